"""
Shared error handling for the response cache layer.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class CacheLayerException(Exception):
    """Base exception for the response cache layer."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class StorageEngineError(CacheLayerException):
    """Storage engine failures (lookup, write, listing, flush)."""

    def __init__(self, engine: str, message: str = "Storage engine error", details: Optional[Dict[str, Any]] = None):
        self.engine = engine
        super().__init__("STORAGE_ENGINE_ERROR", f"{engine}: {message}", details)


class ConfigurationError(CacheLayerException):
    """Invalid cache configuration."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class InterceptorStateError(CacheLayerException):
    """Response stream used after it has already ended."""

    def __init__(self, message: str = "Response already completed", details: Optional[Dict[str, Any]] = None):
        super().__init__("INTERCEPTOR_STATE_ERROR", message, details)
