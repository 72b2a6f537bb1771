"""
Shared configuration management for the response cache layer.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseSettings):
    """Cache layer configuration, read from RESPONSE_CACHE_* variables."""

    model_config = SettingsConfigDict(
        env_prefix="RESPONSE_CACHE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = "local"
    log_level: str = "info"

    # Storage engine
    engine: Literal["memory", "redis"] = "memory"
    namespace: str = "express"
    default_ttl_seconds: float = Field(default=15.0, gt=0)
    redis_url: str = "redis://localhost:6379/0"

    # Service
    host: str = "0.0.0.0"
    port: int = 3000


def get_settings(**overrides) -> CacheSettings:
    """Get cache settings, applying explicit overrides over the environment."""
    return CacheSettings(**overrides)
