"""
Shared utilities for the response cache layer.

This package aggregates common building blocks:

- config: Cache and service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- base_service: FastAPI service scaffolding

Do not import from response_cache or service_* packages into shared/.
"""
