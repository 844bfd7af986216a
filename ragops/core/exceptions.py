"""Custom exception hierarchy for RAGOps."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import status


class ApplicationError(Exception):
    """Base application error with HTTP semantics."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "application_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            return f"{base} :: {self.details}"
        return base


class ValidationError(ApplicationError):
    """Rejected input: raised before any I/O happens."""

    status_code = 422
    code = "validation_error"


class ConfigurationError(ApplicationError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "configuration_error"


class UpstreamError(ApplicationError):
    """A third-party service answered with a non-retryable failure."""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "upstream_error"

    def __init__(self, message: str, *, upstream_status: int | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.upstream_status = upstream_status


class IngestionError(ApplicationError):
    """The search backend rejected or failed to store a document."""

    status_code = status.HTTP_502_BAD_GATEWAY
    code = "ingestion_failed"


__all__ = [
    "ApplicationError",
    "ConfigurationError",
    "IngestionError",
    "UpstreamError",
    "ValidationError",
]
