"""
Shared error handling for the client cache layer.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from shared.logging import get_request_id


class ErrorResponse(BaseModel):
    """Standard error payload."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class ClientCacheException(Exception):
    """Base exception for the client cache layer."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error payload."""
        return ErrorResponse(
            request_id=get_request_id(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationError(ClientCacheException):
    """Invalid request or cache configuration."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class StatusError(ClientCacheException):
    """Response carried a failure status code."""

    def __init__(self, status: int, message: str = "Request failed", details: Optional[Dict[str, Any]] = None):
        self.status = status
        super().__init__("HTTP_STATUS_ERROR", message, details)
