"""
Shared error handling for the WeatherKit token proxy.

Every failure the proxy can report is one of the variants below. Each variant
knows its HTTP status and renders its own envelope, so the request handler
maps errors by calling ``to_response()`` rather than inspecting fields.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Externally visible error envelope."""

    error: str
    status: Optional[int] = None
    message: Optional[str] = None

    def to_body(self) -> Dict[str, Any]:
        """Serialize without the optional fields that were not set."""
        return self.model_dump(exclude_none=True)


class WeatherProxyError(Exception):
    """Base exception for the proxy."""

    code = "proxy_error"
    status_code = 500

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(error=self.code)


class ValidationError(WeatherProxyError):
    """Request rejected before any signing or upstream work."""

    def __init__(self, code: str, status_code: int, message: str = ""):
        self.code = code
        self.status_code = status_code
        super().__init__(message or code)


class ForbiddenOriginError(ValidationError):
    """Origin header present but not on the allow-list."""

    def __init__(self, origin: str = ""):
        self.origin = origin
        super().__init__("forbidden_origin", 403)


class MethodNotAllowedError(ValidationError):
    """Only GET and OPTIONS are served."""

    def __init__(self, method: str = ""):
        self.method = method
        super().__init__("method_not_allowed", 405)


class InvalidCoordinatesError(ValidationError):
    """Latitude/longitude missing, non-numeric, non-finite or out of range."""

    def __init__(self, message: str = "invalid_coordinates"):
        super().__init__("invalid_coordinates", 400, message)


class UpstreamError(WeatherProxyError):
    """WeatherKit answered with a non-2xx status."""

    code = "weatherkit_error"

    def __init__(self, status: int):
        self.status_code = status
        super().__init__(f"WeatherKit responded with status {status}")

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.code, status=self.status_code)


class ProxyError(WeatherProxyError):
    """Internal failure. Surfaces as 500 with a plain string message."""

    def __init__(self, message: str = "Unknown error."):
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.code, message=self.message)

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ProxyError":
        """Wrap an arbitrary exception, keeping only its message."""
        if isinstance(exc, ProxyError):
            return exc
        return cls(str(exc) or "Unknown error.")


class ConfigError(ProxyError):
    """Missing or invalid signing configuration."""


class FormatError(ProxyError):
    """Malformed PEM key material or DER signature."""


class NetworkError(ProxyError):
    """The upstream fetch itself failed."""
