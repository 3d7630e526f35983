"""Normalized error taxonomy for both upstream backends.

Every backend operation either returns a decoded value or raises exactly one
of the ``GatewayError`` subclasses below. The HTTP status of the upstream
response decides the kind; the Hub path additionally distinguishes 429.
"""

import json
from typing import Any

DEFAULT_RETRY_AFTER_SECONDS = 60


class GatewayError(Exception):
    """Base exception for all gateway errors."""

    code = "DOCKER_ERROR"
    default_status: int | None = None
    retryable = False

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code if status_code is not None else self.default_status

    def details(self) -> dict[str, Any]:
        """Return the normalized detail fields carried in failure envelopes."""
        result: dict[str, Any] = {"code": self.code, "retryable": self.retryable}
        if self.status_code is not None:
            result["statusCode"] = self.status_code
        return result


class ValidationFailure(GatewayError):  # noqa: N818
    """Raised when the upstream rejects a request as malformed (400)."""

    code = "VALIDATION_ERROR"
    default_status = 400

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        field_errors: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, status_code)
        self.field_errors = field_errors or {}

    def details(self) -> dict[str, Any]:
        result = super().details()
        if self.field_errors:
            result["details"] = self.field_errors
        return result


class AuthenticationFailure(GatewayError):  # noqa: N818
    """Raised on 401/403 or when required Hub credentials are missing."""

    code = "AUTHENTICATION_FAILED"
    default_status = 401


class NotFound(GatewayError):  # noqa: N818
    """Raised when the upstream resource does not exist (404)."""

    code = "NOT_FOUND"
    default_status = 404


class Conflict(GatewayError):  # noqa: N818
    """Raised on name collisions or resources in use (409)."""

    code = "CONFLICT"
    default_status = 409


class RateLimitExceeded(GatewayError):  # noqa: N818
    """Raised when Docker Hub throttles the caller (429)."""

    code = "RATE_LIMIT_EXCEEDED"
    default_status = 429
    retryable = True

    def __init__(
        self,
        message: str,
        retry_after_seconds: int = DEFAULT_RETRY_AFTER_SECONDS,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, status_code)
        self.retry_after_seconds = retry_after_seconds

    def details(self) -> dict[str, Any]:
        result = super().details()
        result["retryAfterSeconds"] = self.retry_after_seconds
        return result


class InternalUpstreamError(GatewayError):
    """Raised on upstream 5xx responses other than 503."""

    code = "INTERNAL_ERROR"
    default_status = 500
    retryable = True


class ConnectionFailure(GatewayError):  # noqa: N818
    """Raised on 503 or when a backend cannot be reached at all."""

    code = "CONNECTION_ERROR"
    default_status = 503
    retryable = True


class GenericBackendError(GatewayError):
    """Raised for any other non-2xx status."""


class UnexpectedError(GatewayError):
    """Wraps an unclassified exception that reached the tool boundary."""

    code = "UNKNOWN_ERROR"


def extract_upstream_message(body: str, status: int) -> str:
    """Pull the human-readable message out of an upstream error body.

    Both backends answer errors with JSON objects; the engine uses
    ``message``, Hub uses ``message``, ``detail`` or ``error``.
    """
    if body:
        try:
            parsed = json.loads(body)
        except ValueError:
            return body.strip()
        if isinstance(parsed, dict):
            for key in ("message", "error", "detail"):
                value = parsed.get(key)
                if isinstance(value, str) and value:
                    return value
        return body.strip()
    return f"HTTP {status}"


def _field_errors(body: str) -> dict[str, Any]:
    try:
        parsed = json.loads(body) if body else None
    except ValueError:
        return {}
    if isinstance(parsed, dict):
        errors = parsed.get("errinfo") or parsed.get("errors") or parsed.get("fields")
        if isinstance(errors, dict):
            return errors
    return {}


def error_from_status(status: int, body: str = "") -> GatewayError:
    """Translate a non-2xx upstream response into a normalized error.

    The mapping is total: every status yields exactly one kind. 429 lands in
    ``GenericBackendError`` here; the Hub transport handles it before calling
    this function.
    """
    message = extract_upstream_message(body, status)
    if status == 400:
        return ValidationFailure(message, status, _field_errors(body))
    if status in (401, 403):
        return AuthenticationFailure(message, status)
    if status == 404:
        return NotFound(message, status)
    if status == 409:
        return Conflict(message, status)
    if status == 503:
        return ConnectionFailure(message, status)
    if 500 <= status < 600:
        return InternalUpstreamError(message, status)
    return GenericBackendError(message, status)


def parse_retry_after(value: str | None) -> int:
    """Parse a Retry-After header given in seconds, defaulting to 60."""
    if value is None:
        return DEFAULT_RETRY_AFTER_SECONDS
    try:
        seconds = int(value.strip())
    except ValueError:
        return DEFAULT_RETRY_AFTER_SECONDS
    return seconds if seconds >= 0 else DEFAULT_RETRY_AFTER_SECONDS


def describe_error_for_logging(error: BaseException) -> dict[str, Any]:
    """Flatten an error into fields suitable for a structured log record."""
    if isinstance(error, GatewayError):
        record: dict[str, Any] = {"name": type(error).__name__, "message": error.message}
        record.update(error.details())
        return record
    return {"name": type(error).__name__, "message": str(error)}
