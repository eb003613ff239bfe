"""
Application exception taxonomy

Every exception carries an HTTP status code and a short public message that is
safe to return to the caller. Upstream detail (raw status, response body) is
kept on the instance for logging only.
"""

from __future__ import annotations

from typing import Any


class AppException(Exception):
    """Base class for errors that map to a `{success: false, message}` response."""

    status_code: int = 500
    error_type: str = "internal_error"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, *, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def public_message(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "message": self.public_message}


class ConfigurationError(AppException):
    """Required configuration (e.g. Reddit credentials) is missing. Not retryable."""

    status_code = 500
    error_type = "configuration_error"
    default_message = "Service is not configured"

    @property
    def public_message(self) -> str:
        return "Service is temporarily unavailable"


class ValidationError(AppException):
    status_code = 400
    error_type = "validation_error"
    default_message = "Invalid request"


class DuplicateError(AppException):
    status_code = 400
    error_type = "duplicate"
    default_message = "already exists"


class NotFoundError(AppException):
    status_code = 404
    error_type = "not_found"
    default_message = "Not found"


class VerificationFailedError(AppException):
    """The external account does not exist. A business outcome, not a system fault."""

    status_code = 400
    error_type = "verification_failed"
    default_message = "Verification failed"


class RateLimitedError(AppException):
    status_code = 429
    error_type = "rate_limited"
    default_message = "Reddit API rate limit exceeded"

    def __init__(self, message: str | None = None, *, retry_after: float | None = None):
        super().__init__(message, details={"retry_after": retry_after})
        self.retry_after = retry_after

    @property
    def public_message(self) -> str:
        return "Reddit is rate limiting verification right now, please try again later"


class UpstreamError(AppException):
    """Non-success response from the external platform."""

    status_code = 502
    error_type = "upstream_error"
    default_message = "Reddit API error"

    def __init__(
        self,
        message: str | None = None,
        *,
        upstream_status: int | None = None,
        body: str | None = None,
    ):
        self.upstream_status = upstream_status
        self.body = (body or "")[:500]
        if message is None and upstream_status is not None:
            message = f"Reddit API error: {upstream_status} - {self.body or '(empty)'}"
        super().__init__(message, details={"upstream_status": upstream_status})

    @property
    def public_message(self) -> str:
        return "Reddit verification is temporarily unavailable, please try again later"


class UpstreamAuthError(UpstreamError):
    """The client-credentials exchange was rejected."""

    error_type = "upstream_auth_error"
    default_message = "Failed to get Reddit OAuth token"

    def __init__(self, *, upstream_status: int | None = None, body: str | None = None):
        super().__init__(
            f"Failed to get Reddit OAuth token: HTTP {upstream_status}: {(body or '(empty)')[:500]}",
            upstream_status=upstream_status,
            body=body,
        )


class NetworkError(AppException):
    """Transport failure, timeout, or a body that could not be decoded."""

    status_code = 502
    error_type = "network_error"
    default_message = "Network error while contacting Reddit"

    @property
    def public_message(self) -> str:
        return "Reddit verification is temporarily unavailable, please try again later"


__all__ = [
    "AppException",
    "ConfigurationError",
    "ValidationError",
    "DuplicateError",
    "NotFoundError",
    "VerificationFailedError",
    "RateLimitedError",
    "UpstreamError",
    "UpstreamAuthError",
    "NetworkError",
]
