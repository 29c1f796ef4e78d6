"""
Exception hierarchy for the onboarding client.

Every error raised by the client derives from OnboardingError and carries an
ErrorCategory so callers can decide how to react without string matching.
Soft import failures (non-success statuses other than 401/403) are not
exceptions; they are returned as ImportOutcome.
"""

from onboarding.types import ErrorCategory


class OnboardingError(Exception):
    """
    Base exception for all onboarding client errors.

    Attributes:
        message: Human-readable error description
        category: Error classification for handling decisions
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    category: ErrorCategory = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    @property
    def is_retryable(self) -> bool:
        return self.category == ErrorCategory.TRANSIENT

    @property
    def should_refresh_auth(self) -> bool:
        return self.category == ErrorCategory.AUTH

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Caller Errors (Permanent)
# =============================================================================


class PermanentError(OnboardingError):
    """Base class for errors that will not succeed without a caller change."""

    category = ErrorCategory.PERMANENT


class PreconditionError(PermanentError, ValueError):
    """Null or malformed arguments supplied by the caller."""

    def __init__(
        self,
        message: str,
        argument: str | None = None,
        cause: Exception | None = None,
    ):
        context = {"argument": argument} if argument else None
        super().__init__(message, cause, context)
        self.argument = argument


class ValidationError(PermanentError, ValueError):
    """Structural violation in an entity batch (missing key, duplicates)."""

    def __init__(
        self,
        message: str,
        keys: list[str] | None = None,
        cause: Exception | None = None,
    ):
        self.keys = list(keys or [])
        super().__init__(message, cause, {"keys": self.keys} if self.keys else None)


class DeserializationError(PermanentError):
    """Response body did not match the expected envelope."""

    pass


# =============================================================================
# Authentication / Authorization Errors
# =============================================================================


class AuthError(OnboardingError):
    """Base class for credential and token errors."""

    category = ErrorCategory.AUTH

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        context = dict(context or {})
        if status_code is not None:
            context["status_code"] = status_code
        super().__init__(message, cause, context)
        self.status_code = status_code


class AuthenticationError(AuthError):
    """Credential exchange rejected by the remote service."""

    @property
    def should_refresh_auth(self) -> bool:
        # A fresh exchange with the same credentials would be rejected again.
        return False


class AuthorizationError(AuthError):
    """Import rejected: bad or expired token, or unknown data source."""

    pass


# =============================================================================
# Transport / Cancellation
# =============================================================================


class TransientError(OnboardingError):
    """Base class for transient errors."""

    category = ErrorCategory.TRANSIENT


class TransportError(TransientError):
    """Connection failure or timeout while talking to the service."""

    pass


class OperationCancelledError(OnboardingError):
    """The caller signalled cancellation before or during the call."""

    category = ErrorCategory.CANCELLED


# =============================================================================
# Classification Utilities
# =============================================================================


def classify_http_status(status: int) -> ErrorCategory:
    """
    Classify an HTTP status code.

    Args:
        status: HTTP status code

    Returns:
        ErrorCategory for the status (2xx/3xx map to UNKNOWN: not an error)
    """
    if status in (401, 403):
        return ErrorCategory.AUTH
    if status in (408, 429) or 500 <= status < 600:
        return ErrorCategory.TRANSIENT
    if 400 <= status < 500:
        return ErrorCategory.PERMANENT
    return ErrorCategory.UNKNOWN


def is_auth_error(error: Exception) -> bool:
    return isinstance(error, OnboardingError) and error.category == ErrorCategory.AUTH


__all__ = [
    "OnboardingError",
    "PermanentError",
    "PreconditionError",
    "ValidationError",
    "DeserializationError",
    "AuthError",
    "AuthenticationError",
    "AuthorizationError",
    "TransientError",
    "TransportError",
    "OperationCancelledError",
    "classify_http_status",
    "is_auth_error",
]
