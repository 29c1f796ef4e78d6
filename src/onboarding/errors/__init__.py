"""
Error classification and exception hierarchy.

Provides:
- OnboardingError hierarchy for typed exceptions
- HTTP status classification
"""

from onboarding.errors.exceptions import (
    AuthenticationError,
    AuthError,
    AuthorizationError,
    DeserializationError,
    OnboardingError,
    OperationCancelledError,
    PermanentError,
    PreconditionError,
    TransientError,
    TransportError,
    ValidationError,
    classify_http_status,
    is_auth_error,
)
from onboarding.types import ErrorCategory

__all__ = [
    # Enums
    "ErrorCategory",
    # Base classes
    "OnboardingError",
    "PermanentError",
    "AuthError",
    "TransientError",
    # Caller errors
    "PreconditionError",
    "ValidationError",
    "DeserializationError",
    # Auth errors
    "AuthenticationError",
    "AuthorizationError",
    # Transport
    "TransportError",
    "OperationCancelledError",
    # Classification utilities
    "classify_http_status",
    "is_auth_error",
]
