"""
Core types shared across the onboarding client.

Provides the error classification enum and the clock type used for token
expiry comparisons.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum


class ErrorCategory(Enum):
    """
    Classification of error types for handling decisions.

    Categories:
        TRANSIENT: Temporary failures that may succeed when repeated
                   (e.g., network timeouts, connection resets)
        AUTH: Credential or token problems (401/403, rejected credentials)
        PERMANENT: Failures that will not succeed without a caller change
                   (e.g., invalid arguments, malformed batches, bad payloads)
        CANCELLED: The caller cancelled the operation
        UNKNOWN: Unclassified errors
    """

    TRANSIENT = "transient"
    AUTH = "auth"
    PERMANENT = "permanent"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


# Supplies "now" as an aware UTC datetime.
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(UTC)


__all__ = [
    "Clock",
    "ErrorCategory",
    "utc_now",
]
