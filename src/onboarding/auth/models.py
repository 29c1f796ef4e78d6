"""Credential and cached token models."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta


@dataclass(frozen=True)
class Credential:
    """
    Data provider id/secret pair.

    The secret is excluded from repr() so the credential can appear in logs
    and tracebacks without leaking.
    """

    provider_id: str
    provider_secret: str = field(repr=False)

    def to_payload(self) -> dict[str, str]:
        """Authentication request body."""
        return {"id": self.provider_id, "secret": self.provider_secret}


@dataclass(frozen=True)
class CachedToken:
    """
    Bearer token with its absolute expiry.

    Frozen so the token and its expiry are always replaced together.

    Attributes:
        access_token: The bearer token string
        expires_at: UTC timestamp after which the token must not be used
    """

    access_token: str = field(repr=False)
    expires_at: datetime

    def is_valid(self, now: datetime) -> bool:
        return now < self.expires_at

    def remaining_lifetime(self, now: datetime) -> timedelta:
        return self.expires_at - now


__all__ = ["Credential", "CachedToken"]
