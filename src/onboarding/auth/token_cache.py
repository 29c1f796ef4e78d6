"""
Single-credential token cache with coalesced refresh.

Holds at most one CachedToken. A valid token (now < expires_at) is returned
without I/O. Otherwise the refresh hook is awaited under an asyncio.Lock so
that only one authentication is in flight at a time; callers that queued
behind it re-check the cache and reuse the fresh token.

Thread Safety:
    The token and its expiry live in one frozen CachedToken that is swapped
    under a threading.Lock, so readers never see a torn pair.

Cancellation:
    The token is only stored after the refresh hook returns. A refresh that
    fails or is cancelled leaves the previous entry untouched.

Example:
    >>> cache = TokenCache(fetch_token, token_lifetime=timedelta(minutes=59))
    >>> token = await cache.get_token()
"""

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any

from onboarding.auth.models import CachedToken
from onboarding.types import Clock, utc_now

logger = logging.getLogger(__name__)

# One minute of margin under the service's 60 minute token lifetime
DEFAULT_TOKEN_LIFETIME = timedelta(minutes=59)

TokenFetcher = Callable[[], Awaitable[str]]


class TokenCache:
    """
    Supplies a valid bearer token, authenticating on miss or expiry.

    Args:
        fetch_token: Coroutine function returning a new bearer token
        token_lifetime: How long a fetched token is treated as valid
        clock: Returns the current UTC time (injectable for tests)
    """

    def __init__(
        self,
        fetch_token: TokenFetcher,
        token_lifetime: timedelta = DEFAULT_TOKEN_LIFETIME,
        clock: Clock | None = None,
    ):
        if token_lifetime <= timedelta(0):
            raise ValueError(f"token_lifetime must be positive, got {token_lifetime}")

        self._fetch_token = fetch_token
        self.token_lifetime = token_lifetime
        self._clock = clock or utc_now
        self._token: CachedToken | None = None
        self._lock = threading.Lock()
        self._refresh_lock = asyncio.Lock()

    @property
    def cached_token(self) -> CachedToken | None:
        """Current entry, valid or not."""
        with self._lock:
            return self._token

    def _valid_token(self) -> CachedToken | None:
        with self._lock:
            token = self._token
        if token is not None and token.is_valid(self._clock()):
            return token
        return None

    async def get_token(self, force_refresh: bool = False) -> str:
        """
        Get a bearer token, authenticating only when needed.

        Args:
            force_refresh: Authenticate even if the cached token is still valid

        Returns:
            Access token string

        Raises:
            Whatever the refresh hook raises; the cache is left unchanged
        """
        if not force_refresh:
            cached = self._valid_token()
            if cached is not None:
                logger.debug(
                    "Using cached token",
                    extra={
                        "remaining_seconds": cached.remaining_lifetime(
                            self._clock()
                        ).total_seconds()
                    },
                )
                return cached.access_token

        async with self._refresh_lock:
            # Another coroutine may have refreshed while we waited
            if not force_refresh:
                cached = self._valid_token()
                if cached is not None:
                    logger.debug("Token was refreshed by another coroutine")
                    return cached.access_token

            try:
                access_token = await self._fetch_token()
            except Exception as e:
                logger.error(f"Failed to refresh token: {e}")
                raise

            new_token = CachedToken(
                access_token=access_token,
                expires_at=self._clock() + self.token_lifetime,
            )
            with self._lock:
                self._token = new_token

            logger.info(
                f"Token valid until {new_token.expires_at.isoformat()}",
                extra={"expires_at": new_token.expires_at.isoformat()},
            )
            return access_token

    def invalidate(self, access_token: str) -> bool:
        """
        Drop the cached token if it is still the given one.

        Used after the service rejects a token: a token already replaced by a
        concurrent refresh is kept.

        Returns:
            True if the entry was dropped
        """
        with self._lock:
            if self._token is not None and self._token.access_token == access_token:
                self._token = None
                logger.debug("Invalidated rejected token")
                return True
            return False

    def clear(self) -> None:
        """Discard the cached token."""
        with self._lock:
            self._token = None
        logger.debug("Cleared cached token")

    def get_cached_token_info(self) -> dict[str, Any] | None:
        """
        Get information about the cached token for diagnostics.

        Returns:
            Dict with expiry info (never the token itself), or None if empty
        """
        with self._lock:
            token = self._token
        if token is None:
            return None

        now = self._clock()
        return {
            "expires_at": token.expires_at.isoformat(),
            "remaining_seconds": token.remaining_lifetime(now).total_seconds(),
            "is_valid": token.is_valid(now),
        }


__all__ = ["DEFAULT_TOKEN_LIFETIME", "TokenCache", "TokenFetcher"]
