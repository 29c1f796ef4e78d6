"""
HTTP transport for the onboarding client.

One pooled aiohttp.ClientSession is owned by each client (or injected by the
caller) and shared by the authenticator and the import submitter. aiohttp
sessions are safe for concurrent use from tasks on the loop that created them.
"""

import aiohttp

from onboarding.config import OnboardingConfig

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def create_session(
    max_connections: int = 100,
    max_connections_per_host: int = 10,
    timeout_total: int = 120,
    timeout_connect: int = 30,
) -> aiohttp.ClientSession:
    """
    Create aiohttp ClientSession with connection pooling and timeouts.

    Args:
        max_connections: Total connection pool size (default: 100)
        max_connections_per_host: Per-host connection limit (default: 10)
        timeout_total: Total time for one request in seconds (default: 120)
        timeout_connect: Time to establish a connection in seconds (default: 30)

    Returns:
        Configured aiohttp.ClientSession

    Note:
        Must be called from a running event loop. Caller is responsible for
        closing the session.
    """
    connector = aiohttp.TCPConnector(
        limit=max_connections,
        limit_per_host=max_connections_per_host,
        ttl_dns_cache=300,
    )

    timeout = aiohttp.ClientTimeout(
        total=timeout_total,
        connect=timeout_connect,
    )

    return aiohttp.ClientSession(
        connector=connector,
        timeout=timeout,
        headers=DEFAULT_HEADERS,
    )


def create_session_from_config(config: OnboardingConfig) -> aiohttp.ClientSession:
    return create_session(
        max_connections=config.max_connections,
        max_connections_per_host=config.max_connections_per_host,
        timeout_total=config.request_timeout_seconds,
        timeout_connect=config.connect_timeout_seconds,
    )


__all__ = ["DEFAULT_HEADERS", "create_session", "create_session_from_config"]
