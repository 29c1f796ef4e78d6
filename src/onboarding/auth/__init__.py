"""
Authentication: credential exchange and token caching.

Basic Usage:
    from onboarding.auth import Authenticator, Credential, TokenCache

    credential = Credential(provider_id, provider_secret)
    authenticator = Authenticator(session, base_url)
    cache = TokenCache(lambda: authenticator.authenticate(credential))

    token = await cache.get_token()
    headers = {"Authorization": f"Bearer {token}"}
"""

from onboarding.auth.authenticator import TOKEN_ENDPOINT, Authenticator
from onboarding.auth.models import CachedToken, Credential
from onboarding.auth.token_cache import DEFAULT_TOKEN_LIFETIME, TokenCache

__all__ = [
    "Authenticator",
    "TOKEN_ENDPOINT",
    "CachedToken",
    "Credential",
    "TokenCache",
    "DEFAULT_TOKEN_LIFETIME",
]
