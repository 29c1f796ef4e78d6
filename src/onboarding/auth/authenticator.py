"""Exchange a data provider id/secret pair for a bearer token."""

import logging

import aiohttp
from pydantic import ValidationError as PydanticValidationError

from onboarding.auth.models import Credential
from onboarding.errors import AuthenticationError, DeserializationError, TransportError
from onboarding.models import TokenResponse

logger = logging.getLogger(__name__)

TOKEN_ENDPOINT = "dataProviders/tokens"


class Authenticator:
    """
    Single round trip to the token endpoint. No retries.

    Usage:
        authenticator = Authenticator(session, "https://ingest.occtoo.com")
        token = await authenticator.authenticate(Credential("id", "secret"))
    """

    def __init__(self, session: aiohttp.ClientSession, base_url: str):
        self._session = session
        self.base_url = base_url.rstrip("/")

    @property
    def token_url(self) -> str:
        return f"{self.base_url}/{TOKEN_ENDPOINT}"

    async def authenticate(self, credential: Credential) -> str:
        """
        Request a new bearer token.

        Returns:
            Access token string

        Raises:
            AuthenticationError: If the service rejects the credentials
            DeserializationError: If the response envelope is malformed
            TransportError: On connection failure or timeout
        """
        try:
            async with self._session.post(
                self.token_url, json=credential.to_payload()
            ) as response:
                if not 200 <= response.status < 300:
                    # The body is not echoed: the service does not disclose detail
                    logger.warning(
                        "Token request rejected",
                        extra={
                            "http_status": response.status,
                            "api_endpoint": TOKEN_ENDPOINT,
                        },
                    )
                    raise AuthenticationError(
                        "Couldn't obtain a token, please check your data provider details",
                        status_code=response.status,
                    )
                body = await response.read()
        except (TimeoutError, aiohttp.ClientError) as e:
            logger.warning(
                f"HTTP error during token request: {e}",
                extra={"api_endpoint": TOKEN_ENDPOINT},
            )
            raise TransportError("Token request failed", cause=e) from e

        try:
            token = TokenResponse.model_validate_json(body).result.access_token
        except PydanticValidationError as e:
            raise DeserializationError(
                "Token response did not match the expected envelope", cause=e
            ) from e

        if not token:
            raise DeserializationError("Token response contained an empty access token")

        logger.debug(
            "Acquired token",
            extra={"api_endpoint": TOKEN_ENDPOINT, "http_status": response.status},
        )
        return token


__all__ = ["Authenticator", "TOKEN_ENDPOINT"]
