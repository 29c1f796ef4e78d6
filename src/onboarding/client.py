"""Onboarding service client: validate, authenticate, import."""

import asyncio
import logging
from collections.abc import Coroutine, Sequence
from datetime import timedelta
from typing import Any, TypeVar
from uuid import UUID

import aiohttp

from onboarding.auth import Authenticator, Credential, TokenCache
from onboarding.cancellation import raise_if_cancelled, run_cancellable
from onboarding.config import OnboardingConfig
from onboarding.errors import AuthorizationError, PreconditionError
from onboarding.http import create_session_from_config
from onboarding.ingest import ImportSubmitter
from onboarding.logging import LogContext, OperationContext
from onboarding.models import DynamicEntity, ImportOutcome
from onboarding.types import Clock
from onboarding.validation import check_preconditions, validate_entities

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OnboardingServiceClient:
    """
    Async client for the onboarding service.

    Validates entity batches locally, obtains a bearer token (cached for the
    configured lifetime, or supplied by the caller) and submits the batch.

    Usage:
        async with OnboardingServiceClient(provider_id, provider_secret) as client:
            outcome = await client.start_entity_import("products", entities)

        # Blocking callers
        client = OnboardingServiceClient(provider_id, provider_secret)
        try:
            outcome = client.start_entity_import_sync("products", entities)
        finally:
            client.close_sync()

    A client created without a session owns one, bound to the event loop of
    its first call; use one instance either from async code or through the
    *_sync methods, not both. An injected session is never closed here.
    """

    def __init__(
        self,
        data_provider_id: str,
        data_provider_secret: str,
        *,
        config: OnboardingConfig | None = None,
        session: aiohttp.ClientSession | None = None,
        clock: Clock | None = None,
    ):
        if not data_provider_id:
            raise PreconditionError("Value cannot be null or empty.", argument="data_provider_id")
        if not data_provider_secret:
            raise PreconditionError(
                "Value cannot be null or empty.", argument="data_provider_secret"
            )

        self.config = config or OnboardingConfig()
        self.config.validate()

        self._credential = Credential(data_provider_id, data_provider_secret)
        self._session = session
        self._owns_session = session is None
        self._session_loop: asyncio.AbstractEventLoop | None = None
        self._authenticator: Authenticator | None = None
        self._submitter: ImportSubmitter | None = None
        self._runner: asyncio.Runner | None = None
        self._closed = False

        self.token_cache = TokenCache(
            self._authenticate,
            token_lifetime=timedelta(minutes=self.config.token_lifetime_minutes),
            clock=clock,
        )

        logger.info(
            "OnboardingServiceClient initialized",
            extra={"http_url": self.config.base_url},
        )

    @classmethod
    def from_config(
        cls,
        config: OnboardingConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        clock: Clock | None = None,
    ) -> "OnboardingServiceClient":
        """Build a client whose credentials come from the configuration."""
        return cls(
            config.data_provider_id,
            config.data_provider_secret,
            config=config,
            session=session,
            clock=clock,
        )

    async def __aenter__(self) -> "OnboardingServiceClient":
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _ensure_session(self) -> None:
        if self._closed:
            raise RuntimeError("OnboardingServiceClient is closed")

        if self._owns_session:
            loop = asyncio.get_running_loop()
            if self._session is not None and self._session_loop is not loop:
                raise RuntimeError(
                    "OnboardingServiceClient session is bound to another event loop"
                )
            if self._session is None:
                self._session = create_session_from_config(self.config)
                self._session_loop = loop

        if self._authenticator is None or self._submitter is None:
            self._authenticator = Authenticator(self._session, self.config.base_url)
            self._submitter = ImportSubmitter(self._session, self.config.base_url)

    async def _authenticate(self) -> str:
        self._ensure_session()
        return await self._authenticator.authenticate(self._credential)

    def _open_submitter(self) -> ImportSubmitter:
        # Resolved right before each submit: close() may run while a token is awaited
        self._ensure_session()
        return self._submitter

    async def get_token(self, cancel_event: asyncio.Event | None = None) -> str:
        """
        Fetch a fresh token from the service.

        Does not read or write the token cache; meant for callers that manage
        their own token lifecycle and pass it back via ``token=``.
        """
        raise_if_cancelled(cancel_event)
        return await run_cancellable(self._authenticate(), cancel_event)

    async def start_entity_import(
        self,
        data_source: str,
        entities: Sequence[DynamicEntity | None],
        *,
        token: str | None = None,
        correlation_id: UUID | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ImportOutcome:
        """
        Validate a batch and submit it to a data source.

        Args:
            data_source: Target data source name
            entities: Batch to import; None entries are dropped
            token: Bearer token to use instead of the token cache
            correlation_id: Traced through the service logs when given
            cancel_event: Set to abandon the call

        Returns:
            ImportOutcome; non-success statuses other than 401/403 are returned,
            not raised

        Raises:
            PreconditionError: entities is None, data_source or token blank
            ValidationError: Missing or duplicate keys, duplicate properties
            AuthenticationError: Credentials rejected while fetching a token
            AuthorizationError: Import rejected with 401/403
            DeserializationError: Malformed response body
            TransportError: Connection failure or timeout
            OperationCancelledError: cancel_event was set
        """
        check_preconditions(data_source, entities)
        if token is not None and not token.strip():
            raise PreconditionError("Value cannot be empty or whitespace.", argument="token")

        raise_if_cancelled(cancel_event)
        valid_entities = validate_entities(entities)
        raise_if_cancelled(cancel_event)

        with LogContext(
            data_source=data_source,
            correlation_id=str(correlation_id) if correlation_id is not None else None,
        ), OperationContext(
            logger,
            "start_entity_import",
            batch_size=len(valid_entities),
            token_source="caller" if token is not None else "cache",
        ):
            self._ensure_session()

            if token is not None:
                return await run_cancellable(
                    self._open_submitter().submit(
                        data_source, valid_entities, token, correlation_id
                    ),
                    cancel_event,
                )

            cached_token = await run_cancellable(self.token_cache.get_token(), cancel_event)
            raise_if_cancelled(cancel_event)
            try:
                return await run_cancellable(
                    self._open_submitter().submit(
                        data_source, valid_entities, cached_token, correlation_id
                    ),
                    cancel_event,
                )
            except AuthorizationError as e:
                if not self.config.refresh_on_unauthorized:
                    raise
                logger.warning(
                    "Cached token rejected, refreshing and retrying once",
                    extra={"status_code": e.status_code},
                )

            self.token_cache.invalidate(cached_token)
            fresh_token = await run_cancellable(self.token_cache.get_token(), cancel_event)
            raise_if_cancelled(cancel_event)
            return await run_cancellable(
                self._open_submitter().submit(
                    data_source, valid_entities, fresh_token, correlation_id
                ),
                cancel_event,
            )

    async def close(self) -> None:
        """Discard the cached token and close the owned session."""
        self._closed = True
        self.token_cache.clear()
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
            await asyncio.sleep(0)
        self._session = None
        self._authenticator = None
        self._submitter = None
        logger.debug("OnboardingServiceClient closed")

    # ------------------------------------------------------------------
    # Blocking variants
    # ------------------------------------------------------------------

    def _run_sync(self, coro: Coroutine[Any, Any, T]) -> T:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            coro.close()
            raise RuntimeError(
                "Blocking OnboardingServiceClient methods cannot be called from a "
                "running event loop; await the async methods instead"
            )

        if self._runner is None:
            self._runner = asyncio.Runner()
        return self._runner.run(coro)

    def start_entity_import_sync(
        self,
        data_source: str,
        entities: Sequence[DynamicEntity | None],
        *,
        token: str | None = None,
        correlation_id: UUID | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> ImportOutcome:
        """Blocking start_entity_import; same results and exceptions."""
        return self._run_sync(
            self.start_entity_import(
                data_source,
                entities,
                token=token,
                correlation_id=correlation_id,
                cancel_event=cancel_event,
            )
        )

    def get_token_sync(self, cancel_event: asyncio.Event | None = None) -> str:
        """Blocking get_token."""
        return self._run_sync(self.get_token(cancel_event))

    def close_sync(self) -> None:
        """Blocking close; also shuts down the private event loop."""
        try:
            if self._runner is not None:
                self._runner.run(self.close())
            elif not self._closed:
                self._closed = True
                self.token_cache.clear()
        finally:
            if self._runner is not None:
                self._runner.close()
                self._runner = None


__all__ = ["OnboardingServiceClient"]
