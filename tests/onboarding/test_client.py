"""End-to-end tests for OnboardingServiceClient with a mocked aiohttp session."""

import asyncio
from unittest.mock import MagicMock
from uuid import UUID

import pytest

from conftest import (
    TOKEN_BODY,
    make_gated_response,
    make_hanging_response,
    make_response,
    make_session,
)
from onboarding.client import OnboardingServiceClient
from onboarding.config import OnboardingConfig
from onboarding.errors import (
    AuthenticationError,
    AuthorizationError,
    OperationCancelledError,
    PreconditionError,
    ValidationError,
)
from onboarding.models import DynamicEntity, DynamicProperty

BASE_URL = "https://ingest.example.com"
TOKEN_URL = f"{BASE_URL}/dataProviders/tokens"


def _client(session, clock=None, **config_overrides):
    config = OnboardingConfig(base_url=BASE_URL, **config_overrides)
    return OnboardingServiceClient(
        "provider-1", "s3cr3t", config=config, session=session, clock=clock
    )


def _urls(session):
    return [call.args[0] for call in session.post.call_args_list]


class TestConstruction:
    @pytest.mark.parametrize("provider_id,secret", [("", "s"), ("id", ""), (None, "s")])
    def test_requires_credentials(self, provider_id, secret):
        with pytest.raises(PreconditionError):
            OnboardingServiceClient(provider_id, secret)

    def test_invalid_config_rejected(self):
        with pytest.raises(ValueError, match="base_url"):
            OnboardingServiceClient("id", "s", config=OnboardingConfig(base_url="ftp://x"))

    def test_from_config(self):
        config = OnboardingConfig(data_provider_id="id", data_provider_secret="s")
        client = OnboardingServiceClient.from_config(config)
        assert client.config is config


class TestValidationBeforeNetwork:
    async def test_duplicate_keys_fail_before_any_request(self):
        session = make_session()
        client = _client(session)

        with pytest.raises(ValidationError, match="duplicate keys: a"):
            await client.start_entity_import(
                "products", [DynamicEntity(key="a"), DynamicEntity(key="a")]
            )

        session.post.assert_not_called()

    async def test_duplicate_properties_name_entity(self):
        session = make_session()
        client = _client(session)
        entity = DynamicEntity(
            key="a",
            properties=[
                DynamicProperty(id="p", language="en"),
                DynamicProperty(id="p", language="en"),
            ],
        )

        with pytest.raises(ValidationError) as exc_info:
            await client.start_entity_import("products", [entity])

        assert exc_info.value.keys == ["a"]
        session.post.assert_not_called()

    async def test_none_entities_is_precondition_error(self):
        session = make_session()
        with pytest.raises(PreconditionError):
            await _client(session).start_entity_import("products", None)
        session.post.assert_not_called()

    async def test_blank_explicit_token_rejected(self, entities):
        session = make_session()
        with pytest.raises(PreconditionError):
            await _client(session).start_entity_import("products", entities, token="  ")
        session.post.assert_not_called()


class TestImportWithCache:
    async def test_authenticates_then_imports(self, entities, clock):
        session = make_session(
            make_response(200, TOKEN_BODY),
            make_response(202, '{"batchId": "b-1"}', reason="Accepted"),
        )
        client = _client(session, clock)

        outcome = await client.start_entity_import("products", entities)

        assert outcome.status_code == 202
        assert outcome.result.model_dump() == {"batchId": "b-1"}
        assert _urls(session) == [TOKEN_URL, f"{BASE_URL}/import/products"]
        assert session.post.call_args.kwargs["headers"] == {"Authorization": "Bearer token-1"}

    async def test_token_reused_across_imports(self, entities, clock):
        session = make_session(
            make_response(200, TOKEN_BODY),
            make_response(202, "{}"),
            make_response(202, "{}"),
        )
        client = _client(session, clock)

        await client.start_entity_import("products", entities)
        clock.advance(minutes=58)
        await client.start_entity_import("products", entities)

        assert _urls(session).count(TOKEN_URL) == 1

    async def test_token_refreshed_after_expiry(self, entities, clock):
        session = make_session(
            make_response(200, TOKEN_BODY),
            make_response(202, "{}"),
            make_response(200, '{"result": {"accessToken": "token-2"}}'),
            make_response(202, "{}"),
        )
        client = _client(session, clock)

        await client.start_entity_import("products", entities)
        clock.advance(minutes=59)
        await client.start_entity_import("products", entities)

        assert _urls(session).count(TOKEN_URL) == 2
        assert session.post.call_args.kwargs["headers"] == {"Authorization": "Bearer token-2"}

    async def test_none_entities_dropped_and_properties_normalized(self, clock):
        session = make_session(make_response(200, TOKEN_BODY), make_response(202, "{}"))
        entity = DynamicEntity(key="a")

        await _client(session, clock).start_entity_import("products", [None, entity])

        assert session.post.call_args.kwargs["json"] == {
            "Entities": [{"Key": "a", "Properties": []}]
        }
        assert entity.properties == []

    async def test_correlation_id_forwarded(self, entities, clock):
        session = make_session(make_response(200, TOKEN_BODY), make_response(202, "{}"))
        correlation_id = UUID("3f2b8c4e-1d2a-4f6b-9a7e-5c1d0e2f3a4b")

        await _client(session, clock).start_entity_import(
            "products", entities, correlation_id=correlation_id
        )

        assert session.post.call_args.kwargs["params"] == {"correlationId": str(correlation_id)}

    async def test_unauthorized_import_raises(self, entities, clock):
        session = make_session(
            make_response(200, TOKEN_BODY), make_response(401, reason="Unauthorized")
        )

        with pytest.raises(AuthorizationError):
            await _client(session, clock).start_entity_import("products", entities)

        assert session.post.call_count == 2

    async def test_server_error_returned_not_raised(self, entities, clock):
        session = make_session(
            make_response(200, TOKEN_BODY),
            make_response(500, "", reason="Internal Server Error"),
        )

        outcome = await _client(session, clock).start_entity_import("products", entities)

        assert outcome.status_code == 500
        assert outcome.message == "Internal Server Error"
        assert outcome.result is None

    async def test_authentication_failure_propagates(self, entities, clock):
        session = make_session(make_response(401, reason="Unauthorized"))
        client = _client(session, clock)

        with pytest.raises(AuthenticationError):
            await client.start_entity_import("products", entities)

        assert client.token_cache.cached_token is None
        assert _urls(session) == [TOKEN_URL]


class TestRefreshOnUnauthorized:
    async def test_disabled_by_default(self, entities, clock):
        session = make_session(
            make_response(200, TOKEN_BODY), make_response(403, reason="Forbidden")
        )
        client = _client(session, clock)

        assert client.config.refresh_on_unauthorized is False
        with pytest.raises(AuthorizationError):
            await client.start_entity_import("products", entities)

    async def test_refreshes_and_retries_once(self, entities, clock):
        session = make_session(
            make_response(200, TOKEN_BODY),
            make_response(401, reason="Unauthorized"),
            make_response(200, '{"result": {"accessToken": "token-2"}}'),
            make_response(202, "{}", reason="Accepted"),
        )
        client = _client(session, clock, refresh_on_unauthorized=True)

        outcome = await client.start_entity_import("products", entities)

        assert outcome.status_code == 202
        assert _urls(session).count(TOKEN_URL) == 2
        assert session.post.call_args.kwargs["headers"] == {"Authorization": "Bearer token-2"}
        assert client.token_cache.cached_token.access_token == "token-2"

    async def test_second_rejection_raises(self, entities, clock):
        session = make_session(
            make_response(200, TOKEN_BODY),
            make_response(401, reason="Unauthorized"),
            make_response(200, '{"result": {"accessToken": "token-2"}}'),
            make_response(401, reason="Unauthorized"),
        )
        client = _client(session, clock, refresh_on_unauthorized=True)

        with pytest.raises(AuthorizationError):
            await client.start_entity_import("products", entities)

        assert session.post.call_count == 4

    async def test_explicit_token_never_retried(self, entities):
        session = make_session(make_response(401, reason="Unauthorized"))
        client = _client(session, refresh_on_unauthorized=True)

        with pytest.raises(AuthorizationError):
            await client.start_entity_import("products", entities, token="mine")

        assert session.post.call_count == 1


class TestExplicitToken:
    async def test_bypasses_cache(self, entities):
        session = make_session(make_response(202, "{}"))
        client = _client(session)

        outcome = await client.start_entity_import("products", entities, token="mine")

        assert outcome.status_code == 202
        assert _urls(session) == [f"{BASE_URL}/import/products"]
        assert session.post.call_args.kwargs["headers"] == {"Authorization": "Bearer mine"}
        assert client.token_cache.cached_token is None

    async def test_get_token_does_not_touch_cache(self):
        session = make_session(make_response(200, TOKEN_BODY))
        client = _client(session)

        assert await client.get_token() == "token-1"
        assert client.token_cache.cached_token is None


class TestCancellation:
    async def test_cancelled_before_dispatch_never_authenticates(self, entities):
        session = make_session()
        client = _client(session)
        cancel_event = asyncio.Event()
        cancel_event.set()

        with pytest.raises(OperationCancelledError):
            await client.start_entity_import("products", entities, cancel_event=cancel_event)

        session.post.assert_not_called()
        assert client.token_cache.cached_token is None

    async def test_cancelled_with_valid_cached_token_leaves_it(self, entities, clock):
        session = make_session(make_response(200, TOKEN_BODY), make_response(202, "{}"))
        client = _client(session, clock)
        await client.start_entity_import("products", entities)
        before = client.token_cache.cached_token

        cancel_event = asyncio.Event()
        cancel_event.set()
        with pytest.raises(OperationCancelledError):
            await client.start_entity_import("products", entities, cancel_event=cancel_event)

        assert client.token_cache.cached_token is before
        assert session.post.call_count == 2

    async def test_cancel_during_authentication_leaves_cache_empty(self, entities):
        started = asyncio.Event()
        session = make_session(make_hanging_response(started))
        client = _client(session)
        cancel_event = asyncio.Event()

        call = asyncio.create_task(
            client.start_entity_import("products", entities, cancel_event=cancel_event)
        )
        await started.wait()
        cancel_event.set()

        with pytest.raises(OperationCancelledError):
            await call

        assert client.token_cache.cached_token is None
        assert session.post.call_count == 1

    async def test_cancel_during_import_request(self, entities, clock):
        started = asyncio.Event()
        session = make_session(make_response(200, TOKEN_BODY), make_hanging_response(started))
        client = _client(session, clock)
        cancel_event = asyncio.Event()

        call = asyncio.create_task(
            client.start_entity_import("products", entities, cancel_event=cancel_event)
        )
        await started.wait()
        cancel_event.set()

        with pytest.raises(OperationCancelledError):
            await call

    async def test_task_cancellation_propagates(self, entities):
        started = asyncio.Event()
        session = make_session(make_hanging_response(started))
        client = _client(session)

        call = asyncio.create_task(client.start_entity_import("products", entities))
        await started.wait()
        call.cancel()

        with pytest.raises(asyncio.CancelledError):
            await call
        assert client.token_cache.cached_token is None


class TestLifecycle:
    async def test_close_keeps_injected_session_open(self):
        session = make_session()
        client = _client(session)

        await client.close()

        session.close.assert_not_called()
        with pytest.raises(RuntimeError, match="closed"):
            await client.get_token()

    async def test_close_discards_cached_token(self, entities, clock):
        session = make_session(make_response(200, TOKEN_BODY), make_response(202, "{}"))
        client = _client(session, clock)
        await client.start_entity_import("products", entities)

        await client.close()

        assert client.token_cache.cached_token is None

    async def test_close_while_fetching_token_fails_cleanly(self, entities):
        gate, started = asyncio.Event(), asyncio.Event()
        session = make_session(make_gated_response(gate, started, 200, TOKEN_BODY))
        client = _client(session)

        call = asyncio.create_task(client.start_entity_import("products", entities))
        await started.wait()
        await client.close()
        gate.set()

        with pytest.raises(RuntimeError, match="closed"):
            await call
        assert session.post.call_count == 1

    async def test_owned_session_created_and_closed(self, monkeypatch):
        owned = make_session()
        factory = MagicMock(return_value=owned)
        monkeypatch.setattr("onboarding.client.create_session_from_config", factory)

        async with OnboardingServiceClient("id", "s") as client:
            assert client._session is owned

        factory.assert_called_once()
        owned.close.assert_awaited_once()


class TestBlockingVariants:
    def test_sync_import_returns_same_outcome(self, entities, clock):
        session = make_session(make_response(200, TOKEN_BODY), make_response(202, "{}"))
        client = _client(session, clock)
        try:
            outcome = client.start_entity_import_sync("products", entities)
        finally:
            client.close_sync()

        assert outcome.status_code == 202

    def test_sync_import_propagates_exceptions(self):
        session = make_session()
        client = _client(session)
        try:
            with pytest.raises(ValidationError):
                client.start_entity_import_sync(
                    "products", [DynamicEntity(key="a"), DynamicEntity(key="a")]
                )
        finally:
            client.close_sync()

    def test_sync_soft_failure_not_raised(self, entities, clock):
        session = make_session(
            make_response(200, TOKEN_BODY), make_response(500, "", reason="Internal Server Error")
        )
        client = _client(session, clock)
        try:
            outcome = client.start_entity_import_sync("products", entities)
        finally:
            client.close_sync()

        assert outcome.status_code == 500

    def test_sync_calls_share_cached_token(self, entities, clock):
        session = make_session(
            make_response(200, TOKEN_BODY), make_response(202, "{}"), make_response(202, "{}")
        )
        client = _client(session, clock)
        try:
            client.start_entity_import_sync("products", entities)
            client.start_entity_import_sync("products", entities)
        finally:
            client.close_sync()

        assert _urls(session).count(TOKEN_URL) == 1

    async def test_sync_call_inside_running_loop_rejected(self, entities):
        session = make_session()
        client = _client(session)

        with pytest.raises(RuntimeError, match="running event loop"):
            client.start_entity_import_sync("products", entities)

        session.post.assert_not_called()
        assert client._runner is None

    def test_get_token_sync(self):
        session = make_session(make_response(200, TOKEN_BODY))
        client = _client(session)
        try:
            assert client.get_token_sync() == "token-1"
        finally:
            client.close_sync()
