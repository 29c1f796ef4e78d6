"""
pytest configuration for onboarding client tests.

Adds src directory to Python path for imports and provides aiohttp session
and response doubles.
"""

import asyncio
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

from onboarding.logging import clear_log_context  # noqa: E402
from onboarding.models import DynamicEntity, DynamicProperty  # noqa: E402


def make_response(status=200, body="", reason="OK"):
    """Create a mock async context manager for an aiohttp response."""
    mock_resp = AsyncMock()
    mock_resp.status = status
    mock_resp.reason = reason
    raw = body.encode() if isinstance(body, str) else body
    mock_resp.read = AsyncMock(return_value=raw)
    mock_resp.__aenter__ = AsyncMock(return_value=mock_resp)
    mock_resp.__aexit__ = AsyncMock(return_value=False)
    return mock_resp


def make_hanging_response(started: asyncio.Event | None = None):
    """Response whose __aenter__ never completes (a request stuck on the network)."""

    async def hang(*args, **kwargs):
        if started is not None:
            started.set()
        await asyncio.Event().wait()

    mock_resp = AsyncMock()
    mock_resp.__aenter__ = AsyncMock(side_effect=hang)
    mock_resp.__aexit__ = AsyncMock(return_value=False)
    return mock_resp


def make_gated_response(gate: asyncio.Event, started: asyncio.Event, status=200, body=""):
    """Response that completes only once gate is set."""
    mock_resp = make_response(status, body)

    async def enter(*args, **kwargs):
        started.set()
        await gate.wait()
        return mock_resp

    mock_resp.__aenter__ = AsyncMock(side_effect=enter)
    return mock_resp


def make_session(*responses):
    """Create a mock session where successive post() calls return the given responses."""
    mock_session = MagicMock()
    mock_session.closed = False
    mock_session.post = MagicMock(side_effect=list(responses))
    mock_session.close = AsyncMock()
    return mock_session


TOKEN_BODY = '{"result": {"accessToken": "token-1"}}'


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def entities():
    return [
        DynamicEntity(
            key="a",
            properties=[
                DynamicProperty(id="name", language="en", value="Chair"),
                DynamicProperty(id="name", language="sv", value="Stol"),
            ],
        ),
        DynamicEntity(key="b"),
    ]


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_log_context()
    yield
    clear_log_context()
