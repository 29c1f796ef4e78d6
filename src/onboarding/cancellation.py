"""
Caller-driven cancellation.

Client calls accept an optional asyncio.Event. It is checked before each
expensive step, and while a network call is pending the call races the event:
if the event fires first the pending work is cancelled and
OperationCancelledError is raised. Plain task cancellation (Task.cancel())
works as usual in addition.
"""

import asyncio
import contextlib
from collections.abc import Awaitable
from typing import TypeVar

from onboarding.errors import OperationCancelledError

T = TypeVar("T")


def raise_if_cancelled(cancel_event: asyncio.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise OperationCancelledError("Operation was cancelled")


async def run_cancellable(
    awaitable: Awaitable[T], cancel_event: asyncio.Event | None
) -> T:
    """
    Await awaitable, abandoning it if cancel_event is set first.

    Raises:
        OperationCancelledError: If cancel_event was set before or during the wait
    """
    if cancel_event is None:
        return await awaitable

    work = asyncio.ensure_future(awaitable)
    if cancel_event.is_set():
        work.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await work
        raise OperationCancelledError("Operation was cancelled")

    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        waiter.cancel()
        raise

    if work.done():
        waiter.cancel()
        return work.result()

    work.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await work
    raise OperationCancelledError("Operation was cancelled during a network call")


__all__ = ["raise_if_cancelled", "run_cancellable"]
