"""
Effect lifecycle guard and effect error helpers.

A callback created for a running effect stays valid only while the running
map still holds an entry with the same generation token under that key.
Once the effect is canceled, replaced or settled, the callback becomes a
silent no-op.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Tuple, TypeVar

from .events import EffectCompleted, EffectFailed
from .types import RunningEffect

logger = logging.getLogger(__name__)

T = TypeVar("T")
Emit = Callable[[Any], None]
RunningMap = Dict[str, RunningEffect]


def is_current(running: RunningMap, entry: RunningEffect) -> bool:
    """True if entry is the live record for its key."""
    current = running.get(entry.key)
    return current is not None and current.token == entry.token


def guard_current_effect(
    running: RunningMap, entry: RunningEffect
) -> Callable[[Callable[..., None]], Callable[..., None]]:
    """
    Build a decorator that gates callbacks on the staleness of entry.

    Usage:
        dispatch = guard_current_effect(running, entry)(queue.schedule)
    """

    def wrap(callback: Callable[..., None]) -> Callable[..., None]:
        def guarded(*args: Any, **kwargs: Any) -> None:
            if not is_current(running, entry):
                return
            callback(*args, **kwargs)

        return guarded

    return wrap


def with_effect_error_handling(
    key: str, effect: Any, emit: Emit, fn: Callable[[], T]
) -> Tuple[bool, Any]:
    """
    Run fn, turning an exception into an effect-failed event.

    asyncio.CancelledError is a BaseException but still counts as an effect
    failure here.

    Returns:
        (True, result) on success, (False, None) if fn raised
    """
    try:
        return True, fn()
    except (Exception, asyncio.CancelledError) as error:
        logger.warning("Effect %s failed: %r", key, error, extra={"trace_id": key})
        emit(EffectFailed(key=key, effect=effect, error=error))
        return False, None


def attach_completion_handlers(
    entry: RunningEffect,
    running: RunningMap,
    emit: Emit,
    on_settled: Callable[[], None] = lambda: None,
) -> None:
    """
    Watch entry.complete and report its outcome if entry is still current.

    The outcome is always retrieved so that asyncio never logs an
    unretrieved exception for a stale effect.
    """

    @guard_current_effect(running, entry)
    def settle(error: Any) -> None:
        del running[entry.key]
        if error is None:
            logger.debug("Effect %s completed", entry.key, extra={"trace_id": entry.key})
            emit(EffectCompleted(key=entry.key, effect=entry.effect))
        else:
            logger.warning(
                "Effect %s failed: %r", entry.key, error, extra={"trace_id": entry.key}
            )
            emit(EffectFailed(key=entry.key, effect=entry.effect, error=error))
        on_settled()

    def on_done(future: "asyncio.Future[None]") -> None:
        if future.cancelled():
            error: Any = asyncio.CancelledError()
        else:
            error = future.exception()
        settle(error)

    assert entry.complete is not None, "entry must be started before attaching"
    entry.complete.add_done_callback(on_done)
