"""
Reconciliation engine: the state machine tying queue, fold and effects together.

On every batch the engine:
1. folds the signals through transition (emitting signal-received for each),
2. evaluates effects_at once on the folded state,
3. cancels running effects that are no longer desired, starts missing ones,
4. commits the folded state and emits state-updated.

The engine never awaits. Effect awaitables are wrapped in futures whose
outcomes are reported through guarded done callbacks.
"""

import asyncio
import itertools
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional

from .emitter import EventEmitter
from .errors import EffectSelectionError, TransitionError
from .events import EffectCanceled, EffectFailed, EffectStarted, SignalReceived, StateUpdated
from .guard import attach_completion_handlers, guard_current_effect, with_effect_error_handling
from .reconcile import plan_reconcile
from .signal_queue import SignalQueue
from .types import Definition, EffectHandle, RunningEffect
from .. import metrics
from ..logging_config import get_logger

_NO_STATE = object()


class Engine:
    """
    Asynchronous Moore machine with effect reconciliation.

    Usage:
        engine = Engine(definition)
        unsubscribe = engine.on(lambda event: print(event.type))
        engine.dispatch("toggle")
        # after the next loop turn: engine.get_state() reflects the toggle

    Must be constructed and driven from the thread running the event loop.
    Construction runs one reconciliation pass, so a hydrated state resumes
    the effects it implies. Pass subscribers to observe the events of that
    first pass.
    """

    def __init__(
        self,
        definition: Definition,
        state: Any = _NO_STATE,
        name: str = "default",
        loop: Optional[asyncio.AbstractEventLoop] = None,
        subscribers: Iterable[Callable[[Any], None]] = (),
    ) -> None:
        self.name = name
        self._definition = definition
        self._loop = loop
        self._running: Dict[str, RunningEffect] = {}
        self._tokens = itertools.count(1)
        self._emitter = EventEmitter()
        self._queue = SignalQueue(self._process_batch, loop=loop)
        self._log = get_logger(__name__, trace_id=name)
        for handler in subscribers:
            self._emitter.on(handler)
        self._state = definition.initiate() if state is _NO_STATE else state

        self._reconcile(self._state)

    # Public API

    def dispatch(self, signal: Any) -> None:
        """Enqueue signal; it is processed on the next loop turn."""
        self._queue.schedule(signal)

    def on(self, handler: Callable[[Any], None]) -> Callable[[], None]:
        """Subscribe to timeline events. Returns an unsubscribe function."""
        return self._emitter.on(handler)

    def get_state(self) -> Any:
        """Last committed state (never an intermediate fold value)."""
        return self._state

    def running_keys(self) -> FrozenSet[str]:
        return frozenset(self._running)

    def is_idle(self) -> bool:
        """True when no signal is queued or draining and no effect runs."""
        return not self._running and not self._queue.draining and len(self._queue) == 0

    # Internals

    def _emit(self, event: Any) -> None:
        metrics.track_event(event.type)
        self._emitter.emit(event)

    def _update_running_gauge(self) -> None:
        metrics.set_running_effects(self.name, len(self._running))

    def _process_batch(self, signals: List[Any]) -> None:
        self._log.debug("Processing batch of %d signal(s)", len(signals))
        metrics.observe_batch(len(signals))

        state = self._state
        for signal in signals:
            self._emit(SignalReceived(signal=signal))
            try:
                state = self._definition.transition(state, signal)
            except Exception as error:
                self._log.error("Transition failed, batch aborted: %r", error)
                raise TransitionError(signal, error) from error

        self._reconcile(state)
        self._state = state
        self._emit(StateUpdated(state=state))

    def _desired_effects(self, state: Any) -> Mapping[str, Any]:
        try:
            return self._definition.effects_at(state)
        except Exception as error:
            self._log.error("effects_at failed, batch aborted: %r", error)
            raise EffectSelectionError(state, error) from error

    def _reconcile(self, state: Any) -> None:
        desired = self._desired_effects(state)
        plan = plan_reconcile(desired, self._running)

        for key in plan.cancel:
            self._cancel_effect(key)
        for key, effect in plan.start:
            if key in self._running:
                continue
            self._start_effect(key, effect, state)

        if not plan.is_noop:
            self._update_running_gauge()

    def _cancel_effect(self, key: str) -> None:
        # removed before cancel() so re-entrant dispatches see it gone
        entry = self._running.pop(key)
        ok, _ = with_effect_error_handling(key, entry.effect, self._emit, entry.cancel)
        if ok:
            self._log.debug("Canceled effect %s", key)
            self._emit(EffectCanceled(key=key, effect=entry.effect))

    def _build_handle(self, key: str, effect: Any, state: Any) -> EffectHandle:
        handle = self._definition.run_effect(effect, state, key)
        if not isinstance(handle, EffectHandle):
            raise TypeError(
                f"run_effect must return an EffectHandle, got {type(handle).__name__}"
            )
        return handle

    def _start_effect(self, key: str, effect: Any, state: Any) -> None:
        ok, handle = with_effect_error_handling(
            key, effect, self._emit, lambda: self._build_handle(key, effect, state)
        )
        if not ok:
            return

        entry = RunningEffect(
            key=key, effect=effect, token=next(self._tokens), cancel=handle.cancel
        )
        self._running[key] = entry
        dispatch = guard_current_effect(self._running, entry)(self._queue.schedule)

        try:
            loop = self._loop or asyncio.get_running_loop()
            entry.complete = asyncio.ensure_future(handle.start(dispatch), loop=loop)
        except (Exception, asyncio.CancelledError) as error:
            if self._running.get(key) is entry:
                del self._running[key]
            self._log.warning("Effect %s failed to start: %r", key, error)
            self._emit(EffectFailed(key=key, effect=effect, error=error))
            return

        attach_completion_handlers(
            entry, self._running, self._emit, on_settled=self._update_running_gauge
        )
        self._log.debug("Started effect %s", key)
        self._emit(EffectStarted(key=key, effect=effect))


def create_engine(definition: Definition, **kwargs: Any) -> Engine:
    """
    Create an engine instance.

    Args:
        definition: Machine definition
        **kwargs: state, name, loop, subscribers (see Engine)

    Returns:
        Engine with its initial reconciliation already performed
    """
    return Engine(definition, **kwargs)
