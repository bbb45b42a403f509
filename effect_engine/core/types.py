"""
Definition contract and internal bookkeeping records.

A Definition supplies four callables:
- initiate() -> state
- transition(state, signal) -> state            (pure)
- effects_at(state) -> Mapping[key, effect]     (pure)
- run_effect(effect, state, key) -> EffectHandle

None of them may mutate their arguments. States, signals and effects are
opaque to the engine; only effect keys carry identity.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Mapping, Optional, TypeVar

from .errors import InvalidDefinitionError

S = TypeVar("S")
Sig = TypeVar("Sig")
E = TypeVar("E")

Dispatch = Callable[[Any], None]
CancelFn = Callable[[], None]


@dataclass(frozen=True)
class EffectHandle:
    """
    Initializer returned by run_effect.

    Fields:
        start: Called once with a scoped dispatch; returns an awaitable that
            settles when the effect is done.
        cancel: Cooperative cancellation request, called at most once.
    """
    start: Callable[[Dispatch], Awaitable[None]]
    cancel: CancelFn


@dataclass(frozen=True)
class Definition(Generic[S, Sig, E]):
    """
    Pure/effectful callables describing a machine.

    Usage:
        definition = Definition(
            initiate=lambda: {"active": True},
            transition=lambda state, signal: {"active": not state["active"]},
            effects_at=lambda state: {"alpha": "ping"} if state["active"] else {},
            run_effect=lambda effect, state, key: EffectHandle(start, cancel),
        )
    """
    initiate: Callable[[], S]
    transition: Callable[[S, Sig], S]
    effects_at: Callable[[S], Mapping[str, E]]
    run_effect: Callable[[E, S, str], EffectHandle]

    def __post_init__(self) -> None:
        for name in ("initiate", "transition", "effects_at", "run_effect"):
            if not callable(getattr(self, name)):
                raise InvalidDefinitionError(f"Definition.{name} must be callable")


@dataclass(eq=False)
class RunningEffect:
    """
    Bookkeeping for one started effect.

    Fields:
        key: Effect key
        effect: Effect payload as it was when started
        token: Generation number, unique per start within an engine
        cancel: Cancel function from the effect handle
        complete: Future wrapping the start awaitable (set once started)
    """
    key: str
    effect: Any
    token: int
    cancel: CancelFn
    complete: Optional["asyncio.Future[None]"] = None
