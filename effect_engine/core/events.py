"""
Event model for the engine timeline.

Events are immutable records emitted synchronously to subscribers. The
``type`` field is the discriminator.
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class SignalReceived:
    """A signal is about to be folded into state."""
    signal: Any
    type: str = "signal-received"


@dataclass(frozen=True)
class StateUpdated:
    """A batch was committed. Emitted exactly once per batch."""
    state: Any
    type: str = "state-updated"


@dataclass(frozen=True)
class EffectStarted:
    key: str
    effect: Any
    type: str = "effect-started"


@dataclass(frozen=True)
class EffectCompleted:
    key: str
    effect: Any
    type: str = "effect-completed"


@dataclass(frozen=True)
class EffectCanceled:
    key: str
    effect: Any
    type: str = "effect-canceled"


@dataclass(frozen=True)
class EffectFailed:
    """
    An effect failed to construct, start, complete or cancel.

    Fields:
        key: Effect key
        effect: Effect payload
        error: The exception object raised by the effect code
    """
    key: str
    effect: Any
    error: BaseException
    type: str = "effect-failed"


Event = Union[
    SignalReceived,
    StateUpdated,
    EffectStarted,
    EffectCompleted,
    EffectCanceled,
    EffectFailed,
]

EVENT_TYPES = (
    "signal-received",
    "state-updated",
    "effect-started",
    "effect-completed",
    "effect-canceled",
    "effect-failed",
)
