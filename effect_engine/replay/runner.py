"""
Replay runner: fold a signal sequence without starting any effect.

Replay is pure: applies transition to each signal in order, then evaluates
effects_at once on the final state to report what the engine would run.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from ..core.errors import EffectSelectionError, TransitionError
from ..core.types import Definition

_NO_STATE = object()


@dataclass(frozen=True)
class ReplayResult:
    """
    Result of replay operation.

    Fields:
        state: Final state after folding the signals
        applied: Number of signals applied
        effects: effects_at(state), the effects a live engine would run
    """
    state: Any
    applied: int
    effects: Mapping[str, Any]


def replay(
    definition: Definition,
    signals: Iterable[Any],
    state: Any = _NO_STATE,
) -> ReplayResult:
    """
    Replay signals to reconstruct state.

    Same definition and signals always produce the same state, because the
    fold is exactly the one a live engine performs across its batches.

    Args:
        definition: Machine definition
        signals: Signals in dispatch order
        state: Starting state (default: definition.initiate())

    Returns:
        ReplayResult with final state, count and desired effects

    Raises:
        TransitionError: If transition raises for a signal
        EffectSelectionError: If effects_at raises for the final state
    """
    st = definition.initiate() if state is _NO_STATE else state
    count = 0

    for signal in signals:
        try:
            st = definition.transition(st, signal)
        except Exception as error:
            raise TransitionError(signal, error) from error
        count += 1

    try:
        effects = definition.effects_at(st)
    except Exception as error:
        raise EffectSelectionError(st, error) from error

    return ReplayResult(state=st, applied=count, effects=effects)
