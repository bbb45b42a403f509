"""
Tests for signal replay.

Critical: Replay must fold to the same state a live engine commits.
"""

import asyncio

import pytest

from effect_engine.core import Definition, EffectHandle, Engine, canonical_json_str
from effect_engine.core.errors import EffectSelectionError, TransitionError
from effect_engine.replay import replay
from effect_engine.tests.machines import PING_DEFINITION, settle, toggle_transition


def _counter_definition():
    return Definition(
        initiate=lambda: {"active": False, "count": 0},
        transition=toggle_transition,
        effects_at=lambda state: {"ping": {"count": state["count"]}} if state["active"] else {},
        run_effect=lambda effect, state, key: EffectHandle(
            start=lambda dispatch: asyncio.get_running_loop().create_future(),
            cancel=lambda: None,
        ),
    )


def test_replay_determinism_100_runs():
    """Replay same signals 100 times must produce identical state."""
    signals = ["increment"] * 5 + ["toggle"] + ["increment"] * 4

    results = {canonical_json_str(replay(_counter_definition(), signals).state) for _ in range(100)}

    assert len(results) == 1
    final = replay(_counter_definition(), signals)
    assert final.state == {"active": True, "count": 9}
    assert final.applied == 10
    assert final.effects == {"ping": {"count": 9}}


def test_replay_does_not_start_effects():
    started = []
    definition = Definition(
        initiate=lambda: {"active": True, "count": 0},
        transition=toggle_transition,
        effects_at=lambda state: {"ping": "p"},
        run_effect=lambda effect, state, key: started.append(key),
    )

    result = replay(definition, ["increment"])

    assert started == []
    assert result.effects == {"ping": "p"}


def test_replay_from_given_state():
    result = replay(_counter_definition(), ["toggle"], state={"active": True, "count": 3})

    assert result.state == {"active": False, "count": 3}
    assert result.effects == {}


def test_replay_without_signals_returns_initial_state():
    result = replay(PING_DEFINITION, [])

    assert result.applied == 0
    assert result.state == {"active": False, "count": 0}


def test_replay_wraps_transition_error():
    def transition(state, signal):
        raise ValueError("nope")

    definition = Definition(
        initiate=lambda: 0,
        transition=transition,
        effects_at=lambda state: {},
        run_effect=lambda effect, state, key: None,
    )

    with pytest.raises(TransitionError) as exc_info:
        replay(definition, ["bad"])

    assert exc_info.value.signal == "bad"
    assert isinstance(exc_info.value.__cause__, ValueError)


def test_replay_wraps_selection_error():
    def effects_at(state):
        raise KeyError("missing")

    definition = Definition(
        initiate=lambda: 0,
        transition=lambda state, signal: state + 1,
        effects_at=effects_at,
        run_effect=lambda effect, state, key: None,
    )

    with pytest.raises(EffectSelectionError) as exc_info:
        replay(definition, [1, 2])

    assert exc_info.value.state == 2


@pytest.mark.asyncio
async def test_replay_matches_live_engine():
    signals = ["toggle", "increment", "increment", "toggle", "increment"]

    engine = Engine(_counter_definition())
    for signal in signals[:2]:
        engine.dispatch(signal)
    await settle()
    for signal in signals[2:]:
        engine.dispatch(signal)
    await settle()

    result = replay(_counter_definition(), signals)
    assert result.state == engine.get_state()
    assert set(result.effects) == set(engine.running_keys())
