"""
Core effect reconciliation primitives.

This module provides:
- Definition / EffectHandle: the contract supplied by the application
- SignalQueue: batched, ordered signal delivery
- EventEmitter: synchronous fan-out of timeline events
- guard_current_effect: staleness guard for effect callbacks
- plan_reconcile: pure diff of desired vs running effects
- Engine: the reconciliation state machine
"""

from .types import Definition, EffectHandle, RunningEffect
from .events import (
    Event,
    SignalReceived,
    StateUpdated,
    EffectStarted,
    EffectCompleted,
    EffectCanceled,
    EffectFailed,
)
from .signal_queue import SignalQueue
from .emitter import EventEmitter
from .guard import guard_current_effect, with_effect_error_handling, attach_completion_handlers
from .reconcile import ReconcilePlan, plan_reconcile
from .engine import Engine, create_engine
from .canonical import canonicalize, canonical_json_str
from .errors import (
    EngineError,
    InvalidDefinitionError,
    TransitionError,
    EffectSelectionError,
    DefinitionLoadError,
)

__all__ = [
    "Definition",
    "EffectHandle",
    "RunningEffect",
    "Event",
    "SignalReceived",
    "StateUpdated",
    "EffectStarted",
    "EffectCompleted",
    "EffectCanceled",
    "EffectFailed",
    "SignalQueue",
    "EventEmitter",
    "guard_current_effect",
    "with_effect_error_handling",
    "attach_completion_handlers",
    "ReconcilePlan",
    "plan_reconcile",
    "Engine",
    "create_engine",
    "canonicalize",
    "canonical_json_str",
    "EngineError",
    "InvalidDefinitionError",
    "TransitionError",
    "EffectSelectionError",
    "DefinitionLoadError",
]
