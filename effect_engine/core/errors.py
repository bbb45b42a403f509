"""
Exception types for the effect reconciliation engine.

Effect-path failures never surface as exceptions; they are reported as
``effect-failed`` events. These types cover the remaining failure channels.
"""


class EngineError(Exception):
    """Base class for engine errors."""
    pass


class InvalidDefinitionError(EngineError):
    """Raised when a Definition is missing one of its callables."""
    pass


class TransitionError(EngineError):
    """
    Raised when the transition function fails while folding a batch.

    The batch is aborted; committed state and running effects are unchanged.
    """

    def __init__(self, signal, cause: BaseException) -> None:
        super().__init__(f"transition failed for signal {signal!r}: {cause}")
        self.signal = signal


class EffectSelectionError(EngineError):
    """Raised when effects_at fails for a folded state."""

    def __init__(self, state, cause: BaseException) -> None:
        super().__init__(f"effects_at failed: {cause}")
        self.state = state


class DefinitionLoadError(EngineError):
    """Raised when a MODULE:ATTR reference cannot be resolved to a Definition."""
    pass
