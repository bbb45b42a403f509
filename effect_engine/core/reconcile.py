"""
Reconciliation plan: pure diff of desired effects against running keys.

NO side effects. The engine executes the plan; this module only decides.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Tuple


@dataclass(frozen=True)
class ReconcilePlan:
    """
    Fields:
        cancel: Running keys no longer desired, in running order
        start: (key, effect) pairs desired but not running, in desired order
        keep: Keys running and still desired (never restarted)
    """
    cancel: Tuple[str, ...]
    start: Tuple[Tuple[str, Any], ...]
    keep: Tuple[str, ...]

    @property
    def is_noop(self) -> bool:
        return not self.cancel and not self.start


def plan_reconcile(desired: Mapping[str, Any], running: Iterable[str]) -> ReconcilePlan:
    """
    Decide which effects to cancel and which to start.

    A key present in both sets is kept as-is even if its payload changed.

    Args:
        desired: Output of effects_at for the current state
        running: Keys of currently running effects

    Returns:
        ReconcilePlan
    """
    running_keys = list(running)
    running_set = set(running_keys)
    cancel = tuple(k for k in running_keys if k not in desired)
    keep = tuple(k for k in running_keys if k in desired)
    start = tuple((k, desired[k]) for k in desired if k not in running_set)
    return ReconcilePlan(cancel=cancel, start=start, keep=keep)
