"""
Synchronous fan-out event emitter.
"""

from typing import Any, Callable, List

Handler = Callable[[Any], None]


class _Subscription:
    __slots__ = ("handler",)

    def __init__(self, handler: Handler) -> None:
        self.handler = handler


class EventEmitter:
    """
    Multi-subscriber emitter with idempotent unsubscribe.

    emit() calls a snapshot of the handlers in registration order, so
    subscribing or unsubscribing during an emission only affects later ones.
    Handler exceptions propagate to the caller of emit().
    """

    def __init__(self) -> None:
        self._subscriptions: List[_Subscription] = []

    def __len__(self) -> int:
        return len(self._subscriptions)

    def on(self, handler: Handler) -> Callable[[], None]:
        """
        Register handler.

        Returns:
            Function removing this registration; safe to call repeatedly
        """
        sub = _Subscription(handler)
        self._subscriptions.append(sub)

        def unsubscribe() -> None:
            # identity match: the same handler may be registered twice
            for i, current in enumerate(self._subscriptions):
                if current is sub:
                    del self._subscriptions[i]
                    return

        return unsubscribe

    def emit(self, event: Any) -> None:
        for sub in tuple(self._subscriptions):
            sub.handler(event)
