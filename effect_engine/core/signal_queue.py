"""
Signal queue: ordered, batched delivery on a single event loop.

Signals scheduled before the next loop callback fires are delivered together
as one batch, in call order. Signals scheduled while a batch is processed
form the next batch. Signals scheduled while no loop is running are kept and
delivered with the first batch scheduled inside a loop.
"""

import asyncio
from typing import Any, Callable, List, Optional

BatchProcessor = Callable[[List[Any]], None]


class SignalQueue:
    """
    Coalescing FIFO queue drained via ``loop.call_soon``.

    Usage:
        queue = SignalQueue(process_batch)
        queue.schedule("a")
        queue.schedule("b")
        # next loop turn: process_batch(["a", "b"])
    """

    def __init__(
        self,
        process_batch: BatchProcessor,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self._process_batch = process_batch
        self._loop = loop
        self._queue: List[Any] = []
        self._draining = False

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def draining(self) -> bool:
        """True while a drain is pending or running."""
        return self._draining

    def schedule(self, signal: Any) -> None:
        """Append signal and request a drain if none is pending."""
        self._queue.append(signal)
        self._request_drain()

    def _request_drain(self) -> None:
        if self._draining:
            return
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                # no loop yet: signals stay queued until a schedule inside one
                return
        loop.call_soon(self._drain)
        self._draining = True

    def _drain(self) -> None:
        if not self._queue:
            self._draining = False
            return

        batch = self._queue[:]
        self._queue.clear()
        try:
            self._process_batch(batch)
        finally:
            self._draining = False
            if self._queue:
                self._request_drain()
