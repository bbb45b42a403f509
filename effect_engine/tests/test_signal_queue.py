"""
Tests for signal batching.

Critical: signals scheduled before a drain form one ordered batch, and no
signal is ever dropped or delivered twice.
"""

import asyncio

import pytest

from effect_engine.core.signal_queue import SignalQueue
from effect_engine.tests.machines import settle


@pytest.mark.asyncio
async def test_batches_signals_on_next_loop_turn():
    batches = []
    queue = SignalQueue(batches.append)

    queue.schedule("a")
    queue.schedule("b")
    queue.schedule("c")

    assert batches == []
    assert len(queue) == 3
    await asyncio.sleep(0)
    assert batches == [["a", "b", "c"]]
    assert len(queue) == 0


@pytest.mark.asyncio
async def test_rapid_schedules_delivered_in_order_once():
    batches = []
    queue = SignalQueue(batches.append)

    for i in range(10):
        queue.schedule(i)

    await settle()
    assert batches == [list(range(10))]


@pytest.mark.asyncio
async def test_signals_scheduled_during_processing_form_next_batch():
    batches = []

    def process(batch):
        batches.append(list(batch))
        if "trigger" in batch:
            queue.schedule("follow-up")
            # the batch being processed is not mutated
            assert batch == ["trigger"]

    queue = SignalQueue(process)
    queue.schedule("trigger")

    await asyncio.sleep(0)
    assert batches == [["trigger"]]

    await asyncio.sleep(0)
    assert batches == [["trigger"], ["follow-up"]]


@pytest.mark.asyncio
async def test_separate_turns_produce_separate_batches():
    batches = []
    queue = SignalQueue(batches.append)

    queue.schedule(1)
    await settle()
    queue.schedule(2)
    queue.schedule(3)
    await settle()

    assert batches == [[1], [2, 3]]


@pytest.mark.asyncio
async def test_draining_flag_prevents_duplicate_drains():
    calls = []
    queue = SignalQueue(calls.append)

    queue.schedule("a")
    assert queue.draining
    queue.schedule("b")

    await settle()
    assert calls == [["a", "b"]]
    assert not queue.draining


@pytest.mark.asyncio
async def test_failed_batch_does_not_block_later_batches():
    loop = asyncio.get_running_loop()
    reported = []
    loop.set_exception_handler(lambda _loop, context: reported.append(context["exception"]))

    processed = []

    def process(batch):
        processed.append(list(batch))
        if "boom" in batch:
            queue.schedule("after")
            raise RuntimeError("batch failed")

    queue = SignalQueue(process)
    queue.schedule("boom")
    await settle()

    assert processed == [["boom"], ["after"]]
    assert len(reported) == 1
    assert isinstance(reported[0], RuntimeError)
    assert not queue.draining

    queue.schedule("ok")
    await settle()
    assert processed[-1] == ["ok"]


def test_explicit_loop_is_used_outside_running_loop():
    loop = asyncio.new_event_loop()
    try:
        batches = []
        queue = SignalQueue(batches.append, loop=loop)

        queue.schedule("x")
        queue.schedule("y")
        loop.run_until_complete(asyncio.sleep(0))

        assert batches == [["x", "y"]]
    finally:
        loop.close()


def test_signals_scheduled_before_loop_starts_are_kept():
    batches = []
    queue = SignalQueue(batches.append)

    queue.schedule("early")
    assert not queue.draining
    assert len(queue) == 1

    async def main():
        queue.schedule("late")
        await settle()

    asyncio.run(main())

    assert batches == [["early", "late"]]
    assert not queue.draining
    assert len(queue) == 0
