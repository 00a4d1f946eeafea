import random

import pytest

from mazeserver.common.types import Slot
from mazeserver.net.latency import DelayLine


def test_message_held_until_latency_elapses():
    line = DelayLine(0.25)
    line.enqueue("INPUT 1 0", now=10.0, origin=Slot.FIRST)
    assert line.drain_ready(10.0) == []
    assert line.drain_ready(10.24) == []
    ready = line.drain_ready(10.25)
    assert [m.payload for m in ready] == ["INPUT 1 0"]
    assert ready[0].origin == Slot.FIRST
    assert len(line) == 0


def test_drain_stops_at_first_message_not_due():
    line = DelayLine(0.1)
    line.enqueue("a", now=0.0)
    line.enqueue("b", now=0.05)
    line.enqueue("c", now=0.2)
    assert [m.payload for m in line.drain_ready(0.16)] == ["a", "b"]
    assert line.peek_delivery_time() == pytest.approx(0.3)
    assert [m.payload for m in line.drain_ready(0.31)] == ["c"]
    assert line.peek_delivery_time() is None


def test_bursty_input_keeps_enqueue_order_under_random_polling():
    rng = random.Random(7)
    latency = 0.2
    line = DelayLine(latency)
    enqueued = []
    now = 0.0
    for i in range(500):
        # bursts of same-time messages separated by random gaps
        if rng.random() < 0.3:
            now += rng.uniform(0.0, 0.05)
        msg = line.enqueue(f"m{i}", now)
        enqueued.append((msg.payload, now))

    delivered = []
    poll = 0.0
    while len(delivered) < len(enqueued):
        poll += rng.uniform(0.0, 0.03)
        for msg in line.drain_ready(poll):
            sent_at = dict(enqueued)[msg.payload]
            # never early
            assert poll >= sent_at + latency
            delivered.append(msg.payload)
        # anything still queued is genuinely not yet due
        head = line.peek_delivery_time()
        if head is not None:
            assert head > poll
    assert delivered == [payload for payload, _ in enqueued]


def test_released_on_first_poll_at_or_after_due_time():
    line = DelayLine(0.25)
    line.enqueue("x", now=1.0)
    polls = [1.05, 1.1, 1.2, 1.25, 1.3]
    released_at = None
    for poll in polls:
        if line.drain_ready(poll):
            released_at = poll
            break
    assert released_at == 1.25


def test_backwards_clock_keeps_queue_ordered():
    line = DelayLine(0.1)
    line.enqueue("first", now=5.0)
    second = line.enqueue("second", now=4.0)
    assert second.delivery_time == pytest.approx(5.1)
    assert [m.payload for m in line.drain_ready(5.2)] == ["first", "second"]


def test_zero_latency_is_immediate():
    line = DelayLine(0.0)
    line.enqueue("now", now=3.0)
    assert [m.payload for m in line.drain_ready(3.0)] == ["now"]


def test_clear_drops_pending_messages():
    line = DelayLine(0.2)
    line.enqueue("a", now=0.0)
    line.enqueue("b", now=0.0)
    line.clear()
    assert len(line) == 0
    assert line.drain_ready(1.0) == []


def test_negative_latency_rejected():
    with pytest.raises(ValueError):
        DelayLine(-0.1)
