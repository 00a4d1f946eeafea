from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from mazeserver.common.types import Slot


@dataclass(frozen=True)
class DelayedMessage:
    payload: str
    delivery_time: float
    origin: Slot | None = None


class DelayLine:
    """FIFO that releases each message a fixed latency after it was queued.

    Latency is the same for every entry, so enqueue order is delivery order
    and the head is always the next message due.
    """

    def __init__(self, latency: float) -> None:
        if latency < 0:
            raise ValueError("Latency must be non-negative")
        self.latency = latency
        self._queue: deque[DelayedMessage] = deque()

    def __len__(self) -> int:
        return len(self._queue)

    def enqueue(self, payload: str, now: float, origin: Slot | None = None) -> DelayedMessage:
        delivery = now + self.latency
        if self._queue and delivery < self._queue[-1].delivery_time:
            # clock stepped backwards; keep the queue time-ordered
            delivery = self._queue[-1].delivery_time
        msg = DelayedMessage(payload=payload, delivery_time=delivery, origin=origin)
        self._queue.append(msg)
        return msg

    def drain_ready(self, now: float) -> list[DelayedMessage]:
        ready: list[DelayedMessage] = []
        while self._queue and self._queue[0].delivery_time <= now:
            ready.append(self._queue.popleft())
        return ready

    def peek_delivery_time(self) -> float | None:
        if not self._queue:
            return None
        return self._queue[0].delivery_time

    def clear(self) -> None:
        self._queue.clear()
