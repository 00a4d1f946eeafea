from __future__ import annotations

import time
from typing import Callable

from mazeserver.common.constants import TICK_SECONDS

Clock = Callable[[], float]
Sleeper = Callable[[float], None]


class VirtualClock:
    """Manually advanced clock for deterministic tests."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            self.now += seconds


class FixedTickScheduler:
    """Caps the loop at a fixed rate and reports elapsed time between ticks."""

    def __init__(
        self,
        interval: float = TICK_SECONDS,
        clock: Clock = time.monotonic,
        sleep: Sleeper = time.sleep,
    ) -> None:
        if interval <= 0:
            raise ValueError("Tick interval must be positive")
        self.interval = interval
        self.clock = clock
        self.sleep = sleep
        self._last: float | None = None
        self._deadline: float | None = None

    def start(self) -> None:
        now = self.clock()
        self._last = now
        self._deadline = now + self.interval

    def wait_next(self) -> float:
        """Sleep off the rest of the tick budget and return ``dt`` since the last tick."""
        if self._last is None or self._deadline is None:
            self.start()
        assert self._last is not None and self._deadline is not None
        remaining = self._deadline - self.clock()
        if remaining > 0:
            self.sleep(remaining)
        now = self.clock()
        dt = now - self._last
        self._last = now
        self._deadline = now + self.interval
        return dt
