from __future__ import annotations

from enum import Enum, IntEnum
from typing import Tuple

Cell = Tuple[int, int]
Point = Tuple[float, float]


class Slot(IntEnum):
    FIRST = 0
    SECOND = 1

    @property
    def other(self) -> Slot:
        return Slot.SECOND if self is Slot.FIRST else Slot.FIRST


PLAYER_SLOTS: Tuple[Slot, Slot] = (Slot.FIRST, Slot.SECOND)


class MatchPhase(str, Enum):
    LOBBY = "lobby"
    RUNNING = "running"
    ENDED = "ended"
