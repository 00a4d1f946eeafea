from __future__ import annotations

from dataclasses import dataclass, field

from mazeserver.common.types import PLAYER_SLOTS, MatchPhase, Slot
from mazeserver.engine.maze import Level, Maze


@dataclass
class Player:
    slot: Slot
    x: float
    y: float
    input_x: float = 0.0
    input_y: float = 0.0
    score: int = 0


@dataclass
class Item:
    item_id: int
    x: float
    y: float
    active: bool = True

    def collect(self) -> bool:
        """Deactivate the item; returns False if it was already taken."""
        if not self.active:
            return False
        self.active = False
        return True


@dataclass(frozen=True)
class Pickup:
    slot: Slot
    item_id: int


@dataclass(frozen=True)
class MatchOutcome:
    winner: Slot | None  # None on a draw
    scores: tuple[int, int]


@dataclass(frozen=True)
class TickResult:
    pickups: list[Pickup] = field(default_factory=list)
    outcome: MatchOutcome | None = None


@dataclass
class MatchState:
    level: Level
    players: dict[Slot, Player]
    items: list[Item]
    timer: float
    phase: MatchPhase = MatchPhase.LOBBY
    outcome: MatchOutcome | None = None
    tick: int = 0

    @property
    def maze(self) -> Maze:
        return self.level.maze

    @property
    def active_items(self) -> list[Item]:
        return [item for item in self.items if item.active]

    @property
    def scores(self) -> tuple[int, int]:
        return (self.players[Slot.FIRST].score, self.players[Slot.SECOND].score)

    @classmethod
    def from_level(cls, level: Level, timer: float) -> MatchState:
        players = {}
        for slot in PLAYER_SLOTS:
            x, y = level.spawn_for(slot)
            players[slot] = Player(slot=slot, x=x, y=y)
        items = [Item(item_id=i, x=x, y=y) for i, (x, y) in enumerate(level.item_positions)]
        return cls(level=level, players=players, items=items, timer=timer)
