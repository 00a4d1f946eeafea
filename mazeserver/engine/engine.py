from __future__ import annotations

import logging
import random

from mazeserver.common.constants import (
    ITEM_COUNT,
    MATCH_SECONDS,
    MAX_STEP_SECONDS,
    MAZE_HEIGHT,
    MAZE_WIDTH,
)
from mazeserver.common.types import MatchPhase, Slot
from mazeserver.engine.maze import Level, generate_level, validate_dimensions
from mazeserver.engine.physics import collect_items, integrate_motion
from mazeserver.engine.state import MatchOutcome, MatchState, TickResult

logger = logging.getLogger(__name__)


def _clamp_unit(value: float) -> float:
    return max(-1.0, min(1.0, value))


class MatchEngine:
    """Authoritative simulation of a single two-player match.

    The engine owns the ``MatchState`` and is the only writer of it. Network
    code hands it inputs through ``apply_input`` and advances it with ``tick``.
    """

    def __init__(
        self,
        width: int = MAZE_WIDTH,
        height: int = MAZE_HEIGHT,
        item_count: int = ITEM_COUNT,
        match_seconds: float = MATCH_SECONDS,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        validate_dimensions(width, height)
        self.width = width
        self.height = height
        self.item_count = item_count
        self.match_seconds = match_seconds
        self.rng = rng if rng is not None else random.Random(seed)
        self.state = MatchState.from_level(self._generate_level(), match_seconds)

    @property
    def level(self) -> Level:
        return self.state.level

    @property
    def running(self) -> bool:
        return self.state.phase == MatchPhase.RUNNING

    def start(self) -> MatchState:
        """Move the lobby state into play once both players are connected."""
        if self.state.phase == MatchPhase.LOBBY:
            self.state.phase = MatchPhase.RUNNING
            logger.info("Match started with %s items", len(self.state.items))
        return self.state

    def reset(self) -> MatchState:
        """Replace the match with a freshly generated level and zero scores."""
        self.state = MatchState.from_level(self._generate_level(), self.match_seconds)
        self.state.phase = MatchPhase.RUNNING
        logger.info("Match reset with a new %sx%s maze", self.width, self.height)
        return self.state

    def apply_input(self, slot: Slot, x: float, y: float) -> None:
        player = self.state.players[Slot(slot)]
        player.input_x = _clamp_unit(x)
        player.input_y = _clamp_unit(y)

    def tick(self, dt: float) -> TickResult:
        """Advance the match by ``dt`` seconds of real time."""
        state = self.state
        if state.phase != MatchPhase.RUNNING:
            return TickResult()
        dt = max(0.0, dt)
        state.tick += 1
        integrate_motion(state, min(dt, MAX_STEP_SECONDS))
        pickups = collect_items(state)
        for pickup in pickups:
            logger.debug("Slot %s collected item %s", int(pickup.slot), pickup.item_id)
        # The timer is informational only; reaching zero does not end the match.
        state.timer = max(0.0, state.timer - dt)
        if not state.active_items:
            state.outcome = self._decide_outcome(state)
            state.phase = MatchPhase.ENDED
            logger.info(
                "Match over at tick %s: winner=%s scores=%s",
                state.tick,
                "draw" if state.outcome.winner is None else int(state.outcome.winner),
                state.outcome.scores,
            )
        return TickResult(pickups=pickups, outcome=state.outcome)

    def _generate_level(self) -> Level:
        return generate_level(self.width, self.height, self.rng, self.item_count)

    @staticmethod
    def _decide_outcome(state: MatchState) -> MatchOutcome:
        score0, score1 = state.scores
        if score0 > score1:
            winner: Slot | None = Slot.FIRST
        elif score1 > score0:
            winner = Slot.SECOND
        else:
            winner = None
        return MatchOutcome(winner=winner, scores=(score0, score1))
