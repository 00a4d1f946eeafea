from __future__ import annotations

import math

from mazeserver.common.constants import (
    ITEM_SIZE,
    PLAYER_SIZE,
    PLAYER_SPEED,
    SAFE_DISTANCE,
)
from mazeserver.common.types import PLAYER_SLOTS
from mazeserver.engine.maze import Maze
from mazeserver.engine.state import MatchState, Pickup, Player

HALF_SIZE = PLAYER_SIZE / 2.0
PICKUP_RADIUS = PLAYER_SIZE / 2.0 + ITEM_SIZE / 2.0


def footprint_hits_wall(maze: Maze, x: float, y: float, half: float = HALF_SIZE) -> bool:
    """True if the square footprint centred on (x, y) touches any Wall cell.

    The footprint is narrower than a tile, so its four corners cover every
    cell it can overlap.
    """
    for cx in (x - half, x + half):
        for cy in (y - half, y + half):
            if maze.is_wall_at(cx, cy):
                return True
    return False


def too_close(x: float, y: float, other: Player, safe_distance: float = SAFE_DISTANCE) -> bool:
    return math.hypot(x - other.x, y - other.y) < safe_distance


def _blocked(state: MatchState, player: Player, x: float, y: float) -> bool:
    if footprint_hits_wall(state.maze, x, y):
        return True
    other = state.players[player.slot.other]
    return too_close(x, y, other)


def move_player(state: MatchState, player: Player, step: float) -> None:
    """Axis-separated move: X first, then Y from the X-resolved position."""
    dx = player.input_x * PLAYER_SPEED * step
    dy = player.input_y * PLAYER_SPEED * step
    if dx and not _blocked(state, player, player.x + dx, player.y):
        player.x += dx
    if dy and not _blocked(state, player, player.x, player.y + dy):
        player.y += dy


def integrate_motion(state: MatchState, step: float) -> None:
    for slot in PLAYER_SLOTS:
        move_player(state, state.players[slot], step)


def collect_items(state: MatchState) -> list[Pickup]:
    """Hand every overlapped item to the first player (in slot order) touching it."""
    pickups: list[Pickup] = []
    for slot in PLAYER_SLOTS:
        player = state.players[slot]
        for item in state.items:
            if not item.active:
                continue
            if math.hypot(player.x - item.x, player.y - item.y) < PICKUP_RADIUS:
                if item.collect():
                    player.score += 1
                    pickups.append(Pickup(slot=slot, item_id=item.item_id))
    return pickups
