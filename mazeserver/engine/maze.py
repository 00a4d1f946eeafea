from __future__ import annotations

import math
import random
from dataclasses import dataclass

from mazeserver.common.constants import ITEM_COUNT, MIN_MAZE_SIZE
from mazeserver.common.types import PLAYER_SLOTS, Cell, Point, Slot

# Carving moves two cells at a time so passages stay on odd coordinates.
CARVE_STEPS: tuple[Cell, ...] = ((0, -2), (0, 2), (-2, 0), (2, 0))
START_CELL: Cell = (1, 1)


class InvalidDimensions(ValueError):
    """Raised when a maze is too small or not odd-sized."""


class MazeGenerationError(RuntimeError):
    """Raised when a carved maze fails its connectivity invariant."""


@dataclass(frozen=True)
class Maze:
    """Rectangular wall grid, indexed ``walls[y][x]`` (True means Wall).

    Anything outside the grid is treated as Wall.
    """

    width: int
    height: int
    walls: tuple[tuple[bool, ...], ...]

    def in_bounds(self, cell: Cell) -> bool:
        x, y = cell
        return 0 <= x < self.width and 0 <= y < self.height

    def is_wall(self, cx: int, cy: int) -> bool:
        if not self.in_bounds((cx, cy)):
            return True
        return self.walls[cy][cx]

    def is_wall_at(self, x: float, y: float) -> bool:
        """Wall test for a continuous tile-space coordinate."""
        return self.is_wall(math.floor(x), math.floor(y))

    def open_cells(self) -> list[Cell]:
        return [
            (x, y)
            for y in range(self.height)
            for x in range(self.width)
            if not self.walls[y][x]
        ]

    def wall_bits(self) -> str:
        return "".join("1" if wall else "0" for row in self.walls for wall in row)

    @classmethod
    def from_bits(cls, width: int, height: int, bits: str) -> Maze:
        """Rebuild a maze from the wall bits of a SETUP line (client side)."""
        if len(bits) != width * height or set(bits) - {"0", "1"}:
            raise ValueError("Wall bits do not match maze dimensions")
        rows = tuple(
            tuple(ch == "1" for ch in bits[y * width:(y + 1) * width])
            for y in range(height)
        )
        return cls(width=width, height=height, walls=rows)


@dataclass(frozen=True)
class Level:
    """Everything generated for one match: geometry, item spots and spawns."""

    maze: Maze
    item_positions: tuple[Point, ...]
    spawns: tuple[Point, Point]

    def spawn_for(self, slot: Slot) -> Point:
        return self.spawns[slot]


def cell_center(cell: Cell) -> Point:
    x, y = cell
    return (x + 0.5, y + 0.5)


def orthogonal_neighbors(cell: Cell) -> list[Cell]:
    x, y = cell
    return [(x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1)]


def validate_dimensions(width: int, height: int) -> None:
    for name, value in (("width", width), ("height", height)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidDimensions(f"Maze {name} must be an integer, got {value!r}")
        if value < MIN_MAZE_SIZE:
            raise InvalidDimensions(f"Maze {name} must be at least {MIN_MAZE_SIZE}, got {value}")
        if value % 2 == 0:
            raise InvalidDimensions(f"Maze {name} must be odd, got {value}")


def carve_maze(width: int, height: int, rng: random.Random) -> Maze:
    """Carve a perfect maze with an iterative recursive backtracker."""
    validate_dimensions(width, height)
    grid = [[True] * width for _ in range(height)]
    sx, sy = START_CELL
    grid[sy][sx] = False
    stack: list[Cell] = [START_CELL]
    while stack:
        cx, cy = stack[-1]
        candidates: list[Cell] = []
        for dx, dy in CARVE_STEPS:
            nx, ny = cx + dx, cy + dy
            if 0 < nx < width - 1 and 0 < ny < height - 1 and grid[ny][nx]:
                candidates.append((dx, dy))
        if not candidates:
            stack.pop()
            continue
        dx, dy = rng.choice(candidates)
        grid[cy + dy // 2][cx + dx // 2] = False
        grid[cy + dy][cx + dx] = False
        stack.append((cx + dx, cy + dy))
    return Maze(width=width, height=height, walls=tuple(tuple(row) for row in grid))


def reachable_cells(maze: Maze, start: Cell) -> set[Cell]:
    if maze.is_wall(*start):
        return set()
    visited: set[Cell] = set()
    stack = [start]
    while stack:
        cur = stack.pop()
        if cur in visited:
            continue
        visited.add(cur)
        for n in orthogonal_neighbors(cur):
            if n not in visited and not maze.is_wall(*n):
                stack.append(n)
    return visited


def is_fully_connected(maze: Maze, start: Cell = START_CELL) -> bool:
    open_cells = maze.open_cells()
    return len(reachable_cells(maze, start)) == len(open_cells)


def open_edge_count(maze: Maze) -> int:
    edges = 0
    for x, y in maze.open_cells():
        if not maze.is_wall(x + 1, y):
            edges += 1
        if not maze.is_wall(x, y + 1):
            edges += 1
    return edges


def is_perfect(maze: Maze) -> bool:
    """True if the open cells form a single tree (connected, no cycles)."""
    return is_fully_connected(maze) and open_edge_count(maze) == len(maze.open_cells()) - 1


def place_items(maze: Maze, count: int, rng: random.Random) -> tuple[Point, ...]:
    """Rejection-sample ``count`` open cells; duplicates are allowed."""
    positions: list[Point] = []
    for _ in range(count):
        while True:
            cell = (rng.randint(1, maze.width - 2), rng.randint(1, maze.height - 2))
            if not maze.is_wall(*cell):
                break
        positions.append(cell_center(cell))
    return tuple(positions)


def spawn_points(width: int, height: int) -> tuple[Point, Point]:
    return ((1.5, 1.5), (width - 1.5, height - 1.5))


def generate_level(
    width: int,
    height: int,
    rng: random.Random,
    item_count: int = ITEM_COUNT,
) -> Level:
    """Generate maze, item positions and spawn points for a new match."""
    if item_count < 0:
        raise ValueError("Item count must be non-negative")
    maze = carve_maze(width, height, rng)
    if not is_perfect(maze):
        raise MazeGenerationError("Carved maze is not a single connected tree")
    spawns = spawn_points(width, height)
    for slot in PLAYER_SLOTS:
        if maze.is_wall_at(*spawns[slot]):
            raise MazeGenerationError(f"Spawn for slot {int(slot)} is inside a wall")
    items = place_items(maze, item_count, rng)
    return Level(maze=maze, item_positions=items, spawns=spawns)
