from __future__ import annotations

MAZE_WIDTH = 21
MAZE_HEIGHT = 21
MIN_MAZE_SIZE = 5
ITEM_COUNT = 15

PLAYER_SPEED = 5.0  # tiles per second
PLAYER_SIZE = 0.6
ITEM_SIZE = 0.5
SAFE_DISTANCE = 0.8  # slightly larger than PLAYER_SIZE to keep a gap

MATCH_SECONDS = 60.0
TICK_HZ = 60
TICK_SECONDS = 1.0 / TICK_HZ
# Upper bound on the motion step of a single tick; keeps one step well under a tile.
MAX_STEP_SECONDS = 0.1

DEFAULT_PORT = 5000
DEFAULT_LATENCY_MS = 200
LISTEN_BACKLOG = 2
MAX_LINE_BYTES = 65536
RECV_CHUNK = 4096
# Droppable lines (STATE) queued per client; older ones are discarded first.
OUTBOX_MAX_LINES = 8
