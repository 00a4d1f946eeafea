"""Line-oriented text codec for the maze wire protocol.

One message per line, space separated tokens, ``\\n`` terminated::

    SETUP <slot> <width> <height> <wall-bits> <itemCount> <x1> <y1> ...
    INPUT <x> <y>
    EXIT
    RESET
    STATE <timer> <p0x> <p0y> <p0score> <p1x> <p1y> <p1score> <item-active-bits>
    GAMEOVER <winnerSlot|-1> <score0> <score1>
    SHUTDOWN

Decoding never raises on bad input: anything malformed or unknown decodes
to ``None`` and is meant to be dropped by the caller.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from mazeserver.common.constants import MAX_LINE_BYTES
from mazeserver.common.types import PLAYER_SLOTS, Slot
from mazeserver.engine.maze import Level
from mazeserver.engine.state import MatchOutcome, MatchState
from mazeserver.protocol.models import (
    ExitCommand,
    GameOverMessage,
    InputCommand,
    PlayerSnapshot,
    ResetCommand,
    SetupMessage,
    ShutdownMessage,
    StateMessage,
    WireMessage,
)

CMD_SETUP = "SETUP"
CMD_INPUT = "INPUT"
CMD_EXIT = "EXIT"
CMD_RESET = "RESET"
CMD_STATE = "STATE"
CMD_GAMEOVER = "GAMEOVER"
CMD_SHUTDOWN = "SHUTDOWN"

NO_ITEMS = "-"
DRAW = -1


class LineBuffer:
    """Reassembles newline-terminated lines from arbitrary stream chunks."""

    def __init__(self, max_line_bytes: int = MAX_LINE_BYTES) -> None:
        self.max_line_bytes = max_line_bytes
        self._pending = bytearray()

    def feed(self, data: bytes) -> list[str]:
        if not data:
            return []
        self._pending.extend(data)
        *complete, tail = self._pending.split(b"\n")
        self._pending = bytearray(tail)
        if len(self._pending) > self.max_line_bytes:
            self._pending.clear()
        lines = []
        for raw in complete:
            line = raw.decode("utf-8", errors="replace").strip()
            if line:
                lines.append(line)
        return lines

    @property
    def pending(self) -> bytes:
        return bytes(self._pending)


def _fmt_float(value: float) -> str:
    return repr(float(value))


def _fmt_bits(flags: List[bool]) -> str:
    if not flags:
        return NO_ITEMS
    return "".join("1" if flag else "0" for flag in flags)


def _parse_float(token: str) -> float:
    value = float(token)
    if not math.isfinite(value):
        raise ValueError(f"non-finite number {token!r}")
    return value


def _parse_bits(token: str) -> List[bool]:
    if token == NO_ITEMS:
        return []
    if not token or set(token) - {"0", "1"}:
        raise ValueError(f"bad bit string {token!r}")
    return [ch == "1" for ch in token]


def encode(message: WireMessage) -> str:
    """Render a message as a single terminated wire line."""
    if isinstance(message, InputCommand):
        tokens = [CMD_INPUT, _fmt_float(message.x), _fmt_float(message.y)]
    elif isinstance(message, ExitCommand):
        tokens = [CMD_EXIT]
    elif isinstance(message, ResetCommand):
        tokens = [CMD_RESET]
    elif isinstance(message, ShutdownMessage):
        tokens = [CMD_SHUTDOWN]
    elif isinstance(message, SetupMessage):
        tokens = [
            CMD_SETUP,
            str(message.slot),
            str(message.width),
            str(message.height),
            message.walls,
            str(len(message.items)),
        ]
        for x, y in message.items:
            tokens.extend((_fmt_float(x), _fmt_float(y)))
    elif isinstance(message, StateMessage):
        tokens = [CMD_STATE, _fmt_float(message.timer)]
        for player in message.players:
            tokens.extend((_fmt_float(player.x), _fmt_float(player.y), str(player.score)))
        tokens.append(_fmt_bits(message.items_active))
    elif isinstance(message, GameOverMessage):
        tokens = [CMD_GAMEOVER, str(message.winner), *(str(s) for s in message.scores)]
    else:
        raise TypeError(f"Cannot encode {type(message).__name__}")
    return " ".join(tokens) + "\n"


def _decode_input(args: List[str]) -> InputCommand:
    if len(args) != 2:
        raise ValueError("INPUT takes two numbers")
    return InputCommand(x=_parse_float(args[0]), y=_parse_float(args[1]))


def _decode_bare(model: type) -> Callable[[List[str]], WireMessage]:
    def decode(args: List[str]) -> WireMessage:
        if args:
            raise ValueError(f"{model.__name__} takes no arguments")
        return model()

    return decode


def _decode_setup(args: List[str]) -> SetupMessage:
    if len(args) < 5:
        raise ValueError("SETUP is missing fields")
    slot, width, height = int(args[0]), int(args[1]), int(args[2])
    walls = args[3]
    count = int(args[4])
    coords = args[5:]
    if count < 0 or len(coords) != count * 2:
        raise ValueError("SETUP item count does not match coordinates")
    items = [
        (_parse_float(coords[i]), _parse_float(coords[i + 1]))
        for i in range(0, len(coords), 2)
    ]
    return SetupMessage(slot=slot, width=width, height=height, walls=walls, items=items)


def _decode_state(args: List[str]) -> StateMessage:
    if len(args) != 8:
        raise ValueError("STATE takes eight fields")
    players = tuple(
        PlayerSnapshot(
            x=_parse_float(args[1 + i * 3]),
            y=_parse_float(args[2 + i * 3]),
            score=int(args[3 + i * 3]),
        )
        for i in range(2)
    )
    return StateMessage(
        timer=_parse_float(args[0]),
        players=players,
        items_active=_parse_bits(args[7]),
    )


def _decode_game_over(args: List[str]) -> GameOverMessage:
    if len(args) != 3:
        raise ValueError("GAMEOVER takes three fields")
    return GameOverMessage(winner=int(args[0]), scores=(int(args[1]), int(args[2])))


DECODERS: Dict[str, Callable[[List[str]], WireMessage]] = {
    CMD_SETUP: _decode_setup,
    CMD_INPUT: _decode_input,
    CMD_EXIT: _decode_bare(ExitCommand),
    CMD_RESET: _decode_bare(ResetCommand),
    CMD_STATE: _decode_state,
    CMD_GAMEOVER: _decode_game_over,
    CMD_SHUTDOWN: _decode_bare(ShutdownMessage),
}


def decode_line(line: str) -> Optional[WireMessage]:
    """Parse one wire line; returns None for blank, unknown or malformed input."""
    tokens = line.split()
    if not tokens:
        return None
    decoder = DECODERS.get(tokens[0])
    if decoder is None:
        return None
    try:
        return decoder(tokens[1:])
    except (ValueError, ValidationError):
        return None


def setup_message(level: Level, slot: Slot) -> SetupMessage:
    maze = level.maze
    return SetupMessage(
        slot=int(slot),
        width=maze.width,
        height=maze.height,
        walls=maze.wall_bits(),
        items=list(level.item_positions),
    )


def state_message(state: MatchState) -> StateMessage:
    players = tuple(
        PlayerSnapshot(
            x=state.players[slot].x,
            y=state.players[slot].y,
            score=state.players[slot].score,
        )
        for slot in PLAYER_SLOTS
    )
    return StateMessage(
        timer=state.timer,
        players=players,
        items_active=[item.active for item in state.items],
    )


def game_over_message(outcome: MatchOutcome) -> GameOverMessage:
    winner = DRAW if outcome.winner is None else int(outcome.winner)
    return GameOverMessage(winner=winner, scores=outcome.scores)
