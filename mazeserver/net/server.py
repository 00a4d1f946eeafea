from __future__ import annotations

import logging

from mazeserver.common.types import PLAYER_SLOTS, Slot
from mazeserver.engine.engine import MatchEngine
from mazeserver.engine.state import MatchOutcome, TickResult
from mazeserver.net.connection import PlayerConnection
from mazeserver.net.gate import send_setup
from mazeserver.net.latency import DelayLine
from mazeserver.net.scheduler import Clock, FixedTickScheduler
from mazeserver.protocol.codec import (
    decode_line,
    encode,
    game_over_message,
    state_message,
)
from mazeserver.protocol.models import (
    ExitCommand,
    InputCommand,
    ResetCommand,
    ShutdownMessage,
)

logger = logging.getLogger(__name__)


class MatchServer:
    """Fixed-tick loop tying the sockets, delay lines and engine together.

    Everything runs on one thread: the loop is the only writer of the match
    state, and socket reads only feed the inbound delay line.
    """

    def __init__(
        self,
        engine: MatchEngine,
        connections: dict[Slot, PlayerConnection],
        latency: float,
        scheduler: FixedTickScheduler | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.engine = engine
        self.connections = connections
        self.scheduler = scheduler or FixedTickScheduler()
        self.clock = clock or self.scheduler.clock
        self.inbound = DelayLine(latency)
        self.outbound = DelayLine(latency)
        self.running = False

    def start(self) -> None:
        self.engine.start()
        self.running = True

    def run(self) -> None:
        self.start()
        self.scheduler.start()
        logger.info("Game starting!")
        while self.running:
            self.step(self.scheduler.wait_next())

    def step(self, dt: float) -> TickResult | None:
        """One tick: read, deliver due input, simulate, then publish state."""
        now = self.clock()
        self._read_network(now)
        self._deliver_inbound(now)
        if not self.running:
            return None
        result = self.engine.tick(dt)
        if result.outcome is not None:
            self._finish(result.outcome)
            return result
        self.outbound.enqueue(encode(state_message(self.engine.state)), now)
        for msg in self.outbound.drain_ready(now):
            self.broadcast(msg.payload)
        for connection in self.connections.values():
            connection.flush()
        return result

    def broadcast(self, text: str) -> None:
        for slot in PLAYER_SLOTS:
            connection = self.connections.get(slot)
            if connection is not None:
                connection.send(text)

    def broadcast_reliable(self, text: str) -> None:
        for slot in PLAYER_SLOTS:
            connection = self.connections.get(slot)
            if connection is not None:
                connection.send_reliable(text)

    def reset(self) -> None:
        """Start a new match on the existing connections."""
        state = self.engine.reset()
        self.outbound.clear()
        for connection in self.connections.values():
            send_setup(connection, state.level)

    def shutdown(self) -> None:
        logger.info("EXIT requested. Shutting down...")
        self.outbound.clear()
        self.broadcast_reliable(encode(ShutdownMessage()))
        self.running = False

    def close(self) -> None:
        self.running = False
        for connection in self.connections.values():
            connection.close()

    def _read_network(self, now: float) -> None:
        for slot in PLAYER_SLOTS:
            connection = self.connections.get(slot)
            if connection is None or not connection.connected:
                continue
            for line in connection.read_lines():
                self.inbound.enqueue(line, now, origin=slot)

    def _deliver_inbound(self, now: float) -> None:
        for msg in self.inbound.drain_ready(now):
            if not self.running:
                break
            command = decode_line(msg.payload)
            if command is None:
                logger.debug("Dropped malformed line from slot %s: %r", msg.origin, msg.payload)
            elif isinstance(command, InputCommand):
                self.engine.apply_input(msg.origin, command.x, command.y)
            elif isinstance(command, ExitCommand):
                self.shutdown()
            elif isinstance(command, ResetCommand):
                self.reset()
            else:
                logger.debug("Ignored %s from slot %s", type(command).__name__, msg.origin)

    def _finish(self, outcome: MatchOutcome) -> None:
        # GAMEOVER bypasses the delay line; queued STATE lines are dropped.
        self.outbound.clear()
        self.broadcast_reliable(encode(game_over_message(outcome)))
        self.running = False
