from __future__ import annotations

import logging
import socket

from mazeserver.common.constants import LISTEN_BACKLOG
from mazeserver.common.types import PLAYER_SLOTS, Slot
from mazeserver.engine.maze import Level
from mazeserver.net.connection import PlayerConnection
from mazeserver.protocol.codec import encode, setup_message

logger = logging.getLogger(__name__)


def open_listener(host: str, port: int, backlog: int = LISTEN_BACKLOG) -> socket.socket:
    """Bind the listening socket; failures here are fatal and propagate."""
    listener = socket.create_server((host, port), backlog=backlog)
    logger.info("Server listening on %s:%s", host, port)
    return listener


def send_setup(connection: PlayerConnection, level: Level) -> None:
    connection.send_reliable(encode(setup_message(level, connection.slot)))


def accept_players(listener: socket.socket, level: Level) -> dict[Slot, PlayerConnection]:
    """Block until both slots are filled, sending each client its setup line.

    There is no timeout: the server waits for the second player indefinitely.
    """
    logger.info("Waiting for %s clients to connect...", len(PLAYER_SLOTS))
    connections: dict[Slot, PlayerConnection] = {}
    for slot in PLAYER_SLOTS:
        sock, peer = listener.accept()
        connection = PlayerConnection(slot, sock, peer)
        send_setup(connection, level)
        connections[slot] = connection
        logger.info("Client %s connected from %s", int(slot), peer)
    return connections
