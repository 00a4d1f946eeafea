import socket

from mazeserver.common.types import Slot
from mazeserver.net.connection import PlayerConnection


def _make_pair(max_queued_lines: int = 4):
    server_side, client_side = socket.socketpair()
    server_side.setsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF, 4096)
    client_side.setblocking(False)
    return PlayerConnection(Slot.FIRST, server_side, max_queued_lines=max_queued_lines), client_side


def _drain_bytes(sock: socket.socket) -> bytes:
    data = b""
    while True:
        try:
            chunk = sock.recv(65536)
        except BlockingIOError:
            break
        if not chunk:
            break
        data += chunk
    return data


def test_unread_socket_drops_oldest_lines():
    connection, client = _make_pair(max_queued_lines=4)
    try:
        for i in range(2000):
            connection.send(f"LINE {i:05d}\n")
            assert connection.pending_output <= 5 * len("LINE 00000\n")
        assert connection.connected
        assert connection.dropped_lines > 0
    finally:
        connection.close()
        client.close()


def test_reliable_send_skips_stale_lines_and_keeps_framing():
    connection, client = _make_pair(max_queued_lines=4)
    try:
        for i in range(2000):
            connection.send(f"LINE {i:05d}\n")
        data = _drain_bytes(client)
        connection.send_reliable("SHUTDOWN\n")
        data += _drain_bytes(client)

        lines = data.decode().splitlines()
        assert lines[-1] == "SHUTDOWN"
        numbers = [int(line.split()[1]) for line in lines[:-1]]
        assert all(line.startswith("LINE ") and len(line) == 10 for line in lines[:-1])
        assert numbers == sorted(numbers)
        assert len(numbers) < 2000
        assert connection.pending_output == 0
        assert connection.connected
    finally:
        connection.close()
        client.close()


def test_peer_close_marks_disconnected_once():
    connection, client = _make_pair()
    client.close()
    try:
        assert connection.read_lines() == []
        assert not connection.connected
        connection.send("STATE\n")
        assert connection.pending_output == 0
    finally:
        connection.close()
