from __future__ import annotations

import logging
import socket
from collections import deque

from mazeserver.common.constants import OUTBOX_MAX_LINES, RECV_CHUNK
from mazeserver.common.types import Slot
from mazeserver.protocol.codec import LineBuffer

logger = logging.getLogger(__name__)

CLOSE_FLUSH_TIMEOUT = 1.0


class PlayerConnection:
    """Non-blocking line stream to one client.

    Reads never block: no data is a normal outcome. Writes go through a
    bounded queue of whole lines. Only the line at the head may be partly
    sent, so dropping stale lines from the queue never splits one.
    """

    def __init__(
        self,
        slot: Slot,
        sock: socket.socket,
        peer: object = None,
        max_queued_lines: int = OUTBOX_MAX_LINES,
    ) -> None:
        self.slot = slot
        self.sock = sock
        self.peer = peer
        self.connected = True
        self.dropped_lines = 0
        self._lines = LineBuffer()
        self._inflight = bytearray()
        self._queued: deque[bytes] = deque(maxlen=max_queued_lines)
        sock.setblocking(False)

    def read_lines(self) -> list[str]:
        """Drain whatever the socket has buffered and return complete lines."""
        lines: list[str] = []
        while self.connected:
            try:
                data = self.sock.recv(RECV_CHUNK)
            except (BlockingIOError, InterruptedError):
                break
            except OSError as exc:
                self._mark_disconnected(f"read failed: {exc}")
                break
            if not data:
                self._mark_disconnected("peer closed the stream")
                break
            lines.extend(self._lines.feed(data))
        return lines

    def send(self, text: str) -> None:
        """Queue a droppable line; the oldest queued line goes when the queue is full."""
        if not self.connected:
            return
        if len(self._queued) == self._queued.maxlen:
            self.dropped_lines += 1
            if self.dropped_lines == 1:
                logger.info("Client in slot %s is not reading; dropping stale lines", int(self.slot))
        self._queued.append(text.encode("utf-8"))
        self.flush()

    def flush(self) -> None:
        while self.connected:
            if not self._inflight:
                if not self._queued:
                    return
                self._inflight.extend(self._queued.popleft())
            try:
                sent = self.sock.send(self._inflight)
            except (BlockingIOError, InterruptedError):
                return
            except OSError as exc:
                self._mark_disconnected(f"write failed: {exc}")
                return
            del self._inflight[:sent]

    def send_reliable(self, text: str, timeout: float = CLOSE_FLUSH_TIMEOUT) -> None:
        """Send a line and wait (bounded) until it is written.

        Queued droppable lines are discarded first; a partly sent line is
        finished so the stream stays framed.
        """
        if not self.connected:
            return
        self._queued.clear()
        payload = bytes(self._inflight) + text.encode("utf-8")
        self._inflight.clear()
        try:
            self.sock.settimeout(timeout)
            self.sock.sendall(payload)
        except OSError as exc:
            self._mark_disconnected(f"write failed: {exc}")
        finally:
            if self.connected:
                self.sock.setblocking(False)

    @property
    def pending_output(self) -> int:
        return len(self._inflight) + sum(len(line) for line in self._queued)

    def close(self) -> None:
        self.connected = False
        try:
            self.sock.close()
        except OSError:
            logger.debug("Error closing socket for slot %s", int(self.slot), exc_info=True)

    def _mark_disconnected(self, reason: str) -> None:
        if not self.connected:
            return
        self.connected = False
        self._inflight.clear()
        self._queued.clear()
        logger.warning("Client in slot %s disconnected: %s", int(self.slot), reason)
