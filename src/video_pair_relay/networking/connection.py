"""
Live video connection for a participant.

Wraps the asyncio stream pair of one accepted socket. The connection
counts as ended once it is closed locally or the peer hangs up, whether
or not a relay is reading from it.
"""

import asyncio
import logging
import socket
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)


def enable_keepalive(sock: socket.socket, interval: int, count: int) -> None:
    """
    Turn on transport keep-alive for an accepted socket.

    Args:
        sock: Accepted TCP socket
        interval: Seconds of idle time before the first check, and between checks
        count: Unanswered checks before the peer is considered dead
    """
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
    if hasattr(socket, "TCP_KEEPIDLE"):
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPIDLE, interval)
    elif hasattr(socket, "TCP_KEEPALIVE"):
        # macOS spells the idle option differently
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPALIVE, interval)
    if hasattr(socket, "TCP_KEEPINTVL"):
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPINTVL, interval)
    if hasattr(socket, "TCP_KEEPCNT"):
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPCNT, count)


class HangupAwareProtocol(asyncio.StreamReaderProtocol):
    """Stream protocol that reports peer end-of-stream and connection errors."""

    def __init__(self, reader: asyncio.StreamReader, on_hangup: Callable[[], None]):
        super().__init__(reader)
        self._on_hangup = on_hangup

    def eof_received(self):
        keep_open = super().eof_received()
        self._on_hangup()
        return keep_open

    def connection_lost(self, exc):
        super().connection_lost(exc)
        # exc is None after a local close
        if exc is not None:
            logger.debug(f"Video connection lost: {exc}")
            self._on_hangup()


class VideoConnection:
    """One participant's accepted video socket."""

    def __init__(
        self,
        participant_id: int,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        hangup: Optional[asyncio.Event] = None,
    ) -> None:
        self.participant_id = participant_id
        self.reader = reader
        self.writer = writer
        self.peer: Optional[Tuple] = writer.get_extra_info("peername")
        self._closed = asyncio.Event()
        # Set by the protocol on peer EOF or connection loss
        self._hangup = hangup or asyncio.Event()

    @classmethod
    async def from_socket(
        cls, participant_id: int, sock: socket.socket
    ) -> "VideoConnection":
        """Wrap an accepted socket in asyncio streams that watch for hangup."""
        loop = asyncio.get_running_loop()
        reader = asyncio.StreamReader()
        hangup = asyncio.Event()
        protocol = HangupAwareProtocol(reader, hangup.set)
        transport, _ = await loop.create_connection(lambda: protocol, sock=sock)
        writer = asyncio.StreamWriter(transport, protocol, reader, loop)
        return cls(participant_id, reader, writer, hangup)

    @property
    def peer_hung_up(self) -> bool:
        return self._hangup.is_set()

    @property
    def is_closed(self) -> bool:
        return self._closed.is_set() or self._hangup.is_set()

    async def wait_closed(self) -> None:
        """Block until the connection is closed locally or by the peer."""
        if self.is_closed:
            return
        waiters = [
            asyncio.ensure_future(self._closed.wait()),
            asyncio.ensure_future(self._hangup.wait()),
        ]
        try:
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                waiter.cancel()

    async def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        if self._closed.is_set():
            return
        self._closed.set()
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except (ConnectionError, OSError) as e:
            logger.debug(f"Error closing connection of participant {self.participant_id}: {e}")

    def __repr__(self) -> str:
        return f"VideoConnection(participant={self.participant_id}, peer={self.peer})"
