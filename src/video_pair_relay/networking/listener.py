"""
Per-participant connection manager.

Every participant slot owns a listening endpoint of its own. While the
slot is occupied an accept loop holds at most one live connection at a
time; when that connection closes the loop goes back to accepting.
"""

import asyncio
import logging
import socket
from typing import Awaitable, Callable, Optional

from ..core.participants import Participant
from ..core.state import ConnectionEvent, ConnectionState, ConnectionStateMachine
from ..infrastructure.exceptions import AcceptError, ConfigurationError
from ..infrastructure.logging import setup_logging
from .connection import VideoConnection, enable_keepalive

logger = setup_logging(
    component_name="video_pair_relay.listener",
    log_file="logs/listener.log",
)

ConnectedCallback = Callable[[Participant], Awaitable[None]]


class ParticipantListener:
    """Accept loop and connection lifecycle for one participant slot."""

    def __init__(
        self,
        participant: Participant,
        host: str = "0.0.0.0",
        port: int = 0,
        backlog: int = 8,
        keepalive_interval: int = 1,
        keepalive_count: int = 3,
        accept_retry_delay: float = 0.1,
        on_connected: Optional[ConnectedCallback] = None,
    ) -> None:
        self.participant = participant
        self.host = host
        self.requested_port = port
        self.backlog = backlog
        self.keepalive_interval = keepalive_interval
        self.keepalive_count = keepalive_count
        self.accept_retry_delay = accept_retry_delay
        self.on_connected = on_connected

        self.machine = ConnectionStateMachine()
        self.connections_accepted = 0
        self._sock: Optional[socket.socket] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> ConnectionState:
        return self.machine.state

    @property
    def port(self) -> int:
        """Port actually bound, resolved when an ephemeral port was requested."""
        if self._sock is None:
            return self.requested_port
        return self._sock.getsockname()[1]

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def bind(self) -> None:
        """
        Bind the listening endpoint.

        Raises:
            ConfigurationError: If the address cannot be bound
        """
        if self._sock is not None:
            return
        try:
            sock = socket.create_server(
                (self.host, self.requested_port), backlog=self.backlog
            )
        except OSError as e:
            raise ConfigurationError(
                f"cannot bind video listener for participant {self.participant.id} "
                f"on {self.host}:{self.requested_port}: {e}"
            ) from e
        sock.setblocking(False)
        self._sock = sock
        logger.info(
            f"Video endpoint for participant {self.participant.id} bound on "
            f"{self.host}:{self.port}"
        )

    def start(self) -> None:
        """Begin accepting connections for the slot's current occupant."""
        if self.is_running:
            return
        self.bind()
        self.machine.fire(ConnectionEvent.START)
        self._task = asyncio.create_task(
            self._run(), name=f"listener-{self.participant.id}"
        )
        logger.info(f"Started listening for participant {self.participant.id}")

    async def stop(self) -> None:
        """Stop accepting and drop the live connection, keeping the endpoint bound."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        async with self.participant.lock:
            connection = self.participant.connection
            self.participant.connection = None
        if connection is not None:
            await connection.close()

        if self.machine.can_fire(ConnectionEvent.STOP):
            self.machine.fire(ConnectionEvent.STOP)
            logger.info(f"Stopped listening for participant {self.participant.id}")

    async def close(self) -> None:
        """Stop and release the listening endpoint."""
        await self.stop()
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def mark_streaming(self) -> None:
        """Record that a relay session now uses the held connection."""
        if self.machine.can_fire(ConnectionEvent.RELAY_STARTED):
            self.machine.fire(ConnectionEvent.RELAY_STARTED)

    async def _run(self) -> None:
        while True:
            try:
                connection = await self._accept()
            except AcceptError as e:
                logger.warning(f"{e}; retrying")
                await asyncio.sleep(self.accept_retry_delay)
                continue
            except Exception as e:
                logger.error(
                    f"Unexpected accept error for participant {self.participant.id}: {e}",
                    exc_info=True,
                )
                await asyncio.sleep(self.accept_retry_delay)
                continue

            try:
                await self._serve(connection)
            except Exception as e:
                logger.error(
                    f"Error serving connection of participant {self.participant.id}: {e}",
                    exc_info=True,
                )

    async def _accept(self) -> VideoConnection:
        """
        Wait for the next connection and configure it.

        Raises:
            AcceptError: If accepting or configuring the socket fails
        """
        loop = asyncio.get_running_loop()
        try:
            sock, address = await loop.sock_accept(self._sock)
        except OSError as e:
            raise AcceptError(
                f"accept failed for participant {self.participant.id}: {e}"
            ) from e

        try:
            enable_keepalive(sock, self.keepalive_interval, self.keepalive_count)
            return await VideoConnection.from_socket(self.participant.id, sock)
        except OSError as e:
            sock.close()
            raise AcceptError(
                f"could not set up connection from {address} for participant "
                f"{self.participant.id}: {e}"
            ) from e
        except BaseException:
            # Cancellation or an unexpected error must not leak the socket
            sock.close()
            raise

    async def _serve(self, connection: VideoConnection) -> None:
        """Hold the connection until it closes locally or the peer hangs up."""
        try:
            async with self.participant.lock:
                self.participant.connection = connection
            self.connections_accepted += 1
            self.machine.fire(ConnectionEvent.ACCEPTED)
            logger.info(f"Connected to player {self.participant.id} from {connection.peer}")

            if self.on_connected is not None:
                try:
                    await self.on_connected(self.participant)
                except Exception as e:
                    logger.error(
                        f"Error handling connection of participant "
                        f"{self.participant.id}: {e}",
                        exc_info=True,
                    )
            await connection.wait_closed()
            if connection.peer_hung_up:
                logger.info(f"Player {self.participant.id} hung up")
        finally:
            await connection.close()
            async with self.participant.lock:
                if self.participant.connection is connection:
                    self.participant.connection = None
            if self.machine.can_fire(ConnectionEvent.DISCONNECTED):
                self.machine.fire(ConnectionEvent.DISCONNECTED)
            logger.info(f"Lost connection to player {self.participant.id}")
