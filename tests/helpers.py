"""
Async polling and connection helpers shared by the test suite.
"""

import asyncio
import socket
from typing import Callable, Tuple

from video_pair_relay.core.state import ConnectionState
from video_pair_relay.networking.connection import VideoConnection

DEFAULT_TIMEOUT = 5.0


async def wait_until(
    predicate: Callable[[], bool],
    timeout: float = DEFAULT_TIMEOUT,
    interval: float = 0.01,
) -> None:
    """Poll until predicate() is true or fail after timeout."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(interval)


async def wait_for_state(listener, state: ConnectionState, timeout: float = DEFAULT_TIMEOUT):
    await wait_until(lambda: listener.state is state, timeout=timeout)


async def connect(port: int) -> Tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Open a client video connection to a loopback endpoint."""
    return await asyncio.open_connection("127.0.0.1", port)


async def video_socket_pair(participant_id: int):
    """
    Build a server-side VideoConnection and the client streams feeding it.

    Returns:
        (connection, client_reader, client_writer)
    """
    server_sock, client_sock = socket.socketpair()
    connection = await VideoConnection.from_socket(participant_id, server_sock)
    client_reader, client_writer = await asyncio.open_connection(sock=client_sock)
    return connection, client_reader, client_writer


async def close_writer(writer: asyncio.StreamWriter) -> None:
    writer.close()
    try:
        await writer.wait_closed()
    except (ConnectionError, OSError):
        pass
