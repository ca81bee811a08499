"""
Bidirectional byte relay between two paired participants.

Each session runs two copy tasks, one per direction. When either
direction ends, by end-of-stream or by an I/O error, the sibling is
cancelled and both connections are closed. Flow control comes from the
transport: a slow reader stalls the matching writer through drain().
"""

import asyncio
import logging
import time
from typing import Dict, Optional

from ..infrastructure.exceptions import RelayIOError
from ..infrastructure.logging import setup_logging
from .connection import VideoConnection

logger = setup_logging(
    component_name="video_pair_relay.relay",
    log_file="logs/relay.log",
)

DEFAULT_CHUNK_SIZE = 64 * 1024


class RelaySession:
    """Transient copy activity between two connected participants."""

    def __init__(
        self,
        source: VideoConnection,
        destination: VideoConnection,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.source = source
        self.destination = destination
        self.chunk_size = chunk_size
        # Bytes read from each participant and written to its partner
        self.bytes_forwarded: Dict[int, int] = {
            source.participant_id: 0,
            destination.participant_id: 0,
        }
        self.started_at: Optional[float] = None
        self.ended_at: Optional[float] = None
        self.task: Optional[asyncio.Task] = None

    @property
    def key(self) -> frozenset:
        return frozenset(self.bytes_forwarded)

    @property
    def is_running(self) -> bool:
        return self.task is not None and not self.task.done()

    def start(self) -> asyncio.Task:
        """Schedule the session on the running loop."""
        self.task = asyncio.create_task(
            self.run(),
            name=f"relay-{self.source.participant_id}-{self.destination.participant_id}",
        )
        return self.task

    async def run(self) -> None:
        """Copy in both directions until either side ends, then tear down."""
        self.started_at = time.time()
        logger.info(
            f"Relay started between participants "
            f"{self.source.participant_id} and {self.destination.participant_id}"
        )
        forward = asyncio.create_task(self._pump(self.source, self.destination))
        backward = asyncio.create_task(self._pump(self.destination, self.source))
        try:
            await asyncio.wait({forward, backward}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            forward.cancel()
            backward.cancel()
            results = await asyncio.gather(forward, backward, return_exceptions=True)
            for result in results:
                if isinstance(result, RelayIOError):
                    logger.warning(f"Relay I/O failure: {result}")
                elif isinstance(result, Exception):
                    logger.error(f"Unexpected relay failure: {result}", exc_info=result)
            await self.source.close()
            await self.destination.close()
            self.ended_at = time.time()
            logger.info(
                f"Relay ended between participants "
                f"{self.source.participant_id} and {self.destination.participant_id} "
                f"({self.total_bytes()} bytes forwarded)"
            )

    async def _pump(self, src: VideoConnection, dst: VideoConnection) -> None:
        """Copy bytes from src to dst until end-of-stream."""
        try:
            while True:
                data = await src.reader.read(self.chunk_size)
                if not data:
                    logger.debug(f"Participant {src.participant_id} closed its stream")
                    return
                dst.writer.write(data)
                await dst.writer.drain()
                self.bytes_forwarded[src.participant_id] += len(data)
        except (ConnectionError, OSError) as e:
            raise RelayIOError(
                f"relay {src.participant_id} -> {dst.participant_id} failed: {e}"
            ) from e

    def total_bytes(self) -> int:
        return sum(self.bytes_forwarded.values())

    def get_stats(self) -> dict:
        """Get session statistics."""
        return {
            "participants": sorted(self.bytes_forwarded),
            "bytes_forwarded": dict(self.bytes_forwarded),
            "started_at": self.started_at,
            "running": self.is_running,
        }


async def relay(
    source: VideoConnection,
    destination: VideoConnection,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> RelaySession:
    """Run a relay session to completion and return it."""
    session = RelaySession(source, destination, chunk_size)
    await session.run()
    return session
