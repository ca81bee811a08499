"""
Video Router coordinating participants, pairing and relay sessions.

This module owns the participant registry, the pairing engine and one
listener per participant slot. It is the only component the join/leave
boundary talks to.
"""

import asyncio
from typing import Any, Dict, Optional

from ..config.settings import RelayConfig
from ..infrastructure.exceptions import UnknownParticipant, VideoRelayError
from ..infrastructure.logging import setup_logging
from ..networking.listener import ParticipantListener
from ..networking.relay import RelaySession
from .pairing import PairingEngine
from .participants import Participant, ParticipantRegistry
from .types import JoinResult

logger = setup_logging(
    component_name="video_pair_relay.video_router",
    log_file="logs/video_router.log",
)


class VideoRouter:
    """
    Main router that pairs participants and relays video between them.

    Joins and leaves are serialized; connection events from the
    per-participant listeners may interleave with them freely.
    """

    def __init__(self, config: Optional[RelayConfig] = None):
        """
        Initialize the video router.

        Args:
            config: Relay configuration, defaults when omitted
        """
        self.config = config or RelayConfig()
        self.registry = ParticipantRegistry(self.config.max_participants)
        self.pairing = PairingEngine()
        self.listeners: Dict[int, ParticipantListener] = {}
        self.sessions: Dict[frozenset, RelaySession] = {}

        self._membership_lock = asyncio.Lock()
        self._session_lock = asyncio.Lock()
        self._started = False

        self.stats = {
            "joins": 0,
            "leaves": 0,
            "sessions_started": 0,
            "bytes_forwarded": 0,
        }

    @property
    def is_started(self) -> bool:
        return self._started

    async def start(self) -> None:
        """
        Bind one video endpoint per participant slot.

        Raises:
            ConfigurationError: If any endpoint cannot be bound
        """
        if self._started:
            return
        listeners = {}
        try:
            for participant in self.registry.participants:
                listener = ParticipantListener(
                    participant,
                    host=self.config.video_host,
                    port=self.config.port_for_slot(participant.id),
                    backlog=self.config.listen_backlog,
                    keepalive_interval=self.config.keepalive_interval,
                    keepalive_count=self.config.keepalive_count,
                    accept_retry_delay=self.config.accept_retry_delay,
                    on_connected=self._on_connected,
                )
                listener.bind()
                listeners[participant.id] = listener
        except VideoRelayError:
            for listener in listeners.values():
                await listener.close()
            raise

        self.listeners = listeners
        self._started = True
        logger.info(f"Video router started with {len(listeners)} participant slots")

    async def stop(self) -> None:
        """Stop every listener and relay session and release the endpoints."""
        for listener in self.listeners.values():
            await listener.close()

        tasks = [s.task for s in self.sessions.values() if s.task is not None]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        self.listeners = {}
        self._started = False
        logger.info("Video router stopped")

    async def on_join(self) -> JoinResult:
        """
        Admit a new participant, pair it and start listening for its video.

        Returns:
            JoinResult: Identity, video port and pairing outcome

        Raises:
            CapacityExceeded: If every participant slot is taken
        """
        if not self._started:
            raise VideoRelayError("video router is not started")

        async with self._membership_lock:
            participant = await self.registry.acquire_free_slot()
            logger.info(f"Accepted join request for player {participant.id}")

            paired = await self.pairing.assign_partner(participant)
            partner = await self.pairing.get_partner(participant) if paired else None

            listener = self.listeners[participant.id]
            listener.start()
            self.stats["joins"] += 1

            return JoinResult(
                participant_id=participant.id,
                video_port=listener.port,
                paired=paired,
                partner_id=partner.id if partner is not None else None,
            )

    async def on_leave(self, participant_id: int) -> None:
        """
        Remove a participant and drop its video connection.

        Raises:
            UnknownParticipant: If no active participant has that identity
        """
        async with self._membership_lock:
            participant = await self.registry.release(participant_id)
            listener = self.listeners.get(participant.id)
            if listener is not None:
                await listener.stop()
            self.stats["leaves"] += 1
            logger.info(f"Player {participant_id} left")

    async def get_partner_id(self, participant_id: int) -> Optional[int]:
        """
        Look up the identity of a participant's partner.

        Raises:
            UnknownParticipant: If no active participant has that identity
        """
        participant = self.registry.get(participant_id)
        if participant is None or not participant.active:
            raise UnknownParticipant(participant_id)
        partner = await self.pairing.get_partner(participant)
        return partner.id if partner is not None else None

    async def _on_connected(self, participant: Participant) -> None:
        """Start a relay session once both members of a pair are connected."""
        partner = await self.pairing.get_partner(participant)
        if partner is None:
            logger.info(f"Player {participant.id} connected without a partner")
            return

        key = frozenset((participant.id, partner.id))
        async with self._session_lock:
            existing = self.sessions.get(key)
            if existing is not None and existing.is_running:
                return

            first, second = sorted((participant, partner), key=lambda p: p.id)
            async with first.lock, second.lock:
                if not (participant.active and partner.active):
                    return
                if not (
                    participant.has_open_connection()
                    and partner.has_open_connection()
                ):
                    logger.info(
                        f"Player {participant.id} waiting for partner "
                        f"{partner.id} to connect"
                    )
                    return
                source = participant.connection
                destination = partner.connection

            session = RelaySession(
                source, destination, chunk_size=self.config.relay_chunk_size
            )
            self.sessions[key] = session
            task = session.start()
            task.add_done_callback(lambda _: self._on_session_finished(key, session))
            self.stats["sessions_started"] += 1

            for member in (participant, partner):
                listener = self.listeners.get(member.id)
                if listener is not None:
                    listener.mark_streaming()

    def _on_session_finished(self, key: frozenset, session: RelaySession) -> None:
        self.stats["bytes_forwarded"] += session.total_bytes()
        if self.sessions.get(key) is session:
            del self.sessions[key]

    async def get_system_status(self) -> Dict[str, Any]:
        """
        Get the overall system status.

        Returns:
            Dict with participant, pairing and relay information
        """
        participants = []
        for participant in self.registry.participants:
            listener = self.listeners.get(participant.id)
            participants.append(
                {
                    "id": participant.id,
                    "active": participant.active,
                    "state": listener.state.value if listener else "idle",
                    "video_port": listener.port if listener else None,
                    "connected": participant.has_open_connection(),
                }
            )
        return {
            "started": self._started,
            "capacity": self.registry.capacity,
            "active_participants": self.registry.active_count(),
            "participants": participants,
            "pairs": self.pairing.snapshot(),
            "sessions": [session.get_stats() for session in self.sessions.values()],
            "stats": dict(self.stats),
        }
