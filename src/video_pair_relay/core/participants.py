"""
Participant registry for the video pair relay.

A fixed pool of participant slots is created at startup. Slots are
claimed on join and released on leave; they are never destroyed.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, List, Optional

from ..infrastructure.exceptions import CapacityExceeded, UnknownParticipant

if TYPE_CHECKING:
    from ..networking.connection import VideoConnection

logger = logging.getLogger(__name__)


class Participant:
    """One participant slot and its live video connection."""

    def __init__(self, participant_id: int):
        self.id = participant_id
        self.active = False
        self.connection: Optional["VideoConnection"] = None
        # Guards active and connection
        self.lock = asyncio.Lock()

    def has_open_connection(self) -> bool:
        """Check whether a live connection is held (caller holds the lock)."""
        return self.connection is not None and not self.connection.is_closed

    def __repr__(self) -> str:
        return f"Participant(id={self.id}, active={self.active})"


class ParticipantRegistry:
    """Fixed-capacity pool of participant slots."""

    def __init__(self, capacity: int):
        """
        Initialize the registry.

        Args:
            capacity: Maximum number of concurrent participants
        """
        self._slots: List[Participant] = [
            Participant(participant_id) for participant_id in range(1, capacity + 1)
        ]

    @property
    def capacity(self) -> int:
        return len(self._slots)

    @property
    def participants(self) -> List[Participant]:
        return list(self._slots)

    def get(self, participant_id: int) -> Optional[Participant]:
        """Get a slot by identity regardless of its status."""
        if 1 <= participant_id <= len(self._slots):
            return self._slots[participant_id - 1]
        return None

    async def acquire_free_slot(self) -> Participant:
        """
        Claim the first inactive slot.

        Returns:
            Participant: The slot, now marked active

        Raises:
            CapacityExceeded: If every slot is active
        """
        for slot in self._slots:
            async with slot.lock:
                if not slot.active:
                    slot.active = True
                    logger.debug(f"Participant slot {slot.id} claimed")
                    return slot
        raise CapacityExceeded("maximum amount of players reached")

    async def release(self, participant_id: int) -> Participant:
        """
        Mark an active slot inactive.

        Raises:
            UnknownParticipant: If no active slot has that identity
        """
        slot = self.get(participant_id)
        if slot is None:
            raise UnknownParticipant(participant_id)
        async with slot.lock:
            if not slot.active:
                raise UnknownParticipant(participant_id)
            slot.active = False
        logger.debug(f"Participant slot {participant_id} released")
        return slot

    def active_count(self) -> int:
        """Count active slots (unlocked snapshot)."""
        return sum(1 for slot in self._slots if slot.active)
