"""
Pairing engine for the video pair relay.

Participants are grouped into pairs. A participant without a partner
sits in a singleton group until the next joiner fills the open slot.
Assignment is first-fit by pair creation order.
"""

import asyncio
import logging
from contextlib import AsyncExitStack
from dataclasses import dataclass
from typing import List, Optional

from .participants import Participant

logger = logging.getLogger(__name__)


@dataclass
class Pair:
    """Two paired participants, or one waiting for a partner."""

    first: Participant
    second: Optional[Participant] = None

    def members(self) -> List[Participant]:
        return [member for member in (self.first, self.second) if member is not None]

    def contains(self, participant: Participant) -> bool:
        return self.first is participant or self.second is participant

    def partner_of(self, participant: Participant) -> Optional[Participant]:
        if self.first is participant:
            return self.second
        if self.second is participant:
            return self.first
        return None

    def is_open(self) -> bool:
        """
        A pair is open when exactly one member is active and the other
        slot is empty or inactive. Member locks must be held.
        """
        first_active = self.first is not None and self.first.active
        second_active = self.second is not None and self.second.active
        return first_active != second_active

    def key(self) -> frozenset:
        """Identity set used to key relay sessions."""
        return frozenset(member.id for member in self.members())


class PairingEngine:
    """Owns the pairs list and answers partner lookups."""

    def __init__(self) -> None:
        self._pairs: List[Pair] = []
        # Serializes every read and mutation of the pairs list
        self._lock = asyncio.Lock()

    @property
    def pairs(self) -> List[Pair]:
        return list(self._pairs)

    async def assign_partner(self, participant: Participant) -> bool:
        """
        Place a participant into the first open pair.

        Args:
            participant: Newly joined participant

        Returns:
            bool: True if paired with someone, False if put in a singleton group
        """
        async with self._lock:
            self._detach(participant)

            for pair in self._pairs:
                async with AsyncExitStack() as stack:
                    # Ascending identity order prevents lock-order deadlocks
                    for member in sorted(pair.members(), key=lambda m: m.id):
                        await stack.enter_async_context(member.lock)

                    if not pair.is_open():
                        continue

                    if pair.first.active:
                        pair.second = participant
                    else:
                        pair.first = participant
                    logger.info(
                        f"Participant {participant.id} paired with "
                        f"participant {pair.partner_of(participant).id}"
                    )
                    return True

            self._pairs.append(Pair(first=participant))
            logger.info(f"Participant {participant.id} placed in its own group")
            return False

    def _detach(self, participant: Participant) -> None:
        """Remove a recycled slot from the pair it was previously in."""
        for pair in list(self._pairs):
            if pair.second is participant:
                pair.second = None
            elif pair.first is participant:
                if pair.second is None:
                    self._pairs.remove(pair)
                else:
                    pair.first, pair.second = pair.second, None
            else:
                continue
            logger.debug(f"Participant {participant.id} detached from previous pair")
            return

    async def get_partner(self, participant: Participant) -> Optional[Participant]:
        """Return the co-member of the participant's pair, or None."""
        async with self._lock:
            pair = self._find(participant)
            return pair.partner_of(participant) if pair else None

    async def get_pair(self, participant: Participant) -> Optional[Pair]:
        """Return the pair containing the participant, or None."""
        async with self._lock:
            return self._find(participant)

    def _find(self, participant: Participant) -> Optional[Pair]:
        for pair in self._pairs:
            if pair.contains(participant):
                return pair
        return None

    def snapshot(self) -> List[List[int]]:
        """Member identities of every pair, in creation order."""
        return [[member.id for member in pair.members()] for pair in self._pairs]
