"""
Unit tests for the participant registry.
"""

import asyncio

import pytest

from video_pair_relay.core.participants import ParticipantRegistry
from video_pair_relay.infrastructure.exceptions import CapacityExceeded, UnknownParticipant


class TestParticipantRegistry:
    """Test cases for ParticipantRegistry."""

    @pytest.mark.unit
    def test_slots_start_inactive(self, registry):
        assert registry.capacity == 2
        assert [p.id for p in registry.participants] == [1, 2]
        assert all(not p.active and p.connection is None for p in registry.participants)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_acquire_returns_distinct_ids_until_full(self):
        """Each join up to capacity gets a distinct identity, the next one fails."""
        registry = ParticipantRegistry(capacity=3)

        ids = [(await registry.acquire_free_slot()).id for _ in range(3)]

        assert ids == [1, 2, 3]
        assert registry.active_count() == 3
        with pytest.raises(CapacityExceeded):
            await registry.acquire_free_slot()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_concurrent_acquires_never_share_a_slot(self):
        registry = ParticipantRegistry(capacity=4)

        slots = await asyncio.gather(*(registry.acquire_free_slot() for _ in range(4)))

        assert sorted(slot.id for slot in slots) == [1, 2, 3, 4]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_release_recycles_slot(self, registry):
        await registry.acquire_free_slot()
        await registry.acquire_free_slot()

        released = await registry.release(1)
        assert released.id == 1
        assert not released.active

        again = await registry.acquire_free_slot()
        assert again is released
        assert again.active

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_release_inactive_slot_raises(self, registry):
        with pytest.raises(UnknownParticipant) as exc_info:
            await registry.release(1)
        assert exc_info.value.participant_id == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_release_nonexistent_identity_raises(self, registry):
        await registry.acquire_free_slot()
        with pytest.raises(UnknownParticipant):
            await registry.release(99)
        with pytest.raises(UnknownParticipant):
            await registry.release(0)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_double_release_raises(self, registry):
        await registry.acquire_free_slot()
        await registry.release(1)
        with pytest.raises(UnknownParticipant):
            await registry.release(1)

    @pytest.mark.unit
    def test_get_out_of_range(self, registry):
        assert registry.get(1) is registry.participants[0]
        assert registry.get(3) is None
        assert registry.get(-1) is None
