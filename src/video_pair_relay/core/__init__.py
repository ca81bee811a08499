"""
Core components for the video pair relay.

This package contains the participant registry, the pairing engine and
the connection state machine. The coordinating VideoRouter lives in
``core.video_router``.
"""

from .participants import Participant, ParticipantRegistry
from .pairing import Pair, PairingEngine
from .state import ConnectionEvent, ConnectionState, ConnectionStateMachine, TRANSITIONS
from .types import JoinResult

__all__ = [
    "Participant",
    "ParticipantRegistry",
    "Pair",
    "PairingEngine",
    "ConnectionEvent",
    "ConnectionState",
    "ConnectionStateMachine",
    "TRANSITIONS",
    "JoinResult",
]
