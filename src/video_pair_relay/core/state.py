"""
Connection state machine for a participant slot.

    IDLE -> LISTENING -> CONNECTED -> STREAMING
                ^            |            |
                +------------+------------+   (DISCONNECTED)

STOP returns any running state to IDLE.
"""

from enum import Enum
from typing import Dict, Tuple

from ..infrastructure.exceptions import InvalidTransition


class ConnectionState(Enum):
    IDLE = "idle"
    LISTENING = "listening"
    CONNECTED = "connected"
    STREAMING = "streaming"


class ConnectionEvent(Enum):
    START = "start"
    ACCEPTED = "accepted"
    RELAY_STARTED = "relay_started"
    DISCONNECTED = "disconnected"
    STOP = "stop"


TRANSITIONS: Dict[Tuple[ConnectionState, ConnectionEvent], ConnectionState] = {
    (ConnectionState.IDLE, ConnectionEvent.START): ConnectionState.LISTENING,
    (ConnectionState.LISTENING, ConnectionEvent.ACCEPTED): ConnectionState.CONNECTED,
    (ConnectionState.CONNECTED, ConnectionEvent.RELAY_STARTED): ConnectionState.STREAMING,
    (ConnectionState.CONNECTED, ConnectionEvent.DISCONNECTED): ConnectionState.LISTENING,
    (ConnectionState.STREAMING, ConnectionEvent.DISCONNECTED): ConnectionState.LISTENING,
    (ConnectionState.LISTENING, ConnectionEvent.STOP): ConnectionState.IDLE,
    (ConnectionState.CONNECTED, ConnectionEvent.STOP): ConnectionState.IDLE,
    (ConnectionState.STREAMING, ConnectionEvent.STOP): ConnectionState.IDLE,
}


class ConnectionStateMachine:
    """Tracks one slot's connection lifecycle. Performs no I/O."""

    def __init__(self) -> None:
        self.state = ConnectionState.IDLE

    def can_fire(self, event: ConnectionEvent) -> bool:
        return (self.state, event) in TRANSITIONS

    def fire(self, event: ConnectionEvent) -> ConnectionState:
        """
        Apply an event.

        Raises:
            InvalidTransition: If the event is not allowed in the current state
        """
        try:
            next_state = TRANSITIONS[(self.state, event)]
        except KeyError:
            raise InvalidTransition(self.state, event) from None
        self.state = next_state
        return next_state
