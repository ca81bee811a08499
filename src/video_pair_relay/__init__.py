"""
Video Pair Relay - pairs two remote players and relays their camera feeds.

Each player joins through a small HTTP API, is paired with the next
player to arrive, and streams raw video bytes to a TCP endpoint of its
own. Once both members of a pair are connected their sockets are joined
by a byte-transparent bidirectional relay; dropped connections are
accepted again without re-pairing.

Architecture:
- Core: Participant registry, pairing engine, connection state machine, router
- Networking: Per-participant listeners and the byte relay
- API: Join/leave HTTP boundary
- Config: Configuration management
- Infrastructure: Logging and exceptions
"""

__version__ = "1.0.0"

# Infrastructure
from .infrastructure.logging import setup_logging, get_logger
from .infrastructure.exceptions import (
    VideoRelayError,
    ConfigurationError,
    CapacityExceeded,
    UnknownParticipant,
    NetworkError,
)

# Configuration
from .config.settings import RelayConfig, RelayConfigManager

# Core components
from .core.participants import Participant, ParticipantRegistry
from .core.pairing import Pair, PairingEngine
from .core.state import ConnectionState, ConnectionStateMachine

# Networking components
from .networking.listener import ParticipantListener
from .networking.relay import RelaySession, relay

from .core.video_router import VideoRouter

__all__ = [
    "__version__",
    # Infrastructure
    "setup_logging",
    "get_logger",
    "VideoRelayError",
    "ConfigurationError",
    "CapacityExceeded",
    "UnknownParticipant",
    "NetworkError",
    # Configuration
    "RelayConfig",
    "RelayConfigManager",
    # Core components
    "Participant",
    "ParticipantRegistry",
    "Pair",
    "PairingEngine",
    "ConnectionState",
    "ConnectionStateMachine",
    "VideoRouter",
    # Networking components
    "ParticipantListener",
    "RelaySession",
    "relay",
]
