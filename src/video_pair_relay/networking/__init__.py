"""
Networking components for the video pair relay.

This package contains the per-participant listeners, the connection
wrapper, and the bidirectional relay.
"""

from .connection import VideoConnection, enable_keepalive
from .listener import ParticipantListener
from .relay import RelaySession, relay

__all__ = [
    "VideoConnection",
    "enable_keepalive",
    "ParticipantListener",
    "RelaySession",
    "relay",
]
