"""
Common types and constants for the video pair relay.
"""

from dataclasses import dataclass
from typing import Final, Optional

# Messages surfaced at the join/leave boundary
MSG_CAPACITY_EXCEEDED: Final[str] = "maximum amount of players reached"
MSG_UNKNOWN_PARTICIPANT: Final[str] = "no active player with that id"


@dataclass(frozen=True)
class JoinResult:
    """Outcome of a successful join."""

    participant_id: int
    video_port: int
    paired: bool
    partner_id: Optional[int] = None
