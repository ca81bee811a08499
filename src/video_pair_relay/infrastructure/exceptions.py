"""
Custom exceptions for the video pair relay.

This module defines all custom exceptions used throughout the system,
providing clear error categorization and handling.
"""


class VideoRelayError(Exception):
    """Base exception for all video relay related errors."""

    pass


class ConfigurationError(VideoRelayError):
    """Raised when the service cannot be configured or bound at startup."""

    pass


class ValidationError(ConfigurationError):
    """Raised when configuration validation fails."""

    pass


class CapacityExceeded(VideoRelayError):
    """Raised when every participant slot is already taken."""

    pass


class UnknownParticipant(VideoRelayError):
    """Raised when no active participant matches the given identity."""

    def __init__(self, participant_id: int):
        super().__init__(f"no active player with id {participant_id}")
        self.participant_id = participant_id


class InvalidTransition(VideoRelayError):
    """Raised when a connection state machine receives an illegal event."""

    def __init__(self, state, event):
        super().__init__(f"cannot apply {event.name} in state {state.name}")
        self.state = state
        self.event = event


class NetworkError(VideoRelayError):
    """Raised when there are network communication errors."""

    pass


class AcceptError(NetworkError):
    """Raised when accepting a participant connection fails."""

    pass


class RelayIOError(NetworkError):
    """Raised when reading or writing during a relay session fails."""

    pass
