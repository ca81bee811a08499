"""
Infrastructure components for the video pair relay.

This package contains infrastructure concerns including:
- Logging configuration with environment-based levels
- Custom exception definitions
"""

from .logging import setup_logging, get_logger
from .logging_manager import (
    LoggingManager,
    Environment,
    is_production,
    get_environment,
)
from .exceptions import (
    VideoRelayError,
    ConfigurationError,
    ValidationError,
    CapacityExceeded,
    UnknownParticipant,
    InvalidTransition,
    NetworkError,
    AcceptError,
    RelayIOError,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "LoggingManager",
    "Environment",
    "is_production",
    "get_environment",
    # Exceptions
    "VideoRelayError",
    "ConfigurationError",
    "ValidationError",
    "CapacityExceeded",
    "UnknownParticipant",
    "InvalidTransition",
    "NetworkError",
    "AcceptError",
    "RelayIOError",
]
