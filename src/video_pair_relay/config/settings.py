"""
Configuration management for the video pair relay.

Settings come from environment variables, optionally loaded from a
``.env`` file.
"""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from ..infrastructure.exceptions import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class RelayConfig:
    """Runtime configuration for the relay service."""

    # Join/leave HTTP boundary
    api_host: str = "0.0.0.0"
    api_port: int = 3000

    # Video listeners, one per participant slot
    video_host: str = "0.0.0.0"
    video_base_port: int = 0
    listen_backlog: int = 8

    max_participants: int = 2

    # Transport keep-alive
    keepalive_interval: int = 1
    keepalive_count: int = 3

    accept_retry_delay: float = 0.1
    relay_chunk_size: int = 64 * 1024

    log_level: str = "INFO"

    def __post_init__(self):
        """Validate value ranges."""
        if self.max_participants < 1:
            raise ValidationError("max_participants must be at least 1")
        if not 0 <= self.video_base_port <= 65535:
            raise ValidationError(
                f"video_base_port out of range: {self.video_base_port}"
            )
        if (
            self.video_base_port
            and self.video_base_port + self.max_participants - 1 > 65535
        ):
            raise ValidationError(
                "video_base_port leaves no room for every participant slot"
            )
        if self.keepalive_interval < 1:
            raise ValidationError("keepalive_interval must be at least 1 second")
        if self.keepalive_count < 1:
            raise ValidationError("keepalive_count must be at least 1")
        if self.accept_retry_delay < 0:
            raise ValidationError("accept_retry_delay cannot be negative")
        if self.relay_chunk_size < 1:
            raise ValidationError("relay_chunk_size must be positive")

    def port_for_slot(self, participant_id: int) -> int:
        """Return the port a participant slot binds, 0 meaning ephemeral."""
        if self.video_base_port == 0:
            return 0
        return self.video_base_port + participant_id - 1


class RelayConfigManager:
    """Loads RelayConfig from the environment."""

    def __init__(self, env_file_path: str = ".env"):
        """
        Initialize configuration manager.

        Args:
            env_file_path: Path to environment file
        """
        self.env_file_path = env_file_path
        self._load_environment()

    def _load_environment(self):
        """Load environment variables from file."""
        if os.path.exists(self.env_file_path):
            load_dotenv(dotenv_path=self.env_file_path)
            logger.info(f"Loaded environment from {self.env_file_path}")
        else:
            logger.debug(f"Environment file {self.env_file_path} not found")

    def _get_optional_env(self, key: str, default: str = None) -> str:
        """Get optional environment variable."""
        return os.getenv(key, default)

    def _get_int_env(self, key: str, default: int) -> int:
        """Get an integer environment variable."""
        value = os.getenv(key)
        if value is None or value == "":
            return default
        try:
            return int(value)
        except ValueError:
            raise ValidationError(f"{key} must be an integer, got {value!r}")

    def _get_float_env(self, key: str, default: float) -> float:
        """Get a float environment variable."""
        value = os.getenv(key)
        if value is None or value == "":
            return default
        try:
            return float(value)
        except ValueError:
            raise ValidationError(f"{key} must be a number, got {value!r}")

    def get_config(self) -> RelayConfig:
        """
        Get the relay configuration.

        Returns:
            RelayConfig: Relay configuration

        Raises:
            ValidationError: If a value is malformed or out of range
        """
        try:
            config = RelayConfig(
                api_host=self._get_optional_env("API_HOST", "0.0.0.0"),
                api_port=self._get_int_env("API_PORT", 3000),
                video_host=self._get_optional_env("VIDEO_HOST", "0.0.0.0"),
                video_base_port=self._get_int_env("VIDEO_BASE_PORT", 0),
                listen_backlog=self._get_int_env("LISTEN_BACKLOG", 8),
                max_participants=self._get_int_env("MAX_PARTICIPANTS", 2),
                keepalive_interval=self._get_int_env("KEEPALIVE_INTERVAL", 1),
                keepalive_count=self._get_int_env("KEEPALIVE_COUNT", 3),
                accept_retry_delay=self._get_float_env("ACCEPT_RETRY_DELAY", 0.1),
                relay_chunk_size=self._get_int_env("RELAY_CHUNK_SIZE", 64 * 1024),
                log_level=self._get_optional_env("LOG_LEVEL", "INFO"),
            )

            logger.info("Configuration loaded successfully")
            return config

        except ValidationError as e:
            logger.error(f"Failed to load configuration: {e}")
            raise
