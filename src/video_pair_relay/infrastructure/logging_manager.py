"""
Logging management for the video pair relay.

This module provides centralized logging configuration with environment-based
log levels and YAML configuration support.

Environment Log Levels:
- Development: DEBUG and above
- Staging: INFO and above
- Production: WARNING and above
"""

import logging
import logging.config
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

# Third-party loggers that stay at WARNING regardless of environment
NOISY_LOGGERS = [
    "asyncio",
    "uvicorn.access",
    "uvicorn.error",
    "httpx",
]


class Environment(Enum):
    """Environment enumeration."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LoggingManager:
    """Centralized logging management with production controls."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize logging manager.

        Args:
            config_path: Path to YAML configuration file. If None, uses
                LOGGING_CONFIG or the logging.yaml shipped with the package.
        """
        if config_path is None:
            override = os.getenv("LOGGING_CONFIG")
            config_path = (
                Path(override)
                if override
                else Path(__file__).parent.parent / "logging.yaml"
            )

        self.config_path = config_path
        self._config_cache: Optional[Dict[str, Any]] = None
        self._environment = self._detect_environment()

    def _detect_environment(self) -> Environment:
        """Detect current environment from environment variables."""
        env = os.getenv("ENVIRONMENT", "development").lower()

        if env in ["prod", "production"]:
            return Environment.PRODUCTION
        elif env in ["staging", "stage"]:
            return Environment.STAGING
        else:
            return Environment.DEVELOPMENT

    def _load_yaml_config(self) -> Optional[Dict[str, Any]]:
        """Load YAML logging configuration."""
        if self._config_cache is not None:
            return self._config_cache

        if not self.config_path.exists():
            return None

        try:
            with open(self.config_path, "r") as f:
                config = yaml.safe_load(f)
            self._config_cache = config
            return config
        except (yaml.YAMLError, IOError) as e:
            print(f"Warning: Failed to load YAML logging config: {e}")
            return None

    def _get_environment_log_level(self) -> str:
        """Get appropriate log level for current environment."""
        if self._environment == Environment.PRODUCTION:
            return "WARNING"
        elif self._environment == Environment.STAGING:
            return "INFO"
        else:
            return "DEBUG"

    def _apply_production_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Raise application loggers to the production level."""
        if self._environment != Environment.PRODUCTION:
            return config

        env_log_level = self._get_environment_log_level()
        config = dict(config)

        if "root" in config:
            config["root"] = dict(config["root"], level=env_log_level)

        if "loggers" in config:
            config["loggers"] = {
                name: (
                    logger_config
                    if name in NOISY_LOGGERS
                    else dict(logger_config, level=env_log_level)
                )
                for name, logger_config in config["loggers"].items()
            }

        return config

    def setup_logging(
        self,
        component_name: str,
        log_level: Optional[str] = None,
        log_file: Optional[str] = None,
    ) -> logging.Logger:
        """
        Set up logging for a component with environment-aware configuration.

        Args:
            component_name: Name of the component
            log_level: Override log level (if None, uses environment-appropriate level)
            log_file: Log file path for the fallback configuration

        Returns:
            Configured logger instance
        """
        if log_level is None:
            log_level = self._get_environment_log_level()

        config = self._load_yaml_config()

        if config:
            config = self._apply_production_overrides(config)

            # File handlers in the YAML config write below logs/
            os.makedirs("logs", exist_ok=True)
            logging.config.dictConfig(config)

            logger = logging.getLogger(component_name)
            logger.setLevel(getattr(logging, log_level.upper()))
            self._suppress_noisy_loggers()
            return logger

        return self._setup_basic_logging(component_name, log_level, log_file)

    def _setup_basic_logging(
        self,
        component_name: str,
        log_level: str,
        log_file: Optional[str],
    ) -> logging.Logger:
        """Set up basic logging when YAML config is not available."""
        production_mode = self._environment == Environment.PRODUCTION
        logger = logging.getLogger(component_name)
        logger.setLevel(getattr(logging, log_level.upper()))
        logger.handlers.clear()

        if production_mode:
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        else:
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logger.level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if log_file:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(
                logging.WARNING if production_mode else logging.DEBUG
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        self._suppress_noisy_loggers()
        return logger

    def _suppress_noisy_loggers(self):
        """Suppress noisy third-party library loggers."""
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    def get_environment(self) -> Environment:
        """Get current environment."""
        return self._environment

    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self._environment == Environment.PRODUCTION


# Global logging manager instance
_logging_manager = LoggingManager()


def setup_logging(
    component_name: str,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Set up logging for a component (convenience function)."""
    return _logging_manager.setup_logging(component_name, log_level, log_file)


def get_logger(component_name: str) -> logging.Logger:
    """Get a logger for a component."""
    return logging.getLogger(component_name)


def is_production() -> bool:
    """Check if running in production mode."""
    return _logging_manager.is_production()


def get_environment() -> Environment:
    """Get current environment."""
    return _logging_manager.get_environment()
