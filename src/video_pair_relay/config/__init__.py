"""
Configuration management for the video pair relay.

This package provides:
- The RelayConfig data structure and its validation
- Environment variable and .env file loading
"""

from .settings import RelayConfig, RelayConfigManager

__all__ = [
    "RelayConfig",
    "RelayConfigManager",
]
