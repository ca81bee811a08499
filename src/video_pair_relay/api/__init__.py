"""
Join/leave HTTP API for the video pair relay.
"""

from .app import create_app, get_video_router
from .server import main, run_api_server

__all__ = [
    "create_app",
    "get_video_router",
    "main",
    "run_api_server",
]
