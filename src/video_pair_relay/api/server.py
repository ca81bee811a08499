"""
API server runner for the video pair relay.
"""

import asyncio
import logging
import sys
from typing import Optional

import uvicorn

from ..config.settings import RelayConfig, RelayConfigManager
from ..core.video_router import VideoRouter
from ..infrastructure.exceptions import ConfigurationError
from ..infrastructure.logging import setup_logging
from .app import create_app

logger = logging.getLogger(__name__)


async def run_api_server(config: RelayConfig) -> None:
    """
    Bind every video endpoint, then serve the join/leave API.

    Args:
        config: Relay configuration

    Raises:
        ConfigurationError: If a video endpoint cannot be bound
    """
    router = VideoRouter(config)
    # Bind before serving so a bad port fails the process immediately
    await router.start()

    app = create_app(router=router)
    uvicorn_config = uvicorn.Config(
        app=app,
        host=config.api_host,
        port=config.api_port,
        log_level=config.log_level.lower(),
    )
    server = uvicorn.Server(uvicorn_config)

    logger.info(f"Starting video relay API server on {config.api_host}:{config.api_port}")
    await server.serve()


def main(env_file_path: Optional[str] = ".env") -> None:
    """Main function to run the relay service."""
    try:
        config = RelayConfigManager(env_file_path).get_config()
    except ConfigurationError as e:
        logging.getLogger(__name__).critical(f"Invalid configuration: {e}")
        sys.exit(1)

    setup_logging(component_name="video_pair_relay", log_level=config.log_level)

    try:
        asyncio.run(run_api_server(config))
    except KeyboardInterrupt:
        logger.info("Relay server shutdown requested")
    except ConfigurationError as e:
        logger.critical(f"Failed to start relay server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
