"""
Pytest configuration and shared fixtures for the video pair relay test suite.
"""

import pytest
import pytest_asyncio

from video_pair_relay.config.settings import RelayConfig
from video_pair_relay.core.pairing import PairingEngine
from video_pair_relay.core.participants import ParticipantRegistry
from video_pair_relay.core.video_router import VideoRouter


@pytest.fixture
def relay_config():
    """Configuration bound to loopback with OS-assigned video ports."""
    return RelayConfig(
        api_host="127.0.0.1",
        api_port=0,
        video_host="127.0.0.1",
        video_base_port=0,
        max_participants=2,
        keepalive_interval=1,
        keepalive_count=2,
        accept_retry_delay=0.01,
        log_level="DEBUG",
    )


@pytest.fixture
def registry():
    """Registry with two participant slots."""
    return ParticipantRegistry(capacity=2)


@pytest.fixture
def pairing_engine():
    """Empty pairing engine."""
    return PairingEngine()


@pytest_asyncio.fixture
async def video_router(relay_config):
    """Started video router, stopped after the test."""
    router = VideoRouter(relay_config)
    await router.start()
    yield router
    await router.stop()


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
