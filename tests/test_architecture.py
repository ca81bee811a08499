"""
Architecture tests for the video pair relay.

These verify that the package layout imports cleanly and that the
public names are re-exported where callers expect them.
"""

import pytest


class TestArchitectureImports:
    """Test that all modules can be imported correctly."""

    @pytest.mark.unit
    def test_main_package_import(self):
        import video_pair_relay
        assert hasattr(video_pair_relay, "__version__")
        assert video_pair_relay.VideoRouter is not None

    @pytest.mark.unit
    def test_core_imports(self):
        from video_pair_relay.core import PairingEngine, ParticipantRegistry, ConnectionStateMachine
        from video_pair_relay.core.pairing import PairingEngine as PairingEngineClass
        from video_pair_relay.core.participants import ParticipantRegistry as ParticipantRegistryClass
        from video_pair_relay.core.state import ConnectionStateMachine as ConnectionStateMachineClass

        assert PairingEngine == PairingEngineClass
        assert ParticipantRegistry == ParticipantRegistryClass
        assert ConnectionStateMachine == ConnectionStateMachineClass

    @pytest.mark.unit
    def test_networking_imports(self):
        from video_pair_relay.networking import ParticipantListener, RelaySession, VideoConnection
        from video_pair_relay.networking.listener import ParticipantListener as ParticipantListenerClass
        from video_pair_relay.networking.relay import RelaySession as RelaySessionClass
        from video_pair_relay.networking.connection import VideoConnection as VideoConnectionClass

        assert ParticipantListener == ParticipantListenerClass
        assert RelaySession == RelaySessionClass
        assert VideoConnection == VideoConnectionClass

    @pytest.mark.unit
    def test_infrastructure_imports(self):
        from video_pair_relay.infrastructure import setup_logging, get_logger, VideoRelayError
        from video_pair_relay.infrastructure.logging import setup_logging as setup_logging_func
        from video_pair_relay.infrastructure.exceptions import VideoRelayError as VideoRelayErrorClass

        assert setup_logging == setup_logging_func
        assert VideoRelayError == VideoRelayErrorClass
        assert get_logger("video_pair_relay.test").name == "video_pair_relay.test"

    @pytest.mark.unit
    def test_api_imports(self):
        from video_pair_relay.api import create_app, main

        assert callable(create_app)
        assert callable(main)


class TestExceptionHierarchy:
    """Test the exception taxonomy."""

    @pytest.mark.unit
    def test_all_errors_share_a_base(self):
        from video_pair_relay.infrastructure.exceptions import (
            AcceptError,
            CapacityExceeded,
            ConfigurationError,
            InvalidTransition,
            NetworkError,
            RelayIOError,
            UnknownParticipant,
            VideoRelayError,
        )

        for error in (CapacityExceeded, UnknownParticipant, ConfigurationError, InvalidTransition, NetworkError):
            assert issubclass(error, VideoRelayError)
        assert issubclass(AcceptError, NetworkError)
        assert issubclass(RelayIOError, NetworkError)


class TestLoggingManager:
    """Test environment-aware logging setup."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "environment, level",
        [("production", "WARNING"), ("staging", "INFO"), ("development", "DEBUG")],
    )
    def test_environment_levels(self, monkeypatch, environment, level):
        from video_pair_relay.infrastructure.logging_manager import LoggingManager

        monkeypatch.setenv("ENVIRONMENT", environment)
        manager = LoggingManager()

        assert manager._get_environment_log_level() == level
        assert manager.is_production() is (environment == "production")

    @pytest.mark.unit
    def test_basic_logging_without_yaml(self, tmp_path):
        from video_pair_relay.infrastructure.logging_manager import LoggingManager

        manager = LoggingManager(config_path=tmp_path / "absent.yaml")
        log_file = tmp_path / "logs" / "component.log"
        logger = manager.setup_logging("video_pair_relay.test_basic", "INFO", str(log_file))

        logger.info("hello")

        assert logger.level == 20
        assert log_file.exists()
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    @pytest.mark.unit
    def test_production_overrides_application_loggers(self, monkeypatch):
        from video_pair_relay.infrastructure.logging_manager import LoggingManager

        monkeypatch.setenv("ENVIRONMENT", "production")
        manager = LoggingManager()
        config = {
            "root": {"level": "DEBUG"},
            "loggers": {"video_pair_relay": {"level": "DEBUG"}, "uvicorn.access": {"level": "INFO"}},
        }

        result = manager._apply_production_overrides(config)

        assert result["root"]["level"] == "WARNING"
        assert result["loggers"]["video_pair_relay"]["level"] == "WARNING"
        assert result["loggers"]["uvicorn.access"]["level"] == "INFO"

    @pytest.mark.unit
    def test_module_level_environment_helpers(self):
        from video_pair_relay.infrastructure import Environment, get_environment, is_production

        assert isinstance(get_environment(), Environment)
        assert is_production() is (get_environment() is Environment.PRODUCTION)
