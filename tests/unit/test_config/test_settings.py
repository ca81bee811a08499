"""
Unit tests for relay configuration loading.
"""

import pytest

from video_pair_relay.config.settings import RelayConfig, RelayConfigManager
from video_pair_relay.infrastructure.exceptions import ConfigurationError, ValidationError

ENV_KEYS = [
    "API_HOST",
    "API_PORT",
    "VIDEO_HOST",
    "VIDEO_BASE_PORT",
    "LISTEN_BACKLOG",
    "MAX_PARTICIPANTS",
    "KEEPALIVE_INTERVAL",
    "KEEPALIVE_COUNT",
    "ACCEPT_RETRY_DELAY",
    "RELAY_CHUNK_SIZE",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        # setenv first so teardown also removes values written by load_dotenv
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


class TestRelayConfig:
    """Test cases for RelayConfig."""

    @pytest.mark.unit
    def test_defaults(self):
        config = RelayConfig()

        assert config.api_port == 3000
        assert config.max_participants == 2
        assert config.video_base_port == 0
        assert config.keepalive_interval == 1

    @pytest.mark.unit
    def test_port_for_slot(self):
        assert RelayConfig().port_for_slot(2) == 0
        config = RelayConfig(video_base_port=8000, max_participants=3)
        assert [config.port_for_slot(i) for i in (1, 2, 3)] == [8000, 8001, 8002]

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "overrides",
        [
            {"max_participants": 0},
            {"video_base_port": 70000},
            {"video_base_port": 65535, "max_participants": 2},
            {"keepalive_interval": 0},
            {"keepalive_count": 0},
            {"accept_retry_delay": -1},
            {"relay_chunk_size": 0},
        ],
    )
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ValidationError):
            RelayConfig(**overrides)

    @pytest.mark.unit
    def test_validation_error_is_configuration_error(self):
        assert issubclass(ValidationError, ConfigurationError)


class TestRelayConfigManager:
    """Test cases for RelayConfigManager."""

    @pytest.mark.unit
    def test_reads_environment(self, clean_env, tmp_path):
        clean_env.setenv("API_PORT", "3100")
        clean_env.setenv("VIDEO_BASE_PORT", "9000")
        clean_env.setenv("MAX_PARTICIPANTS", "4")
        clean_env.setenv("ACCEPT_RETRY_DELAY", "0.5")

        config = RelayConfigManager(str(tmp_path / "missing.env")).get_config()

        assert config.api_port == 3100
        assert config.video_base_port == 9000
        assert config.max_participants == 4
        assert config.accept_retry_delay == 0.5
        assert config.video_host == "0.0.0.0"

    @pytest.mark.unit
    def test_loads_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("MAX_PARTICIPANTS=6\nVIDEO_HOST=127.0.0.1\n")

        config = RelayConfigManager(str(env_file)).get_config()

        assert config.max_participants == 6
        assert config.video_host == "127.0.0.1"

    @pytest.mark.unit
    def test_malformed_integer_raises(self, clean_env, tmp_path):
        clean_env.setenv("API_PORT", "three thousand")

        with pytest.raises(ValidationError, match="API_PORT"):
            RelayConfigManager(str(tmp_path / "missing.env")).get_config()

    @pytest.mark.unit
    def test_out_of_range_value_raises(self, clean_env, tmp_path):
        clean_env.setenv("MAX_PARTICIPANTS", "0")

        with pytest.raises(ValidationError):
            RelayConfigManager(str(tmp_path / "missing.env")).get_config()
