"""
Unit tests for server configuration.
"""

import pytest

from usercrud.config import DEFAULT_DATABASE_URL, ServerConfig


ENV_VARS = [
    "DATABASE_URL",
    "HTTP_HOST",
    "HTTP_PORT",
    "HTTP_BUFFER_SIZE",
    "HTTP_TIMEOUT",
    "HTTP_LOG_LEVEL",
    "HTTP_LOG_FORMAT",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestDefaults:
    def test_defaults(self):
        config = ServerConfig()

        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.buffer_size == 1024
        assert config.timeout is None
        assert config.database_url == DEFAULT_DATABASE_URL

    def test_default_database_url(self):
        assert DEFAULT_DATABASE_URL.endswith("@127.0.0.1:5432/rust-api")


class TestFromEnv:
    """Tests for ServerConfig.from_env()."""

    def test_empty_environment_gives_defaults(self, clean_env):
        assert ServerConfig.from_env() == ServerConfig()

    def test_reads_variables(self, clean_env):
        clean_env.setenv("DATABASE_URL", "sqlite:///users.db")
        clean_env.setenv("HTTP_HOST", "127.0.0.1")
        clean_env.setenv("HTTP_PORT", "3000")
        clean_env.setenv("HTTP_BUFFER_SIZE", "4096")
        clean_env.setenv("HTTP_TIMEOUT", "2.5")
        clean_env.setenv("HTTP_LOG_LEVEL", "DEBUG")
        clean_env.setenv("HTTP_LOG_FORMAT", "json")

        config = ServerConfig.from_env()

        assert config.database_url == "sqlite:///users.db"
        assert config.host == "127.0.0.1"
        assert config.port == 3000
        assert config.buffer_size == 4096
        assert config.timeout == 2.5
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    def test_bad_port(self, clean_env):
        clean_env.setenv("HTTP_PORT", "eighty")

        with pytest.raises(ValueError):
            ServerConfig.from_env()


class TestValidate:
    """Tests for ServerConfig.validate()."""

    def test_defaults_valid(self):
        ServerConfig().validate()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"port": -1},
            {"port": 65536},
            {"backlog": 0},
            {"buffer_size": 10},
            {"timeout": 0},
            {"database_url": ""},
            {"log_format": "xml"},
        ],
    )
    def test_invalid(self, overrides):
        with pytest.raises(ValueError):
            ServerConfig(**overrides).validate()
