"""
Tests for the client configuration module.

This module tests ClientConfig validation and the CLI > env > default
precedence applied by ClientConfig.resolve().
"""

from unittest.mock import patch

import pytest

from ledger_server.client.config import (
    DEFAULT_SERVER_URL,
    DEFAULT_TIMEOUT,
    ENV_SERVER_URL,
    ENV_TIMEOUT,
    ClientConfig,
)

# =============================================================================
# CONFIG INITIALIZATION TESTS
# =============================================================================


@pytest.mark.unit
class TestClientConfigInitialization:
    """Tests for ClientConfig dataclass initialization."""

    def test_defaults(self):
        config = ClientConfig()

        assert config.server_url == DEFAULT_SERVER_URL == "http://localhost:8080"
        assert config.timeout == DEFAULT_TIMEOUT == 30.0

    def test_config_is_frozen(self):
        config = ClientConfig()

        with pytest.raises(AttributeError):
            config.server_url = "http://other:8080"  # type: ignore[misc]

    def test_empty_server_url_raises_error(self):
        with pytest.raises(ValueError, match="server_url cannot be empty"):
            ClientConfig(server_url="")

    @pytest.mark.parametrize("timeout", [0, -5.0])
    def test_non_positive_timeout_raises_error(self, timeout):
        with pytest.raises(ValueError, match="timeout must be a positive number"):
            ClientConfig(timeout=timeout)


# =============================================================================
# RESOLVE TESTS
# =============================================================================


@pytest.mark.unit
class TestResolve:
    """Tests for ClientConfig.resolve precedence."""

    def test_defaults_when_nothing_set(self):
        with patch.dict("os.environ", {}, clear=True):
            config = ClientConfig.resolve()

        assert config == ClientConfig()

    def test_env_overrides_defaults(self):
        env = {ENV_SERVER_URL: "http://node-b:9000", ENV_TIMEOUT: "12.5"}
        with patch.dict("os.environ", env, clear=True):
            config = ClientConfig.resolve()

        assert config.server_url == "http://node-b:9000"
        assert config.timeout == 12.5

    def test_explicit_values_override_env(self):
        env = {ENV_SERVER_URL: "http://node-b:9000", ENV_TIMEOUT: "12.5"}
        with patch.dict("os.environ", env, clear=True):
            config = ClientConfig.resolve(server_url="http://node-c:8080", timeout=2.0)

        assert config.server_url == "http://node-c:8080"
        assert config.timeout == 2.0

    def test_trailing_slash_stripped(self):
        with patch.dict("os.environ", {}, clear=True):
            config = ClientConfig.resolve(server_url="http://node-a:8080/")

        assert config.server_url == "http://node-a:8080"

    def test_invalid_env_timeout_raises(self):
        with patch.dict("os.environ", {ENV_TIMEOUT: "soon"}, clear=True):
            with pytest.raises(ValueError):
                ClientConfig.resolve()
