"""
Tests for API server port discovery and startup.

This module tests:
- is_port_available(): Check if a TCP port is free
- find_available_port(): Find an available port in a range
- start_server(): Startup with port configuration and an injected ledger

These tests use socket mocking to simulate various port availability scenarios
without actually binding to ports, which would be flaky in CI environments.
"""

import socket
from unittest.mock import MagicMock, patch

import pytest

from ledger_server.api.server import (
    DEFAULT_PORT,
    PORT_RANGE_END,
    PORT_RANGE_START,
    find_available_port,
    is_port_available,
    start_server,
)
from ledger_server.core.ledger import Ledger


def _mock_socket(bind_error: Exception | None = None) -> MagicMock:
    mock_socket = MagicMock()
    mock_socket.__enter__ = MagicMock(return_value=mock_socket)
    mock_socket.__exit__ = MagicMock(return_value=False)
    mock_socket.bind = MagicMock(side_effect=bind_error)
    return mock_socket


# ============================================================================
# is_port_available() Tests
# ============================================================================


@pytest.mark.unit
class TestIsPortAvailable:
    """Tests for the is_port_available function."""

    def test_returns_true_when_port_is_free(self):
        """Port should be reported available when bind succeeds."""
        with patch("socket.socket") as mock_socket_class:
            mock_socket = _mock_socket()
            mock_socket_class.return_value = mock_socket

            assert is_port_available(8080) is True
            mock_socket.bind.assert_called_once_with(("0.0.0.0", 8080))

    def test_returns_false_when_port_in_use(self):
        """Port should be reported unavailable when bind raises OSError."""
        with patch("socket.socket") as mock_socket_class:
            mock_socket_class.return_value = _mock_socket(OSError("Address already in use"))

            assert is_port_available(8080) is False

    def test_uses_custom_host(self):
        """Should check availability on the specified host interface."""
        with patch("socket.socket") as mock_socket_class:
            mock_socket = _mock_socket()
            mock_socket_class.return_value = mock_socket

            is_port_available(9000, host="127.0.0.1")

            mock_socket.bind.assert_called_once_with(("127.0.0.1", 9000))

    def test_uses_tcp_socket(self):
        """Should create a TCP (SOCK_STREAM) socket for checking."""
        with patch("socket.socket") as mock_socket_class:
            mock_socket_class.return_value = _mock_socket()

            is_port_available(8080)

            mock_socket_class.assert_called_once_with(socket.AF_INET, socket.SOCK_STREAM)


# ============================================================================
# find_available_port() Tests
# ============================================================================


@pytest.mark.unit
class TestFindAvailablePort:
    """Tests for the find_available_port function."""

    def test_returns_preferred_port_when_available(self):
        with patch("ledger_server.api.server.is_port_available", return_value=True) as mock_check:
            assert find_available_port(preferred_port=8080) == 8080
            mock_check.assert_called_once_with(8080, "0.0.0.0")

    def test_finds_next_available_when_preferred_in_use(self):
        def port_availability(port, host="0.0.0.0"):
            return port != 8080

        with patch("ledger_server.api.server.is_port_available", side_effect=port_availability):
            assert find_available_port(preferred_port=8080) == 8081

    def test_skips_preferred_port_during_scan(self):
        def port_availability(port, host="0.0.0.0"):
            return port == 8085

        with patch(
            "ledger_server.api.server.is_port_available", side_effect=port_availability
        ) as mock_check:
            assert find_available_port(preferred_port=8080) == 8085
            calls_for_8080 = [c for c in mock_check.call_args_list if c[0][0] == 8080]
            assert len(calls_for_8080) == 1

    def test_returns_none_when_no_ports_available(self):
        with patch("ledger_server.api.server.is_port_available", return_value=False):
            assert find_available_port() is None

    def test_uses_custom_range(self):
        def port_availability(port, host="0.0.0.0"):
            return port == 9005

        with patch("ledger_server.api.server.is_port_available", side_effect=port_availability):
            result = find_available_port(preferred_port=9000, range_start=9000, range_end=9010)
            assert result == 9005

    def test_default_range_constants(self):
        assert DEFAULT_PORT == 8080
        assert PORT_RANGE_START == 8080
        assert PORT_RANGE_END == 8099


# ============================================================================
# start_server() Tests
# ============================================================================


@pytest.mark.unit
class TestStartServer:
    """start_server wires the injected ledger into uvicorn."""

    def test_runs_uvicorn_on_discovered_port(self):
        with (
            patch("ledger_server.api.server.find_available_port", return_value=8081),
            patch("uvicorn.run") as mock_run,
        ):
            start_server(host="127.0.0.1", port=8080)

        args, kwargs = mock_run.call_args
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 8081

    def test_without_auto_discover_binds_exact_port(self):
        with (
            patch("ledger_server.api.server.find_available_port") as mock_find,
            patch("uvicorn.run") as mock_run,
        ):
            start_server(host="127.0.0.1", port=8090, auto_discover=False)

        mock_find.assert_not_called()
        assert mock_run.call_args.kwargs["port"] == 8090

    def test_raises_when_no_port_free(self):
        with (
            patch("ledger_server.api.server.find_available_port", return_value=None),
            patch("uvicorn.run") as mock_run,
        ):
            with pytest.raises(OSError):
                start_server(host="127.0.0.1", port=8080)

        mock_run.assert_not_called()

    def test_serves_injected_ledger(self):
        ledger = Ledger()
        ledger.append("preloaded")

        with (
            patch("ledger_server.api.server.create_app") as mock_create,
            patch("uvicorn.run"),
        ):
            start_server(host="127.0.0.1", port=8080, auto_discover=False, ledger=ledger)

        mock_create.assert_called_once_with(ledger)


# ============================================================================
# Integration-style tests (actual socket behavior)
# ============================================================================


class TestPortDiscoveryIntegration:
    """Tests that bind real sockets on high ports."""

    @pytest.mark.integration
    def test_detects_actually_available_port(self):
        assert isinstance(is_port_available(59999), bool)

    @pytest.mark.integration
    def test_find_available_finds_something(self):
        result = find_available_port(preferred_port=59900, range_start=59900, range_end=59999)
        assert result is not None
        assert 59900 <= result <= 59999
