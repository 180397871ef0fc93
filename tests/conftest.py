"""
Shared pytest fixtures for the ledger server test suite.

This module provides fixtures that are automatically available to all test files:
- Fresh Ledger instances (one per test, never shared)
- A chain-extension helper for building valid and forged candidates
- FastAPI TestClient instances bound to an injected ledger
"""

from collections.abc import Callable, Sequence

import pytest
from fastapi.testclient import TestClient

from ledger_server.api.server import create_app
from ledger_server.config import ServerConfig
from ledger_server.core.ledger import Ledger
from ledger_server.core.records import Record, next_record

# Signature of the ``extend_chain`` fixture.
ChainExtender = Callable[[Sequence[Record], Sequence[str]], list[Record]]


# ============================================================================
# LEDGER FIXTURES
# ============================================================================


@pytest.fixture(scope="function")
def ledger() -> Ledger:
    """
    Create a genesis-only ledger.

    Each test gets its own instance, so mutations never leak between tests.
    """
    return Ledger()


@pytest.fixture
def extend_chain() -> ChainExtender:
    """
    Return a helper that validly extends a chain prefix with payloads.

    Example:
        def test_x(ledger, extend_chain):
            candidate = extend_chain(ledger.snapshot(), ["a", "b"])
            assert len(candidate) == 3
    """

    def _extend(prefix: Sequence[Record], payloads: Sequence[str]) -> list[Record]:
        chain = list(prefix)
        for payload in payloads:
            chain.append(next_record(chain[-1], payload))
        return chain

    return _extend


# ============================================================================
# FASTAPI TEST CLIENT FIXTURES
# ============================================================================


@pytest.fixture(scope="function")
def test_settings() -> ServerConfig:
    """Default configuration, independent of any server.ini on disk."""
    return ServerConfig()


@pytest.fixture(scope="function")
def test_client(ledger: Ledger, test_settings: ServerConfig) -> TestClient:
    """
    Create a FastAPI TestClient serving the ``ledger`` fixture.

    Tests can inspect ``ledger`` directly to check what the HTTP calls did.

    Example:
        def test_list(test_client, ledger):
            response = test_client.get("/blocks")
            assert len(response.json()) == len(ledger)
    """
    app = create_app(ledger, settings=test_settings)
    return TestClient(app)
