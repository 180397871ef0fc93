"""
Connection settings for the ledger client.

Values resolve with the following precedence (highest to lowest):

1. Command-line arguments (--host, --timeout)
2. Environment variables (LEDGER_SERVER_URL, LEDGER_REQUEST_TIMEOUT)
3. Default values

The configuration is immutable once created.

Example:
    config = ClientConfig.resolve(server_url=None, timeout=5.0)
    print(config.server_url)  # "http://localhost:8080" unless overridden
"""

from __future__ import annotations

import os
from dataclasses import dataclass

# =============================================================================
# DEFAULT CONFIGURATION VALUES
# =============================================================================

DEFAULT_SERVER_URL = "http://localhost:8080"

# Default HTTP request timeout in seconds.
DEFAULT_TIMEOUT = 30.0

ENV_SERVER_URL = "LEDGER_SERVER_URL"
ENV_TIMEOUT = "LEDGER_REQUEST_TIMEOUT"


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable connection settings for :class:`~ledger_server.client.api_client.LedgerAPIClient`.

    Attributes:
        server_url: Base URL of the ledger node, without a trailing slash.
        timeout: HTTP request timeout in seconds.
    """

    server_url: str = DEFAULT_SERVER_URL
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        """
        Validate configuration values after initialization.

        Raises:
            ValueError: If server_url is empty or timeout is not positive.
        """
        if not self.server_url:
            raise ValueError("server_url cannot be empty")
        if self.timeout <= 0:
            raise ValueError("timeout must be a positive number")

    @classmethod
    def resolve(cls, server_url: str | None = None, timeout: float | None = None) -> ClientConfig:
        """
        Build a config from explicit values, falling back to env vars and defaults.

        Args:
            server_url: Explicit server URL, usually from the command line.
            timeout: Explicit timeout in seconds, usually from the command line.

        Returns:
            ClientConfig: A fully populated configuration object.
        """
        url = server_url or os.environ.get(ENV_SERVER_URL) or DEFAULT_SERVER_URL
        url = url.rstrip("/")

        if timeout is not None:
            resolved_timeout = timeout
        elif ENV_TIMEOUT in os.environ:
            resolved_timeout = float(os.environ[ENV_TIMEOUT])
        else:
            resolved_timeout = DEFAULT_TIMEOUT

        return cls(server_url=url, timeout=resolved_timeout)
