"""HTTP client for ledger nodes."""

from ledger_server.client.api_client import APIError, LedgerAPIClient, ReplacementRejectedError
from ledger_server.client.config import ClientConfig

__all__ = ["APIError", "ClientConfig", "LedgerAPIClient", "ReplacementRejectedError"]
