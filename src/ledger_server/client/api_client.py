"""
HTTP API client for the ledger node.

This module provides a synchronous client for the node's REST API. It must
be used as a context manager so the underlying connection pool is closed:

    with LedgerAPIClient(ClientConfig()) as client:
        blocks = client.list_blocks()
        record = client.mine_block("hello")

Records come back as :class:`~ledger_server.core.records.Record` instances,
decoded with the same wire codec the server uses.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import httpx

from ledger_server.client.config import ClientConfig
from ledger_server.core.records import Record, record_from_wire, record_to_wire

# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================


@dataclass
class APIError(Exception):
    """
    Exception raised when an API request fails.

    Raised for connection failures (``status_code == 0``), non-2xx responses,
    and bodies that cannot be decoded.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code from the response, 0 if none was received.
        detail: Additional detail from the server response, if available.

    Example:
        try:
            client.list_blocks()
        except APIError as e:
            print(f"API error {e.status_code}: {e}")
    """

    message: str
    status_code: int = 0
    detail: str = ""

    def __str__(self) -> str:
        """Return a formatted error message."""
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class ReplacementRejectedError(APIError):
    """
    The node refused a replacement chain.

    The candidate was not longer than the node's chain, or it failed
    validation. This is an expected outcome when racing other nodes.
    """


# =============================================================================
# API CLIENT
# =============================================================================


@dataclass
class LedgerAPIClient:
    """
    Synchronous HTTP client for the ledger node API.

    Attributes:
        config: Connection settings (server URL and timeout).

    Example:
        with LedgerAPIClient(ClientConfig(server_url="http://node-a:8080")) as client:
            for record in client.list_blocks():
                print(record.sequence_number, record.payload)
    """

    config: ClientConfig = field(default_factory=ClientConfig)

    _http_client: httpx.Client | None = field(default=None, repr=False)

    # -------------------------------------------------------------------------
    # Context Manager Protocol
    # -------------------------------------------------------------------------

    def __enter__(self) -> LedgerAPIClient:
        """Create the underlying httpx.Client."""
        self._http_client = httpx.Client(
            base_url=self.config.server_url,
            timeout=self.config.timeout,
        )
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Close the underlying connection pool."""
        if self._http_client:
            self._http_client.close()
            self._http_client = None

    @property
    def http_client(self) -> httpx.Client:
        """
        Get the HTTP client, ensuring it's been initialized.

        Raises:
            RuntimeError: If accessed outside of the context manager.
        """
        if self._http_client is None:
            raise RuntimeError(
                "LedgerAPIClient must be used as a context manager. "
                "Use 'with LedgerAPIClient(config) as client:'"
            )
        return self._http_client

    # -------------------------------------------------------------------------
    # Request plumbing
    # -------------------------------------------------------------------------

    def _request(self, method: str, path: str, action: str, **kwargs: Any) -> Any:
        """Send a request and return the decoded JSON body of a 200 response.

        Raises:
            APIError: On connection failure, invalid JSON, or a non-200 status.
        """
        try:
            response = self.http_client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise APIError(
                message=f"{action} failed",
                status_code=0,
                detail=f"Cannot connect to server at {self.config.server_url}: {e}",
            ) from e

        if response.status_code != 200:
            raise APIError(
                message=f"{action} failed",
                status_code=response.status_code,
                detail=_error_detail(response),
            )

        try:
            return response.json()
        except ValueError as e:
            raise APIError(
                message=f"{action} failed",
                status_code=response.status_code,
                detail=f"Server returned invalid response (status {response.status_code})",
            ) from e

    def _decode_records(self, body: Any, action: str) -> list[Record]:
        if not isinstance(body, list):
            raise APIError(message=f"{action} failed", detail="Expected a JSON array of blocks")
        try:
            return [record_from_wire(item) for item in body]
        except ValueError as e:
            raise APIError(message=f"{action} failed", detail=str(e)) from e

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def get_health(self) -> dict[str, Any]:
        """
        Get the node's health summary.

        Returns:
            dict: ``status`` ("ok" or "corrupt"), ``length`` and ``tip``.
        """
        return dict(self._request("GET", "/health", "Health check"))

    def list_blocks(self) -> list[Record]:
        """Fetch the node's full chain, ascending by index."""
        body = self._request("GET", "/blocks", "List blocks")
        return self._decode_records(body, "List blocks")

    def mine_block(self, data: str) -> Record:
        """
        Ask the node to append a record carrying ``data``.

        Raises:
            ValueError: If ``data`` is empty (checked before any request).
            APIError: If the node refuses or cannot be reached.
        """
        if not data:
            raise ValueError("data is required")

        body = self._request("POST", "/mine", "Mine block", json={"data": data})
        try:
            return record_from_wire(body)
        except ValueError as e:
            raise APIError(message="Mine block failed", detail=str(e)) from e

    def replace_chain(self, records: Iterable[Record]) -> list[Record]:
        """
        Submit a candidate chain for adoption.

        Returns:
            The node's chain after adoption.

        Raises:
            ReplacementRejectedError: The node answered 400 (candidate not
                longer, invalid, or malformed).
            APIError: Any other failure.
        """
        payload = [record_to_wire(record) for record in records]
        try:
            body = self._request("POST", "/replace", "Replace chain", json=payload)
        except APIError as e:
            if e.status_code == 400:
                raise ReplacementRejectedError(
                    message="Replacement rejected", status_code=400, detail=e.detail
                ) from e
            raise
        return self._decode_records(body, "Replace chain")


def _error_detail(response: httpx.Response) -> str:
    """Extract a readable error detail from a FastAPI or plain-text error body."""
    try:
        data = response.json()
    except ValueError:
        return response.text.strip() or "Unknown error"
    if isinstance(data, dict) and "detail" in data:
        return str(data["detail"])
    return str(data)
