"""HTTP transport for the ledger node."""
