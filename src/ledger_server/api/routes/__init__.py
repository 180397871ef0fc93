"""API route registration."""

from fastapi import FastAPI

from ledger_server.api.routes import blocks, health
from ledger_server.core.ledger import Ledger


def register_routes(app: FastAPI, ledger: Ledger) -> None:
    """Register all API routes with the FastAPI app."""
    app.include_router(health.router(ledger))
    app.include_router(blocks.router(ledger))
