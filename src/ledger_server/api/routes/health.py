"""Health and root endpoints.

Provides the root ``/`` endpoint (API identity and version) and the
``/health`` endpoint (chain length, tip digest and a full re-validation of
the held chain).
"""

from fastapi import APIRouter

from ledger_server import __version__
from ledger_server.api.models import HealthResponse
from ledger_server.core.ledger import Ledger


def router(ledger: Ledger) -> APIRouter:
    """Build the health router bound to ``ledger``."""
    api = APIRouter()

    @api.get("/")
    async def root():
        """Root endpoint showing API identity and current version."""
        return {"message": "Ledger Server API", "version": __version__}

    @api.get("/health", response_model=HealthResponse)
    def health_check():
        """Health check endpoint."""
        result = ledger.verify()
        return HealthResponse(status=result.status, length=result.length, tip=result.tip_digest)

    return api
