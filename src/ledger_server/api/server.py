"""
FastAPI backend server for the ledger node.

This module builds and serves the HTTP application. It provides:
- :func:`create_app`, which wires a :class:`~ledger_server.core.ledger.Ledger`
  into a FastAPI app (the ledger is injected, never global)
- Port discovery helpers so a busy default port does not stop the node
- :func:`start_server`, which runs the app under uvicorn

The server runs on port 8080 by default and binds all interfaces so other
nodes can reach it.
"""

import logging
import socket

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ledger_server import __version__
from ledger_server.api.routes import register_routes
from ledger_server.config import ServerConfig, config
from ledger_server.core.ledger import Ledger

logger = logging.getLogger(__name__)

# ============================================================================
# PORT CONFIGURATION
# ============================================================================

DEFAULT_HOST = "0.0.0.0"  # nosec B104 - intentional for server binding
DEFAULT_PORT = 8080

# Range searched when the requested port is already bound.
PORT_RANGE_START = 8080
PORT_RANGE_END = 8099


# ============================================================================
# APPLICATION FACTORY
# ============================================================================


async def _invalid_payload_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report unparsable request bodies as 400 instead of the default 422."""
    logger.debug("Rejected request body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"detail": "invalid payload"})


def create_app(ledger: Ledger | None = None, settings: ServerConfig | None = None) -> FastAPI:
    """
    Build the FastAPI application around ``ledger``.

    Args:
        ledger: The ledger to serve. A fresh genesis-only ledger is built from
            ``settings`` when omitted.
        settings: Configuration to apply. Defaults to the module-level
            :data:`~ledger_server.config.config`.

    Returns:
        A fully wired FastAPI application.

    Example:
        app = create_app(Ledger())
        client = TestClient(app)
        client.get("/blocks")
    """
    settings = settings or config
    if ledger is None:
        ledger = Ledger(verify_genesis=settings.ledger.verify_genesis)

    docs = settings.docs_should_be_enabled
    app = FastAPI(
        title="Ledger Server",
        version=__version__,
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        openapi_url="/openapi.json" if docs else None,
    )
    app.add_exception_handler(RequestValidationError, _invalid_payload_handler)

    if settings.security.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.security.cors_origins,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    register_routes(app, ledger)
    return app


# ============================================================================
# PORT DISCOVERY
# ============================================================================


def is_port_available(port: int, host: str = DEFAULT_HOST) -> bool:
    """
    Check whether a TCP port can be bound on ``host``.

    Args:
        port: Port number to test.
        host: Interface to test on.

    Returns:
        True if binding succeeded, False if the port is in use.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
        except OSError:
            return False
        return True


def find_available_port(
    preferred_port: int = DEFAULT_PORT,
    host: str = DEFAULT_HOST,
    range_start: int = PORT_RANGE_START,
    range_end: int = PORT_RANGE_END,
) -> int | None:
    """
    Find a free port, trying ``preferred_port`` first.

    Args:
        preferred_port: Port to try before scanning the range.
        host: Interface to test on.
        range_start: First port of the fallback range (inclusive).
        range_end: Last port of the fallback range (inclusive).

    Returns:
        An available port, or None if the preferred port and the whole range
        are in use.
    """
    if is_port_available(preferred_port, host):
        return preferred_port

    for port in range(range_start, range_end + 1):
        if port == preferred_port:
            continue
        if is_port_available(port, host):
            return port

    return None


# ============================================================================
# SERVER STARTUP
# ============================================================================


def start_server(
    host: str | None = None,
    port: int | None = None,
    auto_discover: bool = True,
    ledger: Ledger | None = None,
) -> None:
    """
    Start the ledger node under uvicorn.

    Args:
        host: Interface to bind. Defaults to the configured host.
        port: Port to bind. Defaults to the configured port.
        auto_discover: Search :data:`PORT_RANGE_START`-:data:`PORT_RANGE_END`
            when ``port`` is in use. When False, bind exactly ``port``.
        ledger: Ledger to serve. Built from configuration when omitted.

    Raises:
        OSError: If auto-discovery is on and no port in the range is free.
    """
    import uvicorn

    host = host or config.server.host
    port = port or config.server.port

    if auto_discover:
        actual_port = find_available_port(port, host)
        if actual_port is None:
            raise OSError(
                f"No available port found in range {PORT_RANGE_START}-{PORT_RANGE_END}"
            )
        if actual_port != port:
            logger.warning("Port %d is in use. Using port %d instead.", port, actual_port)
        port = actual_port

    if ledger is None:
        ledger = Ledger(verify_genesis=config.ledger.verify_genesis)

    result = ledger.verify()
    logger.info(
        "Ledger ready: %d record(s), status %s, tip %s",
        result.length,
        result.status,
        result.tip_digest[:16],
    )

    app = create_app(ledger)
    logger.info("Ledger node listening on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port, log_level=config.logging.level.lower())


if __name__ == "__main__":
    start_server()
