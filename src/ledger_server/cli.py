"""
Command-line interface for the Ledger Server.

Provides CLI commands for server management:
- run: Start a ledger node (API server)
- show-config: Print the resolved configuration

Usage:
    ledger-server run [--port PORT] [--host HOST] [--no-auto-port]
    ledger-server show-config

Environment Variables:
    LEDGER_HOST: Host to bind API server (default: 0.0.0.0)
    LEDGER_PORT: Port for API server (default: 8080, auto-discovers if in use)
    PORT: Fallback for LEDGER_PORT
    LEDGER_LOG_LEVEL: Logging level (default: INFO)
"""

import argparse
import logging
import sys

from ledger_server.config import config

_LOG_FORMATS = {
    "simple": "%(levelname)s %(message)s",
    "detailed": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
}


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """
    Configure root logging from the server configuration.

    Args:
        level: Level name override (e.g. "DEBUG"). Defaults to config.logging.level.
        fmt: Format name override ("simple" or "detailed"). Defaults to
            config.logging.format.
    """
    level_name = (level or config.logging.level).upper()
    format_string = _LOG_FORMATS.get(fmt or config.logging.format, _LOG_FORMATS["detailed"])
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=format_string,
        force=True,
    )


def cmd_run(args: argparse.Namespace) -> int:
    """
    Run a ledger node.

    Builds a fresh genesis-only ledger and serves it until interrupted.

    Configuration Priority:
        1. CLI arguments (--port, --host)
        2. Environment variables (LEDGER_PORT, PORT, LEDGER_HOST)
        3. config/server.ini, then built-in defaults (8080, 0.0.0.0)

    Args:
        args: Parsed command-line arguments. Expected attributes:
            - port (int | None): API server port override
            - host (str | None): Host interface to bind
            - no_auto_port (bool): Fail instead of picking another port

    Returns:
        0 on clean shutdown (Ctrl+C), 1 on error during startup
    """
    from ledger_server.api.server import start_server

    configure_logging()

    host = getattr(args, "host", None) or config.server.host
    port = getattr(args, "port", None) or config.server.port
    auto_discover = not getattr(args, "no_auto_port", False)

    try:
        start_server(host=host, port=port, auto_discover=auto_discover)
        return 0
    except KeyboardInterrupt:
        print("\nServer stopped.")
        return 0
    except OSError as e:
        print(f"Error starting server: {e}", file=sys.stderr)
        return 1


def cmd_show_config(args: argparse.Namespace) -> int:
    """Print the resolved configuration. Always returns 0."""
    from ledger_server.config import print_config_summary

    print_config_summary()
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for ``ledger-server``."""
    parser = argparse.ArgumentParser(
        prog="ledger-server",
        description="Ledger Server - a hash-linked, append-only ledger node",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run command
    run_parser = subparsers.add_parser(
        "run",
        help="Run a ledger node",
        description=(
            "Start the API server with a fresh genesis-only ledger. "
            "If the port is in use, automatically finds an available port in the range."
        ),
    )
    run_parser.add_argument(
        "--port",
        "-p",
        type=int,
        help="API server port (default: 8080, or LEDGER_PORT env var). Auto-discovers if in use.",
    )
    run_parser.add_argument(
        "--host",
        type=str,
        help="Host to bind to (default: 0.0.0.0, or LEDGER_HOST env var)",
    )
    run_parser.add_argument(
        "--no-auto-port",
        action="store_true",
        help="Fail if the port is in use instead of searching for a free one",
    )
    run_parser.set_defaults(func=cmd_run)

    # show-config command
    config_parser = subparsers.add_parser(
        "show-config",
        help="Print the resolved configuration",
    )
    config_parser.set_defaults(func=cmd_show_config)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
