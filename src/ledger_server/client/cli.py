"""
Command-line client for a ledger node.

Provides commands for talking to a running node:
- list: Print the node's chain as a table
- mine: Append a record carrying the given data
- replace: Submit a candidate chain read from a JSON file

Usage:
    ledger-client list
    ledger-client mine --data "hello"
    ledger-client --host http://node-b:8080 replace --file chain.json

Environment Variables:
    LEDGER_SERVER_URL: Node base URL (default: http://localhost:8080)
    LEDGER_REQUEST_TIMEOUT: Request timeout in seconds (default: 30)
"""

import argparse
import json
import sys
from collections.abc import Sequence
from pathlib import Path

from ledger_server.client.api_client import APIError, LedgerAPIClient, ReplacementRejectedError
from ledger_server.client.config import DEFAULT_SERVER_URL, ClientConfig
from ledger_server.core.records import Record, record_from_wire

# Width of the truncated hash column in `list` output.
HASH_PREFIX_LENGTH = 16


def format_blocks_table(records: Sequence[Record]) -> str:
    """
    Render records as an aligned INDEX/TIMESTAMP/DATA/HASH table.

    Timestamps are shown to the second and hashes are truncated to
    :data:`HASH_PREFIX_LENGTH` characters.

    Returns:
        The table text, or "No blocks yet." for an empty chain.
    """
    if not records:
        return "No blocks yet."

    rows = [("INDEX", "TIMESTAMP", "DATA", "HASH")]
    for record in records:
        timestamp = record.timestamp_text
        # Drop the fractional seconds: 2026-01-02T03:04:05.123Z -> ...05Z
        if "." in timestamp:
            timestamp = timestamp.split(".", 1)[0] + "Z"
        rows.append(
            (
                str(record.sequence_number),
                timestamp,
                record.payload,
                record.digest[:HASH_PREFIX_LENGTH],
            )
        )

    widths = [max(len(row[col]) for row in rows) for col in range(3)]
    lines = []
    for row in rows:
        cells = [row[col].ljust(widths[col]) for col in range(3)]
        lines.append("  ".join([*cells, row[3]]))
    return "\n".join(lines)


def load_chain_file(path: Path) -> list[Record]:
    """
    Read a candidate chain from a JSON file holding an array of wire records.

    Raises:
        ValueError: If the file is not a JSON array of valid wire records.
        OSError: If the file cannot be read.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array of blocks")
    return [record_from_wire(item) for item in data]


def cmd_list(client: LedgerAPIClient, args: argparse.Namespace) -> int:
    """Print the node's chain. Returns 0 on success."""
    print(format_blocks_table(client.list_blocks()))
    return 0


def cmd_mine(client: LedgerAPIClient, args: argparse.Namespace) -> int:
    """Append a record. Returns 0 on success, 1 if --data is missing."""
    if not args.data:
        print("Error: --data is required for mine", file=sys.stderr)
        return 1

    record = client.mine_block(args.data)
    print(f"Mined block #{record.sequence_number} with hash {record.digest}")
    return 0


def cmd_replace(client: LedgerAPIClient, args: argparse.Namespace) -> int:
    """Submit a candidate chain. Returns 0 if adopted, 1 otherwise."""
    try:
        candidate = load_chain_file(Path(args.file))
    except (OSError, ValueError) as e:
        print(f"Error reading chain file: {e}", file=sys.stderr)
        return 1

    try:
        chain = client.replace_chain(candidate)
    except ReplacementRejectedError as e:
        print(f"Replacement rejected: {e.detail}", file=sys.stderr)
        return 1

    print(f"Chain replaced. Node now holds {len(chain)} blocks.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for ``ledger-client``."""
    parser = argparse.ArgumentParser(
        prog="ledger-client",
        description="Talk to a Ledger Server node",
    )
    parser.add_argument(
        "--host",
        dest="server_url",
        default=None,
        help=f"Node base URL (default: {DEFAULT_SERVER_URL}, or LEDGER_SERVER_URL env var)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Request timeout in seconds (default: 30, or LEDGER_REQUEST_TIMEOUT env var)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    list_parser = subparsers.add_parser("list", help="Print the node's chain")
    list_parser.set_defaults(func=cmd_list)

    mine_parser = subparsers.add_parser("mine", help="Append a record")
    mine_parser.add_argument("--data", "-d", default="", help="Payload for the new record")
    mine_parser.set_defaults(func=cmd_mine)

    replace_parser = subparsers.add_parser(
        "replace",
        help="Submit a replacement chain",
        description="Submit a JSON array of blocks; the node adopts it only if it is "
        "longer than its own chain and fully valid.",
    )
    replace_parser.add_argument("--file", "-f", required=True, help="Path to a JSON chain file")
    replace_parser.set_defaults(func=cmd_replace)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the client CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        config = ClientConfig.resolve(server_url=args.server_url, timeout=args.timeout)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        with LedgerAPIClient(config) as client:
            return args.func(client, args)
    except APIError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
