"""Hash-linked ledger records.

A :class:`Record` is one immutable entry in the chain.  Its ``digest`` is a
SHA-256 commitment over the other four fields, and its ``previous_digest``
repeats the digest of the record before it, which is what links the chain.

Digest input
------------
The hash input is the direct concatenation, with no separators, of::

    str(sequence_number) + rfc3339_nano(created_at) + payload + previous_digest

The timestamp text comes from
:func:`~ledger_server.core.timestamps.format_rfc3339_nano`.  Changing any
part of this encoding breaks compatibility with every existing chain.

Wire format
-----------
Records travel over HTTP as JSON objects with these field names:

.. code-block:: json

    {
      "index":        1,
      "timestamp":    "2026-02-27T14:23:01.452345118Z",
      "data":         "hello",
      "previousHash": "9f86d0...",
      "hash":         "3a7bd3..."
    }
"""

from __future__ import annotations

import hashlib
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ledger_server.core.timestamps import format_rfc3339_nano, now_ns, parse_rfc3339_nano

GENESIS_PAYLOAD = "Genesis Block"
GENESIS_PREVIOUS_DIGEST = "0"

WIRE_FIELDS = ("index", "timestamp", "data", "previousHash", "hash")


@dataclass(frozen=True)
class Record:
    """One immutable, hash-linked ledger entry.

    Instances are frozen, so handing the same object to several readers
    cannot let one of them change what another sees.

    Attributes:
        sequence_number: Zero-based position in the chain.
        created_at:      Creation time in nanoseconds since the Unix epoch (UTC).
        payload:         Caller-supplied opaque string.
        previous_digest: Digest of the preceding record, ``"0"`` for genesis.
        digest:          SHA-256 hex digest over the four fields above.
    """

    sequence_number: int
    created_at: int
    payload: str
    previous_digest: str
    digest: str

    @property
    def timestamp_text(self) -> str:
        """RFC 3339 text of ``created_at`` exactly as it enters the digest."""
        return format_rfc3339_nano(self.created_at)


def compute_digest(
    sequence_number: int, created_at: int, payload: str, previous_digest: str
) -> str:
    """Return the SHA-256 hex digest committing the given record fields.

    Example::

        digest = compute_digest(0, 0, "Genesis Block", "0")
        assert digest == compute_digest(0, 0, "Genesis Block", "0")
        assert len(digest) == 64
    """
    material = f"{sequence_number}{format_rfc3339_nano(created_at)}{payload}{previous_digest}"
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


def recompute_digest(record: Record) -> str:
    """Recompute ``record``'s digest from its own fields."""
    return compute_digest(
        record.sequence_number, record.created_at, record.payload, record.previous_digest
    )


def genesis_record(created_at: int | None = None) -> Record:
    """Build the fixed first record of a new chain."""
    created_at = now_ns() if created_at is None else created_at
    return Record(
        sequence_number=0,
        created_at=created_at,
        payload=GENESIS_PAYLOAD,
        previous_digest=GENESIS_PREVIOUS_DIGEST,
        digest=compute_digest(0, created_at, GENESIS_PAYLOAD, GENESIS_PREVIOUS_DIGEST),
    )


def next_record(previous: Record, payload: str, created_at: int | None = None) -> Record:
    """Build the record that follows ``previous`` and carries ``payload``.

    The result is self-consistent by construction; it still has to pass
    :func:`~ledger_server.core.validation.validate_record` before it may
    enter a ledger.
    """
    created_at = now_ns() if created_at is None else created_at
    sequence_number = previous.sequence_number + 1
    return Record(
        sequence_number=sequence_number,
        created_at=created_at,
        payload=payload,
        previous_digest=previous.digest,
        digest=compute_digest(sequence_number, created_at, payload, previous.digest),
    )


# ── Wire codec ────────────────────────────────────────────────────────────────


def record_to_wire(record: Record) -> dict[str, Any]:
    """Serialise ``record`` into its JSON wire shape."""
    return {
        "index": record.sequence_number,
        "timestamp": record.timestamp_text,
        "data": record.payload,
        "previousHash": record.previous_digest,
        "hash": record.digest,
    }


def record_from_wire(raw: Mapping[str, Any]) -> Record:
    """Parse one JSON wire object into a :class:`Record`.

    The digest fields are taken verbatim; nothing is recomputed here.
    Validation is the ledger's job.

    Raises:
        ValueError: If a field is missing, has the wrong type, or the
            timestamp is not valid RFC 3339.
    """
    if not isinstance(raw, Mapping):
        raise ValueError(f"record must be a JSON object, got {type(raw).__name__}")

    missing = [key for key in WIRE_FIELDS if key not in raw]
    if missing:
        raise ValueError(f"record is missing field(s): {', '.join(missing)}")

    index = raw["index"]
    # bool is an int subclass; JSON true/false is not a valid index.
    if not isinstance(index, int) or isinstance(index, bool):
        raise ValueError(f"record 'index' must be an integer, got {index!r}")
    for key in ("data", "previousHash", "hash"):
        if not isinstance(raw[key], str):
            raise ValueError(f"record {key!r} must be a string, got {raw[key]!r}")

    return Record(
        sequence_number=index,
        created_at=parse_rfc3339_nano(raw["timestamp"]),
        payload=raw["data"],
        previous_digest=raw["previousHash"],
        digest=raw["hash"],
    )
