"""Ledger core: records, validation and the guarded chain.

Public surface
--------------
- :class:`Ledger`             - the guarded chain (append / replace / snapshot).
- :class:`Record`             - one immutable, hash-linked entry.
- :func:`compute_digest`      - SHA-256 commitment over a record's fields.
- :func:`validate_record`     - single-record rule against a predecessor.
- :func:`validate_chain`      - whole-chain rule for replacement candidates.
- :func:`longest_chain_wins`  - default fork-choice rule.
- :exc:`InvalidRecord` and its subclasses - validation failures.
"""

from ledger_server.core.errors import (
    DigestMismatch,
    EmptySequence,
    GenesisMismatch,
    InvalidRecord,
    LedgerError,
    LinkageBroken,
    SequenceGap,
)
from ledger_server.core.ledger import Ledger, LedgerVerifyResult
from ledger_server.core.records import (
    GENESIS_PAYLOAD,
    GENESIS_PREVIOUS_DIGEST,
    Record,
    compute_digest,
    genesis_record,
    next_record,
    recompute_digest,
    record_from_wire,
    record_to_wire,
)
from ledger_server.core.validation import (
    longest_chain_wins,
    validate_chain,
    validate_genesis,
    validate_record,
)

__all__ = [
    "DigestMismatch",
    "EmptySequence",
    "GENESIS_PAYLOAD",
    "GENESIS_PREVIOUS_DIGEST",
    "GenesisMismatch",
    "InvalidRecord",
    "Ledger",
    "LedgerError",
    "LedgerVerifyResult",
    "LinkageBroken",
    "Record",
    "SequenceGap",
    "compute_digest",
    "genesis_record",
    "longest_chain_wins",
    "next_record",
    "recompute_digest",
    "record_from_wire",
    "record_to_wire",
    "validate_chain",
    "validate_genesis",
    "validate_record",
]
