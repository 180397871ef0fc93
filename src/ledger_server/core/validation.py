"""Record and chain validation rules, plus the chain-selection policy.

Single-record rule
------------------
A candidate ``c`` is valid against a known-good predecessor ``p`` when, in
this order:

1. ``c.sequence_number == p.sequence_number + 1``  (else :exc:`SequenceGap`)
2. ``c.previous_digest == p.digest``               (else :exc:`LinkageBroken`)
3. ``recompute_digest(c) == c.digest``             (else :exc:`DigestMismatch`)

The first failing check decides the reported reason.

Whole-chain rule
----------------
An empty chain fails with :exc:`EmptySequence`.  Otherwise every adjacent
pair ``(s[i-1], s[i])`` for ``i >= 1`` must pass the single-record rule, and
validation stops at the first failing pair.  ``s[0]`` is not checked against
anything unless ``verify_genesis=True`` is passed.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from ledger_server.core.errors import (
    DigestMismatch,
    EmptySequence,
    GenesisMismatch,
    LinkageBroken,
    SequenceGap,
)
from ledger_server.core.records import GENESIS_PREVIOUS_DIGEST, Record, recompute_digest

# (current_length, candidate_length) -> adopt candidate?
ForkChoice = Callable[[int, int], bool]


def longest_chain_wins(current_length: int, candidate_length: int) -> bool:
    """Adopt a candidate only if it is strictly longer; ties keep the incumbent."""
    return candidate_length > current_length


def validate_record(candidate: Record, predecessor: Record) -> None:
    """Check ``candidate`` against its ``predecessor``.

    Raises:
        SequenceGap:    Index is not predecessor index + 1.
        LinkageBroken:  ``previous_digest`` does not reference the predecessor.
        DigestMismatch: Stored digest differs from the recomputed one.
    """
    expected_index = predecessor.sequence_number + 1
    if candidate.sequence_number != expected_index:
        raise SequenceGap(
            f"invalid index: got {candidate.sequence_number} expected {expected_index}",
            sequence_number=candidate.sequence_number,
        )
    if candidate.previous_digest != predecessor.digest:
        raise LinkageBroken(
            f"previous hash mismatch at index {candidate.sequence_number}",
            sequence_number=candidate.sequence_number,
        )
    if recompute_digest(candidate) != candidate.digest:
        raise DigestMismatch(
            f"hash mismatch at index {candidate.sequence_number}",
            sequence_number=candidate.sequence_number,
        )


def validate_genesis(record: Record) -> None:
    """Check that ``record`` is a self-consistent first record.

    Raises:
        GenesisMismatch: Wrong index, wrong sentinel, or a stale digest.
    """
    if record.sequence_number != 0:
        raise GenesisMismatch(
            f"genesis index must be 0, got {record.sequence_number}",
            sequence_number=record.sequence_number,
        )
    if record.previous_digest != GENESIS_PREVIOUS_DIGEST:
        raise GenesisMismatch(
            f"genesis previous hash must be {GENESIS_PREVIOUS_DIGEST!r}",
            sequence_number=0,
        )
    if recompute_digest(record) != record.digest:
        raise GenesisMismatch("genesis hash mismatch", sequence_number=0)


def validate_chain(records: Sequence[Record], *, verify_genesis: bool = False) -> None:
    """Validate a whole candidate chain.

    Args:
        records:        Candidate records in ascending order.
        verify_genesis: Also check ``records[0]`` in isolation with
                        :func:`validate_genesis`.

    Raises:
        EmptySequence: ``records`` is empty.
        GenesisMismatch: ``verify_genesis`` is set and ``records[0]`` is not
            a valid first record.
        SequenceGap, LinkageBroken, DigestMismatch: From the first failing
            adjacent pair.
    """
    if not records:
        raise EmptySequence("chain is empty")

    if verify_genesis:
        validate_genesis(records[0])

    for i in range(1, len(records)):
        validate_record(records[i], records[i - 1])
