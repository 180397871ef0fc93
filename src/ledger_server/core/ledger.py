"""The in-memory, hash-linked ledger.

Overview
--------
:class:`Ledger` owns exactly one chain of :class:`~ledger_server.core.records.Record`
objects and is the only authorised way to change it.  Two mutations exist:

- :meth:`Ledger.append` extends the chain by one record built from the tip.
- :meth:`Ledger.replace` swaps the whole chain for a strictly longer, fully
  valid candidate ("longest validated chain wins").

Both run their complete read-tip / validate / mutate sequence under the
exclusive side of a :class:`~ledger_server.core.rwlock.ReadWriteLock`.
Reads (:meth:`snapshot`, :meth:`tip`, :meth:`verify`, ``len()``) take the
shared side and may run concurrently with each other.

Copy-out reads
--------------
Readers never see the internal list.  :meth:`snapshot` returns a new list
and records are frozen dataclasses, so nothing a caller does with a snapshot
can reach back into the ledger.

Instances are passed explicitly to whoever needs them (the HTTP app
receives one in :func:`~ledger_server.api.server.create_app`).  There is no
module-level ledger, so tests can build as many as they like.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from ledger_server.core.errors import InvalidRecord
from ledger_server.core.records import Record, genesis_record, next_record
from ledger_server.core.rwlock import ReadWriteLock
from ledger_server.core.timestamps import format_rfc3339_nano
from ledger_server.core.validation import (
    ForkChoice,
    longest_chain_wins,
    validate_chain,
    validate_record,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerVerifyResult:
    """Result of a full-chain audit performed by :meth:`Ledger.verify`.

    Attributes:
        status: ``"ok"`` if every adjacent pair validates, else ``"corrupt"``.
        length: Number of records audited.
        tip_digest: Digest of the last record.
        error_detail: Reason for a ``"corrupt"`` status, otherwise ``None``.
    """

    status: Literal["ok", "corrupt"]
    length: int
    tip_digest: str
    error_detail: str | None


class Ledger:
    """Append-only, hash-linked chain guarded by a reader/writer lock.

    Args:
        fork_choice: Decides whether a replacement candidate of a given
            length may displace the current chain.  Defaults to
            :func:`~ledger_server.core.validation.longest_chain_wins`.
        verify_genesis: Also require a replacement's first record to be a
            self-consistent genesis record.  Off by default.
        created_at: Fixed genesis timestamp in nanoseconds.  Defaults to now.

    Example::

        ledger = Ledger()
        record = ledger.append("hello")
        assert ledger.tip() == record
        assert len(ledger) == 2
    """

    def __init__(
        self,
        *,
        fork_choice: ForkChoice = longest_chain_wins,
        verify_genesis: bool = False,
        created_at: int | None = None,
    ) -> None:
        self._lock = ReadWriteLock()
        self._records: list[Record] = [genesis_record(created_at)]
        self._fork_choice = fork_choice
        self._verify_genesis = verify_genesis

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._records)

    # ── Reads ─────────────────────────────────────────────────────────────────

    def snapshot(self) -> list[Record]:
        """Return every record, ascending, as a list the caller owns."""
        with self._lock.read():
            return list(self._records)

    def tip(self) -> Record:
        """Return the last record.  The chain is never empty."""
        with self._lock.read():
            return self._records[-1]

    def verify(self) -> LedgerVerifyResult:
        """Re-validate the held chain from end to end."""
        with self._lock.read():
            records = list(self._records)

        try:
            validate_chain(records, verify_genesis=self._verify_genesis)
        except InvalidRecord as exc:
            return LedgerVerifyResult(
                status="corrupt",
                length=len(records),
                tip_digest=records[-1].digest,
                error_detail=str(exc),
            )
        return LedgerVerifyResult(
            status="ok", length=len(records), tip_digest=records[-1].digest, error_detail=None
        )

    # ── Mutations ─────────────────────────────────────────────────────────────

    def append(self, payload: str) -> Record:
        """Build, validate and append the record that follows the current tip.

        Validation always runs, even though a freshly built record is
        consistent by construction.

        Raises:
            InvalidRecord: The candidate failed validation.  The chain is
                left unchanged.
        """
        with self._lock.write():
            tip = self._records[-1]
            candidate = next_record(tip, payload)
            validate_record(candidate, tip)
            self._records.append(candidate)

        logger.debug(
            "ledger: appended record %d (%s)", candidate.sequence_number, candidate.digest[:16]
        )
        return candidate

    def replace(self, candidate: Iterable[Record]) -> bool:
        """Adopt ``candidate`` if the fork-choice rule allows it and it validates.

        Returns:
            ``True`` if the chain was replaced, ``False`` if the candidate was
            not longer or failed validation.  Rejection never raises.
        """
        records = list(candidate)

        with self._lock.write():
            current_length = len(self._records)
            if not self._fork_choice(current_length, len(records)):
                logger.warning(
                    "ledger: rejected replacement (not longer): length %d, current length %d",
                    len(records),
                    current_length,
                )
                return False

            try:
                validate_chain(records, verify_genesis=self._verify_genesis)
                # s[0] is only hashed under verify_genesis; every held record must still
                # render on the wire.
                format_rfc3339_nano(records[0].created_at)
            except (InvalidRecord, ValueError) as exc:
                logger.warning(
                    "ledger: rejected invalid replacement (%s): %s", type(exc).__name__, exc
                )
                return False

            self._records = records

        logger.info(
            "ledger: replaced chain of length %d with chain of length %d",
            current_length,
            len(records),
        )
        return True
