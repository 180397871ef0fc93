"""Typed validation exceptions for the ledger core.

Every failure discovered while validating a record or a candidate chain is
raised as a subclass of :exc:`InvalidRecord`, so callers can catch the whole
family in one clause and still report the specific reason.

Design intent:
    - A rejected *replacement* is an expected outcome, not an anomaly, and is
      reported by :meth:`~ledger_server.core.ledger.Ledger.replace` as
      ``False``.  There is deliberately no ``RejectedNotLonger`` exception.
    - None of these exceptions are fatal to the process.  A bad candidate
      from a remote party is ordinary adversarial input.
"""

from __future__ import annotations


class LedgerError(RuntimeError):
    """Base exception for ledger-core failures."""


class InvalidRecord(LedgerError):
    """A record or chain failed validation.

    Attributes:
        sequence_number: Index of the offending record, or ``None`` when the
            failure is not tied to one record (for example an empty chain).
    """

    def __init__(self, message: str, *, sequence_number: int | None = None) -> None:
        super().__init__(message)
        self.sequence_number = sequence_number


class SequenceGap(InvalidRecord):
    """Candidate index is not exactly predecessor index + 1."""


class LinkageBroken(InvalidRecord):
    """Candidate ``previous_digest`` does not match the predecessor's digest."""


class DigestMismatch(InvalidRecord):
    """Candidate digest does not match the hash recomputed from its fields."""


class EmptySequence(InvalidRecord):
    """A replacement candidate contains no records."""


class GenesisMismatch(InvalidRecord):
    """The first record of a candidate chain is not a well-formed genesis record.

    Only raised when genesis verification is switched on.
    """
