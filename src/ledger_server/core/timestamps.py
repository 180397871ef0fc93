"""RFC 3339 timestamp text with nanosecond precision.

Record timestamps are committed to the digest as text, so the encoding here
is part of the chain format.  UTC times always render in the RFC3339Nano
layout that other nodes hash:

.. code-block:: text

    2026-02-27T14:23:01.452345Z        fraction trimmed of trailing zeros
    2026-02-27T14:23:01Z               fraction omitted when zero
    2026-02-27T14:23:01.000000001Z     up to nine fractional digits

Python's :class:`~datetime.datetime` stops at microseconds, so timestamps are
carried as integer nanoseconds since the Unix epoch and only converted to a
``datetime`` for the calendar arithmetic.
"""

from __future__ import annotations

import re
import time
from datetime import UTC, datetime, timedelta, timezone

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_NANOS_PER_SECOND = 1_000_000_000


def _seconds_since_epoch(moment: datetime) -> int:
    delta = moment - _EPOCH
    return delta.days * 86_400 + delta.seconds


# Representable range: UTC years 0001 through 9999, inclusive.
MIN_TIMESTAMP_NS = _seconds_since_epoch(datetime(1, 1, 1, tzinfo=UTC)) * _NANOS_PER_SECOND
MAX_TIMESTAMP_NS = (
    _seconds_since_epoch(datetime(9999, 12, 31, 23, 59, 59, tzinfo=UTC)) + 1
) * _NANOS_PER_SECOND - 1

# Fractional digits beyond the ninth are accepted and truncated.
_RFC3339_RE = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"T(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>Z|[+-]\d{2}:\d{2})$"
)


def now_ns() -> int:
    """Current wall-clock time as nanoseconds since the Unix epoch."""
    return time.time_ns()


def format_rfc3339_nano(timestamp_ns: int) -> str:
    """Render ``timestamp_ns`` as UTC RFC 3339 text with trimmed nanoseconds.

    Args:
        timestamp_ns: Nanoseconds since the Unix epoch.  Negative values
            (pre-1970) are supported.

    Returns:
        Text such as ``"2026-02-27T14:23:01.452345Z"``.

    Raises:
        ValueError: If ``timestamp_ns`` falls outside UTC years 0001-9999.
    """
    if not MIN_TIMESTAMP_NS <= timestamp_ns <= MAX_TIMESTAMP_NS:
        raise ValueError(f"timestamp {timestamp_ns} ns is outside UTC years 0001-9999")

    seconds, nanos = divmod(timestamp_ns, _NANOS_PER_SECOND)
    moment = _EPOCH + timedelta(seconds=seconds)
    text = (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}"
        f"T{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
    if nanos:
        text += "." + f"{nanos:09d}".rstrip("0")
    return text + "Z"


def parse_rfc3339_nano(text: str) -> int:
    """Parse RFC 3339 text into nanoseconds since the Unix epoch (UTC).

    Any numeric offset is accepted and normalised away, so
    ``"2026-01-01T01:00:00+01:00"`` and ``"2026-01-01T00:00:00Z"`` parse to
    the same value.

    Raises:
        ValueError: If ``text`` is not a valid RFC 3339 timestamp, or its
            UTC instant falls outside years 0001-9999.
    """
    if not isinstance(text, str):
        raise ValueError(f"timestamp must be a string, got {type(text).__name__}")

    match = _RFC3339_RE.match(text)
    if match is None:
        raise ValueError(f"invalid RFC 3339 timestamp: {text!r}")

    offset_text = match["offset"]
    if offset_text == "Z":
        tz = UTC
    else:
        sign = -1 if offset_text[0] == "-" else 1
        hours, minutes = int(offset_text[1:3]), int(offset_text[4:6])
        if hours > 23 or minutes > 59:
            raise ValueError(f"invalid RFC 3339 offset: {offset_text!r}")
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))

    try:
        moment = datetime(
            int(match["year"]),
            int(match["month"]),
            int(match["day"]),
            int(match["hour"]),
            int(match["minute"]),
            int(match["second"]),
            tzinfo=tz,
        )
    except ValueError as exc:
        raise ValueError(f"invalid RFC 3339 timestamp: {text!r}: {exc}") from exc

    fraction = (match["fraction"] or "")[:9].ljust(9, "0")
    timestamp_ns = _seconds_since_epoch(moment) * _NANOS_PER_SECOND + int(fraction)
    # An offset can push a year-0001 or year-9999 local time past either end.
    if not MIN_TIMESTAMP_NS <= timestamp_ns <= MAX_TIMESTAMP_NS:
        raise ValueError(f"timestamp {text!r} is outside UTC years 0001-9999")
    return timestamp_ns
