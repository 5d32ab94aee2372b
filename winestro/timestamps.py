"""Timestamps as the Winestro API writes them, and their JSON form."""

from __future__ import annotations

import re
from datetime import datetime, timezone

TIMESTAMP_FORMAT = "YYYY-MM-DD hh:mm:ss"

_TIMESTAMP_RE = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2}) "
    r"(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:[.,](?P<fraction>\d+))?\Z"
)


def parse_timestamp(text: str) -> datetime:
    """Parse a ``YYYY-MM-DD hh:mm:ss`` timestamp as a UTC datetime.

    A fractional part after the seconds is accepted; digits beyond
    microsecond precision are dropped.
    """
    match = _TIMESTAMP_RE.match(text)
    if match is None:
        raise ValueError(f"cannot parse {text!r} as {TIMESTAMP_FORMAT!r}")
    fraction = match["fraction"] or ""
    microsecond = int(fraction[:6].ljust(6, "0")) if fraction else 0
    try:
        return datetime(
            int(match["year"]),
            int(match["month"]),
            int(match["day"]),
            int(match["hour"]),
            int(match["minute"]),
            int(match["second"]),
            microsecond,
            tzinfo=timezone.utc,
        )
    except ValueError as exc:
        raise ValueError(f"cannot parse {text!r}: {exc}") from None


def format_timestamp(value: datetime) -> str:
    """Format a datetime as an RFC 3339 string with trimmed fractional seconds.

    Naive datetimes are taken to be UTC; a zero offset is written as ``Z``.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset()
    minutes = int(offset.total_seconds()) // 60 if offset is not None else 0
    if minutes == 0:
        return text + "Z"
    sign = "+" if minutes > 0 else "-"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"