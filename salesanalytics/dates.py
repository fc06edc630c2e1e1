"""Parsing of start/end date query parameters."""

from __future__ import annotations

import re
from datetime import datetime, timezone

_DATE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")


class DateRangeError(ValueError):
    """Raised when a date range parameter is missing or malformed."""


def _parse(text: str) -> datetime | None:
    match = _DATE.fullmatch(text)
    if match is None:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        return None


def parse_date_range(args):
    """Return the UTC (start, end) dates from YYYY-MM-DD 'start' and 'end' parameters."""
    start = _parse(args.get("start") or "")
    if start is None:
        raise DateRangeError("invalid start date")
    end = _parse(args.get("end") or "")
    if end is None:
        raise DateRangeError("invalid end date")
    return start, end