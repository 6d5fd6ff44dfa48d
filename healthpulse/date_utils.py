"""Date helpers for reporting periods and submission timestamps.

Reporting periods are ``YYYY-MM`` tokens. Well-formed tokens compare
chronologically as plain strings, so most callers never parse them; these
helpers are for the places that need the calendar (month length for late
submissions, display labels) and for turning submission timestamps from
the backing store into ``datetime`` values.
"""
from __future__ import annotations

import calendar
import logging
import re
from datetime import date, datetime, timezone
from typing import Any, Optional, Tuple

logger = logging.getLogger("healthpulse.date_utils")

_PERIOD_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_period(period: Optional[str]) -> Optional[Tuple[int, int]]:
    """Split a ``YYYY-MM`` token into ``(year, month)``.

    Returns ``None`` for anything else, including out-of-range months such
    as ``2025-13``.
    """

    match = _PERIOD_RE.match((period or "").strip())
    if not match:
        return None
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        return None
    return year, month


def is_valid_period(period: Optional[str]) -> bool:
    return parse_period(period) is not None


def days_in_period(period: Optional[str]) -> Optional[int]:
    """Number of days in the period's month, or ``None`` if malformed."""

    parsed = parse_period(period)
    if parsed is None:
        return None
    return calendar.monthrange(*parsed)[1]


def period_of(moment: datetime) -> str:
    return f"{moment.year:04d}-{moment.month:02d}"


def format_period(period: Optional[str], *, long: bool = False) -> str:
    """Readable label for a period (``"Jan 2025"`` or ``"January 2025"``).

    An empty period means "no filter" and renders as ``"All Periods"``.
    Malformed tokens come back unchanged.
    """

    if not period:
        return "All Periods"
    parsed = parse_period(period)
    if parsed is None:
        return period
    year, month = parsed
    names = calendar.month_name if long else calendar.month_abbr
    return f"{names[month]} {year}"


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Coerce a submission timestamp into a ``datetime``.

    Accepts ``datetime`` and ``date`` objects and ISO-8601 strings (a trailing
    ``Z`` is read as UTC). Naive values are kept naive so the day of month a
    reporter saw is preserved. Returns ``None`` when nothing can be parsed;
    callers treat that as an absent timestamp.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    text = str(value).strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass

    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    logger.debug("parse_timestamp: unable to parse '%s'", value)
    return None


def timestamp_sort_key(moment: Optional[datetime]) -> Tuple[int, float]:
    """Sort key placing missing timestamps before every real one.

    Naive and aware datetimes cannot be compared directly, so both are
    reduced to a POSIX timestamp (naive values are read as UTC).
    """

    if moment is None:
        return (0, 0.0)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (1, moment.timestamp())


__all__ = [
    "parse_period",
    "is_valid_period",
    "days_in_period",
    "period_of",
    "format_period",
    "parse_timestamp",
    "timestamp_sort_key",
]
