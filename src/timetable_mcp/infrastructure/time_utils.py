from __future__ import annotations

import re
from datetime import date, datetime
from zoneinfo import ZoneInfo

from timetable_mcp.domain.exceptions import InvalidDateError

ZAGREB_TZ: ZoneInfo = ZoneInfo("Europe/Zagreb")

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def now_zagreb(tz: ZoneInfo = ZAGREB_TZ) -> datetime:
    """Return the current moment as a timezone-aware datetime in the system timezone."""
    return datetime.now(tz=tz)


def to_civil_date(dt: datetime, tz: ZoneInfo = ZAGREB_TZ) -> date:
    """Return the civil date of an instant in the system timezone.

    Naive datetimes are assumed to already be local to tz.
    """
    if dt.tzinfo is None:
        return dt.date()
    return dt.astimezone(tz).date()


def today_civil(tz: ZoneInfo = ZAGREB_TZ) -> date:
    """Return today's civil date in the system timezone."""
    return to_civil_date(now_zagreb(tz), tz)


def parse_civil_date(s: str) -> date:
    """Parse a strict YYYY-MM-DD string into a date.

    Raises InvalidDateError on empty, malformed or impossible dates
    (e.g. "2026-02-30").
    """
    if not s or not s.strip():
        raise InvalidDateError("Empty date string")
    s = s.strip()
    if not _ISO_DATE.match(s):
        raise InvalidDateError(f"Invalid date format, expected YYYY-MM-DD: {s!r}")
    try:
        return date.fromisoformat(s)
    except ValueError:
        raise InvalidDateError(f"Invalid calendar date: {s!r}")


def format_date(d: date) -> str:
    """Return date string in YYYY-MM-DD format."""
    return d.strftime("%Y-%m-%d")
