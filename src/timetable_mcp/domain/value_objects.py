from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class TransportType(str, Enum):
    """Transport categories served by the timetable.

    Using (str, Enum) for Python 3.10 compatibility (StrEnum requires 3.11+).
    """

    ROAD = "road"
    SEA = "sea"


class SeasonType(str, Enum):
    """Closed set of season labels used by the seed data."""

    OFF = "OFF"
    PRE = "PRE"
    HIGH = "HIGH"
    POST = "POST"


class DayType(str, Enum):
    """Explicit weekday buckets plus the holiday bucket (no generic WEEKDAY)."""

    MON = "MON"
    TUE = "TUE"
    WED = "WED"
    THU = "THU"
    FRI = "FRI"
    SAT = "SAT"
    SUN = "SUN"
    HOLIDAY = "PRAZNIK"

    @property
    def is_holiday(self) -> bool:
        return self is DayType.HOLIDAY


# Indexed by date.weekday() (Monday == 0)
WEEKDAYS: tuple[DayType, ...] = (
    DayType.MON,
    DayType.TUE,
    DayType.WED,
    DayType.THU,
    DayType.FRI,
    DayType.SAT,
    DayType.SUN,
)


class Language(str, Enum):
    HR = "hr"
    EN = "en"


class HolidayPolicy(str, Enum):
    """How holiday dates pick departures for a route.

    REPLACE: only holiday-tagged departures run on a holiday.
    FALLBACK_TO_WEEKDAY: routes with no holiday-tagged departures for the date
    run their actual weekday schedule instead.
    """

    REPLACE = "replace"
    FALLBACK_TO_WEEKDAY = "fallback"


NO_SERVICE_MARKER = "NO_SERVICE"


@dataclass(frozen=True)
class DateRange:
    """Inclusive date window; a missing bound is unbounded on that side."""

    date_from: date | None = None
    date_to: date | None = None

    def contains(self, on_date: date) -> bool:
        if self.date_from is not None and on_date < self.date_from:
            return False
        if self.date_to is not None and on_date > self.date_to:
            return False
        return True


@dataclass(frozen=True)
class DateConstraints:
    """Date-level overrides attached to a departure.

    Evaluated as an ordered chain: exclusion list, then inclusion list, then
    the range window. Each link is optional; an empty list counts as absent.
    """

    exclude: frozenset[date] = frozenset()
    include: frozenset[date] = frozenset()
    window: DateRange | None = None

    @classmethod
    def none(cls) -> DateConstraints:
        return cls()

    def allows(self, on_date: date) -> bool:
        if on_date in self.exclude:
            return False
        if self.include and on_date not in self.include:
            return False
        if self.window is not None and not self.window.contains(on_date):
            return False
        return True
