"""Day-type resolution for civil dates.

All decisions are made on civil dates in the holiday calendar's timezone.
Instants must be converted with time_utils.to_civil_date first.
"""
from __future__ import annotations

from datetime import date

from timetable_mcp.domain.entities import HolidayCalendar
from timetable_mcp.domain.value_objects import WEEKDAYS, DayType


def actual_weekday(on_date: date) -> DayType:
    """Return the weekday bucket for a civil date, ignoring holidays."""
    return WEEKDAYS[on_date.weekday()]


def is_holiday(on_date: date, calendar: HolidayCalendar) -> bool:
    return calendar.is_holiday(on_date)


def resolve_day_type(on_date: date, calendar: HolidayCalendar) -> DayType:
    """Return HOLIDAY for a public holiday, otherwise the weekday bucket.

    Holiday status wins over the weekday: a holiday that falls on a Sunday
    resolves to HOLIDAY, not SUN.
    """
    if calendar.is_holiday(on_date):
        return DayType.HOLIDAY
    return actual_weekday(on_date)
