from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any

from timetable_mcp.domain.entities import Holiday, HolidayCalendar
from timetable_mcp.domain.exceptions import InvalidDateError, SnapshotValidationError
from timetable_mcp.infrastructure.time_utils import parse_civil_date

logger = logging.getLogger(__name__)

DEFAULT_HOLIDAYS_PATH = Path(__file__).parent / "data" / "holidays-hr.json"


def parse_holiday_calendar(raw: dict[str, Any]) -> HolidayCalendar:
    """Build a HolidayCalendar from the static JSON structure.

    Expected shape: {"timezone": "...", "holidays": [{"date", "name_hr", "name_en"}]}
    """
    errors: list[tuple[str, str]] = []
    holidays: dict[date, Holiday] = {}
    for i, entry in enumerate(raw.get("holidays", [])):
        try:
            day = parse_civil_date(str(entry.get("date", "")))
        except InvalidDateError as exc:
            errors.append((f"holidays[{i}].date", str(exc)))
            continue
        holidays[day] = Holiday(
            date=day,
            name_hr=entry.get("name_hr", ""),
            name_en=entry.get("name_en", entry.get("name_hr", "")),
        )
    if errors:
        raise SnapshotValidationError(errors)
    return HolidayCalendar(timezone=raw.get("timezone", "Europe/Zagreb"), holidays=holidays)


def load_holiday_calendar(path: Path | None = None) -> HolidayCalendar:
    """Load the holiday calendar from disk (bundled Croatian calendar by default)."""
    source = path or DEFAULT_HOLIDAYS_PATH
    calendar = parse_holiday_calendar(json.loads(source.read_text(encoding="utf-8")))
    logger.info("Loaded %d holidays from %s", len(calendar.holidays), source)
    return calendar
