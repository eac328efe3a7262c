from __future__ import annotations

import json

from mcp.server.fastmcp import FastMCP

from timetable_mcp.application.timetable_service import TimetableService
from timetable_mcp.infrastructure.time_utils import format_date


def register_resources(mcp: FastMCP, timetable_svc: TimetableService) -> None:
    """Register the read-only reference data resources. Called once during server setup."""

    @mcp.resource("timetable://holidays", mime_type="application/json")
    def holidays() -> str:
        """Public holidays that switch the day type to PRAZNIK."""
        calendar = timetable_svc.calendar
        entries = [
            {"date": format_date(h.date), "name_hr": h.name_hr, "name_en": h.name_en}
            for h in sorted(calendar.holidays.values(), key=lambda h: h.date)
        ]
        return json.dumps(
            {"timezone": calendar.timezone, "holidays": entries}, ensure_ascii=False
        )

    @mcp.resource("timetable://seasons", mime_type="application/json")
    async def seasons() -> str:
        """Season catalogue of the current snapshot with any detected overlaps."""
        result = await timetable_svc.get_season_catalogue()
        return json.dumps(result, ensure_ascii=False)
