from __future__ import annotations

import dataclasses
from datetime import date
from typing import Any
from zoneinfo import ZoneInfo

from timetable_mcp.domain.calendar import resolve_day_type
from timetable_mcp.domain.entities import (
    HolidayCalendar,
    Line,
    TimetableSnapshot,
    TodayDeparture,
)
from timetable_mcp.domain.exceptions import (
    InvalidDirectionError,
    LineNotFoundError,
    RouteNotFoundError,
)
from timetable_mcp.domain.seasons import resolve_season, validate_season_catalogue
from timetable_mcp.domain.services import (
    eligible_departures,
    is_island_origin,
    project_stop_times,
    time_to_minutes,
)
from timetable_mcp.domain.value_objects import HolidayPolicy, Language, TransportType
from timetable_mcp.infrastructure.snapshot_provider import SnapshotProvider
from timetable_mcp.infrastructure.time_utils import ZAGREB_TZ, format_date, today_civil


def aggregate_today_departures(
    transport_type: TransportType,
    on_date: date,
    snapshot: TimetableSnapshot,
    calendar: HolidayCalendar,
    policy: HolidayPolicy = HolidayPolicy.REPLACE,
    language: Language = Language.HR,
) -> list[TodayDeparture]:
    """Every departure of the category that leaves the island on on_date.

    Day type and season are resolved once for all lines. Only routes whose
    origin is an island stop contribute. Rows are ordered by departure time,
    then line display order, then route direction.
    """
    day_type = resolve_day_type(on_date, calendar)
    season = resolve_season(snapshot.seasons, on_date)
    if season is None:
        return []

    rows: list[tuple[tuple[int, int, int], TodayDeparture]] = []
    for line in snapshot.lines_of(transport_type):
        for route in line.routes:
            if not is_island_origin(route):
                continue
            for dep in eligible_departures(route.departures, day_type, season, on_date, policy):
                projected = project_stop_times(
                    dep, route.stops, route.typical_duration_minutes, language
                )
                fallback = route.destination.name(language) if route.destination else ""
                item = TodayDeparture(
                    departure_time=dep.departure_time,
                    line_id=line.id,
                    line_name=line.name(language),
                    subtype=line.subtype(language),
                    route_id=route.id,
                    direction_label=route.direction_label(language),
                    destination=projected.destination or fallback,
                    marker=dep.marker,
                    duration_minutes=projected.duration_minutes,
                )
                key = (time_to_minutes(dep.departure_time), line.display_order, route.direction)
                rows.append((key, item))

    rows.sort(key=lambda row: row[0])
    return [item for _, item in rows]


class TimetableService:
    """Answers timetable queries against the current snapshot."""

    def __init__(
        self,
        provider: SnapshotProvider,
        calendar: HolidayCalendar,
        policy: HolidayPolicy = HolidayPolicy.REPLACE,
        tz: ZoneInfo = ZAGREB_TZ,
    ) -> None:
        self._provider = provider
        self._calendar = calendar
        self._policy = policy
        self._tz = tz

    @property
    def calendar(self) -> HolidayCalendar:
        return self._calendar

    def _day_info(self, on_date: date, language: Language) -> dict[str, Any]:
        day_type = resolve_day_type(on_date, self._calendar)
        holiday = self._calendar.holiday_on(on_date)
        return {
            "date": format_date(on_date),
            "day_type": day_type.value,
            "is_holiday": day_type.is_holiday,
            "holiday_name": holiday.name(language) if holiday else None,
        }

    async def _line(self, line_id: str, transport_type: TransportType) -> tuple[TimetableSnapshot, Line]:
        snapshot = await self._provider.get_snapshot()
        line = snapshot.line(line_id)
        if line is None or line.transport_type is not transport_type:
            raise LineNotFoundError(f"Line not found: {line_id}")
        return snapshot, line

    async def list_lines(
        self, transport_type: TransportType, language: Language = Language.HR
    ) -> list[dict[str, Any]]:
        """Active lines of a category with a stop summary of direction 0."""
        snapshot = await self._provider.get_snapshot()
        items = []
        for line in snapshot.lines_of(transport_type):
            outbound = line.route(0)
            stop_names = [s.name(language) for s in outbound.stops] if outbound else []
            first = line.routes[0] if line.routes else None
            items.append(
                {
                    "id": line.id,
                    "name": line.name(language),
                    "subtype": line.subtype(language),
                    "stops_summary": " - ".join(stop_names),
                    "stops_count": len(stop_names),
                    "typical_duration_minutes": first.typical_duration_minutes if first else None,
                }
            )
        return items

    async def get_line(
        self, line_id: str, transport_type: TransportType, language: Language = Language.HR
    ) -> dict[str, Any]:
        """Line detail: both routes with their ordered stops, plus contacts."""
        _, line = await self._line(line_id, transport_type)
        routes = [
            {
                "id": route.id,
                "direction": route.direction,
                "direction_label": route.direction_label(language),
                "origin": route.origin.name(language) if route.origin else "",
                "destination": route.destination.name(language) if route.destination else "",
                "stops": [
                    {"id": stop.id, "name": stop.name(language), "order": i}
                    for i, stop in enumerate(route.stops)
                ],
                "typical_duration_minutes": route.typical_duration_minutes,
                "marker_note": route.marker_note(language),
            }
            for route in line.routes
        ]
        return {
            "id": line.id,
            "name": line.name(language),
            "subtype": line.subtype(language),
            "routes": routes,
            "contacts": self._contacts(line, language),
        }

    async def get_route_departures(
        self,
        line_id: str,
        transport_type: TransportType,
        on_date: date | None = None,
        direction: int = 0,
        language: Language = Language.HR,
    ) -> dict[str, Any]:
        """Departures in effect for one direction of a line on a date.

        on_date defaults to today in the system timezone.
        Raises InvalidDirectionError, LineNotFoundError, RouteNotFoundError.
        """
        if direction not in (0, 1):
            raise InvalidDirectionError("Direction must be 0 or 1")
        snapshot, line = await self._line(line_id, transport_type)
        route = line.route(direction)
        if route is None:
            raise RouteNotFoundError(f"Route not found: {line_id} direction {direction}")

        effective_date = on_date if on_date is not None else today_civil(self._tz)
        day_info = self._day_info(effective_date, language)
        season = resolve_season(snapshot.seasons, effective_date)
        departures = eligible_departures(
            route.departures,
            resolve_day_type(effective_date, self._calendar),
            season,
            effective_date,
            self._policy,
        )

        rendered = []
        for dep in departures:
            projected = project_stop_times(dep, route.stops, route.typical_duration_minutes, language)
            rendered.append(
                {
                    "id": dep.id,
                    "departure_time": dep.departure_time,
                    "destination": projected.destination,
                    "duration_minutes": projected.duration_minutes,
                    "notes": dep.notes(language),
                    "marker": dep.marker,
                    "stop_times": [dataclasses.asdict(st) for st in projected.stops],
                }
            )

        return {
            "line_id": line.id,
            "line_name": line.name(language),
            "route_id": route.id,
            "direction": route.direction,
            "direction_label": route.direction_label(language),
            **day_info,
            "season": season.season_type.value if season else None,
            "marker_note": route.marker_note(language),
            "departures": rendered,
        }

    async def get_today_departures(
        self,
        transport_type: TransportType,
        on_date: date | None = None,
        language: Language = Language.HR,
    ) -> dict[str, Any]:
        """Aggregated island-origin departures for a category on a date."""
        snapshot = await self._provider.get_snapshot()
        effective_date = on_date if on_date is not None else today_civil(self._tz)
        departures = aggregate_today_departures(
            transport_type, effective_date, snapshot, self._calendar, self._policy, language
        )
        return {
            **self._day_info(effective_date, language),
            "departures": [dataclasses.asdict(d) for d in departures],
        }

    async def get_line_contacts(
        self, line_id: str, transport_type: TransportType, language: Language = Language.HR
    ) -> dict[str, Any]:
        _, line = await self._line(line_id, transport_type)
        return {
            "line_id": line.id,
            "line_name": line.name(language),
            "contacts": self._contacts(line, language),
        }

    async def get_season_catalogue(self) -> dict[str, Any]:
        """Season catalogue with the result of the overlap validator."""
        snapshot = await self._provider.get_snapshot()
        return {
            "seasons": [
                {
                    "id": s.id,
                    "season_type": s.season_type.value,
                    "year": s.year,
                    "date_from": format_date(s.date_from),
                    "date_to": format_date(s.date_to),
                    "label_hr": s.label_hr,
                    "label_en": s.label_en,
                }
                for s in snapshot.seasons
            ],
            "overlaps": [o.message for o in validate_season_catalogue(snapshot.seasons)],
        }

    @staticmethod
    def _contacts(line: Line, language: Language) -> list[dict[str, Any]]:
        return [
            {
                "operator": c.operator(language),
                "phone": c.phone,
                "email": c.email,
                "website": c.website,
            }
            for c in line.contacts
        ]
