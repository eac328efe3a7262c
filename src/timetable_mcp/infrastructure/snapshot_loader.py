"""Seed JSON -> TimetableSnapshot.

The seed format is the one produced by the timetable import tooling:

    {"stops": [...], "seasons": [...], "lines": [{..., "routes": [{..., "departures": [...]}]}]}

Every problem found is collected and reported at once through
SnapshotValidationError; overlapping seasons raise SeasonOverlapError before
any departure is linked.
"""
from __future__ import annotations

import json
import logging
import re
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, TypeVar

from timetable_mcp.domain.entities import (
    Departure,
    Line,
    LineContact,
    Route,
    Season,
    Stop,
    TimetableSnapshot,
)
from timetable_mcp.domain.exceptions import (
    InvalidDateError,
    SeasonOverlapError,
    SnapshotValidationError,
)
from timetable_mcp.domain.seasons import validate_season_catalogue
from timetable_mcp.domain.services import normalize_stop_time, time_to_minutes
from timetable_mcp.domain.value_objects import (
    DateConstraints,
    DateRange,
    DayType,
    SeasonType,
    TransportType,
)
from timetable_mcp.infrastructure.time_utils import parse_civil_date

logger = logging.getLogger(__name__)

_DEPARTURE_TIME = re.compile(r"^\d{2}:\d{2}$")
# "08:45", "08:45–08:50", "08:45 - 08:50"
_STOP_TIME = re.compile(r"^\d{2}:\d{2}(?:\s*[-–]\s*\d{2}:\d{2})?$")

E = TypeVar("E", bound=Enum)

Errors = list[tuple[str, str]]


def _enum(enum_cls: type[E], value: Any, field: str, errors: Errors) -> E | None:
    try:
        return enum_cls(value)
    except ValueError:
        errors.append((field, f"Invalid {enum_cls.__name__}: {value!r}"))
        return None


def _date(value: Any, field: str, errors: Errors) -> date | None:
    try:
        return parse_civil_date(str(value) if value is not None else "")
    except InvalidDateError as exc:
        errors.append((field, str(exc)))
        return None


def _int(value: Any, field: str, errors: Errors) -> int | None:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        errors.append((field, f"must be an integer, got {value!r}"))
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        errors.append((field, f"must be an integer, got {value!r}"))
        return None


def _float(value: Any, field: str, errors: Errors) -> float | None:
    if isinstance(value, bool):
        errors.append((field, f"must be a number, got {value!r}"))
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        errors.append((field, f"must be a number, got {value!r}"))
        return None


def _date_set(value: Any, field: str, errors: Errors) -> frozenset[date]:
    if value is None:
        return frozenset()
    if not isinstance(value, list):
        errors.append((field, "must be an array of YYYY-MM-DD dates"))
        return frozenset()
    parsed = (_date(v, field, errors) for v in value)
    return frozenset(d for d in parsed if d is not None)


def _parse_stops(raw_stops: list[dict[str, Any]], errors: Errors) -> dict[str, Stop]:
    stops: dict[str, Stop] = {}
    for i, raw in enumerate(raw_stops):
        field = f"stops[{i}]"
        if not raw.get("id") or not raw.get("name_hr"):
            errors.append((field, "Stop id and name_hr are required"))
            continue
        transport_type = _enum(TransportType, raw.get("transport_type"), f"{field}.transport_type", errors)
        if transport_type is None:
            continue
        coords = {
            key: _float(raw[key], f"{field}.{key}", errors) if raw.get(key) is not None else None
            for key in ("latitude", "longitude")
        }
        stops[raw["id"]] = Stop(
            id=raw["id"],
            name_hr=raw["name_hr"],
            name_en=raw.get("name_en") or raw["name_hr"],
            transport_type=transport_type,
            latitude=coords["latitude"],
            longitude=coords["longitude"],
        )
    return stops


def _parse_seasons(raw_seasons: list[dict[str, Any]], errors: Errors) -> list[Season]:
    seasons: list[Season] = []
    for i, raw in enumerate(raw_seasons):
        field = f"seasons[{i}]"
        if not raw.get("id"):
            errors.append((field, "Season id is required"))
            continue
        season_type = _enum(SeasonType, raw.get("season_type"), f"{field}.season_type", errors)
        date_from = _date(raw.get("date_from"), f"{field}.date_from", errors)
        date_to = _date(raw.get("date_to"), f"{field}.date_to", errors)
        year = _int(raw["year"], f"{field}.year", errors) if raw.get("year") is not None else None
        if season_type is None or date_from is None or date_to is None:
            continue
        if raw.get("year") is not None and year is None:
            continue
        if date_from > date_to:
            errors.append((field, "date_from must be before or equal to date_to"))
            continue
        seasons.append(
            Season(
                id=raw["id"],
                season_type=season_type,
                year=year if year is not None else date_from.year,
                date_from=date_from,
                date_to=date_to,
                label_hr=raw.get("label_hr", ""),
                label_en=raw.get("label_en", ""),
            )
        )
    return seasons


def _seasons_for(
    season_type: SeasonType,
    window: DateRange | None,
    seasons: list[Season],
) -> list[Season]:
    """Seasons a seed departure belongs to.

    A departure with an explicit range belongs to the season of its type that
    contains the start of the range (or its end when only date_to is set).
    Without a range it belongs to every season of its type, which covers
    disjoint periods such as OFF in spring and OFF again in autumn.
    """
    of_type = [s for s in seasons if s.season_type is season_type]
    ref = (window.date_from or window.date_to) if window is not None else None
    if ref is None:
        return of_type
    return [s for s in of_type if s.contains(ref)][:1]


def _parse_departures(
    raw_departures: list[dict[str, Any]],
    route_id: str,
    stop_count: int,
    seasons: list[Season],
    prefix: str,
    errors: Errors,
) -> list[Departure]:
    departures: list[Departure] = []
    for i, raw in enumerate(raw_departures):
        field = f"{prefix}.departures[{i}]"
        before = len(errors)

        day_type = _enum(DayType, raw.get("day_type"), f"{field}.day_type", errors)
        season_type = _enum(SeasonType, raw.get("season_type"), f"{field}.season_type", errors)

        departure_time = str(raw.get("departure_time", ""))
        if not _DEPARTURE_TIME.match(departure_time):
            errors.append((f"{field}.departure_time", "Departure time must be HH:MM format"))
        else:
            try:
                time_to_minutes(departure_time)
            except ValueError as exc:
                errors.append((f"{field}.departure_time", str(exc)))

        raw_times = raw.get("stop_times")
        stop_times: list[str | None] = []
        if not isinstance(raw_times, list):
            errors.append((f"{field}.stop_times", "stop_times must be an array"))
        elif len(raw_times) != stop_count:
            errors.append(
                (
                    f"{field}.stop_times",
                    f"stop_times length ({len(raw_times)}) must match route stops count ({stop_count})",
                )
            )
        else:
            for j, value in enumerate(raw_times):
                if value is not None and not (isinstance(value, str) and _STOP_TIME.match(value)):
                    errors.append(
                        (f"{field}.stop_times[{j}]", "Stop time must be HH:MM, HH:MM–HH:MM range, or null")
                    )
                    continue
                normalized = normalize_stop_time(value)
                if normalized is not None:
                    try:
                        time_to_minutes(normalized)
                    except ValueError as exc:
                        errors.append((f"{field}.stop_times[{j}]", str(exc)))
                        continue
                stop_times.append(normalized)

        date_from = _date(raw["date_from"], f"{field}.date_from", errors) if raw.get("date_from") else None
        date_to = _date(raw["date_to"], f"{field}.date_to", errors) if raw.get("date_to") else None
        if date_from and date_to and date_from > date_to:
            errors.append((field, "date_from must be before or equal to date_to"))
        include = _date_set(raw.get("include_dates"), f"{field}.include_dates", errors)
        exclude = _date_set(raw.get("exclude_dates"), f"{field}.exclude_dates", errors)

        if len(errors) > before or day_type is None or season_type is None:
            continue

        window = DateRange(date_from, date_to) if (date_from or date_to) else None
        linked = _seasons_for(season_type, window, seasons)
        if not linked:
            errors.append(
                (
                    field,
                    f"No {season_type.value} season found for departure "
                    f"{departure_time} {day_type.value}",
                )
            )
            continue

        constraints = DateConstraints(exclude=exclude, include=include, window=window)
        for season in linked:
            dep_id = f"{route_id}-{i}" if len(linked) == 1 else f"{route_id}-{i}-{season.id}"
            departures.append(
                Departure(
                    id=dep_id,
                    route_id=route_id,
                    season_id=season.id,
                    day_type=day_type,
                    departure_time=departure_time,
                    stop_times=tuple(stop_times),
                    constraints=constraints,
                    notes_hr=raw.get("notes_hr"),
                    notes_en=raw.get("notes_en"),
                    marker=raw.get("marker"),
                )
            )
    return departures


def _parse_route(
    raw: dict[str, Any],
    line_id: str,
    stops: dict[str, Stop],
    seasons: list[Season],
    prefix: str,
    errors: Errors,
) -> Route | None:
    direction = raw.get("direction")
    if direction not in (0, 1):
        errors.append((f"{prefix}.direction", f"Direction must be 0 or 1, got {direction!r}"))
        return None

    route_id = f"{line_id}-{direction}"
    before = len(errors)
    keyed: list[tuple[int, dict[str, Any]]] = []
    for s, rs in enumerate(raw.get("stops", [])):
        order = _int(rs.get("stop_order", 0), f"{prefix}.stops[{s}].stop_order", errors)
        if order is not None:
            keyed.append((order, rs))
    duration = raw.get("typical_duration_minutes")
    if duration is not None:
        duration = _int(duration, f"{prefix}.typical_duration_minutes", errors)
        if duration is not None and duration < 0:
            errors.append((f"{prefix}.typical_duration_minutes", "must not be negative"))
    if len(errors) > before:
        return None

    ordered = [rs for _, rs in sorted(keyed, key=lambda pair: pair[0])]
    route_stops: list[Stop] = []
    for rs in ordered:
        stop = stops.get(rs.get("stop_id"))
        if stop is None:
            errors.append((f"{prefix}.stops", f"Unknown stop id: {rs.get('stop_id')!r}"))
            continue
        route_stops.append(stop)
    if len(route_stops) != len(ordered):
        return None
    if len(route_stops) < 2:
        errors.append((f"{prefix}.stops", "A route needs at least two stops"))
        return None

    for key, expected in (("origin_stop_id", route_stops[0]), ("destination_stop_id", route_stops[-1])):
        if raw.get(key) is not None and raw[key] != expected.id:
            errors.append((f"{prefix}.{key}", f"{raw[key]!r} is not the route's first/last stop"))

    departures = _parse_departures(
        raw.get("departures", []), route_id, len(route_stops), seasons, prefix, errors
    )
    return Route(
        id=route_id,
        line_id=line_id,
        direction=direction,
        direction_label_hr=raw.get("direction_label_hr", ""),
        direction_label_en=raw.get("direction_label_en") or raw.get("direction_label_hr", ""),
        stops=tuple(route_stops),
        typical_duration_minutes=duration,
        marker_note_hr=raw.get("marker_note_hr"),
        marker_note_en=raw.get("marker_note_en"),
        departures=tuple(departures),
    )


def _parse_line(
    raw: dict[str, Any],
    index: int,
    stops: dict[str, Stop],
    seasons: list[Season],
    errors: Errors,
) -> Line | None:
    prefix = f"lines[{index}]"
    if not raw.get("id") or not raw.get("name_hr"):
        errors.append((prefix, "Line id and name_hr are required"))
        return None
    transport_type = _enum(TransportType, raw.get("transport_type"), f"{prefix}.transport_type", errors)
    display_order = _int(raw.get("display_order", 0), f"{prefix}.display_order", errors)

    routes: list[Route] = []
    for r, raw_route in enumerate(raw.get("routes", [])):
        route = _parse_route(raw_route, raw["id"], stops, seasons, f"{prefix}.routes[{r}]", errors)
        if route is not None:
            routes.append(route)
    directions = [route.direction for route in routes]
    if len(set(directions)) != len(directions):
        errors.append((f"{prefix}.routes", "Each direction may appear only once per line"))

    contacts = tuple(
        LineContact(
            operator_hr=c.get("operator_hr", ""),
            operator_en=c.get("operator_en") or c.get("operator_hr", ""),
            phone=c.get("phone"),
            email=c.get("email"),
            website=c.get("website"),
        )
        for c in raw.get("contacts", [])
    )
    if transport_type is None or display_order is None:
        return None
    return Line(
        id=raw["id"],
        transport_type=transport_type,
        name_hr=raw["name_hr"],
        name_en=raw.get("name_en") or raw["name_hr"],
        display_order=display_order,
        subtype_hr=raw.get("subtype_hr"),
        subtype_en=raw.get("subtype_en"),
        is_active=bool(raw.get("is_active", True)),
        routes=tuple(sorted(routes, key=lambda route: route.direction)),
        contacts=contacts,
    )


def parse_snapshot(raw: dict[str, Any]) -> TimetableSnapshot:
    """Validate seed data and build an immutable snapshot.

    Raises SeasonOverlapError when the season catalogue overlaps within a
    year, SnapshotValidationError for every other problem.
    """
    errors: Errors = []
    stops = _parse_stops(raw.get("stops", []), errors)
    seasons = _parse_seasons(raw.get("seasons", []), errors)

    overlaps = validate_season_catalogue(seasons)
    if overlaps:
        for overlap in overlaps:
            logger.error(overlap.message)
        raise SeasonOverlapError(overlaps)

    lines: list[Line] = []
    for i, raw_line in enumerate(raw.get("lines", [])):
        line = _parse_line(raw_line, i, stops, seasons, errors)
        if line is not None:
            lines.append(line)
    if errors:
        raise SnapshotValidationError(errors)

    return TimetableSnapshot(
        stops=tuple(stops.values()),
        seasons=tuple(sorted(seasons, key=lambda s: s.date_from)),
        lines=tuple(lines),
    )


def load_snapshot_file(path: Path) -> TimetableSnapshot:
    """Read and parse a seed JSON file from disk."""
    snapshot = parse_snapshot(json.loads(path.read_text(encoding="utf-8")))
    logger.info(
        "Loaded timetable snapshot from %s: %d lines, %d seasons, %d stops",
        path,
        len(snapshot.lines),
        len(snapshot.seasons),
        len(snapshot.stops),
    )
    return snapshot
