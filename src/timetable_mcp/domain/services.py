from __future__ import annotations

import logging
import re
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import date

from timetable_mcp.domain.calendar import actual_weekday
from timetable_mcp.domain.entities import (
    Departure,
    ProjectedDeparture,
    Route,
    Season,
    Stop,
    StopTime,
)
from timetable_mcp.domain.value_objects import (
    NO_SERVICE_MARKER,
    DayType,
    HolidayPolicy,
    Language,
)

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

# Origins allowed on the "departures today" board. Routes starting anywhere
# else (Split) are mainland legs heading to the island.
ISLAND_ORIGIN_NAMES: frozenset[str] = frozenset({"Vis", "Komiža"})

_STOP_TIME_RANGE = re.compile(r"^(\d{2}:\d{2})\s*[-–]\s*(\d{2}:\d{2})$")


def time_to_minutes(hhmm: str) -> int:
    """Convert 'HH:MM' (or 'HH:MM:SS') to minutes since midnight.

    Raises ValueError for invalid formats.
    """
    parts = hhmm.strip().split(":")
    if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid time format: {hhmm!r}")
    h, m = int(parts[0]), int(parts[1])
    if not (0 <= h <= 23 and 0 <= m <= 59):
        raise ValueError(f"Invalid time value: {hhmm!r}")
    return h * 60 + m


def normalize_stop_time(value: str | None) -> str | None:
    """Reduce an 'HH:MM–HH:MM' arrival/departure range to its departure time."""
    if value is None:
        return None
    match = _STOP_TIME_RANGE.match(value.strip())
    if match:
        return match.group(2)
    return value.strip()


def duration_between(first: str, last: str) -> int:
    """Minutes from first to last, wrapping past midnight when last < first."""
    delta = time_to_minutes(last) - time_to_minutes(first)
    if delta < 0:
        delta += MINUTES_PER_DAY
    return delta


def _matching(
    departures: Iterable[Departure],
    day_type: DayType,
    season: Season,
    on_date: date,
) -> list[Departure]:
    result = []
    for dep in departures:
        if dep.day_type is not day_type:
            continue
        if dep.season_id != season.id:
            continue
        if not dep.constraints.allows(on_date):
            continue
        result.append(dep)
    return result


def _ordered(departures: list[Departure], on_date: date) -> list[Departure]:
    ordered = sorted(departures, key=lambda d: time_to_minutes(d.departure_time))
    counts = Counter(d.departure_time for d in ordered)
    duplicated = sorted(t for t, n in counts.items() if n > 1)
    if duplicated:
        route_ids = sorted({d.route_id for d in ordered if d.departure_time in duplicated})
        logger.warning(
            "Duplicate departures on %s for route(s) %s at %s",
            on_date.isoformat(),
            ", ".join(route_ids),
            ", ".join(duplicated),
        )
    return ordered


def eligible_departures(
    departures: Iterable[Departure],
    day_type: DayType,
    season: Season | None,
    on_date: date,
    policy: HolidayPolicy = HolidayPolicy.REPLACE,
) -> list[Departure]:
    """Return the departures of one route that run on on_date, by departure time.

    Each candidate must pass, in order: day-type match, season match, then
    its date constraints (exclusion, inclusion, range). On a holiday only
    holiday-tagged departures are candidates; a NO_SERVICE marker among them
    cancels the route for the day. With FALLBACK_TO_WEEKDAY a route with no
    holiday departures runs its actual weekday schedule instead.

    No season for the date means no service: the result is empty.
    """
    if season is None:
        return []
    candidates = list(departures)

    if not day_type.is_holiday:
        return _ordered(_matching(candidates, day_type, season, on_date), on_date)

    holiday_rows = _matching(candidates, DayType.HOLIDAY, season, on_date)
    if any(dep.marker == NO_SERVICE_MARKER for dep in holiday_rows):
        return []
    if holiday_rows or policy is HolidayPolicy.REPLACE:
        return _ordered(holiday_rows, on_date)
    weekday = actual_weekday(on_date)
    return _ordered(_matching(candidates, weekday, season, on_date), on_date)


def project_stop_times(
    departure: Departure,
    stops: Sequence[Stop],
    typical_duration_minutes: int | None = None,
    language: Language = Language.HR,
) -> ProjectedDeparture:
    """Pair a departure's stop times with the route's ordered stops.

    Positions with no time are skipped entirely, as are positions past the
    end of either sequence. Destination is the last served stop; duration
    runs from the first to the last served time, falling back to the
    route's typical duration when fewer than two stops are served.
    """
    served: list[StopTime] = []
    for index, stop in enumerate(stops):
        if index >= len(departure.stop_times):
            break
        time = departure.stop_times[index]
        if time is None:
            continue
        served.append(StopTime(stop_name=stop.name(language), arrival_time=time))

    if len(served) >= 2:
        duration: int | None = duration_between(served[0].arrival_time, served[-1].arrival_time)
    else:
        duration = typical_duration_minutes

    destination = served[-1].stop_name if served else ""
    return ProjectedDeparture(stops=served, duration_minutes=duration, destination=destination)


def is_island_origin(route: Route, island_origins: frozenset[str] = ISLAND_ORIGIN_NAMES) -> bool:
    """True when the route starts at one of the island origin stops."""
    origin = route.origin
    return origin is not None and origin.name_hr in island_origins
