from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from timetable_mcp.domain.value_objects import (
    DateConstraints,
    DayType,
    Language,
    SeasonType,
    TransportType,
)


def _pick(language: Language, hr: str, en: str) -> str:
    return en if language is Language.EN else hr


@dataclass(frozen=True)
class Stop:
    """A physical stop or port with a bilingual display name."""

    id: str
    name_hr: str
    name_en: str
    transport_type: TransportType
    latitude: float | None = None
    longitude: float | None = None

    def name(self, language: Language = Language.HR) -> str:
        return _pick(language, self.name_hr, self.name_en)


@dataclass(frozen=True)
class Season:
    """A named, inclusive date interval of one calendar year."""

    id: str
    season_type: SeasonType
    year: int
    date_from: date
    date_to: date
    label_hr: str = ""
    label_en: str = ""

    def contains(self, on_date: date) -> bool:
        return self.date_from <= on_date <= self.date_to


@dataclass(frozen=True)
class Departure:
    """One scheduled trip on a route."""

    id: str
    route_id: str
    season_id: str
    day_type: DayType
    departure_time: str  # HH:MM
    stop_times: tuple[str | None, ...]  # aligned with Route.stops; None = not served
    constraints: DateConstraints = field(default_factory=DateConstraints.none)
    notes_hr: str | None = None
    notes_en: str | None = None
    marker: str | None = None  # e.g. "*", "†", or NO_SERVICE on holiday rows

    def notes(self, language: Language = Language.HR) -> str | None:
        return self.notes_en if language is Language.EN else self.notes_hr


@dataclass(frozen=True)
class Route:
    """One direction of travel on a line."""

    id: str
    line_id: str
    direction: int  # 0 or 1
    direction_label_hr: str
    direction_label_en: str
    stops: tuple[Stop, ...]
    typical_duration_minutes: int | None = None
    marker_note_hr: str | None = None
    marker_note_en: str | None = None
    departures: tuple[Departure, ...] = ()

    @property
    def origin(self) -> Stop | None:
        return self.stops[0] if self.stops else None

    @property
    def destination(self) -> Stop | None:
        return self.stops[-1] if self.stops else None

    def direction_label(self, language: Language = Language.HR) -> str:
        return _pick(language, self.direction_label_hr, self.direction_label_en)

    def marker_note(self, language: Language = Language.HR) -> str | None:
        return self.marker_note_en if language is Language.EN else self.marker_note_hr


@dataclass(frozen=True)
class LineContact:
    """Operator contact for a line."""

    operator_hr: str
    operator_en: str
    phone: str | None = None
    email: str | None = None
    website: str | None = None

    def operator(self, language: Language = Language.HR) -> str:
        return _pick(language, self.operator_hr, self.operator_en)


@dataclass(frozen=True)
class Line:
    """A named service owning one route per direction."""

    id: str
    transport_type: TransportType
    name_hr: str
    name_en: str
    display_order: int
    subtype_hr: str | None = None  # e.g. "Trajekt", "Katamaran"
    subtype_en: str | None = None
    is_active: bool = True
    routes: tuple[Route, ...] = ()
    contacts: tuple[LineContact, ...] = ()

    def name(self, language: Language = Language.HR) -> str:
        return _pick(language, self.name_hr, self.name_en)

    def subtype(self, language: Language = Language.HR) -> str | None:
        return self.subtype_en if language is Language.EN else self.subtype_hr

    def route(self, direction: int) -> Route | None:
        for route in self.routes:
            if route.direction == direction:
                return route
        return None


@dataclass(frozen=True)
class TimetableSnapshot:
    """Read-only view of all timetable reference data for a query batch."""

    stops: tuple[Stop, ...]
    seasons: tuple[Season, ...]
    lines: tuple[Line, ...]

    def line(self, line_id: str) -> Line | None:
        for line in self.lines:
            if line.id == line_id:
                return line
        return None

    def lines_of(self, transport_type: TransportType) -> list[Line]:
        """Active lines of a category in display order."""
        active = [
            line
            for line in self.lines
            if line.transport_type is transport_type and line.is_active
        ]
        return sorted(active, key=lambda line: (line.display_order, line.name_hr))


@dataclass(frozen=True)
class Holiday:
    """A public holiday."""

    date: date
    name_hr: str
    name_en: str

    def name(self, language: Language = Language.HR) -> str:
        return _pick(language, self.name_hr, self.name_en)


@dataclass(frozen=True)
class HolidayCalendar:
    """Fixed set of public holidays keyed by civil date in `timezone`."""

    timezone: str
    holidays: dict[date, Holiday] = field(default_factory=dict)

    def is_holiday(self, on_date: date) -> bool:
        return on_date in self.holidays

    def holiday_on(self, on_date: date) -> Holiday | None:
        return self.holidays.get(on_date)


@dataclass(frozen=True)
class StopTime:
    """A served stop in a projected departure."""

    stop_name: str
    # HH:MM; for an "arrival-departure" range in the seed this is the departure half
    arrival_time: str


@dataclass(frozen=True)
class ProjectedDeparture:
    """Renderable stop sequence for one departure."""

    stops: list[StopTime]
    duration_minutes: int | None
    destination: str


@dataclass(frozen=True)
class TodayDeparture:
    """One row of the aggregated "departures today" board."""

    departure_time: str
    line_id: str
    line_name: str
    subtype: str | None  # always present, None when the line has no subtype
    route_id: str
    direction_label: str
    destination: str
    marker: str | None = None
    duration_minutes: int | None = None
