"""Tests for seed JSON parsing and load-time validation."""
from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any

import pytest

from timetable_mcp.domain.entities import TimetableSnapshot
from timetable_mcp.domain.exceptions import SeasonOverlapError, SnapshotValidationError
from timetable_mcp.domain.value_objects import DayType, SeasonType, TransportType
from timetable_mcp.infrastructure.snapshot_loader import load_snapshot_file, parse_snapshot


def first_departures(seed: dict[str, Any]) -> list[dict[str, Any]]:
    """Departures of vis-komiza direction 0 in the shared seed."""
    return seed["lines"][1]["routes"][1]["departures"]


def error_fields(exc: SnapshotValidationError) -> list[str]:
    return [field for field, _ in exc.errors]


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------

def test_snapshot_contents(snapshot: TimetableSnapshot) -> None:
    assert len(snapshot.stops) == 6
    assert [s.season_type for s in snapshot.seasons] == [
        SeasonType.OFF,
        SeasonType.PRE,
        SeasonType.HIGH,
        SeasonType.POST,
        SeasonType.OFF,
    ]
    assert {line.id for line in snapshot.lines} == {"rukavac", "vis-komiza", "vis-split", "old-line"}


def test_routes_sorted_by_direction_and_stops_by_order(snapshot: TimetableSnapshot) -> None:
    line = snapshot.line("vis-komiza")
    assert line is not None
    assert [r.direction for r in line.routes] == [0, 1]
    outbound = line.routes[0]
    assert outbound.id == "vis-komiza-0"
    assert [s.id for s in outbound.stops] == ["vis", "plisko", "komiza"]


def test_departure_fields(snapshot: TimetableSnapshot) -> None:
    route = snapshot.line("vis-komiza").route(0)  # type: ignore[union-attr]
    dep = next(d for d in route.departures if d.departure_time == "10:00")  # type: ignore[union-attr]
    assert dep.day_type is DayType.MON
    assert dep.season_id == "high-2026"
    assert dep.stop_times == ("10:00", "10:10", "10:25")
    assert dep.constraints.exclude == frozenset({date(2026, 8, 10)})
    assert dep.notes_en == "Not on 10 Aug"


def test_departure_without_range_expands_to_every_season_of_type(snapshot: TimetableSnapshot) -> None:
    route = snapshot.line("vis-komiza").route(0)  # type: ignore[union-attr]
    sunday = [d for d in route.departures if d.departure_time == "16:30"]  # type: ignore[union-attr]
    assert sorted(d.season_id for d in sunday) == ["off-2026-a", "off-2026-b"]
    assert len({d.id for d in sunday}) == 2


def test_departure_with_range_links_to_containing_season(seed: dict[str, Any]) -> None:
    first_departures(seed).append(
        {
            "day_type": "SUN",
            "season_type": "OFF",
            "departure_time": "17:30",
            "stop_times": ["17:30", "17:40", "17:55"],
            "date_from": "2026-11-01",
            "date_to": "2026-12-05",
        }
    )
    snapshot = parse_snapshot(seed)
    route = snapshot.line("vis-komiza").route(0)  # type: ignore[union-attr]
    dep = next(d for d in route.departures if d.departure_time == "17:30")  # type: ignore[union-attr]
    assert dep.season_id == "off-2026-b"
    assert dep.constraints.window is not None


def test_departure_with_only_end_date_links_by_end(seed: dict[str, Any]) -> None:
    first_departures(seed).append(
        {
            "day_type": "SUN",
            "season_type": "OFF",
            "departure_time": "17:30",
            "stop_times": ["17:30", "17:40", "17:55"],
            "date_to": "2026-02-15",
        }
    )
    snapshot = parse_snapshot(seed)
    route = snapshot.line("vis-komiza").route(0)  # type: ignore[union-attr]
    dep = next(d for d in route.departures if d.departure_time == "17:30")  # type: ignore[union-attr]
    assert dep.season_id == "off-2026-a"


def test_defaults_and_inactive_lines(snapshot: TimetableSnapshot) -> None:
    sea = snapshot.line("vis-split")
    assert sea is not None
    assert sea.transport_type is TransportType.SEA
    assert sea.routes[0].direction_label_en == "Vis - Split"
    old = snapshot.line("old-line")
    assert old is not None
    assert not old.is_active


def test_contacts_parsed(snapshot: TimetableSnapshot) -> None:
    contacts = snapshot.line("vis-komiza").contacts  # type: ignore[union-attr]
    assert len(contacts) == 1
    assert contacts[0].phone == "+385 21 711 000"


def test_load_snapshot_file(tmp_path: Path, seed: dict[str, Any]) -> None:
    path = tmp_path / "seed.json"
    path.write_text(json.dumps(seed, ensure_ascii=False), encoding="utf-8")
    snapshot = load_snapshot_file(path)
    assert snapshot.line("vis-split") is not None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def test_overlapping_seasons_rejected(seed: dict[str, Any]) -> None:
    seed["seasons"][0]["date_to"] = "2026-04-01"
    with pytest.raises(SeasonOverlapError) as exc_info:
        parse_snapshot(seed)
    assert "OFF" in str(exc_info.value)
    assert "PRE" in str(exc_info.value)


def test_stop_times_length_mismatch(seed: dict[str, Any]) -> None:
    first_departures(seed)[0]["stop_times"] = ["15:30", "15:55"]
    with pytest.raises(SnapshotValidationError) as exc_info:
        parse_snapshot(seed)
    assert "lines[1].routes[1].departures[0].stop_times" in error_fields(exc_info.value)


def test_invalid_departure_time(seed: dict[str, Any]) -> None:
    first_departures(seed)[0]["departure_time"] = "25:00"
    with pytest.raises(SnapshotValidationError, match="Invalid time value"):
        parse_snapshot(seed)


def test_invalid_day_type_and_season_type(seed: dict[str, Any]) -> None:
    first_departures(seed)[0]["day_type"] = "WEEKDAY"
    first_departures(seed)[1]["season_type"] = "SUMMER"
    with pytest.raises(SnapshotValidationError) as exc_info:
        parse_snapshot(seed)
    messages = " ".join(m for _, m in exc_info.value.errors)
    assert "Invalid DayType: 'WEEKDAY'" in messages
    assert "Invalid SeasonType: 'SUMMER'" in messages


def test_bad_stop_time_value(seed: dict[str, Any]) -> None:
    first_departures(seed)[0]["stop_times"][1] = "later"
    with pytest.raises(SnapshotValidationError) as exc_info:
        parse_snapshot(seed)
    assert "lines[1].routes[1].departures[0].stop_times[1]" in error_fields(exc_info.value)


def test_inverted_date_range(seed: dict[str, Any]) -> None:
    first_departures(seed)[0]["date_from"] = "2026-08-31"
    first_departures(seed)[0]["date_to"] = "2026-07-01"
    with pytest.raises(SnapshotValidationError, match="date_from must be before"):
        parse_snapshot(seed)


def test_no_matching_season(seed: dict[str, Any]) -> None:
    first_departures(seed)[0]["date_from"] = "2027-07-01"
    with pytest.raises(SnapshotValidationError, match="No HIGH season found"):
        parse_snapshot(seed)


def test_invalid_direction(seed: dict[str, Any]) -> None:
    seed["lines"][0]["routes"][0]["direction"] = 2
    with pytest.raises(SnapshotValidationError, match="Direction must be 0 or 1"):
        parse_snapshot(seed)


def test_duplicate_direction(seed: dict[str, Any]) -> None:
    seed["lines"][1]["routes"][0]["direction"] = 0
    with pytest.raises(SnapshotValidationError, match="Each direction may appear only once"):
        parse_snapshot(seed)


def test_unknown_stop(seed: dict[str, Any]) -> None:
    seed["lines"][0]["routes"][0]["stops"][1]["stop_id"] = "nowhere"
    with pytest.raises(SnapshotValidationError, match="Unknown stop id: 'nowhere'"):
        parse_snapshot(seed)


def test_origin_must_be_first_stop(seed: dict[str, Any]) -> None:
    seed["lines"][1]["routes"][1]["origin_stop_id"] = "komiza"
    with pytest.raises(SnapshotValidationError, match="origin_stop_id"):
        parse_snapshot(seed)


def test_all_errors_collected(seed: dict[str, Any]) -> None:
    deps = first_departures(seed)
    deps[0]["departure_time"] = "7:00"
    deps[1]["day_type"] = "HOLIDAY"
    deps[2]["exclude_dates"] = ["2026-13-01"]
    with pytest.raises(SnapshotValidationError) as exc_info:
        parse_snapshot(seed)
    assert len(exc_info.value.errors) == 3


# ---------------------------------------------------------------------------
# Numeric fields
# ---------------------------------------------------------------------------

def test_non_numeric_latitude(seed: dict[str, Any]) -> None:
    seed["stops"][0]["latitude"] = "north"
    with pytest.raises(SnapshotValidationError) as exc_info:
        parse_snapshot(seed)
    assert error_fields(exc_info.value) == ["stops[0].latitude"]


def test_numeric_string_coordinates_accepted(seed: dict[str, Any]) -> None:
    seed["stops"][0]["longitude"] = "16.183"
    snapshot = parse_snapshot(seed)
    vis = next(stop for stop in snapshot.stops if stop.id == "vis")
    assert vis.longitude == pytest.approx(16.183)


def test_non_integer_season_year(seed: dict[str, Any]) -> None:
    seed["seasons"][0]["year"] = "twenty"
    with pytest.raises(SnapshotValidationError) as exc_info:
        parse_snapshot(seed)
    assert error_fields(exc_info.value) == ["seasons[0].year"]


def test_non_integer_display_order(seed: dict[str, Any]) -> None:
    seed["lines"][0]["display_order"] = "first"
    with pytest.raises(SnapshotValidationError) as exc_info:
        parse_snapshot(seed)
    assert error_fields(exc_info.value) == ["lines[0].display_order"]


@pytest.mark.parametrize("duration", ["long", 12.5, True])
def test_non_integer_typical_duration(seed: dict[str, Any], duration: Any) -> None:
    seed["lines"][0]["routes"][0]["typical_duration_minutes"] = duration
    with pytest.raises(SnapshotValidationError) as exc_info:
        parse_snapshot(seed)
    assert error_fields(exc_info.value) == ["lines[0].routes[0].typical_duration_minutes"]


def test_negative_typical_duration(seed: dict[str, Any]) -> None:
    seed["lines"][0]["routes"][0]["typical_duration_minutes"] = -5
    with pytest.raises(SnapshotValidationError, match="must not be negative"):
        parse_snapshot(seed)


def test_non_integer_stop_order(seed: dict[str, Any]) -> None:
    seed["lines"][0]["routes"][0]["stops"][0]["stop_order"] = "x"
    with pytest.raises(SnapshotValidationError) as exc_info:
        parse_snapshot(seed)
    assert error_fields(exc_info.value) == ["lines[0].routes[0].stops[0].stop_order"]


def test_numeric_errors_collected_with_others(seed: dict[str, Any]) -> None:
    seed["stops"][0]["latitude"] = "north"
    seed["lines"][0]["display_order"] = "first"
    first_departures(seed)[0]["departure_time"] = "7:00"
    with pytest.raises(SnapshotValidationError) as exc_info:
        parse_snapshot(seed)
    assert len(exc_info.value.errors) == 3
