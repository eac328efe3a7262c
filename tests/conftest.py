"""Shared pytest fixtures for the Vis Timetable MCP Server test suite."""
from __future__ import annotations

import copy
from datetime import date
from typing import Any

import pytest

from timetable_mcp.domain.entities import Holiday, HolidayCalendar, TimetableSnapshot
from timetable_mcp.infrastructure.snapshot_loader import parse_snapshot

_SEED: dict[str, Any] = {
    "stops": [
        {"id": "vis", "name_hr": "Vis", "name_en": "Vis", "transport_type": "road",
         "latitude": 43.061, "longitude": 16.183},
        {"id": "plisko", "name_hr": "Plisko Polje", "name_en": "Plisko Polje", "transport_type": "road"},
        {"id": "komiza", "name_hr": "Komiža", "name_en": "Komiza", "transport_type": "road"},
        {"id": "rukavac", "name_hr": "Rukavac", "name_en": "Rukavac", "transport_type": "road"},
        {"id": "vis-port", "name_hr": "Vis", "name_en": "Vis", "transport_type": "sea"},
        {"id": "split-port", "name_hr": "Split", "name_en": "Split", "transport_type": "sea"},
    ],
    "seasons": [
        {"id": "off-2026-a", "season_type": "OFF", "year": 2026,
         "date_from": "2026-01-01", "date_to": "2026-03-31", "label_hr": "Zima", "label_en": "Winter"},
        {"id": "pre-2026", "season_type": "PRE", "year": 2026,
         "date_from": "2026-04-01", "date_to": "2026-06-14", "label_hr": "Predsezona", "label_en": "Pre-season"},
        {"id": "high-2026", "season_type": "HIGH", "year": 2026,
         "date_from": "2026-06-15", "date_to": "2026-09-15", "label_hr": "Sezona", "label_en": "High season"},
        {"id": "post-2026", "season_type": "POST", "year": 2026,
         "date_from": "2026-09-16", "date_to": "2026-10-31", "label_hr": "Posezona", "label_en": "Post-season"},
        {"id": "off-2026-b", "season_type": "OFF", "year": 2026,
         "date_from": "2026-11-01", "date_to": "2026-12-31", "label_hr": "Zima", "label_en": "Winter"},
    ],
    "lines": [
        {
            "id": "rukavac",
            "transport_type": "road",
            "name_hr": "Vis - Rukavac",
            "name_en": "Vis - Rukavac",
            "display_order": 2,
            "routes": [
                {
                    "direction": 0,
                    "direction_label_hr": "Vis - Rukavac",
                    "direction_label_en": "Vis - Rukavac",
                    "stops": [{"stop_id": "vis", "stop_order": 1}, {"stop_id": "rukavac", "stop_order": 2}],
                    "typical_duration_minutes": 20,
                    "departures": [
                        {"day_type": "MON", "season_type": "HIGH", "departure_time": "07:00",
                         "stop_times": ["07:00", "07:20"]},
                        {"day_type": "PRAZNIK", "season_type": "HIGH", "departure_time": "07:00",
                         "stop_times": ["07:00", "07:20"], "marker": "NO_SERVICE"},
                    ],
                },
            ],
        },
        {
            "id": "vis-komiza",
            "transport_type": "road",
            "name_hr": "Vis - Komiža",
            "name_en": "Vis - Komiza",
            "display_order": 1,
            "subtype_hr": "Autobus",
            "subtype_en": "Bus",
            "contacts": [
                {"operator_hr": "Autotrans Vis", "operator_en": "Autotrans Vis",
                 "phone": "+385 21 711 000", "email": "info@example.hr", "website": "https://example.hr"},
            ],
            "routes": [
                {
                    "direction": 1,
                    "direction_label_hr": "Komiža - Vis",
                    "direction_label_en": "Komiza - Vis",
                    "stops": [
                        {"stop_id": "komiza", "stop_order": 1},
                        {"stop_id": "plisko", "stop_order": 2},
                        {"stop_id": "vis", "stop_order": 3},
                    ],
                    "typical_duration_minutes": 30,
                    "departures": [
                        {"day_type": "MON", "season_type": "HIGH", "departure_time": "08:00",
                         "stop_times": ["08:00", "08:15", "08:30"]},
                        {"day_type": "WED", "season_type": "HIGH", "departure_time": "12:00",
                         "stop_times": ["12:00", "12:15", "12:30"]},
                    ],
                },
                {
                    "direction": 0,
                    "direction_label_hr": "Vis - Komiža",
                    "direction_label_en": "Vis - Komiza",
                    "origin_stop_id": "vis",
                    "destination_stop_id": "komiza",
                    "stops": [
                        {"stop_id": "plisko", "stop_order": 2},
                        {"stop_id": "vis", "stop_order": 1},
                        {"stop_id": "komiza", "stop_order": 3},
                    ],
                    "typical_duration_minutes": 25,
                    "marker_note_hr": "* vozi samo školskim danima",
                    "marker_note_en": "* school days only",
                    "departures": [
                        {"day_type": "MON", "season_type": "HIGH", "departure_time": "15:30",
                         "stop_times": ["15:30", "15:40", "15:55"]},
                        {"day_type": "MON", "season_type": "HIGH", "departure_time": "07:00",
                         "stop_times": ["07:00", None, "07:25"]},
                        {"day_type": "MON", "season_type": "HIGH", "departure_time": "10:00",
                         "stop_times": ["10:00", "10:05–10:10", "10:25"],
                         "exclude_dates": ["2026-08-10"], "notes_hr": "Ne vozi 10.8.", "notes_en": "Not on 10 Aug"},
                        {"day_type": "PRAZNIK", "season_type": "HIGH", "departure_time": "09:00",
                         "stop_times": ["09:00", "09:10", "09:25"]},
                        {"day_type": "WED", "season_type": "HIGH", "departure_time": "08:00",
                         "stop_times": ["08:00", "08:10", "08:25"]},
                        {"day_type": "SUN", "season_type": "OFF", "departure_time": "16:30",
                         "stop_times": ["16:30", "16:40", "16:55"]},
                    ],
                },
            ],
        },
        {
            "id": "vis-split",
            "transport_type": "sea",
            "name_hr": "Vis - Split",
            "name_en": "Vis - Split",
            "display_order": 1,
            "subtype_hr": "Trajekt",
            "subtype_en": "Ferry",
            "routes": [
                {
                    "direction": 0,
                    "direction_label_hr": "Vis - Split",
                    "stops": [{"stop_id": "vis-port", "stop_order": 1}, {"stop_id": "split-port", "stop_order": 2}],
                    "typical_duration_minutes": 140,
                    "departures": [
                        {"day_type": "MON", "season_type": "HIGH", "departure_time": "05:30",
                         "stop_times": ["05:30", "07:50"]},
                    ],
                },
                {
                    "direction": 1,
                    "direction_label_hr": "Split - Vis",
                    "stops": [{"stop_id": "split-port", "stop_order": 1}, {"stop_id": "vis-port", "stop_order": 2}],
                    "typical_duration_minutes": 140,
                    "departures": [
                        {"day_type": "MON", "season_type": "HIGH", "departure_time": "09:00",
                         "stop_times": ["09:00", "11:20"]},
                    ],
                },
            ],
        },
        {
            "id": "old-line",
            "transport_type": "road",
            "name_hr": "Stara linija",
            "display_order": 9,
            "is_active": False,
            "routes": [],
        },
    ],
}


@pytest.fixture
def seed() -> dict[str, Any]:
    """Seed document in the import format; safe to mutate per test."""
    return copy.deepcopy(_SEED)


@pytest.fixture
def snapshot(seed: dict[str, Any]) -> TimetableSnapshot:
    return parse_snapshot(seed)


@pytest.fixture
def holiday_calendar() -> HolidayCalendar:
    holidays = [
        Holiday(date(2026, 1, 6), "Sveta tri kralja", "Epiphany"),
        Holiday(date(2026, 4, 5), "Uskrs", "Easter Sunday"),
        Holiday(date(2026, 8, 5), "Dan pobjede i domovinske zahvalnosti", "Victory Day"),
    ]
    return HolidayCalendar(timezone="Europe/Zagreb", holidays={h.date: h for h in holidays})
