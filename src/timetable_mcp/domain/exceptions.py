from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from timetable_mcp.domain.entities import Season
    from timetable_mcp.domain.seasons import SeasonOverlap


class TimetableError(Exception):
    """Base exception for all timetable engine errors."""


class ValidationError(TimetableError, ValueError):
    """Raised when caller input fails validation before any resolution."""


class InvalidDateError(ValidationError):
    """Raised for a date string that is not a valid YYYY-MM-DD civil date."""


class InvalidDirectionError(ValidationError):
    """Raised when a route direction is anything other than 0 or 1."""


class InvalidTransportTypeError(ValidationError):
    """Raised for an unknown transport category."""


class LineNotFoundError(TimetableError):
    """Raised when a line id does not exist for the requested transport type."""


class RouteNotFoundError(TimetableError):
    """Raised when a line has no route for the requested direction."""


class DataIntegrityError(TimetableError):
    """Raised when the loaded reference data breaks one of its invariants."""


class SeasonOverlapError(DataIntegrityError):
    """Raised when the season catalogue contains overlapping intervals."""

    def __init__(self, overlaps: Sequence[SeasonOverlap]) -> None:
        self.overlaps = list(overlaps)
        super().__init__("; ".join(o.message for o in self.overlaps))


class AmbiguousSeasonError(DataIntegrityError):
    """Raised when a date falls into more than one season at query time."""

    def __init__(self, on_date: object, seasons: Sequence[Season]) -> None:
        self.on_date = on_date
        self.seasons = list(seasons)
        names = ", ".join(f"{s.season_type.value} ({s.id})" for s in self.seasons)
        super().__init__(f"Date {on_date} matches more than one season: {names}")


class SnapshotValidationError(DataIntegrityError):
    """Raised when seed data fails load-time validation.

    Carries every problem found, as (field, message) pairs.
    """

    def __init__(self, errors: Sequence[tuple[str, str]]) -> None:
        self.errors = list(errors)
        summary = "; ".join(f"{f}: {m}" for f, m in self.errors[:5])
        more = f" (+{len(self.errors) - 5} more)" if len(self.errors) > 5 else ""
        super().__init__(f"Invalid timetable snapshot: {summary}{more}")


class ApiError(TimetableError):
    """Raised when the snapshot source returns an unexpected HTTP error status."""

    def __init__(self, status_code: int, message: str = "") -> None:
        self.status_code = status_code
        super().__init__(message or f"Upstream API error ({status_code})")
