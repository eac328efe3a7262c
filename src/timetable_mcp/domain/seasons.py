from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from timetable_mcp.domain.entities import Season
from timetable_mcp.domain.exceptions import AmbiguousSeasonError


@dataclass(frozen=True)
class SeasonOverlap:
    """Two seasons of the same year whose intervals intersect."""

    year: int
    earlier: Season
    later: Season

    @property
    def message(self) -> str:
        return (
            f"Season overlap in {self.year}: {self.earlier.season_type.value} "
            f"(ends {self.earlier.date_to.isoformat()}) overlaps with "
            f"{self.later.season_type.value} (starts {self.later.date_from.isoformat()})"
        )


def resolve_season(catalogue: Iterable[Season], on_date: date) -> Season | None:
    """Return the season containing on_date, or None when no season covers it.

    Raises AmbiguousSeasonError when more than one season matches; the
    catalogue is expected to have passed validate_season_catalogue.
    """
    matches = [season for season in catalogue if season.contains(on_date)]
    if len(matches) > 1:
        raise AmbiguousSeasonError(on_date, matches)
    return matches[0] if matches else None


def validate_season_catalogue(catalogue: Iterable[Season]) -> list[SeasonOverlap]:
    """Return every overlap in the catalogue (empty list when valid).

    Seasons are grouped by year and sorted by start date; an adjacent pair
    overlaps when the earlier one ends on or after the day the later begins.
    Ending the day before the next begins is not an overlap.
    """
    by_year: dict[int, list[Season]] = defaultdict(list)
    for season in catalogue:
        by_year[season.year].append(season)

    overlaps: list[SeasonOverlap] = []
    for year in sorted(by_year):
        ordered = sorted(by_year[year], key=lambda s: (s.date_from, s.date_to))
        for current, following in zip(ordered, ordered[1:]):
            if current.date_to >= following.date_from:
                overlaps.append(SeasonOverlap(year=year, earlier=current, later=following))
    return overlaps
