from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo

from timetable_mcp.domain.value_objects import HolidayPolicy
from timetable_mcp.infrastructure.holidays import DEFAULT_HOLIDAYS_PATH


@dataclass(frozen=True)
class Settings:
    """Runtime configuration read from environment variables."""

    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    snapshot_path: Path | None = None
    snapshot_url: str | None = None
    snapshot_ttl: int = 300  # seconds
    timezone: str = "Europe/Zagreb"
    holidays_path: Path = DEFAULT_HOLIDAYS_PATH
    holiday_policy: HolidayPolicy = HolidayPolicy.REPLACE

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = os.environ) -> Settings:
        """Build settings from the environment.

        TIMETABLE_SNAPSHOT_URL takes precedence over TIMETABLE_SNAPSHOT_PATH.
        Raises ValueError for an unknown TIMETABLE_HOLIDAY_POLICY.
        """
        path = environ.get("TIMETABLE_SNAPSHOT_PATH")
        holidays = environ.get("TIMETABLE_HOLIDAYS_PATH")
        policy = environ.get("TIMETABLE_HOLIDAY_POLICY", HolidayPolicy.REPLACE.value).lower()
        return cls(
            host=environ.get("HOST", "0.0.0.0"),
            port=int(environ.get("PORT", "3001")),
            log_level=environ.get("LOG_LEVEL", "INFO").upper(),
            snapshot_path=Path(path) if path else None,
            snapshot_url=environ.get("TIMETABLE_SNAPSHOT_URL") or None,
            snapshot_ttl=int(environ.get("TIMETABLE_SNAPSHOT_TTL", "300")),
            timezone=environ.get("TIMETABLE_TIMEZONE", "Europe/Zagreb"),
            holidays_path=Path(holidays) if holidays else DEFAULT_HOLIDAYS_PATH,
            holiday_policy=HolidayPolicy(policy),
        )
