from __future__ import annotations

import httpx
from mcp.server.fastmcp import FastMCP

from timetable_mcp.application.timetable_service import TimetableService
from timetable_mcp.infrastructure.cache import SnapshotCache
from timetable_mcp.infrastructure.holidays import load_holiday_calendar
from timetable_mcp.infrastructure.settings import Settings
from timetable_mcp.infrastructure.snapshot_client import DEFAULT_TIMEOUT, SnapshotClient
from timetable_mcp.infrastructure.snapshot_provider import SnapshotProvider
from timetable_mcp.mcp.resources import register_resources
from timetable_mcp.mcp.tools import register_tools


def create_mcp_app(settings: Settings | None = None) -> FastMCP:
    """Create and configure the FastMCP application with all services wired."""
    settings = settings or Settings.from_env()
    cache = SnapshotCache(ttl=settings.snapshot_ttl)
    client = None
    if settings.snapshot_url:
        http_client = httpx.AsyncClient(timeout=DEFAULT_TIMEOUT, follow_redirects=True)
        client = SnapshotClient(settings.snapshot_url, http_client)
    provider = SnapshotProvider(cache, path=settings.snapshot_path, client=client)

    calendar = load_holiday_calendar(settings.holidays_path)
    timetable_svc = TimetableService(
        provider, calendar, policy=settings.holiday_policy, tz=settings.tz
    )

    mcp = FastMCP("Vis Timetable MCP", stateless_http=True)
    register_tools(mcp, timetable_svc)
    register_resources(mcp, timetable_svc)
    return mcp
