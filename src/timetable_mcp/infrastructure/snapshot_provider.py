from __future__ import annotations

import logging
from pathlib import Path

from timetable_mcp.domain.entities import TimetableSnapshot
from timetable_mcp.domain.exceptions import DataIntegrityError, TimetableError
from timetable_mcp.infrastructure.cache import SnapshotCache
from timetable_mcp.infrastructure.snapshot_client import SnapshotClient
from timetable_mcp.infrastructure.snapshot_loader import load_snapshot_file, parse_snapshot

logger = logging.getLogger(__name__)


class SnapshotProvider:
    """Hands out the current snapshot, reloading it from its source on expiry.

    The source is either a seed JSON file or a SnapshotClient. A reload that
    fails validation keeps the previous snapshot in service; without one the
    error propagates.
    """

    def __init__(
        self,
        cache: SnapshotCache,
        path: Path | None = None,
        client: SnapshotClient | None = None,
    ) -> None:
        if path is None and client is None:
            raise TimetableError("A snapshot path or snapshot client is required")
        self._cache = cache
        self._path = path
        self._client = client

    async def get_snapshot(self) -> TimetableSnapshot:
        cached = self._cache.get()
        if cached is not None:
            return cached
        try:
            snapshot = await self._load()
        except DataIntegrityError:
            previous = self._cache.stale()
            if previous is None:
                raise
            logger.exception("Timetable reload rejected; keeping previous snapshot")
            self._cache.set(previous)
            return previous
        self._cache.set(snapshot)
        return snapshot

    async def _load(self) -> TimetableSnapshot:
        if self._client is not None:
            raw = await self._client.fetch()
            snapshot = parse_snapshot(raw)
            logger.info("Loaded timetable snapshot from %s", self._client.url)
            return snapshot
        if self._path is None:
            raise TimetableError("A snapshot path or snapshot client is required")
        return load_snapshot_file(self._path)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
