from __future__ import annotations

import time

from timetable_mcp.domain.entities import TimetableSnapshot


class SnapshotCache:
    """Single-slot TTL holder for the current timetable snapshot.

    The snapshot is replaced wholesale; readers keep whatever reference they
    already obtained, so no locking is needed.
    """

    def __init__(self, ttl: int = 300) -> None:
        self._ttl = ttl
        self._snapshot: TimetableSnapshot | None = None
        self._expires_at = 0.0  # time.monotonic() deadline

    def get(self) -> TimetableSnapshot | None:
        """Return the snapshot, or None when missing or expired."""
        if self._snapshot is None or time.monotonic() > self._expires_at:
            return None
        return self._snapshot

    def stale(self) -> TimetableSnapshot | None:
        """Return the last snapshot stored, ignoring expiry."""
        return self._snapshot

    def set(self, snapshot: TimetableSnapshot) -> None:
        self._snapshot = snapshot
        self._expires_at = time.monotonic() + self._ttl

    def invalidate(self) -> None:
        """Force the next get() to miss while keeping the stale copy."""
        self._expires_at = 0.0
