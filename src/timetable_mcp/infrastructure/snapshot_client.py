from __future__ import annotations

from typing import Any

import httpx

from timetable_mcp.domain.exceptions import ApiError

DEFAULT_TIMEOUT = 15.0  # seconds


class SnapshotClient:
    """HTTP client for a published timetable seed document.

    The surrounding system exports its timetable tables as one seed JSON
    document; this client only reads it.
    """

    def __init__(self, url: str, http_client: httpx.AsyncClient) -> None:
        self._url = url
        self._http = http_client

    @property
    def url(self) -> str:
        return self._url

    async def fetch(self) -> dict[str, Any]:
        """GET the seed document. Raises ApiError on non-2xx status."""
        response = await self._http.get(self._url, headers={"Accept": "application/json"})
        self._raise_for_status(response)
        data: dict[str, Any] = response.json()
        return data

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.status_code == 404:
            raise ApiError(404, f"Timetable snapshot not found (404): {response.url}")
        if response.status_code >= 400:
            raise ApiError(response.status_code)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()
