from __future__ import annotations

import json
import logging
from datetime import date

import httpx
from mcp import types
from mcp.server.fastmcp import FastMCP

from timetable_mcp.application.timetable_service import TimetableService
from timetable_mcp.domain.exceptions import (
    ApiError,
    DataIntegrityError,
    InvalidTransportTypeError,
    LineNotFoundError,
    RouteNotFoundError,
    ValidationError,
)
from timetable_mcp.domain.value_objects import Language, TransportType
from timetable_mcp.infrastructure.time_utils import parse_civil_date

logger = logging.getLogger(__name__)

_RESULT_URI = "mcp://timetable-mcp/result"


def _as_resource(json_str: str) -> list[types.EmbeddedResource]:
    """Wrap a JSON string as an embedded resource so the LLM does not narrate it."""
    return [
        types.EmbeddedResource(
            type="resource",
            resource=types.TextResourceContents(
                uri=_RESULT_URI,  # type: ignore[arg-type]
                mimeType="application/json",
                text=json_str,
            ),
        )
    ]


def _error_json(message: str) -> str:
    return json.dumps({"error": message}, ensure_ascii=False)


def _result_json(result: object) -> list[types.EmbeddedResource]:
    return _as_resource(json.dumps(result, default=str, ensure_ascii=False))


def _handle_exception(exc: Exception) -> list[types.EmbeddedResource]:
    if isinstance(exc, (LineNotFoundError, RouteNotFoundError)):
        return _as_resource(_error_json(str(exc)))
    if isinstance(exc, ValidationError):
        return _as_resource(_error_json(str(exc)))
    if isinstance(exc, DataIntegrityError):
        logger.exception("Timetable data rejected: %s", exc)
        return _as_resource(_error_json(f"Timetable data is inconsistent: {exc}"))
    if isinstance(exc, ApiError):
        if exc.status_code == 404:
            return _as_resource(_error_json("Timetable source not found."))
        if exc.status_code >= 500:
            return _as_resource(
                _error_json(f"Upstream API error ({exc.status_code}). Please try again later.")
            )
        return _as_resource(_error_json(str(exc)))
    if isinstance(exc, httpx.TimeoutException):
        return _as_resource(_error_json("Request timed out. Please try again."))
    if isinstance(exc, ValueError):
        return _as_resource(_error_json(str(exc)))
    logger.exception("Unexpected error in MCP tool: %s", exc)
    return _as_resource(_error_json("An unexpected error occurred."))


def _parse_date_str(date_str: str | None) -> date | None:
    if date_str is None:
        return None
    return parse_civil_date(date_str)


def _validate_transport_type(transport_type: str) -> TransportType:
    value = transport_type.strip().lower()
    if value not in {t.value for t in TransportType}:
        raise InvalidTransportTypeError(f"Unknown transport type: {transport_type}")
    return TransportType(value)


def _validate_language(language: str) -> Language:
    value = language.strip().lower()
    if value not in {lang.value for lang in Language}:
        raise ValueError(f"Unsupported language: {language}")
    return Language(value)


def _validate_line_id(line_id: str) -> str:
    if not line_id.strip():
        raise ValueError("line_id cannot be empty")
    return line_id.strip()


def register_tools(mcp: FastMCP, timetable_svc: TimetableService) -> None:
    """Bind all @mcp.tool decorators. Called once during server setup."""

    @mcp.tool()
    async def list_lines(
        transport_type: str = "road",
        language: str = "hr",
    ) -> list[types.EmbeddedResource]:
        """List active lines of a transport category in display order.

        Args:
            transport_type: "road" (bus) or "sea" (ferry / catamaran).
            language: "hr" (default) or "en".
        """
        try:
            lines = await timetable_svc.list_lines(
                _validate_transport_type(transport_type), _validate_language(language)
            )
            return _result_json({"lines": lines, "count": len(lines)})
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def get_line(
        line_id: str,
        transport_type: str = "road",
        language: str = "hr",
    ) -> list[types.EmbeddedResource]:
        """Get a line with both routes, their ordered stops and operator contacts.

        Args:
            line_id: Line ID obtained from list_lines.
            transport_type: "road" or "sea".
            language: "hr" (default) or "en".
        """
        try:
            result = await timetable_svc.get_line(
                _validate_line_id(line_id),
                _validate_transport_type(transport_type),
                _validate_language(language),
            )
            return _result_json(result)
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def get_departures(
        line_id: str,
        transport_type: str = "road",
        date_str: str | None = None,
        direction: int = 0,
        language: str = "hr",
    ) -> list[types.EmbeddedResource]:
        """Get the departures of one line direction on a date, with projected stop times.

        Args:
            line_id: Line ID obtained from list_lines.
            transport_type: "road" or "sea".
            date_str: Civil date as YYYY-MM-DD in Europe/Zagreb, e.g. "2026-08-05".
                      Defaults to today when omitted.
            direction: 0 (outbound) or 1 (return).
            language: "hr" (default) or "en".
        """
        try:
            result = await timetable_svc.get_route_departures(
                line_id=_validate_line_id(line_id),
                transport_type=_validate_transport_type(transport_type),
                on_date=_parse_date_str(date_str),
                direction=direction,
                language=_validate_language(language),
            )
            result["count"] = len(result["departures"])
            return _result_json(result)
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def get_today_departures(
        transport_type: str = "road",
        date_str: str | None = None,
        language: str = "hr",
    ) -> list[types.EmbeddedResource]:
        """Get every departure leaving the island (Vis or Komiža) on a date, across all lines.

        Args:
            transport_type: "road" or "sea".
            date_str: Civil date as YYYY-MM-DD in Europe/Zagreb. Defaults to today.
            language: "hr" (default) or "en".
        """
        try:
            result = await timetable_svc.get_today_departures(
                transport_type=_validate_transport_type(transport_type),
                on_date=_parse_date_str(date_str),
                language=_validate_language(language),
            )
            result["count"] = len(result["departures"])
            return _result_json(result)
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def get_line_contacts(
        line_id: str,
        transport_type: str = "road",
        language: str = "hr",
    ) -> list[types.EmbeddedResource]:
        """Get operator contacts (phone, email, website) for a line.

        Args:
            line_id: Line ID obtained from list_lines.
            transport_type: "road" or "sea".
            language: "hr" (default) or "en".
        """
        try:
            result = await timetable_svc.get_line_contacts(
                _validate_line_id(line_id),
                _validate_transport_type(transport_type),
                _validate_language(language),
            )
            return _result_json(result)
        except Exception as exc:
            return _handle_exception(exc)
