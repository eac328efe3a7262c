#!/usr/bin/env python3
"""Vis Timetable MCP Server — repository root entry point.

Usage:
    TIMETABLE_SNAPSHOT_PATH=seed.json uv run server.py           # HTTP mode (default)
    TIMETABLE_SNAPSHOT_PATH=seed.json uv run server.py --stdio   # stdio mode for Claude Desktop
"""
from __future__ import annotations

import logging
import sys

import uvicorn
from starlette.middleware.cors import CORSMiddleware

from timetable_mcp.infrastructure.settings import Settings
from timetable_mcp.mcp import create_mcp_app

settings = Settings.from_env()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

if __name__ == "__main__":
    mcp = create_mcp_app(settings)
    if "--stdio" in sys.argv:
        # Claude Desktop mode
        mcp.run(transport="stdio")
    else:
        # HTTP mode with CORS
        app = mcp.streamable_http_app()
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )
        print(f"Vis Timetable MCP Server listening on http://{settings.host}:{settings.port}/mcp")
        uvicorn.run(app, host=settings.host, port=settings.port)
