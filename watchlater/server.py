"""
YouTube Watch Later MCP server.

Exposes a single tool, ``get_watch_later_urls``, over MCP on stdio. The
YouTube client is built once at startup from a refresh token supplied in the
environment (see ``watchlater.main`` to obtain one).
"""

import json
import logging
from typing import Any

import anyio
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from mcp.types import (
    INTERNAL_ERROR,
    METHOD_NOT_FOUND,
    CallToolRequest,
    CallToolResult,
    ErrorData,
    ServerResult,
    TextContent,
    Tool,
)

from watchlater.config import configure_logging, load_credentials, load_listing_strategy, settings
from watchlater.models import ListingStrategy
from watchlater.services.youtube import fetch_recent_urls, get_youtube_client

logger = logging.getLogger(__name__)


def watch_later_tool() -> Tool:
    return Tool(
        name=settings.TOOL_NAME,
        description="Get URLs of videos added to Watch Later within specified days",
        inputSchema={
            "type": "object",
            "properties": {
                "daysBack": {
                    "type": "number",
                    "description": f"Number of days to look back (default: {settings.DEFAULT_DAYS_BACK})",
                    "default": settings.DEFAULT_DAYS_BACK,
                }
            },
        },
    )


class WatchLaterServer:
    """MCP server wrapping one YouTube client and one listing strategy."""

    def __init__(self, youtube, strategy: ListingStrategy):
        self.youtube = youtube
        self.strategy = strategy

        self.server = Server(settings.SERVER_NAME, version=settings.SERVER_VERSION)
        self._setup_handlers()

    def _setup_handlers(self):
        """Setup MCP tool handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return [watch_later_tool()]

        # Registered directly rather than through @call_tool(), which would
        # turn every exception into an isError result and hide the error code.
        async def call_tool(request: CallToolRequest) -> ServerResult:
            result = await self.call_tool(request.params.name, request.params.arguments or {})
            return ServerResult(result)

        self.server.request_handlers[CallToolRequest] = call_tool

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> CallToolResult:
        if name != settings.TOOL_NAME:
            raise McpError(ErrorData(code=METHOD_NOT_FOUND, message=f"Unknown tool: {name}"))
        return await self.get_watch_later_urls(arguments)

    async def get_watch_later_urls(self, arguments: dict[str, Any]) -> CallToolResult:
        result = fetch_recent_urls(self.youtube, self.strategy, arguments.get("daysBack"))
        if not result.ok:
            raise McpError(
                ErrorData(
                    code=INTERNAL_ERROR,
                    message=f"Failed to get Watch Later URLs: {result.message}",
                )
            )
        return CallToolResult(content=[TextContent(type="text", text=json.dumps(result.value, indent=2))])

    async def run(self):
        async with stdio_server() as (read_stream, write_stream):
            logger.info("YouTube Watch Later MCP server running on stdio")
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )


def create_server() -> WatchLaterServer:
    """Reads configuration and builds the server; missing settings raise ConfigError."""
    credentials = load_credentials(require_refresh_token=True)
    strategy = load_listing_strategy()
    youtube = get_youtube_client(credentials)
    return WatchLaterServer(youtube, strategy)


def main():
    configure_logging()
    server = create_server()
    try:
        anyio.run(server.run)
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


if __name__ == "__main__":
    main()
