import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, METHOD_NOT_FOUND, CallToolRequest, CallToolRequestParams, ListToolsRequest

from watchlater.models import ListingStrategy
from watchlater.config import ConfigError
from watchlater.server import WatchLaterServer, create_server, main, watch_later_tool


@pytest.fixture
def server(mock_youtube):
    return WatchLaterServer(mock_youtube, ListingStrategy.discover())


def test_tool_definition():
    tool = watch_later_tool()
    assert tool.name == "get_watch_later_urls"
    assert tool.description == "Get URLs of videos added to Watch Later within specified days"
    days_back = tool.inputSchema["properties"]["daysBack"]
    assert days_back["type"] == "number"
    assert days_back["default"] == 1
    assert "required" not in tool.inputSchema


@pytest.mark.asyncio
async def test_unknown_tool_is_method_not_found(server):
    with pytest.raises(McpError) as exc_info:
        await server.call_tool("delete_everything", {})
    assert exc_info.value.error.code == METHOD_NOT_FOUND
    assert exc_info.value.error.message == "Unknown tool: delete_everything"


@pytest.mark.asyncio
async def test_call_tool_returns_json_urls(server, mock_youtube, make_item):
    added = datetime.now(timezone.utc) - timedelta(hours=1)
    mock_youtube.playlistItems().list().execute.return_value = {
        "items": [make_item("vid1", added.isoformat().replace("+00:00", "Z"))]
    }

    result = await server.call_tool("get_watch_later_urls", {"daysBack": "a week"})

    assert len(result.content) == 1
    assert result.content[0].type == "text"
    assert json.loads(result.content[0].text) == ["https://youtube.com/watch?v=vid1"]
    assert result.content[0].text == json.dumps(["https://youtube.com/watch?v=vid1"], indent=2)


@pytest.mark.asyncio
async def test_downstream_failure_is_internal_error(server, mock_youtube):
    mock_youtube.channels().list().execute.side_effect = OSError("Network is unreachable")

    with pytest.raises(McpError) as exc_info:
        await server.call_tool("get_watch_later_urls", {})

    assert exc_info.value.error.code == INTERNAL_ERROR
    assert exc_info.value.error.message == "Failed to get Watch Later URLs: Network is unreachable"


@pytest.mark.asyncio
async def test_missing_watch_later_is_internal_error(server, mock_youtube):
    mock_youtube.channels().list().execute.return_value = {"items": []}

    with pytest.raises(McpError) as exc_info:
        await server.call_tool("get_watch_later_urls", {"daysBack": 2})

    assert exc_info.value.error.code == INTERNAL_ERROR
    assert "Could not find Watch Later playlist" in exc_info.value.error.message


@pytest.mark.asyncio
async def test_registered_call_tool_handler(server, mock_youtube):
    handler = server.server.request_handlers[CallToolRequest]
    request = CallToolRequest(
        method="tools/call",
        params=CallToolRequestParams(name="get_watch_later_urls", arguments=None),
    )

    response = await handler(request)

    assert json.loads(response.root.content[0].text) == []


def test_create_server_requires_refresh_token(monkeypatch):
    monkeypatch.delenv("OAUTH_REFRESH_TOKEN")
    with pytest.raises(ConfigError):
        create_server()


def test_create_server_fixed_mode(monkeypatch):
    monkeypatch.setenv("PLAYLIST_MODE", "fixed")
    monkeypatch.setenv("PLAYLIST_ID", "PL42")
    monkeypatch.setattr("watchlater.server.get_youtube_client", MagicMock())

    server = create_server()

    assert server.strategy.playlist_id == "PL42"
    assert server.strategy.fixed_days_back == 7
    assert server.strategy.paginate


@pytest.mark.asyncio
async def test_list_tools_handler(server):
    handler = server.server.request_handlers[ListToolsRequest]

    response = await handler(ListToolsRequest(method="tools/list"))

    tools = response.root.tools
    assert [tool.name for tool in tools] == ["get_watch_later_urls"]
    assert tools[0].inputSchema["properties"]["daysBack"]["default"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("days_back", [1e6, 1e12, -1e12])
async def test_huge_days_back_does_not_escape(server, mock_youtube, make_item, days_back):
    mock_youtube.playlistItems().list().execute.return_value = {
        "items": [make_item("vid1", "2001-09-09T01:46:40Z")]
    }

    result = await server.call_tool("get_watch_later_urls", {"daysBack": days_back})

    expected = ["https://youtube.com/watch?v=vid1"] if days_back > 0 else []
    assert json.loads(result.content[0].text) == expected


def test_main_exits_cleanly_on_interrupt(monkeypatch):
    monkeypatch.setattr("watchlater.server.get_youtube_client", MagicMock())
    anyio_run = MagicMock(side_effect=KeyboardInterrupt)
    monkeypatch.setattr("watchlater.server.anyio.run", anyio_run)

    assert main() is None
    anyio_run.assert_called_once()


def test_main_fails_without_config(monkeypatch):
    monkeypatch.delenv("OAUTH_REFRESH_TOKEN")
    anyio_run = MagicMock()
    monkeypatch.setattr("watchlater.server.anyio.run", anyio_run)

    with pytest.raises(ConfigError):
        main()
    anyio_run.assert_not_called()
