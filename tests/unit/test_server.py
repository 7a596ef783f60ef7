"""Unit tests for the FastMCP wiring."""

from __future__ import annotations

import pytest
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from telegram_connector.core.exceptions import InvalidInputError, RateLimitedError
from telegram_connector.core.rate_limiter import RateLimiter
from telegram_connector.mcp.dispatcher import ToolDispatcher
from telegram_connector.mcp.server import _run_tool, build_server
from telegram_connector.mcp.tools import GenerateLinkRequest
from telegram_connector.telegram.types import Channel, SearchParams, SearchResult

TOOL_NAMES = {
    "check_mcp_status",
    "get_subscribed_channels",
    "get_channel_info",
    "generate_message_link",
    "open_message_in_telegram",
    "search_messages",
}


class StubProvider:
    async def search_messages(self, params: SearchParams) -> SearchResult:
        raise AssertionError("not expected")

    async def get_channel_info(self, identifier: str) -> Channel:
        return Channel(id=1, name="News")

    async def get_subscribed_channels(self, limit: int, offset: int) -> list[Channel]:
        return []

    async def is_connected(self) -> bool:
        return False


def _dispatcher(limiter: RateLimiter | None = None) -> ToolDispatcher:
    return ToolDispatcher(StubProvider(), limiter or RateLimiter(max_tokens=5, refill_rate=1.0))


class TestBuildServer:
    def test_returns_fastmcp(self) -> None:
        server = build_server(_dispatcher())
        assert isinstance(server, FastMCP)
        assert server.name == "telegram-mcp"
        assert server.instructions == "Telegram MCP Connector - Search Russian Telegram channels"

    @pytest.mark.asyncio
    async def test_registers_six_tools(self) -> None:
        tools = await build_server(_dispatcher()).list_tools()
        assert {t.name for t in tools} == TOOL_NAMES

    @pytest.mark.asyncio
    async def test_search_schema(self) -> None:
        tools = {t.name: t for t in await build_server(_dispatcher()).list_tools()}
        schema = tools["search_messages"].inputSchema
        assert set(schema["properties"]) == {"query", "channel_id", "hours_back", "limit"}
        assert schema["required"] == ["query"]

    @pytest.mark.asyncio
    async def test_link_schema_requires_ids(self) -> None:
        tools = {t.name: t for t in await build_server(_dispatcher()).list_tools()}
        schema = tools["generate_message_link"].inputSchema
        assert set(schema["required"]) == {"channel_id", "message_id"}


class TestRunTool:
    @pytest.mark.asyncio
    async def test_success_returns_json(self) -> None:
        request = GenerateLinkRequest(channel_id="123456789", message_id=42)
        data = await _run_tool("generate_message_link", _dispatcher().generate_message_link(request))
        assert data == {
            "channel_id": "123456789",
            "message_id": 42,
            "https_link": "https://t.me/c/123456789/42?single",
            "tg_protocol_link": "tg://resolve?channel=123456789&post=42&single",
        }

    @pytest.mark.asyncio
    async def test_domain_error_becomes_tool_error(self) -> None:
        async def failing() -> Channel:
            raise InvalidInputError("channel_id", "'abc' is not a valid number")

        with pytest.raises(ToolError, match="Invalid channel_id: 'abc' is not a valid number"):
            await _run_tool("generate_message_link", failing())

    @pytest.mark.asyncio
    async def test_rate_limit_becomes_tool_error(self) -> None:
        async def denied() -> Channel:
            raise RateLimitedError(3)

        with pytest.raises(ToolError, match="retry after 3 seconds"):
            await _run_tool("search_messages", denied())

    @pytest.mark.asyncio
    async def test_status_shape(self) -> None:
        data = await _run_tool("check_mcp_status", _dispatcher().check_mcp_status())
        assert data["telegram_connected"] is False
        assert data["rate_limiter_tokens"] == pytest.approx(5.0)
