"""
FastMCP wiring for the tool dispatcher.

build_server() registers the six tools on a FastMCP instance; each tool
builds its request model, calls the dispatcher and returns the response as
plain JSON.  Domain errors surface to the MCP client as tool errors carrying
the exception message.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Any

import structlog
from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import BaseModel

from telegram_connector.core.constants import SERVER_INSTRUCTIONS, SERVER_NAME
from telegram_connector.core.exceptions import TelegramConnectorError
from telegram_connector.mcp.dispatcher import ToolDispatcher
from telegram_connector.mcp.tools import (
    GenerateLinkRequest,
    GetChannelInfoRequest,
    GetChannelsRequest,
    OpenMessageRequest,
    SearchRequest,
)

logger = structlog.get_logger()


async def _run_tool(name: str, call: Awaitable[BaseModel]) -> dict[str, Any]:
    try:
        result = await call
    except TelegramConnectorError as exc:
        logger.info("tool_failed", tool=name, error=str(exc))
        raise ToolError(str(exc)) from exc
    return result.model_dump(mode="json")


def build_server(dispatcher: ToolDispatcher) -> FastMCP:
    """Return a FastMCP server exposing *dispatcher* as MCP tools."""
    server = FastMCP(SERVER_NAME, instructions=SERVER_INSTRUCTIONS)

    @server.tool(
        name="check_mcp_status",
        description="Check Telegram connection status and remaining rate-limit tokens.",
    )
    async def check_mcp_status() -> dict[str, Any]:
        return await _run_tool("check_mcp_status", dispatcher.check_mcp_status())

    @server.tool(
        name="get_subscribed_channels",
        description="List the Telegram channels this account is subscribed to, with pagination.",
    )
    async def get_subscribed_channels(
        limit: int | None = None, offset: int | None = None
    ) -> dict[str, Any]:
        request = GetChannelsRequest(limit=limit, offset=offset)
        return await _run_tool(
            "get_subscribed_channels", dispatcher.get_subscribed_channels(request)
        )

    @server.tool(
        name="get_channel_info",
        description="Get details for a channel by @username, username, or numeric ID.",
    )
    async def get_channel_info(channel_identifier: str) -> dict[str, Any]:
        request = GetChannelInfoRequest(channel_identifier=channel_identifier)
        return await _run_tool("get_channel_info", dispatcher.get_channel_info(request))

    @server.tool(
        name="generate_message_link",
        description="Generate https:// and tg:// deep links to a channel message.",
    )
    async def generate_message_link(
        channel_id: str, message_id: int, include_tg_protocol: bool | None = None
    ) -> dict[str, Any]:
        request = GenerateLinkRequest(
            channel_id=channel_id,
            message_id=message_id,
            include_tg_protocol=include_tg_protocol,
        )
        return await _run_tool("generate_message_link", dispatcher.generate_message_link(request))

    @server.tool(
        name="open_message_in_telegram",
        description="Open a channel message in the Telegram desktop app (macOS only).",
    )
    async def open_message_in_telegram(
        channel_id: str, message_id: int, use_tg_protocol: bool | None = None
    ) -> dict[str, Any]:
        request = OpenMessageRequest(
            channel_id=channel_id,
            message_id=message_id,
            use_tg_protocol=use_tg_protocol,
        )
        return await _run_tool(
            "open_message_in_telegram", dispatcher.open_message_in_telegram(request)
        )

    @server.tool(
        name="search_messages",
        description=(
            "Search recent messages in subscribed channels (or one channel). "
            "hours_back defaults to 48 (max 72); limit defaults to 20 (max 100)."
        ),
    )
    async def search_messages(
        query: str,
        channel_id: str | None = None,
        hours_back: int | None = None,
        limit: int | None = None,
    ) -> dict[str, Any]:
        request = SearchRequest(
            query=query, channel_id=channel_id, hours_back=hours_back, limit=limit
        )
        return await _run_tool("search_messages", dispatcher.search_messages(request))

    return server


async def run_stdio(server: FastMCP) -> None:
    """Serve *server* over stdin/stdout until the client disconnects."""
    logger.info("mcp_server_starting", transport="stdio", name=SERVER_NAME)
    await server.run_stdio_async()
    logger.info("mcp_server_stopped")
