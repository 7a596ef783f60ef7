"""
Tool dispatcher — one handler per MCP tool.

Every handler follows the same order:

  1. validate and normalise the request (InvalidInputError on failure)
  2. billable tools only: acquire credit from the shared rate limiter
  3. delegate to the DataProvider (or the OS link launcher)
  4. map the outcome to a response model

Nothing reaches the rate limiter or the provider until step 1 has passed,
and a denied acquisition never reaches the provider.  Credit spent on a
search is not returned if the provider then fails.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from telegram_connector import __version__
from telegram_connector.core.config import SearchConfig
from telegram_connector.core.constants import DEFAULT_CHANNELS_LIMIT, SEARCH_COST_TOKENS
from telegram_connector.core.exceptions import (
    InvalidInputError,
    RateLimitedError,
    TelegramConnectorError,
    UnsupportedError,
    UpstreamError,
)
from telegram_connector.core.rate_limiter import RateLimiting
from telegram_connector.link import MessageLink
from telegram_connector.mcp.tools import (
    ChannelsResponse,
    GenerateLinkRequest,
    GetChannelInfoRequest,
    GetChannelsRequest,
    MessageLinkResponse,
    OpenMessageRequest,
    OpenMessageResponse,
    SearchRequest,
    StatusResponse,
)
from telegram_connector.telegram.provider import DataProvider
from telegram_connector.telegram.types import (
    Channel,
    ChannelId,
    MessageId,
    SearchParams,
    SearchResult,
)

logger = structlog.get_logger()

T = TypeVar("T")

#: Opens a link in the desktop app; returns True when the app accepted it.
LinkLauncher = Callable[[str], Awaitable[bool]]


async def open_link(link: str) -> bool:
    """Hand *link* to macOS ``open``.  Other platforms raise UnsupportedError."""
    if sys.platform != "darwin":
        raise UnsupportedError("open_message_in_telegram is only supported on macOS")
    proc = await asyncio.create_subprocess_exec(
        "open",
        link,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.DEVNULL,
    )
    return await proc.wait() == 0


def _parse_link_ids(channel_id: str, message_id: int) -> MessageLink:
    return MessageLink.create(ChannelId.parse(channel_id), MessageId(message_id))


class ToolDispatcher:
    """
    Validates, rate-gates and delegates MCP tool calls.

    The provider and rate limiter are shared collaborators injected by the
    caller; the dispatcher holds no other state.
    """

    def __init__(
        self,
        provider: DataProvider,
        rate_limiter: RateLimiting,
        *,
        search: SearchConfig | None = None,
        launcher: LinkLauncher = open_link,
    ) -> None:
        self._provider = provider
        self._rate_limiter = rate_limiter
        self._search = search or SearchConfig()
        self._launcher = launcher

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    async def check_mcp_status(self) -> StatusResponse:
        logger.debug("tool_called", tool="check_mcp_status")
        connected = await self._delegate(self._provider.is_connected)
        return StatusResponse(
            telegram_connected=connected,
            rate_limiter_tokens=self._rate_limiter.available_tokens(),
            server_version=__version__,
        )

    async def get_subscribed_channels(self, request: GetChannelsRequest) -> ChannelsResponse:
        limit = request.limit if request.limit is not None else DEFAULT_CHANNELS_LIMIT
        offset = request.offset if request.offset is not None else 0
        logger.debug("tool_called", tool="get_subscribed_channels", limit=limit, offset=offset)

        channels = await self._delegate(
            lambda: self._provider.get_subscribed_channels(limit, offset)
        )
        return ChannelsResponse(
            channels=channels,
            total=len(channels),
            has_more=len(channels) >= limit,
        )

    async def get_channel_info(self, request: GetChannelInfoRequest) -> Channel:
        identifier = request.channel_identifier
        if not identifier.strip():
            raise InvalidInputError("channel_identifier", "cannot be empty")
        logger.debug("tool_called", tool="get_channel_info", identifier=identifier)
        return await self._delegate(lambda: self._provider.get_channel_info(identifier))

    async def generate_message_link(self, request: GenerateLinkRequest) -> MessageLinkResponse:
        link = _parse_link_ids(request.channel_id, request.message_id)
        include_tg = request.include_tg_protocol if request.include_tg_protocol is not None else True
        logger.debug("tool_called", tool="generate_message_link", channel_id=request.channel_id)
        return MessageLinkResponse(
            channel_id=request.channel_id,
            message_id=request.message_id,
            https_link=link.https_link,
            tg_protocol_link=link.tg_protocol_link if include_tg else None,
        )

    async def open_message_in_telegram(self, request: OpenMessageRequest) -> OpenMessageResponse:
        link = _parse_link_ids(request.channel_id, request.message_id)
        use_tg = request.use_tg_protocol if request.use_tg_protocol is not None else True
        target = link.tg_protocol_link if use_tg else link.https_link
        logger.debug("tool_called", tool="open_message_in_telegram", link=target)

        try:
            opened = await self._launcher(target)
        except UnsupportedError as exc:
            return OpenMessageResponse(
                success=False, message=str(exc), link_used=target, app_opened=False
            )
        except OSError as exc:
            logger.warning("open_link_failed", link=target, error=str(exc))
            return OpenMessageResponse(
                success=False,
                message=f"Failed to execute open command: {exc}",
                link_used=target,
                app_opened=False,
            )

        return OpenMessageResponse(
            success=opened,
            message="Message opened in Telegram" if opened else "Failed to open link",
            link_used=target,
            app_opened=opened,
        )

    async def search_messages(self, request: SearchRequest) -> SearchResult:
        if not request.query.strip():
            raise InvalidInputError("query", "search query cannot be empty")
        channel_id = ChannelId.parse(request.channel_id) if request.channel_id is not None else None
        params = SearchParams.build(
            request.query,
            channel_id=channel_id,
            hours_back=request.hours_back,
            limit=request.limit,
            default_hours_back=self._search.default_hours_back,
            default_limit=self._search.max_results_default,
            max_limit=self._search.max_results_limit,
        )

        try:
            self._rate_limiter.acquire(SEARCH_COST_TOKENS)
        except RateLimitedError as exc:
            logger.warning("rate_limit_denied", retry_after=exc.retry_after_seconds)
            raise

        logger.info(
            "tool_called",
            tool="search_messages",
            hours_back=params.hours_back,
            limit=params.limit,
            channel_id=int(channel_id) if channel_id else None,
        )
        return await self._delegate(lambda: self._provider.search_messages(params))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _delegate(self, call: Callable[[], Awaitable[T]]) -> T:
        """Await a provider call, wrapping foreign exceptions in UpstreamError."""
        try:
            return await call()
        except TelegramConnectorError:
            raise
        except Exception as exc:
            logger.warning("provider_call_failed", error=str(exc))
            raise UpstreamError(str(exc)) from exc
