"""
Request/response contracts for the six MCP tools.

Requests mirror the tool arguments an MCP client sends; responses are
serialised with ``model_dump(mode="json")`` so keys stay snake_case and
datetimes become ISO-8601 strings.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from telegram_connector.telegram.types import Channel

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class GetChannelsRequest(BaseModel):
    """Page through the account's subscribed channels."""

    limit: int | None = Field(None, ge=0, description="Maximum channels to return (default 20)")
    offset: int | None = Field(None, ge=0, description="Number of channels to skip (default 0)")


class GetChannelInfoRequest(BaseModel):
    """Look up one channel."""

    channel_identifier: str = Field(
        ..., description="Channel @username, bare username, or numeric ID"
    )


class GenerateLinkRequest(BaseModel):
    """Build deep links for a single message."""

    channel_id: str = Field(..., description="Numeric channel ID")
    message_id: int = Field(..., description="Message ID inside the channel")
    include_tg_protocol: bool | None = Field(
        None, description="Also return the tg:// link (default true)"
    )


class OpenMessageRequest(BaseModel):
    """Open a message in the desktop Telegram app."""

    channel_id: str = Field(..., description="Numeric channel ID")
    message_id: int = Field(..., description="Message ID inside the channel")
    use_tg_protocol: bool | None = Field(
        None, description="Open the tg:// link instead of https (default true)"
    )


class SearchRequest(BaseModel):
    """Search recent channel messages."""

    query: str = Field(..., description="Text to search for")
    channel_id: str | None = Field(None, description="Restrict the search to one channel ID")
    hours_back: int | None = Field(
        None, description="How far back to search in hours (default 48, max 72)"
    )
    limit: int | None = Field(None, description="Maximum messages to return (default 20, max 100)")


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class StatusResponse(BaseModel):
    telegram_connected: bool
    rate_limiter_tokens: float
    server_version: str


class ChannelsResponse(BaseModel):
    channels: list[Channel]
    total: int
    has_more: bool


class MessageLinkResponse(BaseModel):
    channel_id: str
    message_id: int
    https_link: str
    tg_protocol_link: str | None = None


class OpenMessageResponse(BaseModel):
    success: bool
    message: str
    link_used: str
    app_opened: bool
