"""
DataProvider — the Telegram capability the tool dispatcher delegates to.

Concrete implementations:
  TelethonProvider — MTProto user client via Telethon (telegram/client.py)

Implementations may raise any exception on failure; the dispatcher wraps
it in UpstreamError before it reaches the MCP client.
"""

from __future__ import annotations

from typing import Protocol

from telegram_connector.telegram.types import Channel, SearchParams, SearchResult


class DataProvider(Protocol):
    async def search_messages(self, params: SearchParams) -> SearchResult:
        """Search for messages matching *params*."""
        ...

    async def get_channel_info(self, identifier: str) -> Channel:
        """Resolve a channel by ``@username``, bare username, or numeric ID."""
        ...

    async def get_subscribed_channels(self, limit: int, offset: int) -> list[Channel]:
        """Return one page of the account's subscribed channels."""
        ...

    async def is_connected(self) -> bool:
        """Return True if the client is connected and authorised."""
        ...
