"""
Telethon-backed Telegram data provider.

Uses an MTProto *user* session (not a bot): searching channel history and
listing subscribed dialogs are not available through the Bot API.

Session:
  The StringSession produced by ``telegram-connector login`` is loaded from
  ``[telegram].session_file``.  Without a valid session the provider still
  connects, but ``is_connected()`` reports False and every data call fails.

Search:
  1. cutoff = now - hours_back
  2. channels = the requested channel, or every subscribed channel
  3. per channel: server-side text search, newest first, stop at cutoff
  4. merge, sort newest first, truncate to ``limit``

Telethon objects never leave this module; the ``*_from_*`` converters turn
them into domain types.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime, timedelta
from typing import Any

import structlog

from telegram_connector.core.config import TelegramConfig
from telegram_connector.core.exceptions import InvalidInputError, UpstreamError
from telegram_connector.telegram.types import (
    Channel,
    ChannelId,
    MediaType,
    Message,
    QueryMetadata,
    SearchParams,
    SearchResult,
    Username,
)

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Identifier parsing and conversion (pure, no network)
# ---------------------------------------------------------------------------


def parse_channel_identifier(raw: str) -> ChannelId | Username:
    """Interpret ``@name``, ``name`` or a numeric string as a channel reference."""
    identifier = raw.strip()
    if not identifier:
        raise InvalidInputError("channel_identifier", "cannot be empty")
    if identifier.startswith("@"):
        return Username.parse(identifier)
    if identifier.lstrip("+-").isdigit():
        return ChannelId.parse(identifier)
    return Username(identifier)


def _safe_username(value: str | None) -> str | None:
    if not value:
        return None
    try:
        return Username(value).value
    except InvalidInputError:
        return None


def channel_from_entity(
    entity: Any,
    *,
    is_subscribed: bool,
    description: str | None = None,
    member_count: int | None = None,
) -> Channel:
    """Convert a Telethon ``Channel`` entity into a domain :class:`Channel`."""
    username = _safe_username(getattr(entity, "username", None))
    if member_count is None:
        member_count = getattr(entity, "participants_count", None)
    return Channel(
        id=entity.id,
        name=(getattr(entity, "title", None) or "").strip() or str(entity.id),
        username=username,
        description=description,
        member_count=member_count or 0,
        is_verified=bool(getattr(entity, "verified", False)),
        is_public=username is not None,
        is_subscribed=is_subscribed,
    )


def media_type_of(msg: Any) -> MediaType:
    if getattr(msg, "gif", None) is not None:
        return MediaType.ANIMATION
    if getattr(msg, "photo", None) is not None:
        return MediaType.PHOTO
    if getattr(msg, "video", None) is not None:
        return MediaType.VIDEO
    if getattr(msg, "audio", None) is not None or getattr(msg, "voice", None) is not None:
        return MediaType.AUDIO
    if getattr(msg, "document", None) is not None:
        return MediaType.DOCUMENT
    return MediaType.NONE


def message_from_telethon(msg: Any, channel: Channel) -> Message:
    """Convert a Telethon ``Message`` into a domain :class:`Message`."""
    sender_id = getattr(msg, "sender_id", None)
    timestamp: datetime = msg.date
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return Message(
        id=msg.id,
        channel_id=channel.id,
        channel_name=channel.name,
        channel_username=channel.username,
        text=getattr(msg, "message", None) or "",
        timestamp=timestamp,
        # Channel posts carry the (negative) channel peer as sender.
        sender_id=sender_id if isinstance(sender_id, int) and sender_id > 0 else None,
        sender_name=getattr(msg, "post_author", None),
        has_media=getattr(msg, "media", None) is not None,
        media_type=media_type_of(msg),
    )


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------


class TelethonProvider:
    """
    DataProvider implementation over a Telethon ``TelegramClient``.

    Requires:
      api_id, api_hash — from https://my.telegram.org
      session          — StringSession text saved by ``telegram-connector login``
    """

    def __init__(self, config: TelegramConfig, session: str = "") -> None:
        self._config = config
        self._session = session
        self._client: Any = None  # telethon.TelegramClient, set by connect()

    async def connect(self) -> None:
        try:
            from telethon import TelegramClient
            from telethon.sessions import StringSession
        except ImportError as exc:
            raise RuntimeError(
                "telethon is required for the Telegram provider. Install with: pip install telethon"
            ) from exc

        self._client = TelegramClient(
            StringSession(self._session or None),
            self._config.api_id,
            self._config.api_hash.get_secret_value(),
        )
        await self._client.connect()
        logger.info("telegram_connected", api_id=self._config.api_id)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.disconnect()
            self._client = None
        logger.info("telegram_closed")

    def _require_client(self) -> Any:
        if self._client is None:
            raise UpstreamError("Telegram client is not connected")
        return self._client

    # ------------------------------------------------------------------
    # DataProvider
    # ------------------------------------------------------------------

    async def is_connected(self) -> bool:
        if self._client is None or not self._client.is_connected():
            return False
        try:
            return bool(await self._client.is_user_authorized())
        except Exception as exc:  # noqa: BLE001
            logger.warning("telegram_auth_check_failed", error=str(exc))
            return False

    async def get_subscribed_channels(self, limit: int, offset: int) -> list[Channel]:
        channels = await self._subscribed_channels()
        return channels[offset : offset + limit]

    async def get_channel_info(self, identifier: str) -> Channel:
        ref = parse_channel_identifier(identifier)
        entity = await self._resolve(ref)

        from telethon.tl.functions.channels import GetFullChannelRequest

        client = self._require_client()
        full = await client(GetFullChannelRequest(entity))
        subscribed = not bool(getattr(entity, "left", True))
        return channel_from_entity(
            entity,
            is_subscribed=subscribed,
            description=getattr(full.full_chat, "about", None) or None,
            member_count=getattr(full.full_chat, "participants_count", None),
        )

    async def search_messages(self, params: SearchParams) -> SearchResult:
        client = self._require_client()
        started = time.monotonic()
        cutoff = datetime.now(UTC) - timedelta(hours=params.hours_back)

        if params.channel_id is not None:
            entity = await self._resolve(params.channel_id)
            targets = [(entity, channel_from_entity(entity, is_subscribed=True))]
        else:
            targets = await self._subscribed_targets()

        found: list[Message] = []
        for entity, channel in targets:
            async for msg in client.iter_messages(entity, search=params.query, limit=params.limit):
                if msg.date < cutoff:
                    break
                found.append(message_from_telethon(msg, channel))

        found.sort(key=lambda m: m.timestamp, reverse=True)
        elapsed_ms = int((time.monotonic() - started) * 1000)

        logger.info(
            "telegram_search_completed",
            channels=len(targets),
            found=len(found),
            elapsed_ms=elapsed_ms,
        )

        return SearchResult(
            messages=found[: params.limit],
            total_found=len(found),
            search_time_ms=elapsed_ms,
            query_metadata=QueryMetadata(
                query=params.query,
                hours_back=params.hours_back,
                channels_searched=len(targets),
            ),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _subscribed_targets(self) -> list[tuple[Any, Channel]]:
        client = self._require_client()
        targets: list[tuple[Any, Channel]] = []
        async for dialog in client.iter_dialogs():
            if not dialog.is_channel:
                continue
            entity = dialog.entity
            channel = channel_from_entity(entity, is_subscribed=True)
            if dialog.date is not None:
                channel = channel.model_copy(update={"last_message_date": dialog.date})
            targets.append((entity, channel))
        return targets

    async def _subscribed_channels(self) -> list[Channel]:
        return [channel for _, channel in await self._subscribed_targets()]

    async def _resolve(self, ref: ChannelId | Username) -> Any:
        client = self._require_client()
        if isinstance(ref, Username):
            return await client.get_entity(ref.value)

        from telethon.tl.types import PeerChannel

        return await client.get_entity(PeerChannel(ref.value))
