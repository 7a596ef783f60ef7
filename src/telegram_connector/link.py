"""Deep links to a single Telegram channel message."""

from __future__ import annotations

from dataclasses import dataclass

from telegram_connector.telegram.types import ChannelId, MessageId

_HTTPS_TEMPLATE = "https://t.me/c/{channel_id}/{message_id}?single"
_TG_TEMPLATE = "tg://resolve?channel={channel_id}&post={message_id}&single"


@dataclass(frozen=True)
class MessageLink:
    channel_id: ChannelId
    message_id: MessageId
    https_link: str
    tg_protocol_link: str

    @classmethod
    def create(cls, channel_id: ChannelId, message_id: MessageId) -> MessageLink:
        fmt = {"channel_id": channel_id.value, "message_id": message_id.value}
        return cls(
            channel_id=channel_id,
            message_id=message_id,
            https_link=_HTTPS_TEMPLATE.format(**fmt),
            tg_protocol_link=_TG_TEMPLATE.format(**fmt),
        )
