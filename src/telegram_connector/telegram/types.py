"""
Telegram domain types.

Value objects (ChannelId, MessageId, UserId, Username, ChannelName) reject
malformed input at construction, so anything holding one can trust it.
Entities (Channel, Message, SearchResult) are Pydantic models whose
identifier fields run through the same value objects and serialise to
plain JSON.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Annotated, ClassVar, Self

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from telegram_connector.core.constants import (
    DEFAULT_HOURS_BACK,
    DEFAULT_SEARCH_LIMIT,
    MAX_HOURS_BACK,
    MAX_SEARCH_LIMIT,
)
from telegram_connector.core.exceptions import InvalidInputError

_INT64_MAX = 2**63 - 1
_INT64_MIN = -(2**63)
_INTEGER_RE = re.compile(r"[+-]?\d+")
_USERNAME_RE = re.compile(r"[A-Za-z0-9_]{5,32}", re.ASCII)


# ---------------------------------------------------------------------------
# Identifier value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _PositiveId:
    value: int

    #: Field name used in error messages
    label: ClassVar[str] = "id"

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise InvalidInputError(self.label, f"expected an integer, got {self.value!r}")
        if not (_INT64_MIN <= self.value <= _INT64_MAX):
            raise InvalidInputError(self.label, f"{self.value} does not fit in 64 bits")
        if self.value <= 0:
            raise InvalidInputError(self.label, f"must be a positive integer, got {self.value}")

    @classmethod
    def parse(cls, raw: str) -> Self:
        """Parse a decimal string (as received at the tool boundary)."""
        text = raw if isinstance(raw, str) else str(raw)
        if not _INTEGER_RE.fullmatch(text):
            raise InvalidInputError(cls.label, f"'{text}' is not a valid number")
        number = int(text)
        if not (_INT64_MIN <= number <= _INT64_MAX):
            raise InvalidInputError(cls.label, f"'{text}' is not a valid number")
        return cls(number)

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


class ChannelId(_PositiveId):
    label = "channel_id"


class MessageId(_PositiveId):
    label = "message_id"


class UserId(_PositiveId):
    label = "user_id"


@dataclass(frozen=True)
class Username:
    """Telegram username: 5-32 characters of ``[A-Za-z0-9_]``."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise InvalidInputError("username", f"expected a string, got {self.value!r}")
        if not (5 <= len(self.value) <= 32):
            raise InvalidInputError(
                "username", f"length must be between 5 and 32, got {len(self.value)}"
            )
        if not _USERNAME_RE.fullmatch(self.value):
            raise InvalidInputError(
                "username", "only letters, digits and underscores are allowed"
            )

    @classmethod
    def parse(cls, raw: str) -> Username:
        """Accept ``@name`` or ``name``."""
        return cls(raw[1:] if raw.startswith("@") else raw)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ChannelName:
    """Channel display title, stored trimmed; never blank."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            raise InvalidInputError("channel_name", f"expected a string, got {self.value!r}")
        trimmed = self.value.strip()
        if not trimmed:
            raise InvalidInputError("channel_name", "cannot be empty")
        object.__setattr__(self, "value", trimmed)

    def __str__(self) -> str:
        return self.value


# Annotated field types: plain JSON on the wire, value-object rules on input.
ChannelIdField = Annotated[int, AfterValidator(lambda v: ChannelId(v).value)]
MessageIdField = Annotated[int, AfterValidator(lambda v: MessageId(v).value)]
UserIdField = Annotated[int, AfterValidator(lambda v: UserId(v).value)]
UsernameField = Annotated[str, AfterValidator(lambda v: Username(v).value)]
ChannelNameField = Annotated[str, AfterValidator(lambda v: ChannelName(v).value)]


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


class MediaType(StrEnum):
    NONE = "none"
    PHOTO = "photo"
    VIDEO = "video"
    DOCUMENT = "document"
    AUDIO = "audio"
    ANIMATION = "animation"


class Channel(BaseModel):
    """A Telegram broadcast channel or supergroup."""

    model_config = ConfigDict(frozen=True)

    id: ChannelIdField
    name: ChannelNameField
    username: UsernameField | None = None
    description: str | None = None
    member_count: int = Field(default=0, ge=0)
    is_verified: bool = False
    is_public: bool = False
    is_subscribed: bool = False
    last_message_date: datetime | None = None


class Message(BaseModel):
    """A single channel message returned by search."""

    model_config = ConfigDict(frozen=True)

    id: MessageIdField
    channel_id: ChannelIdField
    channel_name: ChannelNameField
    channel_username: UsernameField | None = None
    text: str
    timestamp: datetime
    sender_id: UserIdField | None = None
    sender_name: str | None = None
    has_media: bool = False
    media_type: MediaType = MediaType.NONE


class QueryMetadata(BaseModel):
    query: str
    hours_back: int
    channels_searched: int


class SearchResult(BaseModel):
    messages: list[Message] = Field(default_factory=list)
    total_found: int = 0
    search_time_ms: int = 0
    query_metadata: QueryMetadata


# ---------------------------------------------------------------------------
# Search parameters
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SearchParams:
    """Validated, clamped search request handed to the provider."""

    query: str
    channel_id: ChannelId | None = None
    hours_back: int = DEFAULT_HOURS_BACK
    limit: int = DEFAULT_SEARCH_LIMIT

    DEFAULT_HOURS_BACK: ClassVar[int] = DEFAULT_HOURS_BACK
    MAX_HOURS_BACK: ClassVar[int] = MAX_HOURS_BACK
    DEFAULT_LIMIT: ClassVar[int] = DEFAULT_SEARCH_LIMIT
    MAX_LIMIT: ClassVar[int] = MAX_SEARCH_LIMIT

    @classmethod
    def build(
        cls,
        query: str,
        *,
        channel_id: ChannelId | None = None,
        hours_back: int | None = None,
        limit: int | None = None,
        default_hours_back: int = DEFAULT_HOURS_BACK,
        default_limit: int = DEFAULT_SEARCH_LIMIT,
        max_limit: int = MAX_SEARCH_LIMIT,
    ) -> SearchParams:
        """
        Apply defaults and ceilings.

        Values above a ceiling are clamped, not rejected.  An empty query or
        a limit of zero after defaulting raises :class:`InvalidInputError`.
        """
        if not query.strip():
            raise InvalidInputError("query", "search query cannot be empty")
        effective_hours = min(
            hours_back if hours_back is not None else default_hours_back, cls.MAX_HOURS_BACK
        )
        effective_limit = min(
            limit if limit is not None else default_limit, max_limit, cls.MAX_LIMIT
        )
        if effective_hours < 0:
            raise InvalidInputError("hours_back", f"must not be negative, got {effective_hours}")
        if effective_limit <= 0:
            raise InvalidInputError("limit", "search limit must be greater than 0")
        return cls(
            query=query,
            channel_id=channel_id,
            hours_back=effective_hours,
            limit=effective_limit,
        )
