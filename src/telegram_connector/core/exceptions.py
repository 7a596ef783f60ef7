"""telegram-connector exception hierarchy."""

from __future__ import annotations


class TelegramConnectorError(Exception):
    """Base exception for all telegram-connector errors."""


class ConfigError(TelegramConnectorError):
    """Raised when the configuration is invalid or cannot be read."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file does not exist."""


class AuthError(TelegramConnectorError):
    """Raised when the Telegram session cannot be loaded, saved, or authorised."""


class InvalidInputError(TelegramConnectorError, ValueError):
    """Raised when a request field is malformed or out of range.

    Always raised before any rate-limit acquisition or provider call.
    """

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class RateLimitedError(TelegramConnectorError):
    """Raised when the rate limiter denies an acquisition.

    ``retry_after_seconds`` is ``None`` when the bucket does not refill and
    no amount of waiting would satisfy the request.
    """

    def __init__(self, retry_after_seconds: int | None) -> None:
        self.retry_after_seconds = retry_after_seconds
        if retry_after_seconds is None:
            msg = "rate limit exceeded; bucket does not refill"
        else:
            msg = f"rate limit exceeded; retry after {retry_after_seconds} seconds"
        super().__init__(msg)


class UpstreamError(TelegramConnectorError):
    """Raised when the Telegram provider fails or is unreachable."""


class UnsupportedError(TelegramConnectorError):
    """Raised when a platform-gated operation is invoked on an unsupported host."""
