"""
structlog setup for telegram-connector.

Log output always goes to stderr.  When the server runs, stdout is the MCP
stdio transport and any stray byte there corrupts the protocol stream.

Modules log through a module-level structlog logger with snake_case event
names::

    logger = structlog.get_logger()
    logger.info("telegram_search_completed", channels=3, found=12)

``configure_logging()`` is called by the CLI, first with the command-line
defaults and again by ``serve`` once the config file has been read; the
second call replaces the renderer and level on the existing handler.

Phone numbers and API hashes are masked twice over: callers pass them
through ``redact_phone()`` / ``redact_hash()``, and the pipeline masks any
``phone`` / ``phone_number`` / ``api_hash`` key that slips through.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

_NOISY_LOGGERS = ("telethon", "httpx", "mcp")

_PHONE_KEYS = frozenset({"phone", "phone_number"})
_HASH_KEYS = frozenset({"api_hash"})


def redact_phone(phone: str) -> str:
    """Mask a phone number, keeping the first three and last two characters."""
    if len(phone) <= 5:
        return "*" * len(phone)
    return f"{phone[:3]}{'*' * (len(phone) - 5)}{phone[-2:]}"


def redact_hash(value: str) -> str:
    """Mask an API hash, keeping only its first four characters."""
    if len(value) <= 4:
        return "*" * len(value)
    return f"{value[:4]}{'*' * (len(value) - 4)}"


def mask_secrets(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor: mask well-known secret keys left in plain text."""
    for key, value in event_dict.items():
        if not isinstance(value, str) or "*" in value:
            continue
        if key in _PHONE_KEYS:
            event_dict[key] = redact_phone(value)
        elif key in _HASH_KEYS:
            event_dict[key] = redact_hash(value)
    return event_dict


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        mask_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _stderr_handler(root: logging.Logger) -> logging.Handler | None:
    for handler in root.handlers:
        if isinstance(handler, logging.StreamHandler) and isinstance(
            handler.formatter, structlog.stdlib.ProcessorFormatter
        ):
            return handler
    return None


def configure_logging(*, level: str = "INFO", json_output: bool = False) -> None:
    """
    Route structlog and stdlib logging through one stderr handler.

    Args:
        level: DEBUG, INFO, WARNING or ERROR.  Unknown names mean INFO.
        json_output: One JSON object per line instead of console output.
    """
    pre_chain = _pre_chain()
    final: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, final],
    )

    root = logging.getLogger()
    handler = _stderr_handler(root)
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        root.addHandler(handler)
    handler.setFormatter(formatter)
    root.setLevel(logging.getLevelName(level.upper()) if _known(level) else logging.INFO)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _known(level: str) -> bool:
    return level.upper() in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
