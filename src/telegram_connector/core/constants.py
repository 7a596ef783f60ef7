"""telegram-connector constants: filesystem layout, search bounds, and rate limits."""

from __future__ import annotations

import os
import sys
from enum import IntEnum
from pathlib import Path

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2
    AUTH_ERROR = 3
    NETWORK_ERROR = 4


# ---------------------------------------------------------------------------
# Platform-specific config directory
# ---------------------------------------------------------------------------

APP_DIR_NAME = "telegram-connector"


def _default_data_dir() -> Path:
    """
    Return the platform-appropriate configuration directory.

    macOS : ~/Library/Application Support/telegram-connector
    Linux : ~/.config/telegram-connector  (or $XDG_CONFIG_HOME/telegram-connector)
    Other : ~/.telegram-connector
    """
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME
    if sys.platform.startswith("linux"):
        xdg = Path(os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config")))
        return xdg / APP_DIR_NAME
    return Path.home() / f".{APP_DIR_NAME}"


# ---------------------------------------------------------------------------
# Filesystem layout
# ---------------------------------------------------------------------------

CONFIG_FILENAME = "config.toml"
SESSION_FILENAME = "session.bin"
CONFIG_ENV_VAR = "TELEGRAM_MCP_CONFIG"

# ---------------------------------------------------------------------------
# MCP server identity
# ---------------------------------------------------------------------------

SERVER_NAME = "telegram-mcp"
SERVER_INSTRUCTIONS = "Telegram MCP Connector - Search Russian Telegram channels"

# ---------------------------------------------------------------------------
# Search bounds
# ---------------------------------------------------------------------------

DEFAULT_HOURS_BACK = 48
MAX_HOURS_BACK = 72
DEFAULT_SEARCH_LIMIT = 20
MAX_SEARCH_LIMIT = 100
DEFAULT_CHANNELS_LIMIT = 20

# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------

DEFAULT_MAX_TOKENS = 50
DEFAULT_REFILL_RATE = 2.0  # tokens per second
SEARCH_COST_TOKENS = 1
