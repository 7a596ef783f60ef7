"""
telegram-connector — MCP server for searching Telegram channels.

The server exposes a handful of tools (status, channel listing, channel
info, message links, opening a message in Telegram Desktop, message search)
over the Model Context Protocol's stdio transport. Search calls are gated by
a shared in-process token bucket before they reach Telegram.

Package layout (src/telegram_connector/):
  core/       — config, constants, exceptions, logging, rate limiter
  telegram/   — value objects, provider capability, Telethon client, sessions
  mcp/        — tool contracts, dispatcher, FastMCP server
  cli/        — Click CLI entry point
  link.py     — t.me / tg:// message link formatting
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
