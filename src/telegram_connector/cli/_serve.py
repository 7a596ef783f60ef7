"""telegram-connector serve — run the MCP server over stdio."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import click
import structlog
from rich.console import Console

from telegram_connector.core.constants import ExitCode

if TYPE_CHECKING:
    from telegram_connector.core.config import ConnectorConfig

logger = structlog.get_logger()

# stdout carries the MCP stream; human-facing output goes to stderr.
err_console = Console(stderr=True)


@click.command("serve")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Config file (default: $TELEGRAM_MCP_CONFIG or the platform config dir)",
)
def serve_cmd(config_path: str | None) -> None:
    """Run the MCP server on stdin/stdout."""
    from telegram_connector.core.config import load_config
    from telegram_connector.core.exceptions import AuthError, ConfigError, UpstreamError
    from telegram_connector.core.logging import configure_logging

    try:
        config = load_config(config_path)
    except ConfigError as exc:
        err_console.print(f"[red]Config error:[/red] {exc}")
        raise SystemExit(ExitCode.CONFIG_ERROR) from exc

    configure_logging(level=config.logging.level, json_output=config.logging.format == "json")

    try:
        asyncio.run(_serve(config))
    except AuthError as exc:
        err_console.print(f"[red]Session error:[/red] {exc}")
        err_console.print("Run [cyan]telegram-connector login[/cyan] first.")
        raise SystemExit(ExitCode.AUTH_ERROR) from exc
    except UpstreamError as exc:
        err_console.print(f"[red]Network error:[/red] {exc}")
        raise SystemExit(ExitCode.NETWORK_ERROR) from exc
    except KeyboardInterrupt:
        pass


async def _serve(config: ConnectorConfig) -> None:
    from telegram_connector.core.exceptions import UpstreamError
    from telegram_connector.core.rate_limiter import RateLimiter
    from telegram_connector.mcp.dispatcher import ToolDispatcher
    from telegram_connector.mcp.server import build_server, run_stdio
    from telegram_connector.telegram.client import TelethonProvider
    from telegram_connector.telegram.session import load_session

    session = load_session(config.telegram.session_file)

    provider = TelethonProvider(config.telegram, session=session)
    limiter = RateLimiter(
        max_tokens=config.rate_limiting.max_tokens,
        refill_rate=config.rate_limiting.refill_rate,
    )
    dispatcher = ToolDispatcher(provider, limiter, search=config.search)

    try:
        await provider.connect()
    except OSError as exc:
        raise UpstreamError(f"Cannot reach Telegram: {exc}") from exc
    try:
        if not await provider.is_connected():
            logger.warning(
                "telegram_not_authorized", session_file=str(config.telegram.session_file)
            )
        await run_stdio(build_server(dispatcher))
    finally:
        await provider.close()
