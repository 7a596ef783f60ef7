"""telegram-connector login — interactive Telegram sign-in."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import click
import structlog
from rich.console import Console
from rich.prompt import Prompt

from telegram_connector.core.constants import ExitCode

if TYPE_CHECKING:
    from telegram_connector.core.config import TelegramConfig

logger = structlog.get_logger()

console = Console()


@click.command("login")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Config file (default: $TELEGRAM_MCP_CONFIG or the platform config dir)",
)
def login_cmd(config_path: str | None) -> None:
    """Sign in to Telegram and save the session file."""
    from telegram_connector.core.config import load_config
    from telegram_connector.core.exceptions import AuthError, ConfigError

    try:
        config = load_config(config_path)
    except ConfigError as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        raise SystemExit(ExitCode.CONFIG_ERROR) from exc

    try:
        asyncio.run(_login(config.telegram))
    except AuthError as exc:
        console.print(f"[red]Login failed:[/red] {exc}")
        raise SystemExit(ExitCode.AUTH_ERROR) from exc

    console.print(f"[green]Session saved[/green] to {config.telegram.session_file}")


async def _login(telegram: TelegramConfig) -> None:
    try:
        from telethon import TelegramClient
        from telethon.errors import SessionPasswordNeededError
        from telethon.sessions import StringSession
    except ImportError as exc:
        raise RuntimeError(
            "telethon is required for login. Install with: pip install telethon"
        ) from exc

    from telegram_connector.core.exceptions import AuthError
    from telegram_connector.core.logging import redact_phone
    from telegram_connector.telegram.session import save_session

    phone = telegram.phone_number.get_secret_value()
    client = TelegramClient(StringSession(), telegram.api_id, telegram.api_hash.get_secret_value())
    await client.connect()
    try:
        if not await client.is_user_authorized():
            logger.info("login_code_requested", phone=redact_phone(phone))
            try:
                await client.send_code_request(phone)
            except Exception as exc:
                raise AuthError(f"Failed to request login code: {exc}") from exc
            await sign_in(client, phone, password_needed=SessionPasswordNeededError)

        save_session(telegram.session_file, client.session.save())
        logger.info("login_completed", phone=redact_phone(phone))
    finally:
        await client.disconnect()


def _ask(prompt: str, *, password: bool = False) -> str:
    return Prompt.ask(prompt, password=password, console=console)


async def sign_in(
    client: Any,
    phone: str,
    *,
    password_needed: type[Exception],
    ask: Callable[..., str] = _ask,
) -> None:
    """
    Complete sign-in with the login code, then the 2FA password if asked.

    The code is stripped; the password is passed through exactly as typed.
    """
    from telegram_connector.core.exceptions import AuthError

    code = ask("Enter the code you received in Telegram")
    try:
        await client.sign_in(phone=phone, code=code.strip())
    except password_needed:
        password = ask("Enter your 2FA password", password=True)
        try:
            await client.sign_in(password=password)
        except Exception as exc:
            raise AuthError(f"2FA authentication failed: {exc}") from exc
    except Exception as exc:
        raise AuthError(f"Sign in failed: {exc}") from exc
