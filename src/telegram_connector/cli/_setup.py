"""telegram-connector setup — write the configuration file."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.prompt import Confirm, Prompt

from telegram_connector.core.constants import (
    DEFAULT_HOURS_BACK,
    DEFAULT_MAX_TOKENS,
    DEFAULT_REFILL_RATE,
    DEFAULT_SEARCH_LIMIT,
    MAX_SEARCH_LIMIT,
    ExitCode,
)

console = Console()


@click.command("setup")
@click.option("--api-id", default="", help="Telegram API ID from https://my.telegram.org")
@click.option("--api-hash", default="", help="Telegram API hash (or a ${VAR} reference)")
@click.option("--phone", default="", help="Phone number in international format (or ${VAR})")
@click.option(
    "--session-file", default="", help="Where to keep the session (default: config dir)"
)
@click.option("--non-interactive", is_flag=True, default=False, help="Read from options/env only")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Config file to write (default: $TELEGRAM_MCP_CONFIG or the platform config dir)",
)
def setup_cmd(
    api_id: str,
    api_hash: str,
    phone: str,
    session_file: str,
    non_interactive: bool,
    config_path: str | None,
) -> None:
    """Create or overwrite the telegram-connector config file."""
    run_setup(
        api_id=api_id,
        api_hash=api_hash,
        phone=phone,
        session_file=session_file,
        non_interactive=non_interactive,
        config_path=Path(config_path) if config_path else None,
        console=console,
    )


def build_config_data(
    api_id: int, api_hash: str, phone: str, session_file: str = ""
) -> dict[str, Any]:
    """Assemble the TOML document written by ``setup``."""
    telegram: dict[str, Any] = {
        "api_id": api_id,
        "api_hash": api_hash,
        "phone_number": phone,
    }
    if session_file:
        telegram["session_file"] = session_file
    return {
        "telegram": telegram,
        "search": {
            "default_hours_back": DEFAULT_HOURS_BACK,
            "max_results_default": DEFAULT_SEARCH_LIMIT,
            "max_results_limit": MAX_SEARCH_LIMIT,
        },
        "rate_limiting": {
            "max_tokens": DEFAULT_MAX_TOKENS,
            "refill_rate": DEFAULT_REFILL_RATE,
        },
        "logging": {"level": "INFO", "format": "text"},
    }


def run_setup(
    *,
    api_id: str,
    api_hash: str,
    phone: str,
    session_file: str,
    non_interactive: bool,
    config_path: Path | None,
    console: Console,
) -> None:
    from telegram_connector.core.config import config_file_path, save_config
    from telegram_connector.core.exceptions import ConfigError

    console.print("[bold]telegram-connector setup[/bold]")

    cfg_path = config_path or config_file_path()
    if cfg_path.exists() and not non_interactive:
        console.print(f"\nExisting config found: [cyan]{cfg_path}[/cyan]")
        if not Confirm.ask("Overwrite it?", default=False, console=console):
            console.print("[green]Config preserved.[/green]")
            return

    api_id = api_id or os.environ.get("TELEGRAM_API_ID", "")
    api_hash = api_hash or os.environ.get("TELEGRAM_API_HASH", "")
    phone = phone or os.environ.get("TELEGRAM_PHONE_NUMBER", "")

    if not non_interactive:
        console.print("Get your API credentials at [cyan]https://my.telegram.org[/cyan]\n")
        api_id = api_id or Prompt.ask("API ID", console=console)
        api_hash = api_hash or Prompt.ask("API hash", password=True, console=console)
        phone = phone or Prompt.ask("Phone number (e.g. +15551234567)", console=console)

    missing = [
        name
        for name, value in (("api_id", api_id), ("api_hash", api_hash), ("phone", phone))
        if not value
    ]
    if missing:
        console.print(f"[red]Missing required values:[/red] {', '.join(missing)}")
        raise SystemExit(ExitCode.CONFIG_ERROR)

    try:
        api_id_num = int(api_id)
    except ValueError:
        console.print(f"[red]API ID must be a number, got {api_id!r}[/red]")
        raise SystemExit(ExitCode.CONFIG_ERROR) from None

    data = build_config_data(api_id_num, api_hash, phone, session_file)
    try:
        written = save_config(data, cfg_path)
    except ConfigError as exc:
        console.print(f"[red]{exc}[/red]")
        raise SystemExit(ExitCode.CONFIG_ERROR) from exc

    console.print(f"\n[green]Config written:[/green] {written}")
    console.print("Next: run [cyan]telegram-connector login[/cyan] to create a session.")
