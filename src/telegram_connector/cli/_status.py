"""telegram-connector status — configuration and session overview."""

from __future__ import annotations

import json

import click
from rich.console import Console

console = Console()


@click.command("status")
@click.option("--json", "as_json", is_flag=True, default=False)
def status_cmd(as_json: bool) -> None:
    """Show config path, session presence and rate-limit settings."""
    cmd_status(as_json=as_json, console=console)


def cmd_status(as_json: bool, console: Console) -> None:
    from telegram_connector.core.config import config_file_path, load_config
    from telegram_connector.core.exceptions import ConfigError

    cfg_path = config_file_path()
    config = None
    config_error = ""
    try:
        config = load_config(cfg_path)
    except ConfigError as exc:
        config_error = str(exc)

    session_file = config.telegram.session_file if config else None
    session_present = bool(session_file and session_file.exists())

    if as_json:
        data: dict = {
            "config_path": str(cfg_path),
            "config_loaded": config is not None,
            "config_error": config_error or None,
            "session_file": str(session_file) if session_file else None,
            "session_present": session_present,
        }
        if config is not None:
            data["rate_limiting"] = config.rate_limiting.model_dump()
            data["search"] = config.search.model_dump()
        print(json.dumps(data, indent=2))
        return

    console.print("[bold]telegram-connector status[/bold]\n")
    console.print(f"  Config:  [cyan]{cfg_path}[/cyan]")

    if config is None:
        console.print(f"  [yellow]{config_error}[/yellow]")
        return

    if session_present:
        console.print(f"  Session: [green]present[/green] ({session_file})")
    else:
        console.print(f"  Session: [yellow]missing[/yellow] ({session_file})")
        console.print("  Run [cyan]telegram-connector login[/cyan] to create one.")

    rl = config.rate_limiting
    console.print(f"  Rate limit: {rl.max_tokens} tokens, refill {rl.refill_rate}/s")
    s = config.search
    console.print(
        f"  Search: default {s.default_hours_back}h back, "
        f"{s.max_results_default} results (max {s.max_results_limit})"
    )
