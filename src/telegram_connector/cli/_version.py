"""telegram-connector version — package, interpreter and config location."""

from __future__ import annotations

import json
import platform
import sys

import click
from rich.console import Console

from telegram_connector import __version__

console = Console()


def version_info() -> dict[str, str]:
    from telegram_connector.core.config import config_file_path

    return {
        "telegram_connector": __version__,
        "python": platform.python_version(),
        "platform": sys.platform,
        "arch": platform.machine(),
        "config_path": str(config_file_path()),
    }


@click.command("version")
@click.option("--json", "as_json", is_flag=True, default=False)
def version_cmd(as_json: bool) -> None:
    """Show version information."""
    info = version_info()
    if as_json:
        click.echo(json.dumps(info, indent=2))
        return
    console.print(f"telegram-connector {info['telegram_connector']}")
    console.print(f"Python {info['python']} on {info['platform']} ({info['arch']})")
    console.print(f"Config: {info['config_path']}")
