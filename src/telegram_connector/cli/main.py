"""
telegram-connector CLI entry point.

Commands:
  telegram-connector serve           — run the MCP server over stdio
  telegram-connector login           — authenticate and save a Telegram session
  telegram-connector setup           — write a configuration file
  telegram-connector status          — show config, session and rate-limit settings
  telegram-connector version         — show version information
"""

from __future__ import annotations

import click
from rich.console import Console

from telegram_connector import __version__
from telegram_connector.cli._login import login_cmd
from telegram_connector.cli._serve import serve_cmd
from telegram_connector.cli._setup import setup_cmd
from telegram_connector.cli._status import status_cmd
from telegram_connector.cli._version import version_cmd

console = Console()


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(
    __version__, "--version", "-V", message="telegram-connector %(version)s"
)
@click.option(
    "--log-level", default="WARNING", hidden=True, help="Log level for structured logging."
)
@click.option("--log-json", is_flag=True, default=False, hidden=True, help="Emit JSON log lines.")
def cli(log_level: str, log_json: bool) -> None:
    """telegram-connector — MCP server for searching Telegram channels."""
    from telegram_connector.core.logging import configure_logging

    configure_logging(level=log_level, json_output=log_json)


cli.add_command(serve_cmd, "serve")
cli.add_command(login_cmd, "login")
cli.add_command(setup_cmd, "setup")
cli.add_command(status_cmd, "status")
cli.add_command(version_cmd, "version")


if __name__ == "__main__":
    cli()
