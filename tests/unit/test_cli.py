"""CLI tests using click's CliRunner."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from telegram_connector import __version__
from telegram_connector.cli.main import cli
from telegram_connector.core.config import load_config


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "config.toml"
    monkeypatch.setenv("TELEGRAM_MCP_CONFIG", str(path))
    for name in ("TELEGRAM_API_ID", "TELEGRAM_API_HASH", "TELEGRAM_PHONE_NUMBER"):
        monkeypatch.delenv(name, raising=False)
    return path


class TestVersion:
    def test_version_command(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert f"telegram-connector {__version__}" in result.output

    def test_version_json(self, runner: CliRunner, _isolated_config: Path) -> None:
        result = runner.invoke(cli, ["version", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["telegram_connector"] == __version__
        assert data["config_path"] == str(_isolated_config)

    def test_version_flag(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestSetup:
    def test_non_interactive_from_options(self, runner: CliRunner, _isolated_config: Path) -> None:
        result = runner.invoke(
            cli,
            [
                "setup",
                "--non-interactive",
                "--api-id",
                "12345",
                "--api-hash",
                "abcdef",
                "--phone",
                "+15551234567",
            ],
        )
        assert result.exit_code == 0, result.output
        cfg = load_config(_isolated_config)
        assert cfg.telegram.api_id == 12345
        assert cfg.telegram.api_hash.get_secret_value() == "abcdef"
        assert cfg.rate_limiting.max_tokens == 50

    def test_non_interactive_from_env(
        self, runner: CliRunner, _isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TELEGRAM_API_ID", "777")
        monkeypatch.setenv("TELEGRAM_API_HASH", "hash")
        monkeypatch.setenv("TELEGRAM_PHONE_NUMBER", "+1555")
        result = runner.invoke(cli, ["setup", "--non-interactive"])
        assert result.exit_code == 0, result.output
        assert "api_id = 777" in _isolated_config.read_text()

    def test_missing_values_fail(self, runner: CliRunner, _isolated_config: Path) -> None:
        result = runner.invoke(cli, ["setup", "--non-interactive", "--api-id", "1"])
        assert result.exit_code == 2
        assert "Missing required values" in result.output
        assert not _isolated_config.exists()

    def test_non_numeric_api_id(self, runner: CliRunner) -> None:
        result = runner.invoke(
            cli,
            ["setup", "--non-interactive", "--api-id", "x", "--api-hash", "h", "--phone", "+1"],
        )
        assert result.exit_code == 2
        assert "must be a number" in result.output

    def test_interactive_keeps_existing(self, runner: CliRunner, _isolated_config: Path) -> None:
        _isolated_config.write_text("# existing\n")
        result = runner.invoke(cli, ["setup"], input="n\n")
        assert result.exit_code == 0
        assert _isolated_config.read_text() == "# existing\n"


class TestStatus:
    def test_unconfigured_json(self, runner: CliRunner, _isolated_config: Path) -> None:
        result = runner.invoke(cli, ["status", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["config_path"] == str(_isolated_config)
        assert data["config_loaded"] is False
        assert data["session_present"] is False

    def test_configured_json(self, runner: CliRunner, tmp_path: Path) -> None:
        session = tmp_path / "session.bin"
        session.write_text("s")
        runner.invoke(
            cli,
            [
                "setup",
                "--non-interactive",
                "--api-id",
                "1",
                "--api-hash",
                "h",
                "--phone",
                "+1",
                "--session-file",
                str(session),
            ],
        )
        result = runner.invoke(cli, ["status", "--json"])
        data = json.loads(result.output)
        assert data["config_loaded"] is True
        assert data["session_present"] is True
        assert data["rate_limiting"] == {"max_tokens": 50, "refill_rate": 2.0}

    def test_human_output(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["status"])
        assert result.exit_code == 0
        assert "telegram-connector status" in result.output


class TestServeErrors:
    def test_missing_config_exit_code(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["serve"])
        assert result.exit_code == 2

    def test_missing_session_exit_code(self, runner: CliRunner, tmp_path: Path) -> None:
        runner.invoke(
            cli,
            [
                "setup",
                "--non-interactive",
                "--api-id",
                "1",
                "--api-hash",
                "h",
                "--phone",
                "+1",
                "--session-file",
                str(tmp_path / "absent.bin"),
            ],
        )
        result = runner.invoke(cli, ["serve"])
        assert result.exit_code == 3

    def test_unreachable_telegram_exit_code(
        self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        from telegram_connector.telegram.client import TelethonProvider
        from telegram_connector.telegram.session import save_session

        session_file = tmp_path / "session.bin"
        save_session(session_file, "session-string")
        runner.invoke(
            cli,
            [
                "setup",
                "--non-interactive",
                "--api-id",
                "1",
                "--api-hash",
                "h",
                "--phone",
                "+1",
                "--session-file",
                str(session_file),
            ],
        )

        async def refuse(self: TelethonProvider) -> None:
            raise ConnectionError("connection refused")

        monkeypatch.setattr(TelethonProvider, "connect", refuse)
        result = runner.invoke(cli, ["serve"])
        assert result.exit_code == 4
