"""
telegram-connector configuration.

File format (TOML)::

    [telegram]
    api_id = 12345
    api_hash = "${TELEGRAM_API_HASH}"     # ${VAR} is expanded at load time
    phone_number = "+15551234567"
    session_file = "~/.config/telegram-connector/session.bin"

    [search]
    default_hours_back = 48
    max_results_default = 20
    max_results_limit = 100

    [rate_limiting]
    max_tokens = 50
    refill_rate = 2.0

    [logging]
    level = "INFO"
    format = "text"                       # or "json"

Only ``[telegram]`` is required.  The file path comes from
``$TELEGRAM_MCP_CONFIG`` or the platform config directory.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator

from telegram_connector.core.constants import (
    CONFIG_ENV_VAR,
    CONFIG_FILENAME,
    DEFAULT_HOURS_BACK,
    DEFAULT_MAX_TOKENS,
    DEFAULT_REFILL_RATE,
    DEFAULT_SEARCH_LIMIT,
    MAX_SEARCH_LIMIT,
    SESSION_FILENAME,
    _default_data_dir,
)
from telegram_connector.core.exceptions import ConfigError, ConfigNotFoundError

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# Environment variable -> (section, key)
_ENV_OVERRIDES = {
    "TELEGRAM_API_ID": ("telegram", "api_id"),
    "TELEGRAM_API_HASH": ("telegram", "api_hash"),
    "TELEGRAM_PHONE_NUMBER": ("telegram", "phone_number"),
    "TELEGRAM_MCP_LOG_LEVEL": ("logging", "level"),
}


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


class TelegramConfig(BaseModel):
    api_id: int = 0
    api_hash: SecretStr = SecretStr("")
    phone_number: SecretStr = SecretStr("")
    session_file: Path = Field(default_factory=lambda: _default_data_dir() / SESSION_FILENAME)

    @field_validator("session_file", mode="before")
    @classmethod
    def expand_home(cls, v: Any) -> Any:
        return Path(v).expanduser() if isinstance(v, str) else v


class SearchConfig(BaseModel):
    default_hours_back: int = Field(default=DEFAULT_HOURS_BACK, ge=0)
    max_results_default: int = Field(default=DEFAULT_SEARCH_LIMIT, ge=1)
    max_results_limit: int = Field(default=MAX_SEARCH_LIMIT, ge=1)


class RateLimitConfig(BaseModel):
    max_tokens: int = Field(default=DEFAULT_MAX_TOKENS, ge=0)
    # 0 disables refill; the bucket then only ever drains.
    refill_rate: float = Field(default=DEFAULT_REFILL_RATE, ge=0)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["text", "json"] = "text"

    @field_validator("level")
    @classmethod
    def known_level(cls, v: str) -> str:
        upper = v.upper()
        if upper not in _LOG_LEVELS:
            raise ValueError(f"level must be one of {', '.join(_LOG_LEVELS)}, got {v!r}")
        return upper


class ConnectorConfig(BaseModel):
    """Complete telegram-connector configuration."""

    telegram: TelegramConfig
    search: SearchConfig = Field(default_factory=SearchConfig)
    rate_limiting: RateLimitConfig = Field(default_factory=RateLimitConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def credentials_present(self) -> ConnectorConfig:
        tg = self.telegram
        if tg.api_id == 0:
            raise ValueError("telegram.api_id is required")
        if not tg.api_hash.get_secret_value():
            raise ValueError("telegram.api_hash is required")
        if not tg.phone_number.get_secret_value():
            raise ValueError("telegram.phone_number is required")
        return self


# ---------------------------------------------------------------------------
# Paths and expansion
# ---------------------------------------------------------------------------


def config_file_path() -> Path:
    """``$TELEGRAM_MCP_CONFIG`` if set, else ``<platform config dir>/config.toml``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return _default_data_dir() / CONFIG_FILENAME


def expand_env_vars(value: str) -> str:
    """
    Replace every ``${NAME}`` in *value* with the environment variable NAME.

    Unset variables expand to the empty string.  An unterminated ``${``
    stops expansion and is left verbatim.  Substituted text is not
    expanded again.
    """
    result = value
    search_from = 0
    while (start := result.find("${", search_from)) != -1:
        end = result.find("}", start)
        if end == -1:
            break
        replacement = os.environ.get(result[start + 2 : end], "")
        result = result[:start] + replacement + result[end + 1 :]
        search_from = start + len(replacement)
    return result


# ---------------------------------------------------------------------------
# Load / save
# ---------------------------------------------------------------------------


def load_config(path: Path | str | None = None) -> ConnectorConfig:
    """
    Read, overlay and validate the configuration.

    Order of application:
      1. TOML file
      2. TELEGRAM_API_ID / TELEGRAM_API_HASH / TELEGRAM_PHONE_NUMBER /
         TELEGRAM_MCP_LOG_LEVEL, when set and non-empty
      3. ``${VAR}`` expansion in api_hash and phone_number
      4. model validation

    Raises:
        ConfigNotFoundError: the file does not exist.
        ConfigError: unreadable TOML or failed validation.
    """
    import tomllib

    cfg_path = Path(path) if path is not None else config_file_path()
    if not cfg_path.is_file():
        raise ConfigNotFoundError(
            f"No config file at {cfg_path}. Run 'telegram-connector setup' to create one."
        )

    try:
        data = tomllib.loads(cfg_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Cannot parse {cfg_path}: {exc}") from exc

    _overlay_env(data)
    telegram = data.get("telegram")
    if isinstance(telegram, dict):
        for key in ("api_hash", "phone_number"):
            if isinstance(telegram.get(key), str):
                telegram[key] = expand_env_vars(telegram[key])

    try:
        return ConnectorConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid config at {cfg_path}: {exc}") from exc


def _overlay_env(data: dict[str, Any]) -> None:
    for var, (section, key) in _ENV_OVERRIDES.items():
        raw = os.environ.get(var, "")
        if not raw:
            continue
        value: Any = raw
        if key == "api_id":
            try:
                value = int(raw)
            except ValueError as exc:
                raise ConfigError(f"{var} must be an integer, got {raw!r}") from exc
        data.setdefault(section, {})[key] = value


def save_config(config_data: dict[str, Any], path: Path | None = None) -> Path:
    """
    Write *config_data* as TOML, owner-only (0600), via temp file + rename.

    Secrets are written as given, so ``${VAR}`` references stay references.
    """
    import tomli_w

    cfg_path = path or config_file_path()
    tmp_path = cfg_path.with_name(cfg_path.name + ".tmp")
    try:
        cfg_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as f:
            tomli_w.dump(config_data, f)
        os.chmod(tmp_path, 0o600)
        tmp_path.replace(cfg_path)
    except (OSError, TypeError) as exc:
        tmp_path.unlink(missing_ok=True)
        raise ConfigError(f"Cannot write config to {cfg_path}: {exc}") from exc
    return cfg_path
