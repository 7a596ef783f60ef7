"""
Telegram session file persistence.

The session string grants full account access, so it is stored with
owner-only permissions (0600) and refused on load if anyone else can read
it.  Writes go through a temp file and an atomic rename.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import structlog

from telegram_connector.core.exceptions import AuthError

logger = structlog.get_logger()

_SECURE_MODE = 0o600


def save_session(path: Path, session_data: str) -> None:
    """Write *session_data* to *path* atomically with mode 0600."""
    try:
        path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
    except OSError as exc:
        raise AuthError(f"Failed to create session directory: {exc}") from exc

    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, _SECURE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(session_data)
        if sys.platform != "win32":
            tmp_path.chmod(_SECURE_MODE)
        tmp_path.replace(path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise AuthError(f"Failed to write session file: {exc}") from exc

    logger.info("session_saved", path=str(path))


def load_session(path: Path) -> str:
    """Read the session string from *path*, verifying its permissions."""
    if not path.exists():
        raise AuthError(f"Session file does not exist: {path}")

    if sys.platform != "win32":
        mode = path.stat().st_mode & 0o777
        if mode != _SECURE_MODE:
            raise AuthError(
                f"Session file has insecure permissions: {mode:o} (expected 600). "
                f"Fix with: chmod 600 {path}"
            )

    try:
        return path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise AuthError(f"Failed to read session file: {exc}") from exc
