"""Unit tests for the interactive sign-in step of ``telegram-connector login``."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from telegram_connector.cli._login import sign_in
from telegram_connector.core.exceptions import AuthError


class PasswordNeeded(Exception):
    pass


class FakeClient:
    def __init__(self, needs_password: bool = False, reject_password: bool = False) -> None:
        self.needs_password = needs_password
        self.reject_password = reject_password
        self.calls: list[dict[str, Any]] = []

    async def sign_in(self, **kwargs: Any) -> None:
        self.calls.append(kwargs)
        if "code" in kwargs and self.needs_password:
            raise PasswordNeeded()
        if "password" in kwargs and self.reject_password:
            raise RuntimeError("PASSWORD_HASH_INVALID")


def _answers(*values: str) -> Callable[..., str]:
    remaining = list(values)

    def ask(prompt: str, *, password: bool = False) -> str:
        return remaining.pop(0)

    return ask


class TestSignIn:
    @pytest.mark.asyncio
    async def test_code_is_stripped(self) -> None:
        client = FakeClient()
        await sign_in(client, "+1555", password_needed=PasswordNeeded, ask=_answers(" 12345 \n"))
        assert client.calls == [{"phone": "+1555", "code": "12345"}]

    @pytest.mark.asyncio
    async def test_password_passed_through_unchanged(self) -> None:
        client = FakeClient(needs_password=True)
        await sign_in(
            client,
            "+1555",
            password_needed=PasswordNeeded,
            ask=_answers("12345", "  secret with spaces  "),
        )
        assert client.calls[-1] == {"password": "  secret with spaces  "}

    @pytest.mark.asyncio
    async def test_rejected_password_is_auth_error(self) -> None:
        client = FakeClient(needs_password=True, reject_password=True)
        with pytest.raises(AuthError, match="2FA authentication failed"):
            await sign_in(
                client, "+1555", password_needed=PasswordNeeded, ask=_answers("1", "pw")
            )
