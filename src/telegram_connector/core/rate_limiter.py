"""Token-bucket rate limiter for billable tool calls.

A single bucket is shared by every tool call in the process. In-memory
only: the balance starts full on every server start. No database or
network dependencies.
"""

from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from telegram_connector.core.exceptions import ConfigError, InvalidInputError, RateLimitedError


@dataclass(frozen=True)
class Acquisition:
    """Outcome of a single acquisition attempt."""

    granted: bool
    retry_after_seconds: int | None = None


@dataclass
class TokenBucket:
    """Single token bucket with refill.

    Not thread-safe on its own; :class:`RateLimiter` serialises access.
    """

    max_tokens: float
    refill_rate: float  # tokens per second
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)
    available_tokens: float = field(init=False)
    last_refill: float = field(init=False)

    def __post_init__(self) -> None:
        if self.max_tokens < 0:
            raise ConfigError(f"max_tokens must be >= 0, got {self.max_tokens}")
        if self.refill_rate < 0:
            raise ConfigError(f"refill_rate must be >= 0, got {self.refill_rate}")
        self.max_tokens = float(self.max_tokens)
        self.refill_rate = float(self.refill_rate)
        # Start with full capacity.
        self.available_tokens = self.max_tokens
        self.last_refill = self.clock()

    def refill(self) -> None:
        """Credit tokens for the time elapsed since the last refill."""
        now = self.clock()
        elapsed = max(0.0, now - self.last_refill)
        self.available_tokens = min(
            self.max_tokens, self.available_tokens + elapsed * self.refill_rate
        )
        self.last_refill = now

    def try_acquire(self, n: float = 1.0) -> Acquisition:
        """Refill, then take *n* tokens if the balance allows it."""
        if n < 0:
            raise InvalidInputError("tokens", f"cannot acquire a negative amount ({n})")
        self.refill()
        if self.available_tokens >= n:
            self.available_tokens -= n
            return Acquisition(granted=True)
        if self.refill_rate == 0:
            # Never refills: no finite wait satisfies the request.
            return Acquisition(granted=False, retry_after_seconds=None)
        deficit = n - self.available_tokens
        return Acquisition(granted=False, retry_after_seconds=math.ceil(deficit / self.refill_rate))

    def available(self) -> float:
        """Return the current balance after refilling."""
        self.refill()
        return self.available_tokens


class RateLimiting(Protocol):
    """Admission gate consulted by the dispatcher before billable calls."""

    def acquire(self, tokens: int = 1) -> None: ...

    def available_tokens(self) -> float: ...


class RateLimiter:
    """Thread-safe façade over one :class:`TokenBucket`.

    ``acquire`` never waits: a denial raises :class:`RateLimitedError`
    immediately with a retry hint and the caller decides what to do.

    Args:
        max_tokens: Bucket capacity (also the initial balance).
        refill_rate: Tokens credited per second. ``0`` disables refill.
    """

    def __init__(
        self,
        max_tokens: float,
        refill_rate: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._bucket = TokenBucket(max_tokens=max_tokens, refill_rate=refill_rate, clock=clock)
        self._lock = threading.Lock()

    @property
    def max_tokens(self) -> float:
        return self._bucket.max_tokens

    @property
    def refill_rate(self) -> float:
        return self._bucket.refill_rate

    def try_acquire(self, tokens: int = 1) -> Acquisition:
        """Attempt an acquisition and return the outcome without raising."""
        with self._lock:
            return self._bucket.try_acquire(tokens)

    def acquire(self, tokens: int = 1) -> None:
        """Take *tokens* from the bucket or raise :class:`RateLimitedError`."""
        outcome = self.try_acquire(tokens)
        if not outcome.granted:
            raise RateLimitedError(outcome.retry_after_seconds)

    def available_tokens(self) -> float:
        with self._lock:
            return self._bucket.available()
