"""Retry budgets for Bot API delivery.

Two failure classes are tracked separately:

- general failures (transport errors, ok=false responses) consume the
  general budget and back off exponentially: ``base_delay * 2 ** attempt``;
- rate-limit failures ("Too Many Requests") consume their own budget and
  wait the server-advised ``retry_after`` or a fixed fallback delay.

A rate-limit retry never advances the general counter and vice versa.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from tgnotify.errors import TelegramAPIError

_RATE_LIMIT_MARKERS = ("too many requests", "retry after", "flood")
_RETRY_AFTER_RE = re.compile(r"retry after (\d+)", re.IGNORECASE)


class RetryPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_retries: int = Field(default=3, ge=0)
    base_delay: float = Field(default=1.0, ge=0)
    max_rate_limit_retries: int = Field(default=5, ge=0)
    rate_limit_delay: float = Field(default=30.0, ge=0)


@dataclass
class RetryState:
    """Counters for one delivery call."""

    policy: RetryPolicy
    attempts: int = 0
    rate_limit_retries: int = 0

    @property
    def general_exhausted(self) -> bool:
        return self.attempts >= self.policy.max_retries

    @property
    def rate_limit_exhausted(self) -> bool:
        return self.rate_limit_retries >= self.policy.max_rate_limit_retries

    def next_backoff(self) -> float:
        """Delay before the next general retry; advances the general counter."""
        delay = self.policy.base_delay * (2 ** self.attempts)
        self.attempts += 1
        return delay

    def next_rate_limit_wait(self, error: TelegramAPIError) -> float:
        """Delay before the next rate-limit retry; advances only its own counter."""
        self.rate_limit_retries += 1
        advised = error.retry_after
        if advised is None:
            advised = parse_retry_after(error.description)
        if advised is None:
            return self.policy.rate_limit_delay
        return float(advised)


def is_rate_limited(error: Exception) -> bool:
    if isinstance(error, TelegramAPIError):
        if error.error_code == 429 or error.retry_after is not None:
            return True
    text = str(error).lower()
    return any(marker in text for marker in _RATE_LIMIT_MARKERS)


def parse_retry_after(description: str) -> int | None:
    """Extract N from 'Too Many Requests: retry after N'."""
    match = _RETRY_AFTER_RE.search(description or "")
    if match is None:
        return None
    return int(match.group(1))
