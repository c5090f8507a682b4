"""Retry and backoff policy shared by provider clients and the API client."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, TypeVar

from ..config import Settings, settings as default_settings
from ..errors import NetworkError, RateLimitError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRY_AFTER_SECONDS = 60.0


@dataclass
class RetryPolicy:
    """Retry transient failures with exponential backoff.

    ``NetworkError`` is retried after ``retry_delay * 2 ** attempt`` seconds.
    ``RateLimitError`` is retried only when ``retry_on_rate_limit`` is set, after
    the error's ``retry_after`` (or ``default_retry_after``). Anything else
    propagates on the first failure.
    """

    retries: int = 3
    retry_delay: float = 1.0
    retry_on_rate_limit: bool = False
    default_retry_after: float = DEFAULT_RETRY_AFTER_SECONDS
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, repr=False)

    def backoff_for(self, attempt: int) -> float:
        return self.retry_delay * (2 ** attempt)

    async def call(self, operation: Callable[[], Awaitable[T]], *, description: str = "request") -> T:
        attempt = 0
        while True:
            try:
                return await operation()
            except RateLimitError as exc:
                if not self.retry_on_rate_limit or attempt >= self.retries:
                    raise
                wait_time = exc.retry_after if exc.retry_after is not None else self.default_retry_after
                logger.debug(
                    f"{description} rate limited, retrying in {wait_time:.1f}s (attempt {attempt + 1}/{self.retries})"
                )
            except NetworkError as exc:
                if attempt >= self.retries:
                    logger.warning(f"{description} failed after {attempt + 1} attempts: {exc}")
                    raise
                wait_time = self.backoff_for(attempt)
                logger.debug(
                    f"{description} network error, retrying in {wait_time:.1f}s "
                    f"(attempt {attempt + 1}/{self.retries}): {exc}"
                )
            await self.sleep(wait_time)
            attempt += 1

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None, **overrides) -> "RetryPolicy":
        config = config or default_settings
        values = {
            "retries": config.max_retries,
            "retry_delay": config.retry_delay_seconds,
        }
        values.update(overrides)
        return cls(**values)
