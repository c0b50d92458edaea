"""When and how long the HTTP blob store waits before trying again.

:class:`RetryPolicy` classifies a failed attempt (:meth:`RetryPolicy.reason`)
and computes the pause before the next one (:meth:`RetryPolicy.delay`).
"""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx

from lexpatch.config import LexpatchConfig

RATE_LIMITED = "rate_limited"
SERVER_ERROR = "server_error"
NETWORK_ERROR = "network_error"

# Statuses worth another attempt; every other non-2xx status is final.
RETRYABLE_STATUSES: frozenset[int] = frozenset({429, 500, 502, 503, 504})

RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry limits and exponential backoff for one store.

    Parameters
    ----------
    max_attempts:
        Total attempts per request, the first one included.
    base_delay:
        Delay in seconds after the first failed attempt; doubles each time.
    max_delay:
        Cap in seconds on any single delay, ``Retry-After`` included.
    jitter:
        Scale each delay by a random factor in ``[0.5, 1.0]``.
    """

    max_attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 10.0
    jitter: bool = True
    random_source: Callable[[], float] = field(default=random.random, compare=False)

    @classmethod
    def from_config(cls, config: LexpatchConfig) -> RetryPolicy:
        return cls(
            max_attempts=config.retry_max_attempts,
            base_delay=config.retry_base_delay,
            max_delay=config.retry_max_delay,
            jitter=config.retry_jitter,
        )

    def reason(
        self,
        status_code: int | None = None,
        exception: Exception | None = None,
    ) -> str | None:
        """Return why the attempt may be retried, or ``None`` if it is final."""
        if exception is not None:
            return NETWORK_ERROR if isinstance(exception, RETRYABLE_EXCEPTIONS) else None
        if status_code == 429:
            return RATE_LIMITED
        if status_code in RETRYABLE_STATUSES:
            return SERVER_ERROR
        return None

    def should_retry(
        self,
        attempt: int,
        status_code: int | None = None,
        exception: Exception | None = None,
    ) -> bool:
        """True when attempt number *attempt* (0-based) failed retryably and is not the last."""
        if attempt + 1 >= self.max_attempts:
            return False
        return self.reason(status_code, exception) is not None

    def delay(self, attempt: int, retry_after: float | None = None) -> float:
        """Seconds to wait after failed attempt *attempt* (0-based)."""
        if retry_after is not None:
            delay = min(max(retry_after, 0.0), self.max_delay)
        else:
            delay = min(self.base_delay * (2 ** attempt), self.max_delay)
        if self.jitter:
            delay *= 0.5 + self.random_source() * 0.5
        return delay
