"""Rate-limit aware retry wrapper for HTTP calls.

Every call to the Euclid API and the tracking endpoint goes through
``RateLimitedExecutor.execute``.

Policy:
- HTTP 429: warn, sleep, then double the delay. Doubling is unbounded; a long
  run of 429s inside one call keeps growing the delay.
- Any other error: warn and sleep with the current delay (not doubled). On the
  last attempt the error is re-raised to the caller.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import httpx

from euclidbot.errors import RetryExhaustedError
from euclidbot.events import EventSink, LoggingEventSink

logger = logging.getLogger(__name__)

RATE_LIMIT_HEADERS = ("x-ratelimit-limit", "x-ratelimit-remaining", "x-ratelimit-reset")

Operation = Callable[[], Awaitable[httpx.Response]]
Sleeper = Callable[[float], Awaitable[None]]


def is_rate_limited(error: BaseException) -> bool:
    """True if the error is an HTTP 429 response."""
    return (
        isinstance(error, httpx.HTTPStatusError)
        and error.response is not None
        and error.response.status_code == 429
    )


class RateLimitedExecutor:
    """Executes an HTTP operation with retry and exponential 429 backoff."""

    def __init__(
        self,
        retries: int = 5,
        base_delay_ms: int = 5000,
        events: Optional[EventSink] = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        """Initialize executor.

        Args:
            retries: Total number of attempts per call
            base_delay_ms: Initial delay between attempts in milliseconds
            events: Event sink for warnings and rate-limit info
            sleep: Coroutine used to wait (seconds); replaced in tests
        """
        if retries < 1:
            raise ValueError("retries must be >= 1")
        self.retries = retries
        self.base_delay_ms = base_delay_ms
        self.events = events or LoggingEventSink()
        self._sleep = sleep

    async def execute(self, operation: Operation) -> httpx.Response:
        """Run ``operation`` until it returns a 2xx response.

        Raises:
            httpx.HTTPError: Last non-429 error once the budget is spent
            RetryExhaustedError: Budget consumed by rate limiting
        """
        delay = self.base_delay_ms

        for i in range(self.retries):
            try:
                response = await operation()
                response.raise_for_status()
                self._log_rate_limit_headers(response)
                return response

            except Exception as e:
                if is_rate_limited(e):
                    self.events.warn(f"Rate limit hit (429). Retrying in {delay}ms...")
                    await self._sleep(delay / 1000)
                    delay *= 2
                elif i == self.retries - 1:
                    raise
                else:
                    self.events.warn(
                        f"API retry {i + 1}/{self.retries} failed: {e}. Retrying in {delay}ms..."
                    )
                    await self._sleep(delay / 1000)

        raise RetryExhaustedError(
            f"Request still rate limited after {self.retries} attempts"
        )

    def _log_rate_limit_headers(self, response: httpx.Response) -> None:
        headers = {name: response.headers.get(name) for name in RATE_LIMIT_HEADERS}
        if any(value is not None for value in headers.values()):
            self.events.info(
                "Rate Limit Headers: "
                f"limit={headers['x-ratelimit-limit']}, "
                f"remaining={headers['x-ratelimit-remaining']}, "
                f"reset={headers['x-ratelimit-reset']}"
            )
