"""Tests for the rate-limited request executor."""

import httpx
import pytest

from euclidbot.errors import RetryExhaustedError
from euclidbot.events import EventLevel
from euclidbot.utils.retry import RateLimitedExecutor, is_rate_limited

URL = "https://api.test/swap"


def make_response(status: int, headers: dict = None) -> httpx.Response:
    return httpx.Response(status, headers=headers, json={}, request=httpx.Request("POST", URL))


def scripted(*steps):
    """Operation returning responses / raising exceptions in order."""
    calls = []

    async def operation():
        step = steps[len(calls)]
        calls.append(step)
        if isinstance(step, Exception):
            raise step
        return step

    operation.calls = calls
    return operation


class TestRateLimitedExecutor:
    """Tests for retry and backoff behaviour."""

    @pytest.mark.asyncio
    async def test_success_first_try(self, executor, sleep):
        op = scripted(make_response(200))

        response = await executor.execute(op)

        assert response.status_code == 200
        assert len(op.calls) == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_429_backoff_doubles(self, executor, sleep, events):
        """Three 429s then success: delays 5000, 10000, 20000 ms."""
        op = scripted(make_response(429), make_response(429), make_response(429), make_response(200))

        response = await executor.execute(op)

        assert response.status_code == 200
        assert len(op.calls) == 4
        assert sleep.delays == [5.0, 10.0, 20.0]
        warnings = events.messages(EventLevel.WARN)
        assert warnings == [
            "Rate limit hit (429). Retrying in 5000ms...",
            "Rate limit hit (429). Retrying in 10000ms...",
            "Rate limit hit (429). Retrying in 20000ms...",
        ]

    @pytest.mark.asyncio
    async def test_generic_error_keeps_delay(self, executor, sleep, events):
        op = scripted(
            httpx.ConnectError("boom"),
            make_response(500),
            make_response(200),
        )

        response = await executor.execute(op)

        assert response.status_code == 200
        assert sleep.delays == [5.0, 5.0]
        assert events.messages(EventLevel.WARN)[0].startswith("API retry 1/5 failed: boom.")

    @pytest.mark.asyncio
    async def test_generic_error_after_429_uses_escalated_delay(self, executor, sleep):
        op = scripted(make_response(429), httpx.ReadTimeout("slow"), make_response(200))

        await executor.execute(op)

        assert sleep.delays == [5.0, 10.0]

    @pytest.mark.asyncio
    async def test_last_attempt_error_is_raised(self, events, sleep):
        executor = RateLimitedExecutor(retries=3, base_delay_ms=100, events=events, sleep=sleep)
        op = scripted(httpx.ConnectError("a"), httpx.ConnectError("b"), httpx.ConnectError("c"))

        with pytest.raises(httpx.ConnectError, match="c"):
            await executor.execute(op)

        assert len(op.calls) == 3
        assert sleep.delays == [0.1, 0.1]

    @pytest.mark.asyncio
    async def test_last_attempt_http_error_is_raised(self, events, sleep):
        executor = RateLimitedExecutor(retries=2, base_delay_ms=100, events=events, sleep=sleep)
        op = scripted(make_response(502), make_response(503))

        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await executor.execute(op)

        assert exc_info.value.response.status_code == 503

    @pytest.mark.asyncio
    async def test_rate_limited_until_budget_exhausted(self, events, sleep):
        executor = RateLimitedExecutor(retries=3, base_delay_ms=1000, events=events, sleep=sleep)
        op = scripted(make_response(429), make_response(429), make_response(429))

        with pytest.raises(RetryExhaustedError):
            await executor.execute(op)

        assert sleep.delays == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_rate_limit_headers_logged(self, executor, events):
        op = scripted(make_response(200, headers={
            "x-ratelimit-limit": "100",
            "x-ratelimit-remaining": "99",
        }))

        await executor.execute(op)

        infos = events.messages(EventLevel.INFO)
        assert infos == ["Rate Limit Headers: limit=100, remaining=99, reset=None"]

    @pytest.mark.asyncio
    async def test_no_header_event_without_headers(self, executor, events):
        await executor.execute(scripted(make_response(200)))

        assert events.messages(EventLevel.INFO) == []

    def test_invalid_retry_budget(self):
        with pytest.raises(ValueError):
            RateLimitedExecutor(retries=0)

    def test_is_rate_limited(self):
        error_429 = httpx.HTTPStatusError("429", request=make_response(429).request, response=make_response(429))
        error_500 = httpx.HTTPStatusError("500", request=make_response(500).request, response=make_response(500))

        assert is_rate_limited(error_429) is True
        assert is_rate_limited(error_500) is False
        assert is_rate_limited(ValueError("x")) is False
