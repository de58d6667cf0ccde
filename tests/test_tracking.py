"""Tests for the Intract tracking reporter."""

import json

import httpx
import pytest

from euclidbot.events import EventLevel
from euclidbot.notifications.tracking import TrackingReporter
from euclidbot.utils.retry import RateLimitedExecutor

from conftest import WALLET

TRACK_URL = "https://testnet.euclidswap.io/api/intract-track"
TX_HASH = "0x" + "ab" * 32


def make_reporter(executor, events, handler) -> TrackingReporter:
    return TrackingReporter(
        url=TRACK_URL,
        referral_code="EUCLIDEAN667247",
        executor=executor,
        events=events,
        transport=httpx.MockTransport(handler),
    )


class TestTrackingReporter:

    @pytest.mark.asyncio
    async def test_report_success(self, executor, events):
        captured = []

        def handler(request):
            captured.append(request)
            return httpx.Response(200, json={"ok": True})

        reporter = make_reporter(executor, events, handler)

        assert await reporter.report(TX_HASH, WALLET) is True

        request = captured[0]
        assert json.loads(request.content) == {
            "chain_uid": "arbitrum",
            "tx_hash": TX_HASH,
            "wallet_address": WALLET,
            "referral_code": "EUCLIDEAN667247",
            "type": "swap",
        }
        assert request.headers["Referer"] == "https://testnet.euclidswap.io/swap?ref=EUCLIDEAN667247"
        assert "Transaction tracked with Euclid" in events.messages(EventLevel.SUCCESS)

    @pytest.mark.asyncio
    async def test_report_failure_is_not_fatal(self, events, sleep):
        executor = RateLimitedExecutor(retries=2, base_delay_ms=10, events=events, sleep=sleep)

        def handler(request):
            return httpx.Response(503)

        reporter = make_reporter(executor, events, handler)

        assert await reporter.report(TX_HASH, WALLET) is False
        assert any(m.startswith("Failed to track transaction") for m in events.messages(EventLevel.WARN))
        assert events.messages(EventLevel.SUCCESS) == []

    @pytest.mark.asyncio
    async def test_report_retries_on_rate_limit(self, executor, events, sleep):
        responses = iter([httpx.Response(429), httpx.Response(200)])
        reporter = make_reporter(executor, events, lambda request: next(responses))

        assert await reporter.report(TX_HASH, WALLET) is True
        assert sleep.delays == [5.0]
