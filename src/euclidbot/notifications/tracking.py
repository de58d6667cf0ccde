"""Intract transaction tracking.

Reports confirmed swaps to the Euclid referral tracker. Best-effort: a
failure is logged and never fails the transaction.
"""

import logging
from typing import Optional

import httpx

from euclidbot.events import EventSink, LoggingEventSink
from euclidbot.utils.retry import RateLimitedExecutor

logger = logging.getLogger(__name__)


class TrackingReporter:
    """Posts transaction-completion telemetry."""

    def __init__(
        self,
        url: str,
        referral_code: str,
        executor: RateLimitedExecutor,
        chain_uid: str = "arbitrum",
        referer_base: str = "https://testnet.euclidswap.io/",
        timeout: float = 30.0,
        events: Optional[EventSink] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.referral_code = referral_code
        self.executor = executor
        self.chain_uid = chain_uid
        self.referer = f"{referer_base.rstrip('/')}/swap?ref={referral_code}"
        self.timeout = timeout
        self.events = events or LoggingEventSink()
        self._transport = transport

    def build_payload(self, tx_hash: str, wallet_address: str) -> dict:
        return {
            "chain_uid": self.chain_uid,
            "tx_hash": tx_hash,
            "wallet_address": wallet_address,
            "referral_code": self.referral_code,
            "type": "swap",
        }

    async def report(self, tx_hash: str, wallet_address: str) -> bool:
        """Report a confirmed transaction.

        Returns:
            True if the tracker accepted the report
        """
        payload = self.build_payload(tx_hash, wallet_address)
        headers = {
            "accept": "application/json, text/plain, */*",
            "content-type": "application/json",
            "Referer": self.referer,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                await self.executor.execute(
                    lambda: client.post(self.url, json=payload, headers=headers)
                )
        except Exception as e:
            logger.debug(f"Tracking failed for {tx_hash}: {type(e).__name__}: {e}")
            self.events.warn(f"Failed to track transaction: {e}")
            return False

        self.events.success("Transaction tracked with Euclid")
        return True
