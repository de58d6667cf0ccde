"""Submission pipeline for a single swap transaction.

Stages:
    BUILT -> GAS_ESTIMATED -> SIMULATED -> SENT -> CONFIRMED | FAILED

- Gas estimation failure is not fatal: the route's fallback gas limit is kept.
- Simulation failure raises SimulationError; nothing is broadcast.
- A mined transaction with status != 1 is a final failure (no resubmission).
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from euclidbot.chain.client import ChainClient, parse_gwei
from euclidbot.errors import SimulationError, revert_reason
from euclidbot.events import EventSink, LoggingEventSink
from euclidbot.notifications.tracking import TrackingReporter
from euclidbot.routing.base import SwapCalldata, SwapKind, get_route

logger = logging.getLogger(__name__)

GAS_BUFFER_PERCENT = 110


class TxStage(str, Enum):
    BUILT = "built"
    GAS_ESTIMATED = "gas_estimated"
    SIMULATED = "simulated"
    SENT = "sent"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class PendingTransaction:
    """Transaction about to be submitted. Only gas_limit changes after build."""

    to: str
    value: int
    data: str
    gas_limit: int
    nonce: int
    max_fee_per_gas: int
    max_priority_fee_per_gas: int
    chain_id: int

    def to_tx_params(self) -> dict[str, Any]:
        """web3 transaction dict."""
        return {
            "to": self.to,
            "value": self.value,
            "data": self.data,
            "gas": self.gas_limit,
            "nonce": self.nonce,
            "maxFeePerGas": self.max_fee_per_gas,
            "maxPriorityFeePerGas": self.max_priority_fee_per_gas,
            "chainId": self.chain_id,
        }


@dataclass(frozen=True)
class TxResult:
    """Outcome of a mined transaction."""

    tx_hash: str
    success: bool
    gas_used: int


class SubmissionPipeline:
    """Builds, estimates, simulates, sends and confirms one transaction."""

    def __init__(
        self,
        chain: ChainClient,
        router_address: str,
        max_fee_gwei: Decimal = Decimal("0.1"),
        priority_fee_gwei: Decimal = Decimal("0.1"),
        receipt_timeout: Optional[float] = 300.0,
        explorer_url: str = "https://sepolia.arbiscan.io",
        tracker: Optional[TrackingReporter] = None,
        events: Optional[EventSink] = None,
    ):
        """Initialize pipeline.

        Args:
            chain: Chain client used for every network call
            router_address: Contract the swap is sent to
            max_fee_gwei: Fixed maxFeePerGas
            priority_fee_gwei: Fixed maxPriorityFeePerGas
            receipt_timeout: Seconds to wait for a receipt (None = client default)
            explorer_url: Base URL for transaction links
            tracker: Reporter invoked after a successful confirmation
            events: Event sink
        """
        self.chain = chain
        self.router_address = router_address
        self.max_fee_per_gas = parse_gwei(max_fee_gwei)
        self.max_priority_fee_per_gas = parse_gwei(priority_fee_gwei)
        self.receipt_timeout = receipt_timeout
        self.explorer_url = explorer_url.rstrip("/")
        self.tracker = tracker
        self.events = events or LoggingEventSink()
        self.stage: Optional[TxStage] = None

    def _enter(self, stage: TxStage) -> None:
        logger.debug(f"Transaction stage: {self.stage} -> {stage}")
        self.stage = stage

    async def build(self, kind: SwapKind, amount_in: int, calldata: SwapCalldata) -> PendingTransaction:
        nonce = await self.chain.get_nonce(self.chain.address)
        tx = PendingTransaction(
            to=self.router_address,
            value=amount_in,
            data=calldata.data,
            gas_limit=get_route(kind).gas_limit,
            nonce=nonce,
            max_fee_per_gas=self.max_fee_per_gas,
            max_priority_fee_per_gas=self.max_priority_fee_per_gas,
            chain_id=self.chain.chain_id,
        )
        self._enter(TxStage.BUILT)
        return tx

    async def estimate_gas(self, tx: PendingTransaction) -> PendingTransaction:
        """Raise gas_limit to 110% of the network estimate, if available."""
        try:
            estimate = await self.chain.estimate_gas(tx.to_tx_params())
        except Exception as e:
            self.events.warn(
                f"Gas estimation failed: {e}. Using manual gas limit: {tx.gas_limit}"
            )
        else:
            self.events.info(f"Estimated gas: {estimate}")
            tx.gas_limit = estimate * GAS_BUFFER_PERCENT // 100
        self._enter(TxStage.GAS_ESTIMATED)
        return tx

    async def simulate(self, tx: PendingTransaction) -> None:
        """Dry-run the exact transaction.

        Raises:
            SimulationError: The call reverted or failed
        """
        try:
            await self.chain.call(tx.to_tx_params())
        except Exception as e:
            reason = revert_reason(e) or str(e)
            raise SimulationError(f"Transaction simulation failed: {reason}", reason=reason) from e
        self._enter(TxStage.SIMULATED)

    async def send(self, tx: PendingTransaction) -> str:
        tx_hash = await self.chain.send_transaction(tx.to_tx_params())
        self._enter(TxStage.SENT)
        self.events.info(f"Transaction sent! Hash: {tx_hash}")
        return tx_hash

    async def confirm(self, tx_hash: str) -> TxResult:
        self.events.loading("Waiting for confirmation...")
        receipt = await self.chain.wait_for_receipt(tx_hash, timeout=self.receipt_timeout)

        success = receipt.get("status") == 1
        result = TxResult(
            tx_hash=tx_hash,
            success=success,
            gas_used=int(receipt.get("gasUsed", 0)),
        )

        if success:
            self._enter(TxStage.CONFIRMED)
            self.events.success(f"Transaction successful! Gas used: {result.gas_used}")
        else:
            self._enter(TxStage.FAILED)
            self.events.error("Transaction failed!")
        return result

    async def submit(self, kind: SwapKind, amount_in: int, calldata: SwapCalldata) -> TxResult:
        """Run every stage for one swap.

        Raises:
            SimulationError: Simulation reverted; no transaction was sent
        """
        self.stage = None
        self.events.loading("Executing swap transaction...")

        tx = await self.build(kind, amount_in, calldata)
        await self.estimate_gas(tx)
        await self.simulate(tx)
        tx_hash = await self.send(tx)
        result = await self.confirm(tx_hash)

        if result.success:
            if self.tracker is not None:
                await self.tracker.report(tx_hash, self.chain.address)
            self.events.step(f"View transaction: {self.explorer_url}/tx/{tx_hash}")

        return result
