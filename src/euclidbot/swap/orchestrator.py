"""Batch orchestrator: runs N swap attempts one after another.

Attempts are strictly sequential (nonce ordering). A failing attempt is
logged and the batch moves on; only configuration, input and balance errors
stop a batch, and those are raised before the first attempt.
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

from euclidbot.chain.client import ChainClient
from euclidbot.errors import AttemptError, ValidationError, revert_reason
from euclidbot.events import EventSink, LoggingEventSink
from euclidbot.routing.base import SwapKind, SwapRequest
from euclidbot.routing.euclid import EuclidSwapClient
from euclidbot.swap.pipeline import SubmissionPipeline, TxResult
from euclidbot.swap.state import BatchSnapshot, BatchState
from euclidbot.swap.validator import PreflightReport, PreflightValidator

logger = logging.getLogger(__name__)


class SwapMode(str, Enum):
    """User-selectable batch mode."""

    ETH_EUCLID = "eth_euclid"
    ETH_ANDR = "eth_andr"
    RANDOM_SWAP = "random_swap"

    @property
    def label(self) -> str:
        return MODE_LABELS[self]


MODE_LABELS = {
    SwapMode.ETH_EUCLID: "ETH - EUCLID (Arbitrum)",
    SwapMode.ETH_ANDR: "ETH - ANDR (Arbitrum)",
    SwapMode.RANDOM_SWAP: "Random Swap (Arbitrum)",
}


def kind_for_attempt(mode: SwapMode, index: int) -> SwapKind:
    """Swap kind for attempt ``index`` (0-based).

    Random mode alternates EUCLID on even indexes and ANDR on odd ones.
    """
    if mode == SwapMode.ETH_EUCLID:
        return SwapKind.EUCLID
    if mode == SwapMode.ETH_ANDR:
        return SwapKind.ANDR
    return SwapKind.EUCLID if index % 2 == 0 else SwapKind.ANDR


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"  # mined with status != 1, or unexpected error
    SKIPPED = "skipped"  # aborted before broadcast


@dataclass
class AttemptRecord:
    index: int
    kind: SwapKind
    outcome: AttemptOutcome
    result: Optional[TxResult] = None
    error: Optional[str] = None


@dataclass
class BatchSummary:
    mode: SwapMode
    preflight: PreflightReport
    attempts: list[AttemptRecord] = field(default_factory=list)
    snapshot: Optional[BatchSnapshot] = None

    @property
    def kinds(self) -> list[SwapKind]:
        return [a.kind for a in self.attempts]


Confirm = Callable[[PreflightReport], Union[bool, Awaitable[bool]]]


class BatchOrchestrator:
    """Drives a batch of swaps through quote, build, submit and track."""

    def __init__(
        self,
        chain: ChainClient,
        swap_client: EuclidSwapClient,
        pipeline: SubmissionPipeline,
        validator: PreflightValidator,
        events: Optional[EventSink] = None,
        min_delay_ms: int = 15000,
        delay_jitter_ms: int = 10000,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.chain = chain
        self.swap_client = swap_client
        self.pipeline = pipeline
        self.validator = validator
        self.events = events or LoggingEventSink()
        self.min_delay_ms = min_delay_ms
        self.delay_jitter_ms = delay_jitter_ms
        self._rng = rng or random.Random()
        self._sleep = sleep
        self.state = BatchState()

    def snapshot(self) -> BatchSnapshot:
        """Current progress, safe to hand to the presentation layer."""
        return self.state.snapshot()

    def next_delay_ms(self) -> int:
        """Uniform delay in [min_delay_ms, min_delay_ms + delay_jitter_ms)."""
        return self.min_delay_ms + int(self._rng.random() * self.delay_jitter_ms)

    async def prepare(self, mode: SwapMode, count: int, amount_eth) -> PreflightReport:
        """Validate inputs and balance, then emit the batch summary.

        Raises:
            ValidationError: count or amount not positive
            InsufficientBalanceError: Wallet cannot cover the batch
        """
        try:
            amount = Decimal(str(amount_eth))
        except (InvalidOperation, ValueError) as e:
            raise ValidationError("Invalid input. Please enter positive numbers.") from e
        if not isinstance(count, int) or count <= 0 or not amount.is_finite() or amount <= 0:
            raise ValidationError("Invalid input. Please enter positive numbers.")

        self.events.info(f"Connected to wallet: {self.chain.address}")

        amount_in = self.chain.parse_amount(amount)
        report = await self.validator.check(amount_in, count)

        self.events.warn("Summary:")
        self.events.step(f"Swap type: {mode.label}")
        self.events.step(f"Number of transactions: {count}")
        self.events.step(f"ETH per transaction: {amount} ETH")
        self.events.step(
            f"Total ETH (incl. gas): {self.chain.format_amount(report.required_total)} ETH"
        )
        return report

    async def run(
        self,
        mode: SwapMode,
        count: int,
        amount_eth,
        confirm: Optional[Confirm] = None,
    ) -> Optional[BatchSummary]:
        """Run a whole batch.

        Args:
            mode: Swap mode
            count: Number of transactions
            amount_eth: ETH per transaction
            confirm: Called with the pre-flight report; returning False cancels

        Returns:
            BatchSummary, or None if the user cancelled
        """
        report = await self.prepare(mode, count, amount_eth)

        if confirm is not None:
            answer = confirm(report)
            if asyncio.iscoroutine(answer):
                answer = await answer
            if not answer:
                self.events.error("Operation cancelled by user.")
                return None

        amount_in = self.chain.parse_amount(Decimal(str(amount_eth)))
        self.state = BatchState(total=count)
        summary = BatchSummary(mode=mode, preflight=report)

        for i in range(count):
            kind = kind_for_attempt(mode, i)
            summary.attempts.append(await self._run_attempt(i, count, kind, amount_in))
            self.events.progress(self.state.snapshot())

            if i < count - 1:
                delay = self.next_delay_ms()
                self.events.loading(f"Waiting {delay / 1000} seconds before next transaction...")
                await self._sleep(delay / 1000)

        summary.snapshot = self.state.snapshot()
        self.events.success("All transactions completed!")
        return summary

    async def _run_attempt(self, index: int, total: int, kind: SwapKind, amount_in: int) -> AttemptRecord:
        self.events.loading(f"Transaction {index + 1}/{total} ({kind.description}):")
        address = self.chain.address

        try:
            request = SwapRequest(
                kind=kind,
                amount_in=amount_in,
                sender_address=address,
                target_address=address,
            )

            self.events.step("Fetching swap quote for amount_out...")
            quote = await self.swap_client.get_quote(request)

            self.events.step("Building swap transaction...")
            calldata = await self.swap_client.build_swap(request, quote)

            result = await self.pipeline.submit(kind, amount_in, calldata)

        except AttemptError as e:
            self.events.error(f"{e}. Skipping transaction.")
            self.state.record_skip()
            return AttemptRecord(index, kind, AttemptOutcome.SKIPPED, error=str(e))

        except Exception as e:
            logger.debug(f"Attempt {index + 1} failed", exc_info=True)
            self.events.error(f"Error during transaction: {e}")
            reason = revert_reason(e)
            if reason:
                self.events.error(f"Revert reason: {reason}")
            self.state.record_failure()
            return AttemptRecord(index, kind, AttemptOutcome.FAILED, error=str(e))

        if result.success:
            self.state.record_success()
            return AttemptRecord(index, kind, AttemptOutcome.SUCCESS, result=result)

        self.state.record_failure()
        return AttemptRecord(index, kind, AttemptOutcome.FAILED, result=result)
