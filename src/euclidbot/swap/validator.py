"""Pre-flight balance check for a batch."""

import logging
from dataclasses import dataclass
from decimal import Decimal

from euclidbot.chain.client import ChainClient, parse_ether
from euclidbot.errors import InsufficientBalanceError, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreflightReport:
    """Balance figures for a batch, in wei."""

    balance: int
    swap_total: int
    gas_total: int

    @property
    def required_total(self) -> int:
        return self.swap_total + self.gas_total


class PreflightValidator:
    """Checks the wallet can pay for every swap plus gas before a batch."""

    def __init__(self, chain: ChainClient, gas_estimate_per_tx: Decimal = Decimal("0.00009794")):
        self.chain = chain
        self.gas_per_tx = parse_ether(gas_estimate_per_tx)

    async def check(self, amount_in: int, count: int) -> PreflightReport:
        """Validate balance for ``count`` swaps of ``amount_in`` wei.

        Raises:
            ValidationError: Non-positive amount or count
            InsufficientBalanceError: balance < required total
        """
        if amount_in <= 0 or count <= 0:
            raise ValidationError("Invalid input. Please enter positive numbers.")

        balance = await self.chain.get_balance(self.chain.address)
        report = PreflightReport(
            balance=balance,
            swap_total=amount_in * count,
            gas_total=self.gas_per_tx * count,
        )

        logger.debug(
            f"Pre-flight: balance={balance} wei, required={report.required_total} wei"
        )

        if balance < report.required_total:
            raise InsufficientBalanceError(
                required=self.chain.format_amount(report.required_total),
                available=self.chain.format_amount(balance),
            )

        return report
