"""Exception hierarchy for the swap bot.

Two families:
- Batch-fatal errors (configuration, input validation, insufficient balance)
  stop a batch before any transaction is submitted.
- Attempt errors (bad quote data, missing calldata, sender mismatch,
  simulation revert) abort only the current transaction; the batch continues.
"""

from typing import Optional


class EuclidBotError(Exception):
    """Base exception for all bot errors."""
    pass


class ConfigurationError(EuclidBotError):
    """Raised when required configuration (e.g. PRIVATE_KEY) is missing."""
    pass


class ValidationError(EuclidBotError):
    """Raised when user-supplied batch parameters are invalid."""
    pass


class InsufficientBalanceError(EuclidBotError):
    """Raised when the wallet cannot cover the whole batch."""

    def __init__(self, required: str, available: str):
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient ETH balance. Required: {required} ETH, Available: {available} ETH"
        )


class RetryExhaustedError(EuclidBotError):
    """Raised when every retry slot was consumed without a response."""
    pass


class AttemptError(EuclidBotError):
    """Base for errors that abort a single attempt only."""
    pass


class QuoteError(AttemptError):
    """Quote response has no usable amount_out."""
    pass


class CalldataError(AttemptError):
    """Swap response has no calldata."""
    pass


class SenderMismatchError(AttemptError):
    """Swap API echoed a sender different from the wallet."""

    def __init__(self, returned: str, expected: str):
        self.returned = returned
        self.expected = expected
        super().__init__(
            f"API returned incorrect sender address: {returned}. Expected: {expected}"
        )


class SimulationError(AttemptError):
    """eth_call dry-run of the transaction reverted."""

    def __init__(self, message: str, reason: Optional[str] = None):
        self.reason = reason
        super().__init__(message)


def revert_reason(error: BaseException) -> Optional[str]:
    """Extract a revert reason from an exception, if it exposes one.

    web3 raises ContractLogicError with the decoded reason as ``message``;
    other errors may carry a ``reason`` attribute.
    """
    reason = getattr(error, "reason", None)
    if reason:
        return str(reason)
    message = getattr(error, "message", None)
    if isinstance(message, str) and "revert" in message.lower():
        return message
    return None
