"""Swap execution module.

Provides:
- PreflightValidator: balance check before a batch
- SubmissionPipeline: estimate, simulate, send and confirm one transaction
- BatchOrchestrator: runs a batch of attempts
"""

from euclidbot.swap.orchestrator import (
    AttemptOutcome,
    BatchOrchestrator,
    BatchSummary,
    SwapMode,
    kind_for_attempt,
)
from euclidbot.swap.pipeline import PendingTransaction, SubmissionPipeline, TxResult, TxStage
from euclidbot.swap.state import BatchSnapshot, BatchState
from euclidbot.swap.validator import PreflightReport, PreflightValidator

__all__ = [
    # Orchestrator
    "AttemptOutcome",
    "BatchOrchestrator",
    "BatchSummary",
    "SwapMode",
    "kind_for_attempt",
    # Pipeline
    "PendingTransaction",
    "SubmissionPipeline",
    "TxResult",
    "TxStage",
    # State
    "BatchSnapshot",
    "BatchState",
    # Validator
    "PreflightReport",
    "PreflightValidator",
]
