"""Wires settings into a ready-to-run orchestrator."""

import logging
from typing import Optional

from euclidbot.chain.client import ChainClient, Web3ChainClient
from euclidbot.config import Settings, get_settings
from euclidbot.events import EventSink, LoggingEventSink
from euclidbot.notifications.tracking import TrackingReporter
from euclidbot.routing.euclid import EuclidSwapClient
from euclidbot.swap.orchestrator import BatchOrchestrator
from euclidbot.swap.pipeline import SubmissionPipeline
from euclidbot.swap.validator import PreflightValidator
from euclidbot.utils.retry import RateLimitedExecutor

logger = logging.getLogger(__name__)


def create_chain_client(settings: Settings) -> ChainClient:
    """Create the web3 chain client.

    Raises:
        ConfigurationError: PRIVATE_KEY is not set
    """
    return Web3ChainClient(
        rpc_url=settings.rpc_url,
        private_key=settings.require_private_key(),
        chain_id=settings.chain_id,
    )


def create_orchestrator(
    settings: Optional[Settings] = None,
    events: Optional[EventSink] = None,
    chain: Optional[ChainClient] = None,
) -> BatchOrchestrator:
    """Build every component of the swap pipeline from settings."""
    settings = settings or get_settings()
    events = events or LoggingEventSink()
    chain = chain or create_chain_client(settings)

    executor = RateLimitedExecutor(
        retries=settings.retry_attempts,
        base_delay_ms=settings.retry_base_delay_ms,
        events=events,
    )
    swap_client = EuclidSwapClient(
        api_url=settings.swap_api_url,
        executor=executor,
        referer=settings.referer_url,
        timeout=settings.http_timeout,
        allow_fallback_quote=settings.allow_fallback_quote,
        events=events,
    )
    tracker = TrackingReporter(
        url=settings.tracking_url,
        referral_code=settings.referral_code,
        executor=executor,
        referer_base=settings.referer_url,
        timeout=settings.http_timeout,
        events=events,
    )
    pipeline = SubmissionPipeline(
        chain=chain,
        router_address=settings.router_address,
        max_fee_gwei=settings.max_fee_gwei,
        priority_fee_gwei=settings.priority_fee_gwei,
        receipt_timeout=settings.receipt_timeout_seconds,
        explorer_url=settings.explorer_url,
        tracker=tracker,
        events=events,
    )
    validator = PreflightValidator(chain, gas_estimate_per_tx=settings.gas_estimate_per_tx)

    logger.debug(f"Orchestrator configured: {settings.get_safe_dict()}")

    return BatchOrchestrator(
        chain=chain,
        swap_client=swap_client,
        pipeline=pipeline,
        validator=validator,
        events=events,
        min_delay_ms=settings.min_delay_ms,
        delay_jitter_ms=settings.delay_jitter_ms,
    )
