"""Routing module: swap kinds, routes and the Euclid swap API client."""

from euclidbot.routing.base import (
    ANDR_HOP_RATIOS,
    ROUTES,
    Quote,
    RouteSpec,
    SwapCalldata,
    SwapKind,
    SwapRequest,
    get_route,
)
from euclidbot.routing.euclid import EuclidSwapClient, build_swap_payload, extract_amount_out

__all__ = [
    # Data model
    "ANDR_HOP_RATIOS",
    "ROUTES",
    "Quote",
    "RouteSpec",
    "SwapCalldata",
    "SwapKind",
    "SwapRequest",
    "get_route",
    # API client
    "EuclidSwapClient",
    "build_swap_payload",
    "extract_amount_out",
]
