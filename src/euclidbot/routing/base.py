"""Swap kinds, routes and quote data types."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class SwapKind(str, Enum):
    """Target token of a swap."""

    EUCLID = "euclid"
    ANDR = "andr"

    @property
    def description(self) -> str:
        return f"ETH to {self.value.upper()}"


# Empirical amount ratios for the intermediate hops of the ETH -> ANDR route,
# relative to the final ANDR amount. Tied to testnet pool prices.
ANDR_HOP_RATIOS: dict[str, float] = {
    "euclid": 9.934,
    "usdc": 139.36,
    "usdt": 271.87,
}


@dataclass(frozen=True)
class RouteSpec:
    """Fixed hop path and defaults for one swap kind."""

    kind: SwapKind
    target_chain_uid: str
    route: tuple[str, ...]
    default_amount_out: str
    gas_limit: int  # Fallback when gas estimation fails
    hop_ratios: dict[str, float] = field(default_factory=dict)

    @property
    def target_token(self) -> str:
        return self.route[-1]

    def hop_amounts(self, amount_out: str) -> tuple[tuple[str, str], ...]:
        """Per-hop output amounts (excluding the native input token).

        Intermediate hops are ``floor(amount_out * ratio)``; the last hop is
        ``amount_out`` itself.
        """
        final = int(amount_out)
        hops = []
        for token in self.route[1:-1]:
            ratio = self.hop_ratios.get(token)
            if ratio is None:
                raise ValueError(f"No hop ratio configured for {token}")
            hops.append((token, str(math.floor(final * ratio))))
        hops.append((self.target_token, amount_out))
        return tuple(hops)


ROUTES: dict[SwapKind, RouteSpec] = {
    SwapKind.EUCLID: RouteSpec(
        kind=SwapKind.EUCLID,
        target_chain_uid="optimism",
        route=("eth", "euclid"),
        default_amount_out="11580659",
        gas_limit=812028,
    ),
    SwapKind.ANDR: RouteSpec(
        kind=SwapKind.ANDR,
        target_chain_uid="andromeda",
        route=("eth", "euclid", "usdc", "usdt", "andr"),
        default_amount_out="1471120",
        gas_limit=1500000,
        hop_ratios=ANDR_HOP_RATIOS,
    ),
}


def get_route(kind: SwapKind) -> RouteSpec:
    """Get the route spec for a swap kind."""
    return ROUTES[kind]


@dataclass(frozen=True)
class SwapRequest:
    """Parameters of one swap attempt. Amounts are in wei."""

    kind: SwapKind
    amount_in: int
    sender_address: str
    target_address: str
    slippage_bps: int = 500

    def __post_init__(self):
        if self.amount_in <= 0:
            raise ValueError("amount_in must be positive")

    @property
    def route(self) -> RouteSpec:
        return get_route(self.kind)


@dataclass(frozen=True)
class Quote:
    """Resolved quote for a swap request."""

    amount_out: str
    per_hop_amounts: tuple[tuple[str, str], ...] = ()
    is_fallback: bool = False  # amount_out came from the hardcoded default

    @property
    def is_usable(self) -> bool:
        return bool(self.amount_out) and self.amount_out != "0"


@dataclass(frozen=True)
class SwapCalldata:
    """Calldata returned by the swap API for a built swap."""

    data: str
    sender_address: str
    raw: Optional[dict] = field(default=None, compare=False, repr=False)
