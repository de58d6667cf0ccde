"""Euclid protocol swap API client.

The same endpoint serves two purposes:
1. Quote: payload with placeholder zero outputs; the response ``meta`` field
   is a JSON string carrying ``swaps.path[0].amount_out``.
2. Build: payload with the quoted amount substituted; the response carries the
   calldata in ``msgs[0].data`` and echoes the sender.
"""

import json
import logging
from typing import Optional

import httpx

from euclidbot.errors import CalldataError, QuoteError, SenderMismatchError
from euclidbot.events import EventSink, LoggingEventSink
from euclidbot.routing.base import Quote, SwapCalldata, SwapRequest
from euclidbot.utils.retry import RateLimitedExecutor

logger = logging.getLogger(__name__)

SOURCE_CHAIN_UID = "arbitrum"
VSL_CHAIN_UID = "vsl"
DEX_NAME = "euclid"
PARTNER_FEE_BPS = 10

NATIVE_ETH_ASSET = {
    "token": "eth",
    "token_type": {
        "__typename": "NativeTokenType",
        "native": {"__typename": "NativeToken", "denom": "eth"},
    },
}


def build_swap_payload(request: SwapRequest, quote: Optional[Quote] = None) -> dict:
    """Build the swap API request body.

    Without a quote the payload is a quote request: the cross-chain limit is
    the route's default amount and every hop amount is zero. With a quote the
    real amount_out and per-hop breakdown are filled in.
    """
    route = request.route
    amount_in = str(request.amount_in)

    if quote is None:
        limit = route.default_amount_out
        amount_out = "0"
        hops = [f"{token}: 0" for token in route.route]
    else:
        limit = quote.amount_out
        amount_out = quote.amount_out
        hops = [f"{token}: {amount}" for token, amount in quote.per_hop_amounts]

    return {
        "amount_in": amount_in,
        "asset_in": NATIVE_ETH_ASSET,
        "slippage": str(request.slippage_bps),
        "cross_chain_addresses": [
            {
                "user": {
                    "address": request.target_address,
                    "chain_uid": route.target_chain_uid,
                },
                "limit": {"less_than_or_equal": limit},
            }
        ],
        "partnerFee": {
            "partner_fee_bps": PARTNER_FEE_BPS,
            "recipient": request.sender_address,
        },
        "sender": {"address": request.sender_address, "chain_uid": SOURCE_CHAIN_UID},
        "swap_path": {
            "path": [
                {
                    "route": list(route.route),
                    "dex": DEX_NAME,
                    "amount_in": amount_in,
                    "amount_out": amount_out,
                    "chain_uid": VSL_CHAIN_UID,
                    "amount_out_for_hops": hops,
                }
            ],
            "total_price_impact": "0.00",
        },
    }


def extract_amount_out(data: dict) -> Optional[str]:
    """Read ``swaps.path[0].amount_out`` from the JSON-encoded ``meta`` field.

    Returns None when the response has no meta at all.

    Raises:
        QuoteError: meta is present but not in the expected shape
    """
    meta = data.get("meta")
    if not meta:
        return None

    try:
        parsed = json.loads(meta) if isinstance(meta, str) else meta
        amount_out = parsed["swaps"]["path"][0]["amount_out"]
    except (ValueError, KeyError, IndexError, TypeError) as e:
        raise QuoteError(f"Malformed quote meta: {e}") from e

    return "" if amount_out is None else str(amount_out)


class EuclidSwapClient:
    """Quote resolver and transaction builder for the Euclid swap API."""

    def __init__(
        self,
        api_url: str,
        executor: RateLimitedExecutor,
        referer: str = "https://testnet.euclidswap.io/",
        timeout: float = 30.0,
        allow_fallback_quote: bool = True,
        events: Optional[EventSink] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize client.

        Args:
            api_url: Swap endpoint URL
            executor: Retry wrapper for the HTTP calls
            referer: Referer header expected by the API
            timeout: HTTP timeout in seconds
            allow_fallback_quote: Use the route default when meta is missing
            events: Event sink
            transport: Optional httpx transport (tests)
        """
        self.api_url = api_url
        self.executor = executor
        self.referer = referer
        self.timeout = timeout
        self.allow_fallback_quote = allow_fallback_quote
        self.events = events or LoggingEventSink()
        self._transport = transport

    def _get_headers(self) -> dict:
        return {
            "accept": "application/json, text/plain, */*",
            "content-type": "application/json",
            "Referer": self.referer,
        }

    async def _post(self, payload: dict) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await self.executor.execute(
                lambda: client.post(self.api_url, json=payload, headers=self._get_headers())
            )
            return response.json()

    async def get_quote(self, request: SwapRequest) -> Quote:
        """Request a quote and resolve amount_out.

        Raises:
            QuoteError: No usable amount_out; the attempt should be skipped
        """
        route = request.route
        logger.debug(f"Requesting quote: {request.amount_in} wei ETH -> {route.target_token}")

        data = await self._post(build_swap_payload(request))
        self.events.info("Quote received")

        amount_out = extract_amount_out(data)
        is_fallback = False
        if amount_out is None:
            if not self.allow_fallback_quote:
                raise QuoteError("Quote response has no meta and fallback quotes are disabled")
            self.events.warn(
                f"Quote response has no meta, using default amount_out {route.default_amount_out}"
            )
            amount_out = route.default_amount_out
            is_fallback = True

        if not amount_out or amount_out == "0":
            raise QuoteError("Invalid amount_out in API response")
        if not (amount_out.isascii() and amount_out.isdigit()):
            raise QuoteError(f"Non-integer amount_out in API response: {amount_out}")

        return Quote(
            amount_out=amount_out,
            per_hop_amounts=route.hop_amounts(amount_out),
            is_fallback=is_fallback,
        )

    async def build_swap(self, request: SwapRequest, quote: Quote) -> SwapCalldata:
        """Fetch calldata for a quoted swap.

        Raises:
            CalldataError: Response has no msgs[0].data
            SenderMismatchError: Echoed sender differs from the wallet
        """
        if not quote.is_usable:
            raise QuoteError("Cannot build a swap from an empty quote")

        data = await self._post(build_swap_payload(request, quote))
        self.events.info("Swap response received")

        msgs = data.get("msgs") or []
        calldata = msgs[0].get("data") if msgs and isinstance(msgs[0], dict) else None
        if not calldata:
            raise CalldataError("Calldata not found in API response")

        sender = (data.get("sender") or {}).get("address") or ""
        if sender.lower() != request.sender_address.lower():
            raise SenderMismatchError(sender, request.sender_address)

        return SwapCalldata(data=calldata, sender_address=sender, raw=data)
