"""Chain access for the configured EVM network."""

from euclidbot.chain.client import (
    ChainClient,
    Web3ChainClient,
    format_ether,
    parse_ether,
    parse_gwei,
)

__all__ = [
    "ChainClient",
    "Web3ChainClient",
    "format_ether",
    "parse_ether",
    "parse_gwei",
]
