"""Euclid testnet swap bot.

Runs batches of ETH -> EUCLID / ETH -> ANDR swaps on Arbitrum Sepolia through
the Euclid swap API.
"""

__version__ = "0.1.0"
