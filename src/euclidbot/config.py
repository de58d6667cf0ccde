"""Application configuration using pydantic-settings.

Everything is read from the environment (or a local .env file). The only
secret is PRIVATE_KEY, the raw hex key of the testnet wallet.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from euclidbot.errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Wallet
    # ======================
    private_key: Optional[str] = Field(default=None, description="Wallet private key (hex)")

    # ======================
    # Network
    # ======================
    rpc_url: str = Field(
        default="https://sepolia-rollup.arbitrum.io/rpc",
        description="Arbitrum Sepolia JSON-RPC URL",
    )
    chain_id: int = Field(default=421614, description="EVM chain id of the network")
    network_name: str = Field(default="Arbitrum Sepolia", description="Display name of the network")
    explorer_url: str = Field(
        default="https://sepolia.arbiscan.io", description="Block explorer base URL"
    )
    router_address: str = Field(
        default="0x7f2CC9FE79961f628Da671Ac62d1f2896638edd5",
        description="Euclid router contract receiving the swap transactions",
    )

    # ======================
    # Euclid API
    # ======================
    swap_api_url: str = Field(
        default="https://testnet.api.euclidprotocol.com/api/v1/execute/astro/swap",
        description="Euclid swap quote / execute endpoint",
    )
    tracking_url: str = Field(
        default="https://testnet.euclidswap.io/api/intract-track",
        description="Intract tracking endpoint",
    )
    referer_url: str = Field(
        default="https://testnet.euclidswap.io/", description="Referer header for API calls"
    )
    referral_code: str = Field(default="EUCLIDEAN667247", description="Referral code for tracking")
    http_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")
    allow_fallback_quote: bool = Field(
        default=True,
        description="Use the hardcoded amount_out when the quote response has no meta",
    )

    # ======================
    # Retry policy
    # ======================
    retry_attempts: int = Field(default=5, description="Retry budget per API call")
    retry_base_delay_ms: int = Field(default=5000, description="Initial retry delay (ms)")

    # ======================
    # Transactions
    # ======================
    max_fee_gwei: Decimal = Field(default=Decimal("0.1"), description="maxFeePerGas in gwei")
    priority_fee_gwei: Decimal = Field(
        default=Decimal("0.1"), description="maxPriorityFeePerGas in gwei"
    )
    gas_estimate_per_tx: Decimal = Field(
        default=Decimal("0.00009794"), description="Gas cost per tx used by the pre-flight check (ETH)"
    )
    receipt_timeout_seconds: float = Field(
        default=300.0, description="Maximum time to wait for a receipt"
    )

    # ======================
    # Batch pacing
    # ======================
    min_delay_ms: int = Field(default=15000, description="Minimum delay between transactions (ms)")
    delay_jitter_ms: int = Field(default=10000, description="Random extra delay (ms)")

    # ======================
    # Runtime
    # ======================
    debug: bool = Field(default=False, description="Enable debug logging")

    @property
    def has_private_key(self) -> bool:
        """Check if a wallet key is configured."""
        return bool(self.private_key and self.private_key.strip())

    def require_private_key(self) -> str:
        """Return the private key or fail the batch."""
        if not self.has_private_key:
            raise ConfigurationError("Private key not found in .env file")
        return self.private_key.strip()

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "network": self.network_name,
            "chain_id": self.chain_id,
            "rpc_url": self.rpc_url,
            "router_address": self.router_address,
            "swap_api_url": self.swap_api_url,
            "tracking_url": self.tracking_url,
            "private_key": "***" if self.has_private_key else "(not set)",
            "retry": {
                "attempts": self.retry_attempts,
                "base_delay_ms": self.retry_base_delay_ms,
            },
            "fees_gwei": {
                "max_fee": str(self.max_fee_gwei),
                "priority_fee": str(self.priority_fee_gwei),
            },
            "delay_ms": [self.min_delay_ms, self.min_delay_ms + self.delay_jitter_ms],
            "debug": self.debug,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
