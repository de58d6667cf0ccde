"""Chain client for the configured EVM network.

``ChainClient`` is the only surface the pipeline and the validator talk to.
``Web3ChainClient`` implements it on web3.py's async API with a local
eth_account signer.
"""

import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Optional, Union

from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

logger = logging.getLogger(__name__)

TxParams = dict[str, Any]


def parse_ether(amount: Union[str, int, float, Decimal]) -> int:
    """Convert an ETH amount to wei."""
    return Web3.to_wei(Decimal(str(amount)), "ether")


def format_ether(wei: int) -> str:
    """Convert wei to a plain decimal ETH string (no exponent)."""
    value = Web3.from_wei(wei, "ether")
    return format(Decimal(value).normalize(), "f")


def parse_gwei(amount: Union[str, int, float, Decimal]) -> int:
    """Convert a gwei amount to wei."""
    return Web3.to_wei(Decimal(str(amount)), "gwei")


class ChainClient(ABC):
    """Network operations used by the swap pipeline."""

    @property
    @abstractmethod
    def address(self) -> str:
        """Checksummed wallet address."""
        pass

    @property
    @abstractmethod
    def chain_id(self) -> int:
        pass

    @abstractmethod
    async def get_balance(self, address: str) -> int:
        """Native balance in wei."""
        pass

    @abstractmethod
    async def get_nonce(self, address: str) -> int:
        """Pending transaction count."""
        pass

    @abstractmethod
    async def estimate_gas(self, tx: TxParams) -> int:
        pass

    @abstractmethod
    async def call(self, tx: TxParams) -> bytes:
        """Read-only execution of ``tx`` (raises on revert)."""
        pass

    @abstractmethod
    async def send_transaction(self, tx: TxParams) -> str:
        """Sign and broadcast ``tx``, returning the 0x-prefixed hash."""
        pass

    @abstractmethod
    async def wait_for_receipt(self, tx_hash: str, timeout: Optional[float] = None) -> dict:
        """Wait until ``tx_hash`` is mined and return its receipt."""
        pass

    def parse_amount(self, amount: Union[str, int, float, Decimal]) -> int:
        return parse_ether(amount)

    def format_amount(self, wei: int) -> str:
        return format_ether(wei)


class Web3ChainClient(ChainClient):
    """ChainClient backed by web3.py AsyncWeb3."""

    def __init__(
        self,
        rpc_url: str,
        private_key: str,
        chain_id: int,
        web3: Optional[AsyncWeb3] = None,
    ):
        """Initialize client.

        Args:
            rpc_url: JSON-RPC endpoint
            private_key: Hex private key of the wallet
            chain_id: Expected chain id, used when signing
            web3: Pre-built AsyncWeb3 instance (tests)
        """
        self.rpc_url = rpc_url
        self._chain_id = chain_id
        self._account = Account.from_key(private_key)
        self._web3 = web3

    @property
    def web3(self) -> AsyncWeb3:
        """Lazy load web3 instance."""
        if self._web3 is None:
            self._web3 = AsyncWeb3(AsyncHTTPProvider(self.rpc_url))
        return self._web3

    @property
    def address(self) -> str:
        return self._account.address

    @property
    def chain_id(self) -> int:
        return self._chain_id

    async def get_balance(self, address: str) -> int:
        return await self.web3.eth.get_balance(Web3.to_checksum_address(address))

    async def get_nonce(self, address: str) -> int:
        return await self.web3.eth.get_transaction_count(
            Web3.to_checksum_address(address), "pending"
        )

    async def estimate_gas(self, tx: TxParams) -> int:
        return int(await self.web3.eth.estimate_gas(self._with_sender(tx)))

    async def call(self, tx: TxParams) -> bytes:
        return await self.web3.eth.call(self._with_sender(tx))

    async def send_transaction(self, tx: TxParams) -> str:
        signed = self._account.sign_transaction(self._with_sender(tx))
        tx_hash = await self.web3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3.to_hex(tx_hash)

    async def wait_for_receipt(self, tx_hash: str, timeout: Optional[float] = None) -> dict:
        kwargs = {"timeout": timeout} if timeout else {}
        receipt = await self.web3.eth.wait_for_transaction_receipt(tx_hash, **kwargs)
        return dict(receipt)

    def _with_sender(self, tx: TxParams) -> TxParams:
        params = dict(tx)
        params.setdefault("from", self.address)
        params.setdefault("chainId", self._chain_id)
        return params
