"""Pytest configuration and fixtures."""

import json
import os
from typing import Optional

import httpx
import pytest

# Set test environment
os.environ["PRIVATE_KEY"] = ""
os.environ["DEBUG"] = "true"

from euclidbot.chain.client import ChainClient
from euclidbot.events import RecordingEventSink
from euclidbot.utils.retry import RateLimitedExecutor

WALLET = "0xAbCdEf0123456789aBcDeF0123456789AbCdEf01"
ROUTER = "0x7f2CC9FE79961f628Da671Ac62d1f2896638edd5"
CALLDATA = "0xdeadbeef"


class FakeChainClient(ChainClient):
    """In-memory chain client that records every call."""

    def __init__(
        self,
        balance: int = 10**18,
        nonce: int = 7,
        gas_estimate: Optional[int] = 500000,
        call_error: Optional[Exception] = None,
        receipt_status: int = 1,
        gas_used: int = 420000,
    ):
        self.balance = balance
        self.nonce = nonce
        self.gas_estimate = gas_estimate
        self.call_error = call_error
        self.receipt_status = receipt_status
        self.gas_used = gas_used
        self.calls: list[tuple[str, object]] = []
        self.sent: list[dict] = []

    @property
    def address(self) -> str:
        return WALLET

    @property
    def chain_id(self) -> int:
        return 421614

    def called(self, name: str) -> int:
        return sum(1 for op, _ in self.calls if op == name)

    async def get_balance(self, address: str) -> int:
        self.calls.append(("get_balance", address))
        return self.balance

    async def get_nonce(self, address: str) -> int:
        self.calls.append(("get_nonce", address))
        return self.nonce

    async def estimate_gas(self, tx: dict) -> int:
        self.calls.append(("estimate_gas", tx))
        if self.gas_estimate is None:
            raise ValueError("execution reverted: gas required exceeds allowance")
        return self.gas_estimate

    async def call(self, tx: dict) -> bytes:
        self.calls.append(("call", tx))
        if self.call_error is not None:
            raise self.call_error
        return b""

    async def send_transaction(self, tx: dict) -> str:
        self.calls.append(("send_transaction", tx))
        self.sent.append(tx)
        self.nonce += 1
        return "0x" + f"{len(self.sent):064x}"

    async def wait_for_receipt(self, tx_hash: str, timeout: Optional[float] = None) -> dict:
        self.calls.append(("wait_for_receipt", tx_hash))
        return {"status": self.receipt_status, "gasUsed": self.gas_used, "transactionHash": tx_hash}


class SleepRecorder:
    """Stands in for asyncio.sleep and records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def swap_api_handler(
    amount_out: Optional[str] = "11000000",
    calldata: Optional[str] = CALLDATA,
    sender: str = WALLET,
    seen: Optional[list] = None,
):
    """MockTransport handler imitating the Euclid swap endpoint.

    Requests whose swap_path amount_out is "0" are quotes; others are builds.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if seen is not None:
            seen.append(body)

        if body["swap_path"]["path"][0]["amount_out"] == "0":
            data = {}
            if amount_out is not None:
                data["meta"] = json.dumps({"swaps": {"path": [{"amount_out": amount_out}]}})
            return httpx.Response(200, json=data)

        msgs = [{"data": calldata}] if calldata is not None else []
        return httpx.Response(200, json={"msgs": msgs, "sender": {"address": sender}})

    return handler


@pytest.fixture
def events() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def executor(events, sleep) -> RateLimitedExecutor:
    return RateLimitedExecutor(retries=5, base_delay_ms=5000, events=events, sleep=sleep)


@pytest.fixture
def chain() -> FakeChainClient:
    return FakeChainClient()
