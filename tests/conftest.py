from __future__ import annotations

from typing import Any, Dict, List, Tuple

import pytest

from oroswap_bot.config import ProtocolConfig


class FakeZigClient:
    """In-memory stand-in for the signing client; records every call."""

    def __init__(self, balances: Dict[str, int] | None = None, return_amount: int = 0) -> None:
        self.balances = dict(balances or {})
        self.return_amount = return_amount
        self.executed: List[Tuple[str, str, Dict[str, Any], List[Tuple[int, str]]]] = []
        self.queries: List[Tuple[str, Dict[str, Any]]] = []
        self.execute_error: Exception | None = None
        self.balance_error: Exception | None = None
        self._next_tx = 0

    def get_balance(self, address: str, denom: str) -> int:  # noqa: ARG002
        if self.balance_error is not None:
            raise self.balance_error
        return self.balances.get(denom, 0)

    def query_smart(self, contract: str, query: Dict[str, Any]) -> Dict[str, Any]:
        self.queries.append((contract, query))
        return {"return_amount": str(self.return_amount), "spread_amount": "0", "commission_amount": "0"}

    def execute(self, sender: str, contract: str, msg: Dict[str, Any], funds: List[Tuple[int, str]]) -> str:
        if self.execute_error is not None:
            raise self.execute_error
        self.executed.append((sender, contract, msg, funds))
        self._next_tx += 1
        return f"TXHASH{self._next_tx}"


class FakeSession:
    def __init__(self, client: FakeZigClient, address: str = "zig1testaddress") -> None:
        self.client = client
        self.address = address


@pytest.fixture
def cfg() -> ProtocolConfig:
    return ProtocolConfig(max_cycle_attempts=0, retry_backoff_factor=1.0)


@pytest.fixture
def fake_client() -> FakeZigClient:
    return FakeZigClient()


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)

    @property
    def total(self) -> float:
        return sum(self.calls)


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()
