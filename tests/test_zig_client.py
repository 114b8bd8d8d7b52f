from __future__ import annotations

import time

import pytest

from oroswap_bot import zig_client
from oroswap_bot.errors import ConfigError, InitializationError

# BIP-39 test vector, never holds funds
MNEMONIC = "abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon abandon about"


@pytest.mark.parametrize("mnemonic,rpc", [("", "https://rest.zigchain.com"), ("word " * 24, ""), ("   ", "  "), (None, None)])
def test_connect_requires_mnemonic_and_endpoint(cfg, mnemonic, rpc) -> None:
    with pytest.raises(ConfigError):
        zig_client.connect(mnemonic, rpc, cfg)


def test_connect_wraps_unreachable_endpoint(cfg, monkeypatch: pytest.MonkeyPatch) -> None:
    def unreachable(rpc_endpoint, timeout=8.0):
        raise zig_client.requests.ConnectionError("connection refused")

    monkeypatch.setattr(zig_client, "resolve_chain_id", unreachable)
    with pytest.raises(InitializationError, match="connection refused"):
        zig_client.connect(MNEMONIC, "https://rest.zigchain.com", cfg)


def test_format_funds_sorts_and_drops_zero() -> None:
    funds = [(150000, "uzig"), (42, "coin.zig1abc.uoro"), (0, "uatom")]
    assert zig_client.format_funds(funds) == "42coin.zig1abc.uoro,150000uzig"
    assert zig_client.format_funds([(0, "uzig")]) == ""


def test_normalize_endpoint() -> None:
    assert zig_client.normalize_endpoint("https://rest.zigchain.com/") == "rest+https://rest.zigchain.com"
    assert zig_client.normalize_endpoint("grpc+https://grpc.zigchain.com") == "grpc+https://grpc.zigchain.com"


class _FakeResponse:
    def __init__(self, payload) -> None:
        self._payload = payload

    def raise_for_status(self) -> None:
        return None

    def json(self):
        return self._payload


def test_resolve_chain_id_from_node_info(monkeypatch: pytest.MonkeyPatch) -> None:
    seen = {}

    def fake_get(url, timeout):
        seen["url"] = url
        return _FakeResponse({"default_node_info": {"network": "zig-test-2"}})

    monkeypatch.setattr(zig_client.config, "CHAIN_ID", "")
    monkeypatch.setattr(zig_client.requests, "get", fake_get)
    assert zig_client.resolve_chain_id("https://rest.zigchain.com") == "zig-test-2"
    assert seen["url"] == "https://rest.zigchain.com" + zig_client.NODE_INFO_PATH


def test_resolve_chain_id_prefers_setting(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(zig_client.config, "CHAIN_ID", "zigchain-1")
    assert zig_client.resolve_chain_id("grpc+https://grpc.zigchain.com") == "zigchain-1"


def test_resolve_chain_id_grpc_needs_setting(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(zig_client.config, "CHAIN_ID", "")
    with pytest.raises(ConfigError):
        zig_client.resolve_chain_id("grpc+https://grpc.zigchain.com")


def test_rpc_call_times_out() -> None:
    with pytest.raises(TimeoutError):
        zig_client._rpc_call(time.sleep, 2, timeout=0.05)


def test_rpc_call_reraises_worker_error() -> None:
    def broken():
        raise KeyError("missing")

    with pytest.raises(KeyError):
        zig_client._rpc_call(broken, timeout=1)


class _FakeTx:
    def __init__(self) -> None:
        self.tx_hash = "ABCDEF0123"
        self.waited_for = None

    def wait_to_complete(self, timeout=None):
        self.waited_for = timeout
        return self


class _FakeContract:
    def __init__(self) -> None:
        self.calls = []
        self.tx = _FakeTx()

    def execute(self, args, sender, funds=None):
        self.calls.append((args, sender, funds))
        return self.tx

    def query(self, args):
        return {"return_amount": "12"}


class _FakeLedger:
    def query_bank_balance(self, address, denom=None):
        return 777


def _client() -> tuple[zig_client.ZigClient, _FakeContract]:
    wallet = zig_client.LocalWallet.from_mnemonic(MNEMONIC, prefix="zig")
    client = zig_client.ZigClient(_FakeLedger(), wallet, timeout_sec=2, confirm_timeout_sec=30)
    contract = _FakeContract()
    client._contract = lambda address: contract  # type: ignore[method-assign]
    return client, contract


def test_zig_client_address_uses_zig_prefix() -> None:
    client, _ = _client()
    assert client.address.startswith("zig1")


def test_zig_client_execute_waits_and_returns_hash() -> None:
    client, contract = _client()
    tx_hash = client.execute(client.address, "zig1router", {"swap": {}}, [(5, "uzig"), (0, "uoro")])

    assert tx_hash == "ABCDEF0123"
    args, _sender, funds = contract.calls[0]
    assert args == {"swap": {}}
    assert funds == "5uzig"
    assert contract.tx.waited_for.total_seconds() == 30


def test_zig_client_rejects_foreign_sender() -> None:
    client, contract = _client()
    with pytest.raises(ValueError):
        client.execute("zig1someoneelse", "zig1router", {"swap": {}}, [(5, "uzig")])
    assert contract.calls == []


def test_zig_client_balance_and_query() -> None:
    client, _ = _client()
    assert client.get_balance(client.address, "uzig") == 777
    assert client.query_smart("zig1router", {"simulation": {}}) == {"return_amount": "12"}


class _SlowContract(_FakeContract):
    def __init__(self, delay: float) -> None:
        super().__init__()
        self.delay = delay
        self.finished = 0

    def execute(self, args, sender, funds=None):
        time.sleep(self.delay)
        self.finished += 1
        return super().execute(args, sender, funds)


def test_zig_client_execute_outlives_read_timeout() -> None:
    client, _ = _client()
    slow = _SlowContract(delay=0.3)
    client._timeout = 0.05
    client._contract = lambda address: slow  # type: ignore[method-assign]

    tx_hash = client.execute(client.address, "zig1router", {"swap": {}}, [(5, "uzig")])

    # the caller only returns once the broadcast has finished, so nothing is left in flight
    assert tx_hash == "ABCDEF0123"
    assert slow.finished == 1
    assert len(slow.calls) == 1
