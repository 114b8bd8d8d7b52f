from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple
import threading, queue
import requests
from cosmpy.aerial.client import LedgerClient, NetworkConfig
from cosmpy.aerial.contract import LedgerContract
from cosmpy.aerial.wallet import LocalWallet
from cosmpy.crypto.address import Address

from . import config
from .errors import ConfigError, InitializationError

NODE_INFO_PATH = "/cosmos/base/tendermint/v1beta1/node_info"


def _rpc_call(method, *args, timeout: Optional[float] = None, **kwargs):
    """Run an SDK client method in a thread with timeout to avoid hangs."""
    if timeout is None:
        timeout = getattr(config, "RPC_TIMEOUT_SEC", 8)
    q: "queue.Queue[tuple[bool, object]]" = queue.Queue(maxsize=1)
    def _runner():
        try:
            res = method(*args, **kwargs)
            q.put((True, res))
        except Exception as e:  # pragma: no cover
            q.put((False, e))
    th = threading.Thread(target=_runner, daemon=True)
    th.start()
    try:
        ok, val = q.get(timeout=timeout)
    except queue.Empty:
        raise TimeoutError(f"RPC call timeout after {timeout}s: {getattr(method, '__name__', method)}")
    if ok:
        return val
    raise val  # re-raise exception from thread


def normalize_endpoint(rpc_endpoint: str) -> str:
    """cosmpy wants an explicit transport prefix; bare URLs are treated as REST."""
    url = rpc_endpoint.strip().rstrip("/")
    if url.startswith(("rest+", "grpc+")):
        return url
    return f"rest+{url}"


def resolve_chain_id(rpc_endpoint: str, timeout: float = 8.0) -> str:
    if config.CHAIN_ID:
        return config.CHAIN_ID
    url = normalize_endpoint(rpc_endpoint)
    if not url.startswith("rest+"):
        raise ConfigError("CHAIN_ID must be set when using a gRPC endpoint")
    resp = requests.get(url[len("rest+"):] + NODE_INFO_PATH, timeout=timeout)
    resp.raise_for_status()
    network = ((resp.json() or {}).get("default_node_info") or {}).get("network")
    if not network:
        raise InitializationError(f"Could not read chain id from {url}")
    return network


def format_funds(funds: List[Tuple[int, str]]) -> str:
    """[(amount, denom)] -> '123coin.x,456uzig'. Denoms sorted, zero amounts dropped."""
    coins = sorted((denom, int(amount)) for amount, denom in funds if int(amount) > 0)
    return ",".join(f"{amount}{denom}" for denom, amount in coins)


class ZigClient:
    """Signing client bound to the one wallet used for the whole run."""

    def __init__(self, ledger: LedgerClient, wallet: LocalWallet, timeout_sec: int = 8, confirm_timeout_sec: int = 120):
        self._ledger = ledger
        self._wallet = wallet
        self._timeout = timeout_sec
        self._confirm_timeout = confirm_timeout_sec
        self._contracts: Dict[str, LedgerContract] = {}

    @property
    def address(self) -> str:
        return str(self._wallet.address())

    def _contract(self, contract: str) -> LedgerContract:
        if contract not in self._contracts:
            self._contracts[contract] = LedgerContract(None, self._ledger, Address(contract))
        return self._contracts[contract]

    def get_balance(self, address: str, denom: str) -> int:
        return int(_rpc_call(self._ledger.query_bank_balance, Address(address), denom, timeout=self._timeout))

    def query_smart(self, contract: str, query: Dict[str, Any]) -> Dict[str, Any]:
        return _rpc_call(self._contract(contract).query, query, timeout=self._timeout)

    def execute(self, sender: str, contract: str, msg: Dict[str, Any], funds: List[Tuple[int, str]]) -> str:
        """Sign, broadcast and wait for inclusion. Returns the transaction hash.

        Failures (simulation, broadcast, non-zero result code) are raised as the SDK reports them.
        """
        if sender != self.address:
            raise ValueError(f"sender {sender} does not match signing wallet {self.address}")
        funds_str = format_funds(funds) or None
        # Broadcast runs to completion in this thread; only reads go through the watchdog.
        tx = self._contract(contract).execute(msg, self._wallet, funds=funds_str)
        tx.wait_to_complete(timeout=timedelta(seconds=self._confirm_timeout))
        return tx.tx_hash


@dataclass(frozen=True)
class Session:
    address: str
    client: ZigClient


def connect(mnemonic: str, rpc_endpoint: str, cfg: config.ProtocolConfig) -> Session:
    """Derive the wallet, connect with the fixed gas price and probe the endpoint once."""
    if not (mnemonic or "").strip() or not (rpc_endpoint or "").strip():
        raise ConfigError("Mnemonic and RPC Endpoint must be provided.")
    try:
        wallet = LocalWallet.from_mnemonic(mnemonic.strip(), prefix=cfg.address_prefix)
        chain_id = resolve_chain_id(rpc_endpoint, timeout=cfg.rpc_timeout_sec)
        network = NetworkConfig(
            chain_id=chain_id,
            url=normalize_endpoint(rpc_endpoint),
            fee_minimum_gas_price=float(cfg.gas_price),
            fee_denomination=cfg.zig_denom,
            staking_denomination=cfg.zig_denom,
        )
        ledger = LedgerClient(network)
        client = ZigClient(ledger, wallet, cfg.rpc_timeout_sec, cfg.tx_confirm_timeout_sec)
        client.get_balance(client.address, cfg.zig_denom)
    except (ConfigError, InitializationError):
        raise
    except Exception as e:
        raise InitializationError(str(e) or e.__class__.__name__) from e
    return Session(address=client.address, client=client)
