import os
from dataclasses import dataclass
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()

REQUIRED_ENV = [
    "RPC_ENDPOINT",
    "MNEMONIC",
]

# Chain
RPC_ENDPOINT = os.getenv("RPC_ENDPOINT", "")
MNEMONIC = os.getenv("MNEMONIC", "")
CHAIN_ID = os.getenv("CHAIN_ID", "")  # discovered from the endpoint when unset
ADDRESS_PREFIX = "zig"

# Oroswap
ROUTER_CONTRACT_ADDRESS = "zig15jqg0hmp9n06q0as7uk3x9xkwr9k3r7yh4ww2uc0hek8zlryrgmsamk4qg"
EXPLORER_URL = "https://www.zigscan.org/tx/"
ZIG_DENOM = "uzig"
ORO_DENOM = "coin.zig10rfjm85jmzfhravjwpq3hcdz8ngxg7lxd0drkr.uoro"
ZIG_SYMBOL = "ZIG"
ORO_SYMBOL = "ORO"
TOKEN_DECIMALS = 6
ZIG_AMOUNT_FOR_LP = 150000  # 0.15 ZIG
SWAP_MAX_SPREAD = "0.1"
LP_SLIPPAGE_TOLERANCE = "0.1"
GAS_PRICE = Decimal("0.025")  # per unit of gas, in uzig

# Timing
DELAY_BETWEEN_STEPS = 5  # seconds
DELAY_BETWEEN_CYCLES = 5  # seconds
DELAY_AFTER_ERROR = 10  # seconds
RETRY_DELAY_HOURS = 1  # insufficient funds cooldown
RPC_TIMEOUT_SEC = int(os.getenv("RPC_TIMEOUT_SEC", "8"))  # per-call soft timeout safeguard
TX_CONFIRM_TIMEOUT_SEC = int(os.getenv("TX_CONFIRM_TIMEOUT_SEC", "120"))

# Retry policy: 0 attempts = retry forever, factor 1.0 = fixed cooldowns
MAX_CYCLE_ATTEMPTS = int(os.getenv("MAX_CYCLE_ATTEMPTS", "0"))
RETRY_BACKOFF_FACTOR = float(os.getenv("RETRY_BACKOFF_FACTOR", "1.0"))


def missing_env() -> list[str]:
    return [var for var in REQUIRED_ENV if not (os.getenv(var) or "").strip()]


@dataclass(frozen=True)
class ProtocolConfig:
    """Everything the farming components need, fixed for the whole run."""
    router_address: str = ROUTER_CONTRACT_ADDRESS
    explorer_url: str = EXPLORER_URL
    zig_denom: str = ZIG_DENOM
    oro_denom: str = ORO_DENOM
    zig_symbol: str = ZIG_SYMBOL
    oro_symbol: str = ORO_SYMBOL
    decimals: int = TOKEN_DECIMALS
    zig_amount_for_lp: int = ZIG_AMOUNT_FOR_LP
    swap_max_spread: str = SWAP_MAX_SPREAD
    lp_slippage_tolerance: str = LP_SLIPPAGE_TOLERANCE
    gas_price: Decimal = GAS_PRICE
    address_prefix: str = ADDRESS_PREFIX
    delay_between_steps: int = DELAY_BETWEEN_STEPS
    delay_between_cycles: int = DELAY_BETWEEN_CYCLES
    delay_after_error: int = DELAY_AFTER_ERROR
    retry_delay_hours: int = RETRY_DELAY_HOURS
    max_cycle_attempts: int = MAX_CYCLE_ATTEMPTS
    retry_backoff_factor: float = RETRY_BACKOFF_FACTOR
    rpc_timeout_sec: int = RPC_TIMEOUT_SEC
    tx_confirm_timeout_sec: int = TX_CONFIRM_TIMEOUT_SEC

    @property
    def long_cooldown_sec(self) -> int:
        return self.retry_delay_hours * 3600

    def explorer_link(self, tx_hash: str) -> str:
        return f"{self.explorer_url}{tx_hash}"


def load_protocol_config() -> ProtocolConfig:
    return ProtocolConfig()
