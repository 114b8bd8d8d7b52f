"""Oroswap actions: balance display, swap, provide liquidity and the cycle that chains them."""
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

from . import ui
from .amounts import format_micro
from .config import ProtocolConfig
from .ui import _log


@dataclass(frozen=True)
class CycleOutcome:
    cycle_index: int
    swap_tx: str
    liquidity_tx: str


def _native(denom: str) -> Dict[str, Any]:
    return {"native_token": {"denom": denom}}


def get_formatted_balance(client, address: str, denom: str, symbol: str, decimals: int = 6) -> str:
    """Best effort; a failed lookup reads as zero so it never aborts a cycle."""
    try:
        return format_micro(int(client.get_balance(address, denom)), symbol, decimals)
    except Exception:
        return format_micro(0, symbol, decimals)


def build_swap_msg(amount_micro: int, cfg: ProtocolConfig) -> Dict[str, Any]:
    return {
        "swap": {
            "offer_asset": {"info": _native(cfg.zig_denom), "amount": str(amount_micro)},
            "max_spread": cfg.swap_max_spread,
        }
    }


def build_simulation_query(cfg: ProtocolConfig) -> Dict[str, Any]:
    return {
        "simulation": {
            "offer_asset": {"amount": str(cfg.zig_amount_for_lp), "info": _native(cfg.zig_denom)}
        }
    }


def build_provide_liquidity_msg(oro_amount: int, cfg: ProtocolConfig) -> Dict[str, Any]:
    return {
        "provide_liquidity": {
            "assets": [
                {"info": _native(cfg.oro_denom), "amount": str(oro_amount)},
                {"info": _native(cfg.zig_denom), "amount": str(cfg.zig_amount_for_lp)},
            ],
            "slippage_tolerance": cfg.lp_slippage_tolerance,
        }
    }


def required_counterpart_amount(simulated: int, held: int) -> int:
    """Never ask for more of the counterpart token than the wallet holds."""
    return min(int(simulated), int(held))


def perform_swap(client, sender: str, amount_micro: int, cfg: ProtocolConfig) -> str:
    with ui.step(f"[1/2] Executing swap for {format_micro(amount_micro, cfg.zig_symbol, cfg.decimals)}...") as s:
        try:
            tx_hash = client.execute(
                sender,
                cfg.router_address,
                build_swap_msg(amount_micro, cfg),
                [(amount_micro, cfg.zig_denom)],
            )
        except Exception:
            s.fail("Swap failed.")
            raise
        s.succeed("Swap successful!")
    ui.ok(f"> Explorer: {cfg.explorer_link(tx_hash)}")
    _log("SWAP_CONFIRMED", tx=tx_hash, offer_units=amount_micro, denom=cfg.zig_denom)
    return tx_hash


def perform_add_liquidity(client, sender: str, cfg: ProtocolConfig) -> str:
    with ui.step("[2/2] Adding liquidity...") as s:
        try:
            lp_zig = format_micro(cfg.zig_amount_for_lp, cfg.zig_symbol, cfg.decimals)
            s.update(f"Simulating pool ratio for {lp_zig}...")
            simulation = client.query_smart(cfg.router_address, build_simulation_query(cfg))
            simulated = int(simulation["return_amount"])
            s.update(f"Required: {format_micro(simulated, cfg.oro_symbol, cfg.decimals)}")

            held = int(client.get_balance(sender, cfg.oro_denom))
            oro_amount = required_counterpart_amount(simulated, held)
            if oro_amount < simulated:
                ui.warn(f"Insufficient {cfg.oro_symbol}: {format_micro(held, cfg.oro_symbol, cfg.decimals)} available. Using available amount.")

            tx_hash = client.execute(
                sender,
                cfg.router_address,
                build_provide_liquidity_msg(oro_amount, cfg),
                [(oro_amount, cfg.oro_denom), (cfg.zig_amount_for_lp, cfg.zig_denom)],
            )
        except Exception:
            s.fail("Adding liquidity failed.")
            raise
        s.succeed("Liquidity added successfully!")
    ui.ok(f"> Explorer: {cfg.explorer_link(tx_hash)}")
    _log("LIQUIDITY_CONFIRMED", tx=tx_hash, oro_units=oro_amount, simulated_units=simulated, zig_units=cfg.zig_amount_for_lp)
    return tx_hash


def run_cycle(session, cycle_index: int, amount_micro: int, cfg: ProtocolConfig, sleep=time.sleep) -> CycleOutcome:
    ui.rule(f"Starting Farming Cycle #{cycle_index} | {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    client, address = session.client, session.address
    with ui.step("Checking wallet balance...") as s:
        zig_balance = get_formatted_balance(client, address, cfg.zig_denom, cfg.zig_symbol, cfg.decimals)
        oro_balance = get_formatted_balance(client, address, cfg.oro_denom, cfg.oro_symbol, cfg.decimals)
        s.succeed(f"Balance: {zig_balance}, {oro_balance}")

    swap_tx = perform_swap(client, address, amount_micro, cfg)
    with ui.step(f"Waiting for {cfg.delay_between_steps} seconds...") as s:
        sleep(cfg.delay_between_steps)
        s.succeed("Wait complete.")
    liquidity_tx = perform_add_liquidity(client, address, cfg)

    ui.ok(f"\nCycle #{cycle_index} completed successfully!")
    return CycleOutcome(cycle_index=cycle_index, swap_tx=swap_tx, liquidity_tx=liquidity_tx)
