import time
from functools import partial

from . import config, ui
from .errors import ConfigError, InitializationError, RetryBudgetExhausted
from .oroswap import run_cycle
from .prompts import collect_run_parameters
from .retry import CycleLoop, RetryPolicy


def initialize_session(cfg: config.ProtocolConfig):
    from . import zig_client

    with ui.step("Initializing client...") as s:
        try:
            session = zig_client.connect(config.MNEMONIC, config.RPC_ENDPOINT, cfg)
        except ConfigError as e:
            s.fail(str(e))
            raise
        except InitializationError:
            s.fail("Failed to initialize client.")
            raise
        s.succeed("Client initialized successfully.")
    return session


def run(read=None, sleep=time.sleep):
    print("\n")
    print("🌾 Oroswap farming bot")
    print(f"   RPC: {config.RPC_ENDPOINT or '<unset>'}")
    print(f"   Router: {config.ROUTER_CONTRACT_ADDRESS}\n")

    missing = config.missing_env()
    if "MNEMONIC" in missing:
        ui.error("FATAL: MNEMONIC phrase not found in .env file. Bot is stopping.")
        return None

    cfg = config.load_protocol_config()
    try:
        params = collect_run_parameters(read, cfg.zig_symbol, cfg.decimals)
        ui.warn(f"> Retry delay set to {cfg.retry_delay_hours} hour(s) for insufficient funds.")
        if cfg.max_cycle_attempts > 0:
            ui.warn(f"> Giving up after {cfg.max_cycle_attempts} failed attempts of one cycle.")

        try:
            session = initialize_session(cfg)
        except (ConfigError, InitializationError) as e:
            ui.error("FATAL: Failed to initialize the client. Check RPC endpoint and mnemonic.")
            ui.error(f"> Details: {e}")
            return None
        ui.ok(f"> Connected to wallet: {session.address}")

        loop = CycleLoop(
            partial(_cycle, session, params.swap_amount_micro, cfg, sleep),
            params.total_cycles,
            RetryPolicy.from_config(cfg),
            inter_cycle_delay=cfg.delay_between_cycles,
            sleep=sleep,
        )
        try:
            summary = loop.run()
        except RetryBudgetExhausted as e:
            ui.error(f"FATAL: {e}")
            return loop.summary
        retried = sum(summary.failures.values())
        ui.ok(f"\nAll {summary.total_cycles} cycles completed successfully!")
        if retried:
            ui.warn(f"> Retries along the way: {retried}")
        return summary
    except KeyboardInterrupt:
        print()
        print("Shutting down…")
        return None


def _cycle(session, amount_micro, cfg, sleep, cycle_index):
    return run_cycle(session, cycle_index, amount_micro, cfg, sleep=sleep)
