from dataclasses import dataclass
from . import ui
from .amounts import parse_positive_decimal, parse_positive_int, try_to_micro


@dataclass(frozen=True)
class RunParameters:
    swap_amount_micro: int
    total_cycles: int


def _default_read(prompt: str) -> str:
    return ui.console.input(f"[cyan]{prompt}[/cyan]")


def ask_swap_amount(read=None, symbol: str = "ZIG", decimals: int = 6) -> int:
    read = read or _default_read
    while True:
        parsed = parse_positive_decimal(read(f"Enter the amount to swap in {symbol} (e.g., 0.25): "))
        micro = try_to_micro(parsed, decimals)
        if micro > 0:
            ui.ok(f"> Swap amount set to {parsed.normalize():f} {symbol}.")
            return micro
        ui.alert("> Invalid input. Please enter a positive number (e.g., 0.25).")


def ask_cycle_count(read=None) -> int:
    read = read or _default_read
    while True:
        cycles = parse_positive_int(read("Enter the number of swap cycles to perform (e.g., 10): "))
        if cycles is not None:
            ui.ok(f"> Number of cycles set to {cycles}.")
            return cycles
        ui.alert("> Invalid input. Please enter a positive integer (e.g., 10).")


def collect_run_parameters(read=None, symbol: str = "ZIG", decimals: int = 6) -> RunParameters:
    swap_amount_micro = ask_swap_amount(read, symbol, decimals)
    total_cycles = ask_cycle_count(read)
    return RunParameters(swap_amount_micro=swap_amount_micro, total_cycles=total_cycles)
