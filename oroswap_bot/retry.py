"""Cycle retry controller.

Runs cycles 1..N in order. A failed cycle is retried at the same index after a
cooldown picked by failure kind:

 - insufficient funds -> long visible countdown (1 hour by default)
 - anything else      -> short fixed wait (10 seconds by default)

With the default policy there is no attempt ceiling and no backoff, so a cycle
that keeps failing is retried forever. MAX_CYCLE_ATTEMPTS / RETRY_BACKOFF_FACTOR
bound and stretch that when set.
"""
from __future__ import annotations
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List

from . import ui
from .config import ProtocolConfig
from .errors import RetryBudgetExhausted

INSUFFICIENT_FUNDS_MARKER = "insufficient funds"
SDK_CODESPACE = "sdk"
SDK_ERR_INSUFFICIENT_FUNDS = 5


class LoopState(str, Enum):
    RUNNING = "running"
    COOLDOWN_LONG = "cooldown_long"
    COOLDOWN_SHORT = "cooldown_short"
    DONE = "done"
    FATAL = "fatal"


class FailureKind(str, Enum):
    INSUFFICIENT_FUNDS = "insufficient_funds"
    OTHER = "other"


def classify_failure(exc: BaseException) -> FailureKind:
    # Structured code when the client surfaces one, message match otherwise.
    code = getattr(exc, "code", None)
    codespace = getattr(exc, "codespace", None)
    if codespace == SDK_CODESPACE and code == SDK_ERR_INSUFFICIENT_FUNDS:
        return FailureKind.INSUFFICIENT_FUNDS
    if INSUFFICIENT_FUNDS_MARKER in str(exc):
        return FailureKind.INSUFFICIENT_FUNDS
    return FailureKind.OTHER


@dataclass(frozen=True)
class RetryPolicy:
    long_cooldown_sec: int = 3600
    short_cooldown_sec: int = 10
    max_attempts: int = 0  # 0 = unlimited
    backoff_factor: float = 1.0

    @classmethod
    def from_config(cls, cfg: ProtocolConfig) -> "RetryPolicy":
        return cls(
            long_cooldown_sec=cfg.long_cooldown_sec,
            short_cooldown_sec=cfg.delay_after_error,
            max_attempts=cfg.max_cycle_attempts,
            backoff_factor=cfg.retry_backoff_factor,
        )

    def cooldown_for(self, kind: FailureKind, failures: int) -> int:
        """Seconds to wait after the n-th consecutive failure (n >= 1) of one cycle."""
        base = self.long_cooldown_sec if kind is FailureKind.INSUFFICIENT_FUNDS else self.short_cooldown_sec
        return int(round(base * (self.backoff_factor ** max(0, failures - 1))))

    def exhausted(self, attempts: int) -> bool:
        return self.max_attempts > 0 and attempts >= self.max_attempts


@dataclass
class RunSummary:
    total_cycles: int
    completed: int = 0
    state: LoopState = LoopState.RUNNING
    failures: Dict[FailureKind, int] = field(default_factory=lambda: {k: 0 for k in FailureKind})
    outcomes: List[object] = field(default_factory=list)
    transitions: List[tuple] = field(default_factory=list)


class CycleLoop:
    """Single control loop over cycle indices with explicit timed suspension."""

    def __init__(
        self,
        run_cycle: Callable[[int], object],
        total_cycles: int,
        policy: RetryPolicy,
        inter_cycle_delay: int = 5,
        sleep: Callable[[float], None] = time.sleep,
        countdown: Callable[[int], object] | None = None,
    ):
        if total_cycles <= 0:
            raise ValueError("total_cycles must be positive")
        self.run_cycle = run_cycle
        self.policy = policy
        self.inter_cycle_delay = inter_cycle_delay
        self.sleep = sleep
        self.countdown = countdown or (lambda seconds: ui.countdown(seconds, sleep=self.sleep))
        self.summary = RunSummary(total_cycles=total_cycles)

    def _enter(self, state: LoopState, cycle_index: int):
        self.summary.state = state
        self.summary.transitions.append((state, cycle_index))

    def run(self) -> RunSummary:
        total = self.summary.total_cycles
        cycle_index = 1
        attempts = 0
        self._enter(LoopState.RUNNING, cycle_index)
        while True:
            attempts += 1
            try:
                outcome = self.run_cycle(cycle_index)
            except Exception as e:
                kind = classify_failure(e)
                self.summary.failures[kind] += 1
                ui.error(f"\nERROR occurred during cycle #{cycle_index}:")
                ui.error(f"> Message: {e}")
                if self.policy.exhausted(attempts):
                    self._enter(LoopState.FATAL, cycle_index)
                    raise RetryBudgetExhausted(cycle_index, attempts, e) from e
                wait = self.policy.cooldown_for(kind, attempts)
                if kind is FailureKind.INSUFFICIENT_FUNDS:
                    self._enter(LoopState.COOLDOWN_LONG, cycle_index)
                    ui.warn("> Insufficient funds detected. Use the faucet if needed.")
                    self.countdown(wait)
                else:
                    self._enter(LoopState.COOLDOWN_SHORT, cycle_index)
                    ui.warn(f"> Unexpected error. Retrying in {wait} seconds...")
                    self.sleep(wait)
                self._enter(LoopState.RUNNING, cycle_index)
                continue

            self.summary.completed += 1
            self.summary.outcomes.append(outcome)
            if cycle_index >= total:
                self._enter(LoopState.DONE, cycle_index)
                return self.summary
            with ui.step(f"Waiting for {self.inter_cycle_delay} seconds before the next cycle...") as s:
                self.sleep(self.inter_cycle_delay)
                s.succeed("Wait complete. Starting next cycle.")
            cycle_index += 1
            attempts = 0
            self._enter(LoopState.RUNNING, cycle_index)
