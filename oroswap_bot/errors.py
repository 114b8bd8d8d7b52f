"""Fatal error types. Cycle-level errors are never wrapped and keep their original type."""


class ConfigError(ValueError):
    """Required settings (mnemonic, endpoint) are missing or blank."""


class InitializationError(RuntimeError):
    """Wallet derivation or client connection failed; the run cannot start."""


class RetryBudgetExhausted(RuntimeError):
    def __init__(self, cycle_index: int, attempts: int, last_error: BaseException):
        super().__init__(f"cycle #{cycle_index} failed {attempts} times; last error: {last_error}")
        self.cycle_index = cycle_index
        self.attempts = attempts
        self.last_error = last_error
