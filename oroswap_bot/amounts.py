from decimal import Decimal, InvalidOperation, Overflow, ROUND_DOWN, ROUND_HALF_UP


def parse_positive_decimal(text: str) -> Decimal | None:
    try:
        value = Decimal((text or "").strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite() or value <= 0:
        return None
    return value


def parse_positive_int(text: str) -> int | None:
    try:
        value = int((text or "").strip())
    except ValueError:
        return None
    return value if value > 0 else None


def to_micro(amount: Decimal, decimals: int = 6) -> int:
    """Major token units -> integer micro units, truncated toward zero."""
    return int((Decimal(amount) * (Decimal(10) ** decimals)).to_integral_value(rounding=ROUND_DOWN))


def try_to_micro(amount: Decimal | None, decimals: int = 6) -> int:
    """Like to_micro, but 0 for missing or out-of-range amounts."""
    if amount is None:
        return 0
    try:
        return to_micro(amount, decimals)
    except (InvalidOperation, Overflow):
        return 0


def from_micro(units: int, decimals: int = 6) -> Decimal:
    return Decimal(int(units)) / (Decimal(10) ** decimals)


def format_micro(units: int, symbol: str, decimals: int = 6, places: int = 4) -> str:
    q = Decimal(10) ** -places
    return f"{from_micro(units, decimals).quantize(q, rounding=ROUND_HALF_UP)} {symbol}"
