from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

CURRENCY = "KES"
ZERO = Decimal("0")
CENTS = Decimal("0.01")
# Largest decimal exponent accepted from loose input; anything beyond is noise
# and would make int() or quantize() build enormous numbers.
MAX_EXPONENT = 18
MAX_INT = 10 ** MAX_EXPONENT


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """
    Coerce loosely typed numeric input (str, int, float, Decimal) to Decimal.
    Booleans, blanks, anything unparseable or non-finite, and magnitudes with
    an exponent beyond ``MAX_EXPONENT`` either way yield ``default``.
    """

    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return default
    if not result.is_finite():
        return default
    if result and abs(result.adjusted()) > MAX_EXPONENT:
        return default
    return result


def to_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if abs(value) < MAX_INT else default
    try:
        return int(to_decimal(value, default=Decimal(default)))
    except (ValueError, OverflowError):
        return default


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def money_str(amount: Optional[Decimal]) -> str:
    """Wire representation: plain notation, trailing zeros after the point dropped."""
    if amount is None:
        return "0"
    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def format_kes(amount: Any) -> str:
    """Display price the way the storefront does: ``KES 12,960`` / ``KES 1,440.5``."""
    value = to_decimal(amount)
    rounded = quantize(value)
    if rounded == rounded.to_integral_value():
        return f"{CURRENCY} {int(rounded):,}"
    text = f"{rounded:,.2f}".rstrip("0")
    return f"{CURRENCY} {text}"

