"""
Money utilities for Naira amounts.

Every amount handled by the Core is a Decimal; rounding to kobo happens only
where a value leaves the pricing engine, a cart line or an order total.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Optional, Union

MONEY_PRECISION = Decimal("0.01")
ZERO = Decimal("0")

CURRENCY_SYMBOL = "₦"
CURRENCY_CODE = "NGN"

Number = Union[str, int, float, Decimal, None]


def parse_decimal(value) -> Optional[Decimal]:
    """
    Convert a configuration value to Decimal.

    Returns None when the value is missing or not numeric (booleans included),
    so callers can tell "absent" from "zero".
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    try:
        parsed = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return None
    return parsed if parsed.is_finite() else None


def to_decimal(value: Number) -> Decimal:
    """Convert any value to Decimal, falling back to zero when it is not numeric."""
    parsed = parse_decimal(value)
    if parsed is None:
        return ZERO
    return parsed


def round_money(value: Number) -> Decimal:
    """Round a monetary value to kobo precision."""
    return to_decimal(value).quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def to_kobo(value: Number) -> int:
    """Amount in minor units, as expected by the Paystack API."""
    return int((to_decimal(value) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def from_kobo(kobo: int) -> Decimal:
    return round_money(Decimal(kobo) / Decimal(100))


def format_naira(amount: Number, show_symbol: bool = True, show_decimals: bool = True) -> str:
    """
    Format an amount as Naira, e.g. ``format_naira(5500) == '₦5,500.00'``.
    None is rendered as zero.
    """
    value = round_money(amount)
    sign = "-" if value < 0 else ""
    if show_decimals:
        formatted = f"{abs(value):,.2f}"
    else:
        formatted = f"{abs(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP):,}"
    symbol = CURRENCY_SYMBOL if show_symbol else ""
    return f"{sign}{symbol}{formatted}"
