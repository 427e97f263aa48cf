"""Decimal helpers shared by the payroll engine and the bank file writers."""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, getcontext
from typing import Any, Iterable

getcontext().prec = 28

ZERO = Decimal("0")
CENT = Decimal("0.01")
CENTS_PER_DOLLAR = Decimal("100")


def to_decimal(value: Any) -> Decimal:
    """Convert a number to ``Decimal`` preserving precision for ints/floats/strings."""

    if isinstance(value, Decimal):
        return value
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise TypeError("Booleans are not valid monetary amounts")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return ZERO
        return Decimal(stripped)
    raise TypeError(f"Unsupported numeric type: {type(value)!r}")


def round_cents(value: Any) -> Decimal:
    """Round the supplied value to cents using HALF_UP."""

    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def apply_rate(amount: Any, rate: Any) -> Decimal:
    return round_cents(to_decimal(amount) * to_decimal(rate))


def multiply(amount: Any, *factors: Any) -> Decimal:
    result = to_decimal(amount)
    for factor in factors:
        result *= to_decimal(factor)
    return round_cents(result)


def divide(amount: Any, divisor: Any) -> Decimal:
    divisor_dec = to_decimal(divisor)
    if divisor_dec == 0:
        return ZERO.quantize(CENT)
    return round_cents(to_decimal(amount) / divisor_dec)


def pro_rata(amount: Any, numerator: Any, denominator: Any) -> Decimal:
    denominator_dec = to_decimal(denominator)
    if denominator_dec == 0:
        return ZERO.quantize(CENT)
    return round_cents(to_decimal(amount) * to_decimal(numerator) / denominator_dec)


def sum_money(values: Iterable[Any]) -> Decimal:
    total = ZERO
    for value in values:
        total += to_decimal(value)
    return round_cents(total)


def to_cents(value: Any) -> int:
    return int((round_cents(value) * CENTS_PER_DOLLAR).to_integral_value(rounding=ROUND_HALF_UP))


def to_float(value: Any) -> float:
    return float(round_cents(value))


def format_amount(value: Any) -> str:
    """Render an amount with exactly two decimal places, e.g. ``738.00``."""

    return f"{round_cents(value):.2f}"
