"""Two-decimal currency arithmetic."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

CENT = Decimal("0.01")

# Debit/credit totals closer than this are considered equal.
BALANCE_TOLERANCE = Decimal("0.01")

Numeric = Union[Decimal, int, str]


def to_decimal(value: Numeric) -> Decimal:
    """Convert a value to Decimal exactly.

    Floats are rejected so binary rounding never leaks into amounts.

    Raises:
        TypeError: If the value is a float or not numeric at all
        ArithmeticError: If a string is not a number
    """
    if isinstance(value, float):
        raise TypeError("Use Decimal or str for amounts, not float")
    return Decimal(value)


def to_money(value: Numeric) -> Decimal:
    """Quantize a value to exactly two decimals (half-up)."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Decimal]) -> Decimal:
    """Sum amounts and quantize the result once."""
    return to_money(sum(values, Decimal("0")))


def is_balanced(debit: Decimal, credit: Decimal) -> bool:
    """Return True when debit and credit agree within the tolerance."""
    return abs(debit - credit) <= BALANCE_TOLERANCE


def format_money(value: Decimal, currency: str = "€") -> str:
    """Format an amount the Spanish way: ``1.234,56 €``."""
    quantized = to_money(value)
    sign = "-" if quantized < 0 else ""
    integer, _, decimals = f"{abs(quantized):.2f}".partition(".")
    groups = []
    while len(integer) > 3:
        groups.insert(0, integer[-3:])
        integer = integer[:-3]
    groups.insert(0, integer)
    return f"{sign}{'.'.join(groups)},{decimals} {currency}".rstrip()
