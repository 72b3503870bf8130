"""Invoice line and total calculations.

Line amounts are kept exact while totals are summed; rounding to cents
happens once per stored figure so the invoice total never drifts from the sum
of its lines by accumulated rounding.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Union

from ledgerkit.domain.entities import InvoiceLine, InvoiceLineInput
from ledgerkit.utils.money import to_decimal, to_money

HUNDRED = Decimal("100")

Number = Union[Decimal, int, str]


@dataclass(frozen=True)
class LineAmounts:
    """Exact (unrounded) amounts of one invoice line."""

    subtotal: Decimal
    tax_amount: Decimal
    total: Decimal


@dataclass(frozen=True)
class InvoiceTotals:
    """Invoice totals rounded to cents."""

    subtotal: Decimal
    tax_total: Decimal
    total: Decimal


def calculate_line(
    quantity: Number,
    unit_price: Number,
    discount_percentage: Number = 0,
    discount_amount: Number = 0,
    tax_rate: Number = 0,
) -> LineAmounts:
    """Compute the exact amounts of a line.

    ``subtotal = quantity * unit_price * (1 - discount_percentage / 100) - discount_amount``,
    ``tax = subtotal * tax_rate / 100`` and ``total = subtotal + tax``.
    """
    gross = to_decimal(quantity) * to_decimal(unit_price)
    subtotal = gross * (1 - to_decimal(discount_percentage) / HUNDRED) - to_decimal(discount_amount)
    tax_amount = subtotal * to_decimal(tax_rate) / HUNDRED
    return LineAmounts(subtotal=subtotal, tax_amount=tax_amount, total=subtotal + tax_amount)


def calculate_totals(lines: Iterable[LineAmounts]) -> InvoiceTotals:
    """Sum exact line amounts and round each total once."""
    subtotal = Decimal("0")
    tax_total = Decimal("0")
    total = Decimal("0")
    for line in lines:
        subtotal += line.subtotal
        tax_total += line.tax_amount
        total += line.total
    return InvoiceTotals(
        subtotal=to_money(subtotal),
        tax_total=to_money(tax_total),
        total=to_money(total),
    )


def build_invoice_lines(
    lines: Iterable[InvoiceLineInput],
) -> tuple[tuple[InvoiceLine, ...], InvoiceTotals]:
    """Compute stored invoice lines (rounded per line) and exact-sum totals."""
    computed = []
    exact = []
    for number, line in enumerate(lines, start=1):
        amounts = calculate_line(
            line.quantity,
            line.unit_price,
            line.discount_percentage,
            line.discount_amount,
            line.tax_rate,
        )
        exact.append(amounts)
        computed.append(
            InvoiceLine(
                line_number=number,
                description=line.description,
                quantity=Decimal(line.quantity),
                unit_price=Decimal(line.unit_price),
                discount_percentage=Decimal(line.discount_percentage),
                discount_amount=Decimal(line.discount_amount),
                subtotal=to_money(amounts.subtotal),
                tax_rate=Decimal(line.tax_rate),
                tax_amount=to_money(amounts.tax_amount),
                total=to_money(amounts.total),
                account_code=line.account_code,
            )
        )
    return tuple(computed), calculate_totals(exact)
