"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles Spanish and plain formats:
    - "123,45"
    - "1.234,56"
    - "-12,50"
    - "1234,5 €"
    - "(50,00)" (negative in parentheses)
    - "1234.56"

    A single dot followed by one or two digits is read as a decimal point;
    any other dot is a thousands separator.

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Importe vacío")

    # Remove whitespace
    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    # Remove currency symbols and codes
    amount_str = re.sub(r"[$€£¥]|EUR", "", amount_str)
    amount_str = amount_str.replace(" ", "").replace("\u00a0", "")

    if "," in amount_str:
        # Comma is the decimal separator, dots group thousands
        amount_str = amount_str.replace(".", "").replace(",", ".")
    elif amount_str.count(".") > 1 or re.search(r"\.\d{3}$", amount_str):
        amount_str = amount_str.replace(".", "")

    try:
        amount = Decimal(amount_str)
    except InvalidOperation:
        raise ValueError(f"No se pudo interpretar el importe '{amount_str}'")
    if not amount.is_finite():
        raise ValueError(f"No se pudo interpretar el importe '{amount_str}'")
    if is_negative:
        amount = -amount
    return amount
