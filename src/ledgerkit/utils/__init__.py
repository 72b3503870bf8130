"""Utility functions for ledgerkit."""

from ledgerkit.utils.date_parser import parse_date, parse_yymmdd, month_range, year_range, period_range
from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.money import to_money, sum_money, is_balanced, format_money, BALANCE_TOLERANCE

__all__ = [
    "parse_date",
    "parse_yymmdd",
    "month_range",
    "year_range",
    "period_range",
    "parse_amount",
    "to_money",
    "sum_money",
    "is_balanced",
    "format_money",
    "BALANCE_TOLERANCE",
]
