"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports:
    - ISO dates: "2024-01-15"
    - Spanish day-first dates: "15/01/2024", "15-01-2024", "15.01.24"
    - "today" / "hoy"

    Args:
        date_str: Date string

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()

    if date_str in ("today", "hoy"):
        return date.today()

    # ISO strings are year-first; everything else is read day-first
    dayfirst = not (len(date_str) >= 4 and date_str[:4].isdigit())
    try:
        dt = date_parser.parse(date_str, dayfirst=dayfirst)
        return dt.date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"No se pudo interpretar la fecha '{date_str}': {e}")


def parse_yymmdd(value: str) -> date:
    """Parse a Norma 43 YYMMDD date; the century is always 20xx.

    Raises:
        ValueError: If the field is not six digits or not a valid date
    """
    if len(value) != 6 or not value.isdigit():
        raise ValueError(f"Fecha no válida '{value}'")
    return date(2000 + int(value[0:2]), int(value[2:4]), int(value[4:6]))


def month_range(year: int, month: int) -> tuple[date, date]:
    """Get the first and last day of a month.

    Raises:
        ValueError: If month is not between 1 and 12
    """
    if month < 1 or month > 12:
        raise ValueError("El mes debe estar entre 1 y 12")
    start_date = date(year, month, 1)
    end_date = start_date + relativedelta(months=1) - timedelta(days=1)
    return (start_date, end_date)


def year_range(year: int) -> tuple[date, date]:
    """Get January 1 and December 31 of a year."""
    return (date(year, 1, 1), date(year, 12, 31))


def period_range(year: int, month: int | None = None) -> tuple[date, date]:
    """Get the date range of a monthly period, or of the year when month is None."""
    if month is None:
        return year_range(year)
    return month_range(year, month)
