"""Fiscal year domain service and closed-period lookups."""

import logging
from datetime import date
from typing import Optional
from ledgerkit.database.base import Database
from ledgerkit.domain.entities import FiscalYear, FiscalYearStatus, PeriodStatus
from ledgerkit.domain.errors import ConflictError, PeriodClosedError, ValidationError, period_closed
from ledgerkit.utils.date_parser import year_range

logger = logging.getLogger(__name__)


def is_date_closed(db: Database, centro_code: str, day: date) -> bool:
    """Return True when a date falls inside a closed month, year or fiscal year."""
    monthly = db.get_period(centro_code, day.year, day.month)
    if monthly is not None and monthly.status == PeriodStatus.CLOSED:
        return True
    annual = db.get_period(centro_code, day.year)
    if annual is not None and annual.status == PeriodStatus.CLOSED:
        return True
    fiscal_year = db.get_fiscal_year_for_date(centro_code, day)
    return fiscal_year is not None and fiscal_year.status == FiscalYearStatus.CLOSED


def ensure_date_open(db: Database, centro_code: str, day: date) -> None:
    """Reject mutations dated inside a closed period.

    Raises:
        PeriodClosedError: If the date belongs to a closed period
    """
    if is_date_closed(db, centro_code, day):
        raise PeriodClosedError(period_closed(day))


class FiscalYearService:
    """Service for managing fiscal years (ejercicios)."""

    def __init__(self, db: Database):
        """Initialize fiscal year service.

        Args:
            db: Database instance
        """
        self.db = db

    def open_fiscal_year(
        self,
        centro_code: str,
        year: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> FiscalYear:
        """Open a fiscal year for a centro.

        Args:
            centro_code: Centro code
            year: Fiscal year label
            start_date: First day; defaults to January 1 of year
            end_date: Last day; defaults to December 31 of year

        Returns:
            Created fiscal year

        Raises:
            ValidationError: If the range is empty or the centro is missing
            ConflictError: If the year exists or overlaps another fiscal year
        """
        if not centro_code.strip():
            raise ValidationError("El centro es obligatorio")
        default_start, default_end = year_range(year)
        start_date = start_date or default_start
        end_date = end_date or default_end
        if start_date > end_date:
            raise ValidationError("La fecha de inicio del ejercicio es posterior a la de fin")

        for existing in self.db.list_fiscal_years(centro_code):
            if existing.year == year:
                raise ConflictError(f"El ejercicio {year} ya existe en el centro {centro_code}")
            if existing.start_date <= end_date and start_date <= existing.end_date:
                raise ConflictError(
                    f"El ejercicio {year} se solapa con el ejercicio {existing.year} "
                    f"del centro {centro_code}"
                )

        fiscal_year_id = self.db.create_fiscal_year(centro_code, year, start_date, end_date)
        logger.info("Opened fiscal year %s for centro %s (id=%s)", year, centro_code, fiscal_year_id)
        return self.db.get_fiscal_year(centro_code, year)

    def get_fiscal_year(self, centro_code: str, year: int) -> Optional[FiscalYear]:
        """Get fiscal year of a centro by year."""
        return self.db.get_fiscal_year(centro_code, year)

    def get_fiscal_year_for_date(self, centro_code: str, day: date) -> Optional[FiscalYear]:
        """Get the fiscal year containing a date, if any."""
        return self.db.get_fiscal_year_for_date(centro_code, day)

    def list_fiscal_years(self, centro_code: str) -> list[FiscalYear]:
        """List fiscal years of a centro ordered by start date."""
        return self.db.list_fiscal_years(centro_code)
