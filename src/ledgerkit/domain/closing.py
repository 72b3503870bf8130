"""Period and fiscal-year closing service.

A monthly close seals the month. An annual close additionally generates the
regularization entry (profit and loss accounts into the result account) and
the balance-sheet closing entry, then closes the fiscal year. All writes of a
close go through a single repository call so a failed close changes nothing.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Callable, Optional
from ledgerkit.config import Settings, get_settings
from ledgerkit.database.base import Database
from ledgerkit.domain.balance import BalanceService, period_result
from ledgerkit.domain.entities import (
    ClosingPeriod,
    ClosingResult,
    EntryStatus,
    FiscalYear,
    FiscalYearStatus,
    JournalLineInput,
    MovementType,
    PeriodClosing,
    PeriodStatus,
    PeriodType,
    PreparedEntry,
    TrialBalanceRow,
)
from ledgerkit.domain.errors import (
    AlreadyClosedError,
    PeriodNotReadyError,
    ValidationError,
    period_already_closed,
    period_label,
)
from ledgerkit.domain.fiscal_year import ensure_date_open
from ledgerkit.domain.journal import JournalService
from ledgerkit.domain.pgc import is_income_statement
from ledgerkit.utils.date_parser import period_range
from ledgerkit.utils.money import format_money, to_money

logger = logging.getLogger(__name__)

NO_ENTRIES_WARNING = "No hay asientos en el período"


def _net(lines: list[JournalLineInput]) -> Decimal:
    """Return debits minus credits of a list of lines."""
    net = Decimal("0")
    for line in lines:
        net += line.amount if line.movement_type == MovementType.DEBIT else -line.amount
    return net


class ClosingService:
    """Service for closing monthly and annual periods."""

    def __init__(
        self,
        db: Database,
        settings: Optional[Settings] = None,
        today: Callable[[], date] = date.today,
    ):
        """Initialize closing service.

        Args:
            db: Database instance
            settings: Business rules; defaults to the environment settings
            today: Clock used to reject periods that have not started yet
        """
        self.db = db
        self.settings = settings or get_settings()
        self.today = today
        self.journal = JournalService(db)
        self.balances = BalanceService(db)

    def close_period(
        self,
        centro_code: str,
        year: int,
        closed_by: str,
        month: Optional[int] = None,
        notes: Optional[str] = None,
        closing_date: Optional[date] = None,
    ) -> ClosingResult:
        """Close a month, or the whole year when month is None.

        Args:
            centro_code: Centro code
            year: Period year
            closed_by: User closing the period
            month: Month 1-12 for a monthly close, None for the annual close
            notes: Optional notes stored with the period
            closing_date: Date of generated entries; defaults to the period end

        Returns:
            Closed period with its trial balance and non-fatal warnings

        Raises:
            ValidationError: If the month is out of range
            AlreadyClosedError: If the period is already closed
            PeriodNotReadyError: If drafts remain, the period has not started,
                or (annual) a month is open or there is no open fiscal year
            UnbalancedEntryError: If a generated entry does not balance
        """
        if month is not None and not 1 <= month <= 12:
            raise ValidationError("El mes debe estar entre 1 y 12")
        if not closed_by or not closed_by.strip():
            raise ValidationError("El usuario que cierra el período es obligatorio")

        period_type = PeriodType.MONTHLY if month is not None else PeriodType.ANNUAL
        label = period_label(year, month)
        start_date, end_date = period_range(year, month)

        fiscal_year = None
        if period_type == PeriodType.ANNUAL:
            fiscal_year = self._require_open_fiscal_year(centro_code, year)
            start_date, end_date = fiscal_year.start_date, fiscal_year.end_date

        self._check_preconditions(centro_code, year, month, label, start_date, end_date)

        rows = self.balances.trial_balance(centro_code, start_date, end_date)
        warnings = []
        if not rows:
            warnings.append(NO_ENTRIES_WARNING)

        closing_date = closing_date or end_date
        regularization_entry = None
        closing_entry = None
        result_amount = None
        if period_type == PeriodType.ANNUAL:
            result_amount = to_money(period_result(rows))
            regularization_entry = self._build_regularization_entry(
                centro_code, year, rows, closing_date, closed_by
            )
            if self.settings.generate_annual_closing_entry:
                closing_entry = self._build_closing_entry(
                    centro_code, year, rows, result_amount, closing_date, closed_by
                )
            outcome = "beneficio" if result_amount >= 0 else "pérdida"
            warnings.append(f"Resultado del ejercicio: {outcome} de {format_money(abs(result_amount))}")

        period = self.db.record_period_closing(
            PeriodClosing(
                centro_code=centro_code,
                period_type=period_type,
                period_year=year,
                period_month=month,
                start_date=start_date,
                end_date=end_date,
                closed_by=closed_by,
                closing_date=closing_date,
                notes=notes,
                regularization_entry=regularization_entry,
                closing_entry=closing_entry,
                fiscal_year_id=fiscal_year.id if fiscal_year is not None else None,
            )
        )
        logger.info("Closed period %s of centro %s by %s", label, centro_code, closed_by)
        return ClosingResult(
            period=period,
            trial_balance=tuple(rows),
            warnings=tuple(warnings),
            result_amount=result_amount,
        )

    def _require_open_fiscal_year(self, centro_code: str, year: int) -> FiscalYear:
        fiscal_year = self.db.get_fiscal_year(centro_code, year)
        if fiscal_year is None or fiscal_year.status != FiscalYearStatus.OPEN:
            annual = self.db.get_period(centro_code, year)
            if annual is not None and annual.status == PeriodStatus.CLOSED:
                raise AlreadyClosedError(period_already_closed(year, None))
            raise PeriodNotReadyError(f"No hay un ejercicio {year} abierto para el centro {centro_code}")
        return fiscal_year

    def _check_preconditions(
        self,
        centro_code: str,
        year: int,
        month: Optional[int],
        label: str,
        start_date: date,
        end_date: date,
    ) -> None:
        if start_date > self.today():
            raise PeriodNotReadyError(f"El período {label} todavía no ha comenzado")

        if not self.is_period_open(centro_code, year, month):
            raise AlreadyClosedError(period_already_closed(year, month))

        drafts = self.db.list_entries(centro_code, start_date, end_date, EntryStatus.DRAFT)
        if drafts:
            numbers = ", ".join(str(entry.entry_number) for entry in drafts)
            raise PeriodNotReadyError(
                f"El período {label} tiene asientos en borrador pendientes de contabilizar: {numbers}"
            )

        if month is None:
            open_months = [m for m in range(1, 13) if not self._is_month_closed(centro_code, year, m)]
            if open_months:
                months = ", ".join(str(m) for m in open_months)
                raise PeriodNotReadyError(
                    f"No se puede cerrar el ejercicio {year}: hay meses sin cerrar ({months})"
                )
        elif self.settings.require_sequential_months and month > 1:
            if not self._is_month_closed(centro_code, year, month - 1):
                raise PeriodNotReadyError(
                    f"Debe cerrarse antes el período {period_label(year, month - 1)}"
                )

    def _is_month_closed(self, centro_code: str, year: int, month: int) -> bool:
        period = self.db.get_period(centro_code, year, month)
        return period is not None and period.status == PeriodStatus.CLOSED

    def _build_regularization_entry(
        self,
        centro_code: str,
        year: int,
        rows: list[TrialBalanceRow],
        closing_date: date,
        closed_by: str,
    ) -> Optional[PreparedEntry]:
        """Zero every profit and loss account into the result account."""
        lines = []
        for row in rows:
            if not is_income_statement(row.account_code, row.account_type):
                continue
            balance = to_money(row.balance)
            if balance > 0:
                lines.append(JournalLineInput.credit(row.account_code, balance, "Regularización"))
            elif balance < 0:
                lines.append(JournalLineInput.debit(row.account_code, -balance, "Regularización"))
        if not lines:
            return None

        # Debits to income exceeding credits to expenses is a profit
        difference = _net(lines)
        if difference > 0:
            lines.append(JournalLineInput.credit(self.settings.result_account, difference, "Resultado del ejercicio"))
        elif difference < 0:
            lines.append(JournalLineInput.debit(self.settings.result_account, -difference, "Resultado del ejercicio"))

        logger.debug("Regularization of %s for centro %s: %s lines", year, centro_code, len(lines))
        return self.journal.prepare_entry(
            centro_code,
            closing_date,
            f"Regularización ejercicio {year}",
            lines,
            created_by=closed_by,
            check_period=False,
        )

    def _build_closing_entry(
        self,
        centro_code: str,
        year: int,
        rows: list[TrialBalanceRow],
        result_amount: Decimal,
        closing_date: date,
        closed_by: str,
    ) -> Optional[PreparedEntry]:
        """Zero every balance-sheet account, including the year result."""
        balances: dict[str, Decimal] = {}
        for row in rows:
            if not is_income_statement(row.account_code, row.account_type):
                balances[row.account_code] = row.balance
        # The regularization credits the profit to the result account
        result_account = self.settings.result_account
        balances[result_account] = balances.get(result_account, Decimal("0")) - result_amount

        lines = []
        for account_code, balance in sorted(balances.items()):
            balance = to_money(balance)
            if balance > 0:
                lines.append(JournalLineInput.credit(account_code, balance, "Cierre"))
            elif balance < 0:
                lines.append(JournalLineInput.debit(account_code, -balance, "Cierre"))
        if not lines:
            return None

        # Cents left by entries balanced within tolerance go to the closing account
        residue = _net(lines)
        if residue > 0:
            lines.append(JournalLineInput.credit(self.settings.closing_balance_account, residue, "Cierre"))
        elif residue < 0:
            lines.append(JournalLineInput.debit(self.settings.closing_balance_account, -residue, "Cierre"))

        return self.journal.prepare_entry(
            centro_code,
            closing_date,
            f"Asiento de cierre ejercicio {year}",
            lines,
            created_by=closed_by,
            check_period=False,
        )

    def is_period_open(self, centro_code: str, year: int, month: Optional[int] = None) -> bool:
        """Return True unless the period (or, for a month, its year) is closed."""
        return self.get_period_status(centro_code, year, month) == PeriodStatus.OPEN

    def get_period_status(
        self, centro_code: str, year: int, month: Optional[int] = None
    ) -> PeriodStatus:
        """Return the status of a period; unrecorded periods are open."""
        annual = self.db.get_period(centro_code, year)
        if annual is not None and annual.status == PeriodStatus.CLOSED:
            return PeriodStatus.CLOSED
        if month is None:
            return PeriodStatus.OPEN
        period = self.db.get_period(centro_code, year, month)
        return period.status if period is not None else PeriodStatus.OPEN

    def list_periods(
        self, centro_code: str, year: int, period_type: Optional[PeriodType] = None
    ) -> list[ClosingPeriod]:
        """List recorded periods of a year."""
        return self.db.list_periods(centro_code, year, period_type)

    def ensure_date_open(self, centro_code: str, day: date) -> None:
        """Reject mutations dated inside a closed period.

        Raises:
            PeriodClosedError: If the date belongs to a closed period
        """
        ensure_date_open(self.db, centro_code, day)
