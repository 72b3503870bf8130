"""Tests for monthly and annual closing."""

import pytest
from datetime import date
from decimal import Decimal

from ledgerkit.config import Settings
from ledgerkit.domain.closing import NO_ENTRIES_WARNING, ClosingService
from ledgerkit.domain.entities import (
    EntryStatus,
    FiscalYearStatus,
    JournalLineInput,
    MovementType,
    PeriodStatus,
    PeriodType,
)
from ledgerkit.domain.errors import (
    AlreadyClosedError,
    PeriodNotReadyError,
    ValidationError,
)

CENTRO = "C001"


def _close_months(closing_service, months):
    for month in months:
        closing_service.close_period(CENTRO, 2024, "ana", month=month)


def _sides(lines):
    return {
        (line.account_code, line.movement_type): line.amount
        for line in lines
    }


@pytest.fixture
def year_activity(post_simple, fiscal_year_2024):
    """Post a year of activity: 1000,00 profit."""
    post_simple(date(2024, 1, 2), "10000.00", debit="5720000", credit="1000000", description="Capital")
    post_simple(date(2024, 3, 15), "5000.00", debit="5720000", credit="7000000", description="Ventas")
    post_simple(date(2024, 6, 10), "3000.00", debit="6000000", credit="5720000", description="Compras")
    post_simple(date(2024, 11, 5), "1000.00", debit="6210000", credit="5720000", description="Alquiler")


class TestMonthlyClose:
    """Tests for closing a month."""

    def test_close_month(self, closing_service, post_simple, temp_db):
        """Test a month closes and its posted entries become closed."""
        entry = post_simple(date(2024, 1, 15), "100.00")
        february = post_simple(date(2024, 2, 1), "50.00")

        result = closing_service.close_period(CENTRO, 2024, "ana", month=1, notes="Cierre enero")

        assert result.period.status == PeriodStatus.CLOSED
        assert result.period.period_type == PeriodType.MONTHLY
        assert result.period.period_month == 1
        assert result.period.closed_by == "ana"
        assert result.period.closing_date == date(2024, 1, 31)
        assert result.period.notes == "Cierre enero"
        assert result.period.regularization_entry_id is None
        assert result.warnings == ()
        assert result.result_amount is None
        assert [row.account_code for row in result.trial_balance] == ["5720000", "6000000"]

        assert temp_db.get_entry(entry.id).status == EntryStatus.CLOSED
        assert temp_db.get_entry(february.id).status == EntryStatus.POSTED
        assert not closing_service.is_period_open(CENTRO, 2024, 1)
        assert closing_service.is_period_open(CENTRO, 2024, 2)

    def test_close_empty_month_warns(self, closing_service):
        """Test an empty month closes with a warning."""
        result = closing_service.close_period(CENTRO, 2024, "ana", month=5)

        assert result.warnings == (NO_ENTRIES_WARNING,)
        assert result.trial_balance == ()
        assert result.period.status == PeriodStatus.CLOSED

    def test_close_twice(self, closing_service):
        """Test a month cannot be closed twice."""
        closing_service.close_period(CENTRO, 2024, "ana", month=1)
        with pytest.raises(AlreadyClosedError, match="El período 1/2024 ya está cerrado"):
            closing_service.close_period(CENTRO, 2024, "luis", month=1)
        assert closing_service.list_periods(CENTRO, 2024)[0].closed_by == "ana"

    def test_drafts_block_close(self, closing_service, journal_service, temp_db):
        """Test drafts dated in the month prevent closing and nothing changes."""
        draft = journal_service.create_draft_entry(
            CENTRO,
            date(2024, 1, 20),
            "Pendiente",
            [
                JournalLineInput.debit("6000000", Decimal("10.00")),
                JournalLineInput.credit("5720000", Decimal("10.00")),
            ],
        )

        with pytest.raises(PeriodNotReadyError, match="borrador"):
            closing_service.close_period(CENTRO, 2024, "ana", month=1)
        assert closing_service.is_period_open(CENTRO, 2024, 1)
        assert temp_db.get_period(CENTRO, 2024, 1) is None

        journal_service.post_entry(draft.id)
        closing_service.close_period(CENTRO, 2024, "ana", month=1)
        assert temp_db.get_entry(draft.id).status == EntryStatus.CLOSED

    def test_drafts_in_other_month_do_not_block(self, closing_service, journal_service):
        """Test only drafts inside the period matter."""
        journal_service.create_draft_entry(
            CENTRO,
            date(2024, 2, 1),
            "Pendiente febrero",
            [
                JournalLineInput.debit("6000000", Decimal("10.00")),
                JournalLineInput.credit("5720000", Decimal("10.00")),
            ],
        )
        result = closing_service.close_period(CENTRO, 2024, "ana", month=1)
        assert result.period.status == PeriodStatus.CLOSED

    def test_future_month(self, closing_service):
        """Test a period that has not started cannot be closed."""
        with pytest.raises(PeriodNotReadyError, match="todavía no ha comenzado"):
            closing_service.close_period(CENTRO, 2025, "ana", month=7)

    def test_current_month_can_close(self, closing_service):
        """Test the month containing today has started."""
        result = closing_service.close_period(CENTRO, 2025, "ana", month=6)
        assert result.period.status == PeriodStatus.CLOSED

    @pytest.mark.parametrize("month", [0, 13])
    def test_invalid_month(self, closing_service, month):
        """Test months outside 1-12 are rejected."""
        with pytest.raises(ValidationError):
            closing_service.close_period(CENTRO, 2024, "ana", month=month)

    def test_closed_by_required(self, closing_service):
        """Test the closing user is required."""
        with pytest.raises(ValidationError):
            closing_service.close_period(CENTRO, 2024, " ", month=1)

    def test_sequential_months(self, temp_db, chart):
        """Test months must close in order when configured."""
        service = ClosingService(
            temp_db,
            settings=Settings(_env_file=None, require_sequential_months=True),
            today=lambda: date(2025, 6, 30),
        )
        with pytest.raises(PeriodNotReadyError, match="1/2024"):
            service.close_period(CENTRO, 2024, "ana", month=2)

        service.close_period(CENTRO, 2024, "ana", month=1)
        service.close_period(CENTRO, 2024, "ana", month=2)
        assert not service.is_period_open(CENTRO, 2024, 2)


class TestAnnualClose:
    """Tests for closing a fiscal year."""

    def test_open_month_blocks_annual_close(self, closing_service, year_activity, temp_db):
        """Test a year with November open cannot close and nothing changes."""
        _close_months(closing_service, [m for m in range(1, 13) if m != 11])
        entries_before = temp_db.list_entries(CENTRO)

        with pytest.raises(PeriodNotReadyError, match=r"hay meses sin cerrar \(11\)"):
            closing_service.close_period(CENTRO, 2024, "ana")

        assert temp_db.get_fiscal_year(CENTRO, 2024).status == FiscalYearStatus.OPEN
        assert temp_db.get_period(CENTRO, 2024) is None
        assert closing_service.is_period_open(CENTRO, 2024, 11)
        assert temp_db.list_entries(CENTRO) == entries_before
        november = temp_db.list_entries(CENTRO, date(2024, 11, 1), date(2024, 11, 30))
        assert [e.status for e in november] == [EntryStatus.POSTED]

    def test_annual_close_generates_entries(self, closing_service, year_activity, temp_db, balance_service):
        """Test regularization and closing entries of a profitable year."""
        _close_months(closing_service, range(1, 13))

        result = closing_service.close_period(CENTRO, 2024, "ana")
        period = result.period

        assert period.period_type == PeriodType.ANNUAL
        assert period.period_month is None
        assert period.status == PeriodStatus.CLOSED
        assert result.result_amount == Decimal("1000.00")
        assert "Resultado del ejercicio: beneficio de 1.000,00 €" in result.warnings

        regularization = temp_db.get_entry(period.regularization_entry_id)
        assert regularization.entry_date == date(2024, 12, 31)
        assert regularization.entry_number == 5
        assert regularization.total_debit == regularization.total_credit == Decimal("5000.00")
        assert _sides(temp_db.get_entry_lines(regularization.id)) == {
            ("6000000", MovementType.CREDIT): Decimal("3000.00"),
            ("6210000", MovementType.CREDIT): Decimal("1000.00"),
            ("7000000", MovementType.DEBIT): Decimal("5000.00"),
            ("1290000", MovementType.CREDIT): Decimal("1000.00"),
        }

        closing = temp_db.get_entry(period.closing_entry_id)
        assert closing.entry_number == 6
        assert _sides(temp_db.get_entry_lines(closing.id)) == {
            ("1000000", MovementType.DEBIT): Decimal("10000.00"),
            ("1290000", MovementType.DEBIT): Decimal("1000.00"),
            ("5720000", MovementType.CREDIT): Decimal("11000.00"),
        }

        # Every account ends the year at zero
        for row in balance_service.trial_balance(CENTRO, date(2024, 1, 1), date(2024, 12, 31)):
            assert row.balance == 0, row.account_code

        fiscal_year = temp_db.get_fiscal_year(CENTRO, 2024)
        assert fiscal_year.status == FiscalYearStatus.CLOSED
        assert fiscal_year.closed_by == "ana"
        assert fiscal_year.closing_date == date(2024, 12, 31)
        assert all(e.status == EntryStatus.CLOSED for e in temp_db.list_entries(CENTRO))

    def test_annual_close_loss(self, closing_service, post_simple, fiscal_year_2024):
        """Test a loss is reported and debited to the result account."""
        post_simple(date(2024, 4, 1), "800.00", debit="6000000", credit="5720000")
        post_simple(date(2024, 4, 2), "300.00", debit="5720000", credit="7050000")
        _close_months(closing_service, range(1, 13))

        result = closing_service.close_period(CENTRO, 2024, "ana")

        assert result.result_amount == Decimal("-500.00")
        assert "Resultado del ejercicio: pérdida de 500,00 €" in result.warnings
        lines = closing_service.db.get_entry_lines(result.period.regularization_entry_id)
        assert _sides(lines)[("1290000", MovementType.DEBIT)] == Decimal("500.00")

    def test_annual_close_without_closing_entry(self, temp_db, chart, year_activity):
        """Test the balance-sheet closing entry can be disabled."""
        service = ClosingService(
            temp_db,
            settings=Settings(_env_file=None, generate_annual_closing_entry=False),
            today=lambda: date(2025, 6, 30),
        )
        _close_months(service, range(1, 13))

        period = service.close_period(CENTRO, 2024, "ana").period

        assert period.regularization_entry_id is not None
        assert period.closing_entry_id is None

    def test_annual_close_twice(self, closing_service, fiscal_year_2024):
        """Test a closed year cannot be closed again."""
        _close_months(closing_service, range(1, 13))
        closing_service.close_period(CENTRO, 2024, "ana")

        with pytest.raises(AlreadyClosedError, match="El período 2024 ya está cerrado"):
            closing_service.close_period(CENTRO, 2024, "ana")

    def test_annual_close_without_fiscal_year(self, closing_service):
        """Test the annual close needs an open fiscal year."""
        _close_months(closing_service, range(1, 13))
        with pytest.raises(PeriodNotReadyError, match="No hay un ejercicio 2024 abierto"):
            closing_service.close_period(CENTRO, 2024, "ana")

    def test_months_of_closed_year_are_closed(self, closing_service, fiscal_year_2024):
        """Test the annual status overrides monthly records."""
        _close_months(closing_service, range(1, 13))
        closing_service.close_period(CENTRO, 2024, "ana")

        assert closing_service.get_period_status(CENTRO, 2024) == PeriodStatus.CLOSED
        assert closing_service.get_period_status(CENTRO, 2024, 6) == PeriodStatus.CLOSED
        assert closing_service.get_period_status(CENTRO, 2025, 1) == PeriodStatus.OPEN

    def test_list_periods(self, closing_service, fiscal_year_2024):
        """Test monthly periods are listed before the annual one."""
        _close_months(closing_service, range(1, 13))
        closing_service.close_period(CENTRO, 2024, "ana")

        periods = closing_service.list_periods(CENTRO, 2024)
        assert [p.period_month for p in periods] == list(range(1, 13)) + [None]
        annual = closing_service.list_periods(CENTRO, 2024, PeriodType.ANNUAL)
        assert len(annual) == 1
