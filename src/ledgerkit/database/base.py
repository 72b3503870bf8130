"""Abstract persistence interfaces.

Each collaborator the accounting core depends on is a separate interface so
services and tests can see exactly which operations they rely on.
``Database`` bundles them for implementations backed by a single store.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerkit.domain.entities import (
    Account,
    AccountTotals,
    AccountType,
    ApprovalStatus,
    BankTransaction,
    ClosingPeriod,
    EntryStatus,
    FiscalYear,
    InvoiceLine,
    InvoiceReceived,
    JournalEntry,
    JournalLine,
    JournalLineInput,
    PeriodClosing,
    PeriodType,
    PreparedEntry,
)


class ChartOfAccounts(ABC):
    """Chart-of-accounts lookup."""

    @abstractmethod
    def create_account(
        self,
        code: str,
        name: str,
        account_type: AccountType,
        level: int,
        parent_code: Optional[str] = None,
    ) -> str:
        """Create an account. Returns the account code."""
        pass

    @abstractmethod
    def get_account(self, code: str) -> Optional[Account]:
        """Resolve an account by code."""
        pass

    @abstractmethod
    def list_accounts(self, active_only: bool = False) -> list[Account]:
        """List accounts ordered by code."""
        pass

    @abstractmethod
    def set_account_active(self, code: str, active: bool) -> None:
        """Activate or deactivate an account."""
        pass


class LedgerRepository(ABC):
    """Journal entries and lines."""

    @abstractmethod
    def next_entry_number(self, centro_code: str) -> int:
        """Atomically reserve the next entry number for a centro.

        Numbers are never handed out twice, even if the entry using them is
        never saved or is later deleted.
        """
        pass

    @abstractmethod
    def save_entry(self, entry: PreparedEntry) -> int:
        """Persist an entry with its lines in one write. Returns entry ID."""
        pass

    @abstractmethod
    def get_entry(self, entry_id: int) -> Optional[JournalEntry]:
        """Get entry header by ID."""
        pass

    @abstractmethod
    def get_entry_lines(self, entry_id: int) -> list[JournalLine]:
        """Get the lines of an entry ordered by line number."""
        pass

    @abstractmethod
    def list_entries(
        self,
        centro_code: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[EntryStatus] = None,
    ) -> list[JournalEntry]:
        """List entries of a centro, optionally filtered by date range and status."""
        pass

    @abstractmethod
    def update_entry_status(
        self, entry_id: int, status: EntryStatus, posted_by: Optional[str] = None
    ) -> None:
        """Change entry status."""
        pass

    @abstractmethod
    def replace_entry_lines(
        self,
        entry_id: int,
        lines: Sequence[JournalLineInput],
        total_debit: Decimal,
        total_credit: Decimal,
    ) -> None:
        """Replace all lines of an entry and its totals in one write."""
        pass

    @abstractmethod
    def delete_entry(self, entry_id: int) -> None:
        """Delete an entry and its lines."""
        pass

    @abstractmethod
    def get_account_totals(
        self, centro_code: str, start_date: date, end_date: date
    ) -> list[AccountTotals]:
        """Sum debits and credits per account over non-draft entries in a range."""
        pass


class PeriodRepository(ABC):
    """Fiscal years and closing periods."""

    @abstractmethod
    def create_fiscal_year(
        self, centro_code: str, year: int, start_date: date, end_date: date
    ) -> int:
        """Create an open fiscal year. Returns fiscal year ID."""
        pass

    @abstractmethod
    def get_fiscal_year(self, centro_code: str, year: int) -> Optional[FiscalYear]:
        """Get fiscal year of a centro by year."""
        pass

    @abstractmethod
    def get_fiscal_year_for_date(self, centro_code: str, day: date) -> Optional[FiscalYear]:
        """Get the fiscal year whose range contains a date."""
        pass

    @abstractmethod
    def list_fiscal_years(self, centro_code: str) -> list[FiscalYear]:
        """List fiscal years of a centro ordered by start date."""
        pass

    @abstractmethod
    def get_period(
        self, centro_code: str, year: int, month: Optional[int] = None
    ) -> Optional[ClosingPeriod]:
        """Get a monthly period, or the annual period when month is None."""
        pass

    @abstractmethod
    def list_periods(
        self, centro_code: str, year: int, period_type: Optional[PeriodType] = None
    ) -> list[ClosingPeriod]:
        """List recorded periods of a year."""
        pass

    @abstractmethod
    def record_period_closing(self, closing: PeriodClosing) -> ClosingPeriod:
        """Apply a closing atomically.

        Writes the generated entries, marks the period closed, moves the
        period's entries to ``closed`` and closes the fiscal year when given.
        Nothing is written if any step fails.

        Raises:
            AlreadyClosedError: If the period was closed concurrently
        """
        pass


class InvoiceRepository(ABC):
    """Received invoices."""

    @abstractmethod
    def save_invoice(
        self,
        supplier_id: str,
        centro_code: str,
        invoice_number: str,
        invoice_date: date,
        lines: Sequence[InvoiceLine],
        subtotal: Decimal,
        tax_total: Decimal,
        total: Decimal,
        requires_manager_approval: bool,
        requires_accounting_approval: bool,
        approval_status: ApprovalStatus,
        due_date: Optional[date] = None,
        notes: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> int:
        """Persist an invoice with its lines. Returns invoice ID."""
        pass

    @abstractmethod
    def get_invoice(self, invoice_id: int) -> Optional[InvoiceReceived]:
        """Get invoice with lines by ID."""
        pass

    @abstractmethod
    def update_invoice_approval(
        self,
        invoice_id: int,
        approval_status: ApprovalStatus,
        rejected_by: Optional[str] = None,
        rejected_reason: Optional[str] = None,
    ) -> None:
        """Change approval status."""
        pass

    @abstractmethod
    def save_invoice_entry(self, invoice_id: int, entry: PreparedEntry) -> int:
        """Persist the journal entry of an invoice and link it in one write.

        Returns the entry ID.
        """
        pass


class BankTransactionSink(ABC):
    """Imported bank transactions."""

    @abstractmethod
    def save_bank_transactions(self, transactions: Sequence[BankTransaction]) -> int:
        """Persist transactions in one write. Returns count saved."""
        pass

    @abstractmethod
    def list_bank_transactions(
        self,
        bank_account_id: Optional[str] = None,
        import_batch_id: Optional[str] = None,
    ) -> list[BankTransaction]:
        """List stored transactions ordered by date."""
        pass


class Database(
    ChartOfAccounts,
    LedgerRepository,
    PeriodRepository,
    InvoiceRepository,
    BankTransactionSink,
):
    """Abstract database interface for ledgerkit."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass
