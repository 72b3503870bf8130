"""Domain model entities for ledgerkit.

These are pure data classes representing accounting concepts, independent of
the database schema. Persistence adapters convert to and from them in
``ledgerkit.database.mappers``.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """Chart-of-accounts classification."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class EntryStatus(str, Enum):
    """Journal entry lifecycle: draft -> posted -> closed."""

    DRAFT = "draft"
    POSTED = "posted"
    CLOSED = "closed"


class MovementType(str, Enum):
    """Side of a journal line."""

    DEBIT = "debit"
    CREDIT = "credit"


class FiscalYearStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class PeriodType(str, Enum):
    MONTHLY = "monthly"
    ANNUAL = "annual"


class PeriodStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class ApprovalStatus(str, Enum):
    """Approval state of a received invoice."""

    PENDING_MANAGER = "pending_manager"
    PENDING_ACCOUNTING = "pending_accounting"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalLevel(str, Enum):
    MANAGER = "manager"
    ACCOUNTING = "accounting"


class ApprovalAction(str, Enum):
    APPROVED = "approved"
    REJECTED = "rejected"


class UserRole(str, Enum):
    """Role of the user acting on an invoice approval."""

    ADMIN = "admin"
    MANAGER = "manager"
    ACCOUNTANT = "accountant"
    VIEWER = "viewer"


class BankTransactionStatus(str, Enum):
    """Reconciliation state of an imported bank movement."""

    PENDING = "pending"
    RECONCILED = "reconciled"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Account:
    """Chart-of-accounts entry (PGC code)."""

    code: str
    name: str
    account_type: AccountType
    level: int
    parent_code: Optional[str]
    active: bool = True


@dataclass(frozen=True)
class JournalLineInput:
    """A journal line as supplied by a caller, before numbering."""

    account_code: str
    movement_type: MovementType
    amount: Decimal
    description: Optional[str] = None

    @classmethod
    def debit(cls, account_code: str, amount: Decimal, description: Optional[str] = None) -> "JournalLineInput":
        return cls(account_code, MovementType.DEBIT, amount, description)

    @classmethod
    def credit(cls, account_code: str, amount: Decimal, description: Optional[str] = None) -> "JournalLineInput":
        return cls(account_code, MovementType.CREDIT, amount, description)


@dataclass(frozen=True)
class JournalLine:
    """Persisted journal line owned by exactly one entry."""

    id: int
    entry_id: int
    line_number: int
    account_code: str
    movement_type: MovementType
    amount: Decimal
    description: Optional[str]


@dataclass(frozen=True)
class JournalEntry:
    """Journal entry (asiento) header."""

    id: int
    entry_number: int
    entry_date: date
    description: str
    centro_code: str
    fiscal_year_id: Optional[int]
    status: EntryStatus
    total_debit: Decimal
    total_credit: Decimal
    created_by: Optional[str]
    created_at: datetime
    updated_at: datetime
    posted_at: Optional[datetime] = None
    posted_by: Optional[str] = None


@dataclass(frozen=True)
class PreparedEntry:
    """A validated, numbered entry ready to be written by the ledger repository."""

    centro_code: str
    entry_number: int
    entry_date: date
    description: str
    fiscal_year_id: Optional[int]
    status: EntryStatus
    lines: tuple[JournalLineInput, ...]
    total_debit: Decimal
    total_credit: Decimal
    created_by: Optional[str]


@dataclass(frozen=True)
class AccountTotals:
    """Debit and credit sums of one account over a date range."""

    account_code: str
    debit_total: Decimal
    credit_total: Decimal


@dataclass(frozen=True)
class TrialBalanceRow:
    """Trial balance (sumas y saldos) row."""

    account_code: str
    account_name: str
    account_type: AccountType
    debit_total: Decimal
    credit_total: Decimal

    @property
    def balance(self) -> Decimal:
        """Debit minus credit."""
        return self.debit_total - self.credit_total


@dataclass(frozen=True)
class FiscalYear:
    """Fiscal year (ejercicio) of a centro."""

    id: int
    year: int
    start_date: date
    end_date: date
    centro_code: str
    status: FiscalYearStatus
    closing_date: Optional[date] = None
    closed_by: Optional[str] = None

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class ClosingPeriod:
    """Monthly or annual closing record."""

    id: int
    centro_code: str
    period_type: PeriodType
    period_year: int
    period_month: Optional[int]
    status: PeriodStatus
    closing_entry_id: Optional[int]
    regularization_entry_id: Optional[int]
    closed_by: Optional[str]
    closing_date: Optional[date]
    notes: Optional[str]


@dataclass(frozen=True)
class PeriodClosing:
    """Everything one closing writes, applied by the period repository atomically."""

    centro_code: str
    period_type: PeriodType
    period_year: int
    period_month: Optional[int]
    start_date: date
    end_date: date
    closed_by: str
    closing_date: date
    notes: Optional[str] = None
    regularization_entry: Optional[PreparedEntry] = None
    closing_entry: Optional[PreparedEntry] = None
    fiscal_year_id: Optional[int] = None


@dataclass(frozen=True)
class ClosingResult:
    """Outcome of a successful period close."""

    period: ClosingPeriod
    trial_balance: tuple[TrialBalanceRow, ...]
    warnings: tuple[str, ...]
    result_amount: Optional[Decimal] = None


@dataclass(frozen=True)
class InvoiceLine:
    """Line of a received invoice with its computed amounts."""

    line_number: int
    description: str
    quantity: Decimal
    unit_price: Decimal
    discount_percentage: Decimal
    discount_amount: Decimal
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total: Decimal
    account_code: Optional[str] = None


@dataclass(frozen=True)
class InvoiceLineInput:
    """An invoice line as supplied by a caller, before amounts are computed."""

    description: str
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal = Decimal("0")
    discount_percentage: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    account_code: Optional[str] = None


@dataclass(frozen=True)
class InvoiceReceived:
    """Supplier invoice aggregate."""

    id: int
    supplier_id: str
    centro_code: str
    invoice_number: str
    invoice_date: date
    lines: tuple[InvoiceLine, ...]
    subtotal: Decimal
    tax_total: Decimal
    total: Decimal
    requires_manager_approval: bool
    requires_accounting_approval: bool
    approval_status: ApprovalStatus
    due_date: Optional[date] = None
    notes: Optional[str] = None
    entry_id: Optional[int] = None
    rejected_by: Optional[str] = None
    rejected_reason: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class BankTransaction:
    """Bank movement produced by a statement import."""

    bank_account_id: str
    centro_code: str
    transaction_date: date
    description: str
    amount: Decimal
    import_batch_id: str
    status: BankTransactionStatus = BankTransactionStatus.PENDING
    value_date: Optional[date] = None
    reference: Optional[str] = None
    document_number: Optional[str] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class Norma43Account:
    """Per-account header/summary data read from a Norma 43 file."""

    bank_code: str
    branch_code: str
    account_number: str
    start_date: Optional[date]
    end_date: Optional[date]
    initial_balance: Optional[Decimal]
    currency_code: str
    account_name: str
    final_balance: Optional[Decimal] = None


@dataclass(frozen=True)
class Norma43ImportResult:
    """Result of parsing (and optionally importing) a Norma 43 file."""

    success: bool
    transactions_imported: int
    transactions: tuple[BankTransaction, ...]
    total_credits: Decimal
    total_debits: Decimal
    errors: tuple[str, ...]
    import_batch_id: str
    warnings: tuple[str, ...] = ()
    accounts: tuple[Norma43Account, ...] = field(default_factory=tuple)
    file_name: Optional[str] = None
