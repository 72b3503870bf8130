"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic: status columns are stored as plain
strings and become enums here, and the annual period's stored month 0 becomes
``None``.
"""

from ledgerkit.domain import entities as domain
from ledgerkit.database.models import (
    ANNUAL_PERIOD_MONTH,
    Account as ORMAccount,
    BankTransaction as ORMBankTransaction,
    ClosingPeriod as ORMClosingPeriod,
    FiscalYear as ORMFiscalYear,
    InvoiceLine as ORMInvoiceLine,
    InvoiceReceived as ORMInvoiceReceived,
    JournalEntry as ORMJournalEntry,
    JournalLine as ORMJournalLine,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        code=orm_account.code,
        name=orm_account.name,
        account_type=domain.AccountType(orm_account.account_type),
        level=orm_account.level,
        parent_code=orm_account.parent_code,
        active=orm_account.active,
    )


def journal_entry_to_domain(orm_entry: ORMJournalEntry) -> domain.JournalEntry:
    """Convert SQLAlchemy JournalEntry model to domain JournalEntry entity."""
    return domain.JournalEntry(
        id=orm_entry.id,
        entry_number=orm_entry.entry_number,
        entry_date=orm_entry.entry_date,
        description=orm_entry.description,
        centro_code=orm_entry.centro_code,
        fiscal_year_id=orm_entry.fiscal_year_id,
        status=domain.EntryStatus(orm_entry.status),
        total_debit=orm_entry.total_debit,
        total_credit=orm_entry.total_credit,
        created_by=orm_entry.created_by,
        created_at=orm_entry.created_at,
        updated_at=orm_entry.updated_at,
        posted_at=orm_entry.posted_at,
        posted_by=orm_entry.posted_by,
    )


def journal_line_to_domain(orm_line: ORMJournalLine) -> domain.JournalLine:
    """Convert SQLAlchemy JournalLine model to domain JournalLine entity."""
    return domain.JournalLine(
        id=orm_line.id,
        entry_id=orm_line.entry_id,
        line_number=orm_line.line_number,
        account_code=orm_line.account_code,
        movement_type=domain.MovementType(orm_line.movement_type),
        amount=orm_line.amount,
        description=orm_line.description,
    )


def fiscal_year_to_domain(orm_year: ORMFiscalYear) -> domain.FiscalYear:
    """Convert SQLAlchemy FiscalYear model to domain FiscalYear entity."""
    return domain.FiscalYear(
        id=orm_year.id,
        year=orm_year.year,
        start_date=orm_year.start_date,
        end_date=orm_year.end_date,
        centro_code=orm_year.centro_code,
        status=domain.FiscalYearStatus(orm_year.status),
        closing_date=orm_year.closing_date,
        closed_by=orm_year.closed_by,
    )


def closing_period_to_domain(orm_period: ORMClosingPeriod) -> domain.ClosingPeriod:
    """Convert SQLAlchemy ClosingPeriod model to domain ClosingPeriod entity."""
    month = orm_period.period_month
    return domain.ClosingPeriod(
        id=orm_period.id,
        centro_code=orm_period.centro_code,
        period_type=domain.PeriodType(orm_period.period_type),
        period_year=orm_period.period_year,
        period_month=None if month == ANNUAL_PERIOD_MONTH else month,
        status=domain.PeriodStatus(orm_period.status),
        closing_entry_id=orm_period.closing_entry_id,
        regularization_entry_id=orm_period.regularization_entry_id,
        closed_by=orm_period.closed_by,
        closing_date=orm_period.closing_date,
        notes=orm_period.notes,
    )


def period_month_to_orm(month: int | None) -> int:
    """Convert a domain period month (None for annual) to its stored value."""
    return ANNUAL_PERIOD_MONTH if month is None else month


def invoice_line_to_domain(orm_line: ORMInvoiceLine) -> domain.InvoiceLine:
    """Convert SQLAlchemy InvoiceLine model to domain InvoiceLine entity."""
    return domain.InvoiceLine(
        line_number=orm_line.line_number,
        description=orm_line.description,
        quantity=orm_line.quantity,
        unit_price=orm_line.unit_price,
        discount_percentage=orm_line.discount_percentage,
        discount_amount=orm_line.discount_amount,
        subtotal=orm_line.subtotal,
        tax_rate=orm_line.tax_rate,
        tax_amount=orm_line.tax_amount,
        total=orm_line.total,
        account_code=orm_line.account_code,
    )


def invoice_to_domain(orm_invoice: ORMInvoiceReceived) -> domain.InvoiceReceived:
    """Convert SQLAlchemy InvoiceReceived model (with lines) to domain entity."""
    return domain.InvoiceReceived(
        id=orm_invoice.id,
        supplier_id=orm_invoice.supplier_id,
        centro_code=orm_invoice.centro_code,
        invoice_number=orm_invoice.invoice_number,
        invoice_date=orm_invoice.invoice_date,
        lines=tuple(invoice_line_to_domain(line) for line in orm_invoice.lines),
        subtotal=orm_invoice.subtotal,
        tax_total=orm_invoice.tax_total,
        total=orm_invoice.total,
        requires_manager_approval=orm_invoice.requires_manager_approval,
        requires_accounting_approval=orm_invoice.requires_accounting_approval,
        approval_status=domain.ApprovalStatus(orm_invoice.approval_status),
        due_date=orm_invoice.due_date,
        notes=orm_invoice.notes,
        entry_id=orm_invoice.entry_id,
        rejected_by=orm_invoice.rejected_by,
        rejected_reason=orm_invoice.rejected_reason,
        created_by=orm_invoice.created_by,
        created_at=orm_invoice.created_at,
    )


def bank_transaction_to_domain(orm_transaction: ORMBankTransaction) -> domain.BankTransaction:
    """Convert SQLAlchemy BankTransaction model to domain BankTransaction entity."""
    return domain.BankTransaction(
        id=orm_transaction.id,
        bank_account_id=orm_transaction.bank_account_id,
        centro_code=orm_transaction.centro_code,
        transaction_date=orm_transaction.transaction_date,
        value_date=orm_transaction.value_date,
        description=orm_transaction.description,
        amount=orm_transaction.amount,
        reference=orm_transaction.reference,
        document_number=orm_transaction.document_number,
        status=domain.BankTransactionStatus(orm_transaction.status),
        import_batch_id=orm_transaction.import_batch_id,
    )


def bank_transaction_to_orm(transaction: domain.BankTransaction) -> ORMBankTransaction:
    """Convert a domain BankTransaction to a new SQLAlchemy row."""
    return ORMBankTransaction(
        bank_account_id=transaction.bank_account_id,
        centro_code=transaction.centro_code,
        transaction_date=transaction.transaction_date,
        value_date=transaction.value_date,
        description=transaction.description,
        amount=transaction.amount,
        reference=transaction.reference,
        document_number=transaction.document_number,
        status=transaction.status.value,
        import_batch_id=transaction.import_batch_id,
    )
