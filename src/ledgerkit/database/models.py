"""SQLAlchemy models for ledgerkit database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()

# Annual closing rows store month 0 so the unique constraint also covers them.
ANNUAL_PERIOD_MONTH = 0


class Account(Base):
    """Chart-of-accounts model."""

    __tablename__ = "accounts"

    code = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    account_type = Column(String, nullable=False)
    level = Column(Integer, nullable=False)
    parent_code = Column(String, ForeignKey("accounts.code"), nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class EntrySequence(Base):
    """Last entry number handed out per centro."""

    __tablename__ = "entry_sequences"

    centro_code = Column(String, primary_key=True)
    last_number = Column(Integer, default=0, nullable=False)


class FiscalYear(Base):
    """Fiscal year model."""

    __tablename__ = "fiscal_years"

    id = Column(Integer, primary_key=True)
    centro_code = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String, default="open", nullable=False)
    closing_date = Column(Date, nullable=True)
    closed_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("centro_code", "year", name="uq_fiscal_year_centro_year"),)


class JournalEntry(Base):
    """Journal entry header model."""

    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True)
    entry_number = Column(Integer, nullable=False)
    entry_date = Column(Date, nullable=False)
    description = Column(String, nullable=False)
    centro_code = Column(String, nullable=False)
    fiscal_year_id = Column(Integer, ForeignKey("fiscal_years.id"), nullable=True)
    status = Column(String, default="draft", nullable=False)
    total_debit = Column(Numeric(14, 2), nullable=False)
    total_credit = Column(Numeric(14, 2), nullable=False)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )
    posted_at = Column(DateTime, nullable=True)
    posted_by = Column(String, nullable=True)

    # Entry numbers are unique per centro
    __table_args__ = (UniqueConstraint("centro_code", "entry_number", name="uq_entry_centro_number"),)

    # Relationships
    lines = relationship(
        "JournalLine",
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="JournalLine.line_number",
    )


class JournalLine(Base):
    """Journal line model."""

    __tablename__ = "journal_lines"

    id = Column(Integer, primary_key=True)
    entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=False)
    line_number = Column(Integer, nullable=False)
    account_code = Column(String, ForeignKey("accounts.code"), nullable=False)
    movement_type = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    description = Column(String, nullable=True)

    __table_args__ = (UniqueConstraint("entry_id", "line_number", name="uq_line_entry_number"),)

    # Relationships
    entry = relationship("JournalEntry", back_populates="lines")


class ClosingPeriod(Base):
    """Monthly or annual closing period model."""

    __tablename__ = "closing_periods"

    id = Column(Integer, primary_key=True)
    centro_code = Column(String, nullable=False)
    period_type = Column(String, nullable=False)
    period_year = Column(Integer, nullable=False)
    period_month = Column(Integer, nullable=False)
    status = Column(String, default="open", nullable=False)
    closing_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)
    regularization_entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)
    closed_by = Column(String, nullable=True)
    closing_date = Column(Date, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # One row per period; a concurrent second close hits this constraint
    __table_args__ = (
        UniqueConstraint(
            "centro_code", "period_type", "period_year", "period_month", name="uq_closing_period"
        ),
    )


class InvoiceReceived(Base):
    """Received (supplier) invoice model."""

    __tablename__ = "invoices_received"

    id = Column(Integer, primary_key=True)
    supplier_id = Column(String, nullable=False)
    centro_code = Column(String, nullable=False)
    invoice_number = Column(String, nullable=False)
    invoice_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    subtotal = Column(Numeric(14, 2), nullable=False)
    tax_total = Column(Numeric(14, 2), nullable=False)
    total = Column(Numeric(14, 2), nullable=False)
    requires_manager_approval = Column(Boolean, default=False, nullable=False)
    requires_accounting_approval = Column(Boolean, default=True, nullable=False)
    approval_status = Column(String, nullable=False)
    entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)
    rejected_by = Column(String, nullable=True)
    rejected_reason = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        UniqueConstraint("centro_code", "supplier_id", "invoice_number", name="uq_invoice_supplier_number"),
    )

    # Relationships
    lines = relationship(
        "InvoiceLine",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLine.line_number",
    )


class InvoiceLine(Base):
    """Received invoice line model."""

    __tablename__ = "invoice_lines"

    id = Column(Integer, primary_key=True)
    invoice_id = Column(Integer, ForeignKey("invoices_received.id"), nullable=False)
    line_number = Column(Integer, nullable=False)
    description = Column(String, nullable=False)
    quantity = Column(Numeric(14, 4), nullable=False)
    unit_price = Column(Numeric(14, 4), nullable=False)
    discount_percentage = Column(Numeric(5, 2), default=0, nullable=False)
    discount_amount = Column(Numeric(14, 2), default=0, nullable=False)
    subtotal = Column(Numeric(14, 2), nullable=False)
    tax_rate = Column(Numeric(5, 2), nullable=False)
    tax_amount = Column(Numeric(14, 2), nullable=False)
    total = Column(Numeric(14, 2), nullable=False)
    account_code = Column(String, ForeignKey("accounts.code"), nullable=True)

    # Relationships
    invoice = relationship("InvoiceReceived", back_populates="lines")


class BankTransaction(Base):
    """Imported bank transaction model."""

    __tablename__ = "bank_transactions"

    id = Column(Integer, primary_key=True)
    bank_account_id = Column(String, nullable=False)
    centro_code = Column(String, nullable=False)
    transaction_date = Column(Date, nullable=False)
    value_date = Column(Date, nullable=True)
    description = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    reference = Column(String, nullable=True)
    document_number = Column(String, nullable=True)
    status = Column(String, default="pending", nullable=False)
    import_batch_id = Column(String, nullable=False)
    imported_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
