"""Shared pytest fixtures for ledgerkit tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from ledgerkit.config import Settings
from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.balance import BalanceService
from ledgerkit.domain.closing import ClosingService
from ledgerkit.domain.entities import AccountType, JournalLineInput
from ledgerkit.domain.fiscal_year import FiscalYearService
from ledgerkit.domain.invoice import InvoiceService
from ledgerkit.domain.journal import JournalService
from ledgerkit.domain.norma43 import Norma43ImportService

CENTRO = "C001"

# Minimal PGC chart used by the tests
CHART = [
    ("1000000", "Capital social", AccountType.EQUITY),
    ("1290000", "Resultado del ejercicio", AccountType.EQUITY),
    ("1390000", "Cuenta de cierre", AccountType.EQUITY),
    ("4000000", "Proveedores", AccountType.LIABILITY),
    ("4300000", "Clientes", AccountType.ASSET),
    ("4720000", "Hacienda Pública, IVA soportado", AccountType.ASSET),
    ("5720000", "Bancos c/c", AccountType.ASSET),
    ("6000000", "Compras de mercaderías", AccountType.EXPENSE),
    ("6210000", "Arrendamientos", AccountType.EXPENSE),
    ("6290000", "Otros servicios", AccountType.EXPENSE),
    ("7000000", "Ventas de mercaderías", AccountType.REVENUE),
    ("7050000", "Prestaciones de servicios", AccountType.REVENUE),
]


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def settings():
    """Settings with the default business rules, independent of the environment."""
    return Settings(
        _env_file=None,
        approval_threshold=Decimal("500.00"),
        generate_annual_closing_entry=True,
        require_sequential_months=False,
    )


@pytest.fixture
def chart(temp_db):
    """Seed the chart of accounts and return the codes."""
    for code, name, account_type in CHART:
        temp_db.create_account(code=code, name=name, account_type=account_type, level=3)
    return [code for code, _, _ in CHART]


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def journal_service(temp_db, chart):
    """Create a JournalService over a seeded chart."""
    return JournalService(temp_db)


@pytest.fixture
def fiscal_year_service(temp_db):
    """Create a FiscalYearService with a temporary database."""
    return FiscalYearService(temp_db)


@pytest.fixture
def balance_service(temp_db):
    """Create a BalanceService with a temporary database."""
    return BalanceService(temp_db)


@pytest.fixture
def closing_service(temp_db, chart, settings):
    """Create a ClosingService over a seeded chart."""
    return ClosingService(temp_db, settings=settings, today=lambda: date(2025, 6, 30))


@pytest.fixture
def invoice_service(temp_db, chart, settings):
    """Create an InvoiceService over a seeded chart."""
    return InvoiceService(temp_db, settings=settings)


@pytest.fixture
def norma43_service(temp_db):
    """Create a Norma43ImportService with a temporary database."""
    return Norma43ImportService(temp_db)


@pytest.fixture
def fiscal_year_2024(fiscal_year_service):
    """Open calendar fiscal year 2024 for the test centro."""
    return fiscal_year_service.open_fiscal_year(CENTRO, 2024)


@pytest.fixture
def post_simple(journal_service):
    """Return a helper posting a two-line entry."""

    def post(day, amount, debit="6000000", credit="5720000", description="Asiento de prueba"):
        return journal_service.create_entry(
            CENTRO,
            day,
            description,
            [
                JournalLineInput.debit(debit, Decimal(amount)),
                JournalLineInput.credit(credit, Decimal(amount)),
            ],
            created_by="tester",
        )

    return post


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
