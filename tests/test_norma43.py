"""Tests for the Norma 43 parser and import service."""

import pytest
from datetime import date
from decimal import Decimal

from ledgerkit.domain.entities import BankTransactionStatus
from ledgerkit.domain.errors import NORMA43_INVALID_FORMAT
from ledgerkit.domain.norma43 import parse_norma43

CENTRO = "C001"
BANK_ACCOUNT = "ES-0049-01"


def header(balance=100000, key="2", start="240101", end="240131", account="0123456789", name="RESTAURANTE CENTRO"):
    record = (
        "11" + "0049" + "1500" + account + start + end + key
        + f"{balance:014d}" + "978" + "3" + name.ljust(26) + "   "
    )
    assert len(record) == 80
    return record


def movement(cents, key="2", day="240115", value_day="240116", document="0000000001", ref1="", ref2="", common="02", own="099"):
    record = (
        "22" + "    " + "1500" + day + value_day + common + own + key
        + f"{cents:014d}" + document + ref1.ljust(12) + ref2.ljust(16)
    )
    assert len(record) == 80
    return record


def concept(first, second=""):
    record = "23" + "01" + first.ljust(38) + second.ljust(38)
    assert len(record) == 80
    return record


def summary(debit_count, debits, credit_count, credits, final_balance, final_key="2", account="0123456789"):
    record = (
        "33" + "0049" + "1500" + account
        + f"{debit_count:05d}" + f"{debits:014d}"
        + f"{credit_count:05d}" + f"{credits:014d}"
        + final_key + f"{final_balance:014d}" + "978" + "    "
    )
    assert len(record) == 80
    return record


def end_of_file(count):
    record = "88" + "9" * 18 + f"{count:06d}" + " " * 54
    assert len(record) == 80
    return record


def statement(*records):
    return "\n".join(records) + "\n"


def parse(content, file_name=None):
    return parse_norma43(content, BANK_ACCOUNT, CENTRO, file_name)


class TestParseValidFiles:
    """Tests for well-formed statements."""

    def test_two_movements(self):
        """Test a header, a credit, a debit and the end record."""
        result = parse(
            statement(
                header(),
                movement(10000, key="2", ref1="FRA-7"),
                movement(5000, key="1", day="240120", value_day="240120"),
                end_of_file(3),
            ),
            file_name="enero.n43",
        )

        assert result.success is True
        assert result.transactions_imported == 2
        assert result.total_credits == Decimal("100.00")
        assert result.total_debits == Decimal("50.00")
        assert result.errors == ()
        assert result.warnings == ()
        assert result.file_name == "enero.n43"

        credit, debit = result.transactions
        assert credit.amount == Decimal("100.00")
        assert debit.amount == Decimal("-50.00")
        assert credit.transaction_date == date(2024, 1, 15)
        assert credit.value_date == date(2024, 1, 16)
        assert credit.description == "FRA-7"
        assert credit.reference == "FRA-7"
        assert credit.document_number == "0000000001"
        assert debit.description == "Mov. 02-099"
        assert credit.bank_account_id == BANK_ACCOUNT
        assert credit.centro_code == CENTRO
        assert credit.status == BankTransactionStatus.PENDING
        assert credit.import_batch_id == debit.import_batch_id == result.import_batch_id

    def test_account_header(self):
        """Test header fields are decoded."""
        result = parse(statement(header(balance=123456, key="1"), end_of_file(1)))

        (account,) = result.accounts
        assert account.bank_code == "0049"
        assert account.branch_code == "1500"
        assert account.account_number == "0123456789"
        assert account.start_date == date(2024, 1, 1)
        assert account.end_date == date(2024, 1, 31)
        assert account.initial_balance == Decimal("-1234.56")
        assert account.currency_code == "978"
        assert account.account_name == "RESTAURANTE CENTRO"

    def test_concept_records_build_description(self):
        """Test 23 records replace the fallback description."""
        result = parse(
            statement(
                header(),
                movement(2500, ref1="REF"),
                concept("TRANSFERENCIA RECIBIDA", "CLIENTE SA"),
                concept("FACTURA 12"),
                end_of_file(4),
            )
        )

        (transaction,) = result.transactions
        assert transaction.description == "TRANSFERENCIA RECIBIDA CLIENTE SA FACTURA 12"
        assert transaction.reference == "REF"

    def test_no_movements(self):
        """Test a statement without 22 records."""
        result = parse(statement(header(), summary(0, 0, 0, 0, 100000), end_of_file(2)))

        assert result.success is True
        assert result.transactions_imported == 0
        assert result.transactions == ()
        assert result.total_credits == Decimal("0.00")
        assert result.total_debits == Decimal("0.00")
        assert result.warnings == ()

    def test_matching_summary(self):
        """Test a consistent 33 record gives no warnings and sets the final balance."""
        result = parse(
            statement(
                header(balance=100000),
                movement(10000, key="2"),
                movement(5000, key="1"),
                summary(1, 5000, 1, 10000, 105000),
                end_of_file(4),
            )
        )

        assert result.warnings == ()
        assert result.accounts[0].final_balance == Decimal("1050.00")

    def test_mismatching_summary(self):
        """Test inconsistent totals are reported as warnings only."""
        result = parse(
            statement(
                header(balance=100000),
                movement(10000, key="2"),
                summary(2, 5000, 1, 10000, 999999),
                end_of_file(3),
            )
        )

        assert result.success is True
        assert result.transactions_imported == 1
        assert len(result.warnings) == 2
        assert "apuntes al debe" in result.warnings[0]
        assert "saldo final" in result.warnings[1]

    def test_record_count_mismatch(self):
        """Test a wrong 88 record count is a warning."""
        result = parse(statement(header(), movement(100), end_of_file(7)))

        assert result.transactions_imported == 1
        assert result.warnings == ("El registro de fin de fichero indica 7 registros y se han leído 2",)

    def test_several_accounts(self):
        """Test movements of every account in the file are collected."""
        result = parse(
            statement(
                header(account="0000000001"),
                movement(100),
                summary(0, 0, 1, 100, 100100, account="0000000001"),
                header(account="0000000002", balance=0),
                movement(300, key="1"),
                summary(1, 300, 0, 0, 300, final_key="1", account="0000000002"),
                end_of_file(6),
            )
        )

        assert [a.account_number for a in result.accounts] == ["0000000001", "0000000002"]
        assert [t.amount for t in result.transactions] == [Decimal("1.00"), Decimal("-3.00")]
        assert result.warnings == ()

    def test_windows_file_with_bom_and_trimmed_lines(self):
        """Test CRLF line ends, a BOM and stripped trailing blanks."""
        content = "\ufeff" + "\r\n".join(
            record.rstrip() for record in (header(), movement(4200), end_of_file(2))
        )
        result = parse(content)

        assert result.success is True
        assert result.errors == ()
        assert result.transactions[0].amount == Decimal("42.00")
        assert result.transactions[0].document_number == "0000000001"

    def test_parsing_is_repeatable(self):
        """Test the same input gives the same transactions under a new batch."""
        content = statement(header(), movement(10000), movement(5000, key="1"), end_of_file(3))
        first = parse(content)
        second = parse(content)

        def movements(result):
            return [(t.transaction_date, t.amount, t.description, t.reference) for t in result.transactions]

        assert movements(first) == movements(second)
        assert first.import_batch_id != second.import_batch_id


class TestParseInvalidFiles:
    """Tests for rejected files and skipped records."""

    def test_plain_text_file(self):
        """Test a file that is not Norma 43 at all."""
        result = parse("Extracto de movimientos\nFecha;Importe\n")

        assert result.success is False
        assert result.transactions_imported == 0
        assert result.transactions == ()
        assert result.errors == (NORMA43_INVALID_FORMAT,)
        assert result.errors == ("El archivo no tiene formato Norma 43 válido",)
        assert result.total_credits == Decimal("0.00")
        assert result.total_debits == Decimal("0.00")

    @pytest.mark.parametrize("content", ["", "\n\n", "88" + "9" * 18 + "000000"])
    def test_empty_or_headerless(self, content):
        """Test input without any account header is rejected."""
        result = parse(content)
        assert result.success is False
        assert result.errors == (NORMA43_INVALID_FORMAT,)

    def test_malformed_movement_is_skipped(self):
        """Test a bad 22 record is reported while the rest is imported."""
        bad = movement(100)
        bad = bad[:28] + "12AB5678901234" + bad[42:]
        result = parse(statement(header(), movement(10000), bad, movement(2000, key="1"), end_of_file(4)))

        assert result.success is True
        assert result.transactions_imported == 2
        assert result.errors == ("Línea 3: Importe no numérico '12AB5678901234'",)
        assert result.total_credits == Decimal("100.00")
        assert result.total_debits == Decimal("20.00")

    def test_invalid_debit_credit_key(self):
        """Test a movement key other than 1 or 2."""
        result = parse(statement(header(), movement(100, key="3"), end_of_file(2)))

        assert result.transactions_imported == 0
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Línea 2: Clave debe/haber no válida '3'")

    def test_invalid_movement_date(self):
        """Test an impossible operation date."""
        result = parse(statement(header(), movement(100, day="241340"), end_of_file(2)))

        assert result.transactions_imported == 0
        assert "Fecha de operación no válida" in result.errors[0]

    def test_concept_without_movement(self):
        """Test a 23 record with no preceding 22."""
        result = parse(statement(header(), concept("HUERFANO"), end_of_file(2)))

        assert result.success is True
        assert result.errors == ("Línea 2: concepto complementario sin movimiento previo",)

    def test_concept_after_malformed_movement(self):
        """Test continuation of a skipped movement is not attached elsewhere."""
        result = parse(
            statement(header(), movement(100), movement(100, key="9"), concept("PERDIDO"), end_of_file(4))
        )

        assert result.transactions[0].description == "Mov. 02-099"
        assert len(result.errors) == 2

    def test_unknown_record_code(self):
        """Test unknown record types inside a valid file."""
        result = parse(statement(header(), "99" + " " * 78, movement(100), end_of_file(3)))

        assert result.transactions_imported == 1
        assert result.errors == ("Línea 2: tipo de registro desconocido '99'",)

    def test_movement_before_header(self):
        """Test a 22 record outside any account."""
        result = parse(statement(movement(100), header(), movement(200), end_of_file(3)))

        assert result.success is True
        assert result.transactions_imported == 1
        assert result.errors == ("Línea 1: movimiento sin registro de cabecera de cuenta",)

    def test_malformed_header(self):
        """Test a bad header skips its movements without crashing."""
        bad_header = header()[:20] + "XXXXXX" + header()[26:]
        result = parse(statement(bad_header, movement(100), header(), movement(200), end_of_file(4)))

        assert result.transactions_imported == 1
        assert result.errors[0] == "Línea 1: Fecha inicial no válida 'XXXXXX'"
        assert result.errors[1] == "Línea 2: movimiento sin registro de cabecera de cuenta"
        assert len(result.accounts) == 1

    def test_header_without_balance(self):
        """Test a header cut after the date range still imports its movements."""
        short_header = "11" + "0049" + "1500" + "0123456789" + "240101" + "240131"
        assert len(short_header) == 32
        result = parse(
            statement(short_header, movement(10000), summary(0, 0, 1, 10000, 999999), end_of_file(3))
        )

        assert result.success is True
        assert result.transactions_imported == 1
        assert result.transactions[0].amount == Decimal("100.00")
        assert result.errors == ()
        assert result.warnings == ()
        account = result.accounts[0]
        assert account.account_number == "0123456789"
        assert account.start_date == date(2024, 1, 1)
        assert account.initial_balance is None
        assert account.final_balance == Decimal("9999.99")


class TestImportService:
    """Tests for storing parsed statements."""

    def test_import_stores_pending_transactions(self, norma43_service, temp_db):
        """Test transactions are saved under the batch id."""
        result = norma43_service.import_file(
            statement(header(), movement(10000), movement(5000, key="1"), end_of_file(3)),
            BANK_ACCOUNT,
            CENTRO,
            file_name="enero.n43",
        )

        stored = temp_db.list_bank_transactions(import_batch_id=result.import_batch_id)
        assert len(stored) == 2
        assert {t.amount for t in stored} == {Decimal("100.00"), Decimal("-50.00")}
        assert all(t.status == BankTransactionStatus.PENDING for t in stored)
        assert all(t.bank_account_id == BANK_ACCOUNT for t in stored)

    def test_import_invalid_file_stores_nothing(self, norma43_service, temp_db):
        """Test a rejected file leaves no transactions."""
        result = norma43_service.import_file("no es norma 43", BANK_ACCOUNT, CENTRO)

        assert result.success is False
        assert temp_db.list_bank_transactions() == []

    def test_import_twice_creates_two_batches(self, norma43_service, temp_db):
        """Test reimporting a file is not deduplicated."""
        content = statement(header(), movement(10000), end_of_file(2))
        first = norma43_service.import_file(content, BANK_ACCOUNT, CENTRO)
        second = norma43_service.import_file(content, BANK_ACCOUNT, CENTRO)

        assert first.import_batch_id != second.import_batch_id
        assert len(temp_db.list_bank_transactions(bank_account_id=BANK_ACCOUNT)) == 2
