"""Norma 43 (AEB Cuaderno 43) bank statement parser and import service.

Each record is one 80-column line whose first two characters identify it:

    11  account header: bank, branch, account, date range, initial balance
    22  movement: dates, concepts, debit/credit key, amount, references
    23  concept continuation of the preceding 22 record
    33  account summary: debit/credit counts and totals, final balance
    88  end of file: record count

Positions below are 0-based slices of the standard's 1-based columns.
Amounts carry two implicit decimals. Key ``1`` means debe (money out, negative
amount) and ``2`` means haber (money in, positive amount).

A file is rejected as a whole only when it is not Norma 43 at all; a
malformed movement is skipped and reported in ``errors`` while the rest of the
file is still imported.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional
from ledgerkit.database.base import Database
from ledgerkit.domain.entities import BankTransaction, Norma43Account, Norma43ImportResult
from ledgerkit.domain.errors import FormatError, NORMA43_INVALID_FORMAT
from ledgerkit.utils.date_parser import parse_yymmdd
from ledgerkit.utils.money import sum_money, to_money

logger = logging.getLogger(__name__)

RECORD_LENGTH = 80

HEADER = "11"
MOVEMENT = "22"
CONCEPT = "23"
SUMMARY = "33"
END_OF_FILE = "88"
RECORD_CODES = frozenset({HEADER, MOVEMENT, CONCEPT, SUMMARY, END_OF_FILE})

DEBIT_KEY = "1"
CREDIT_KEY = "2"


def _amount(field_value: str, name: str) -> Decimal:
    """Decode an unsigned amount with two implicit decimals."""
    if not field_value.isdigit():
        raise ValueError(f"{name} no numérico '{field_value.strip()}'")
    return Decimal(int(field_value)) / 100


def _signed(amount: Decimal, key: str, name: str) -> Decimal:
    if key == DEBIT_KEY:
        return -amount
    if key == CREDIT_KEY:
        return amount
    raise ValueError(f"Clave debe/haber no válida '{key}' en {name}")


def _date(field_value: str, name: str) -> date:
    try:
        return parse_yymmdd(field_value)
    except ValueError:
        raise ValueError(f"{name} no válida '{field_value.strip()}'")


def _count(field_value: str, name: str) -> int:
    if not field_value.isdigit():
        raise ValueError(f"{name} no numérico '{field_value.strip()}'")
    return int(field_value)


@dataclass
class _Movement:
    """A movement being assembled from a 22 record and its 23 continuations."""

    transaction_date: date
    value_date: date
    amount: Decimal
    fallback_description: str
    document_number: Optional[str]
    reference: Optional[str]
    concepts: list[str] = field(default_factory=list)

    @property
    def description(self) -> str:
        return " ".join(self.concepts) if self.concepts else self.fallback_description


@dataclass
class _AccountState:
    """Per-account accumulation between a 11 header and its 33 summary."""

    header: Norma43Account
    debit_count: int = 0
    credit_count: int = 0
    debits: Decimal = Decimal("0")
    credits: Decimal = Decimal("0")
    final_balance: Optional[Decimal] = None

    @property
    def label(self) -> str:
        return f"{self.header.bank_code}-{self.header.branch_code}-{self.header.account_number}"


def _parse_header(record: str) -> Norma43Account:
    # Balance key and amount are optional; the identifiers and dates are enough
    initial_balance = None
    if record[32:47].strip():
        initial = _amount(record[33:47], "Saldo inicial")
        initial_balance = _signed(initial, record[32], "saldo inicial")
    return Norma43Account(
        bank_code=record[2:6],
        branch_code=record[6:10],
        account_number=record[10:20],
        start_date=_date(record[20:26], "Fecha inicial"),
        end_date=_date(record[26:32], "Fecha final"),
        initial_balance=initial_balance,
        currency_code=record[47:50],
        account_name=record[51:77].strip(),
    )


def _parse_movement(record: str) -> _Movement:
    common_concept = record[22:24]
    own_concept = record[24:27]
    amount = _signed(_amount(record[28:42], "Importe"), record[27], "movimiento")
    references = [ref for ref in (record[52:64].strip(), record[64:80].strip()) if ref]
    reference = " ".join(references) or None
    return _Movement(
        transaction_date=_date(record[10:16], "Fecha de operación"),
        value_date=_date(record[16:22], "Fecha valor"),
        amount=amount,
        fallback_description=reference or f"Mov. {common_concept}-{own_concept}",
        document_number=record[42:52].strip() or None,
        reference=reference,
    )


def _parse_concepts(record: str) -> list[str]:
    return [text for text in (record[4:42].strip(), record[42:80].strip()) if text]


def _check_structure(lines: list[str]) -> None:
    """Reject input that is not a Norma 43 file at all.

    Raises:
        FormatError: If the first record has an unknown code or no header exists
    """
    records = [line for line in lines if line.strip()]
    if not records or records[0][:2] not in RECORD_CODES:
        raise FormatError(NORMA43_INVALID_FORMAT)
    if not any(record.startswith(HEADER) for record in records):
        raise FormatError(NORMA43_INVALID_FORMAT)


def _summary_warnings(state: _AccountState, record: str) -> list[str]:
    """Compare a 33 summary record with the movements read for its account."""
    warnings = []
    expected_debit_count = _count(record[20:25], "Número de apuntes al debe")
    expected_debits = _amount(record[25:39], "Total debe")
    expected_credit_count = _count(record[39:44], "Número de apuntes al haber")
    expected_credits = _amount(record[44:58], "Total haber")
    state.final_balance = _signed(_amount(record[59:73], "Saldo final"), record[58], "saldo final")

    if expected_debit_count != state.debit_count or to_money(expected_debits) != to_money(state.debits):
        warnings.append(
            f"Cuenta {state.label}: el resumen indica {expected_debit_count} apuntes al debe por "
            f"{to_money(expected_debits)} y se han leído {state.debit_count} por {to_money(state.debits)}"
        )
    if expected_credit_count != state.credit_count or to_money(expected_credits) != to_money(state.credits):
        warnings.append(
            f"Cuenta {state.label}: el resumen indica {expected_credit_count} apuntes al haber por "
            f"{to_money(expected_credits)} y se han leído {state.credit_count} por {to_money(state.credits)}"
        )
    if state.header.initial_balance is None:
        return warnings
    computed_final = state.header.initial_balance + state.credits - state.debits
    if to_money(computed_final) != to_money(state.final_balance):
        warnings.append(
            f"Cuenta {state.label}: el saldo final {to_money(state.final_balance)} no coincide "
            f"con el calculado {to_money(computed_final)}"
        )
    return warnings


def parse_norma43(
    content: str,
    bank_account_id: str,
    centro_code: str,
    file_name: Optional[str] = None,
) -> Norma43ImportResult:
    """Decode Norma 43 statement text into bank transactions.

    Pure function: nothing is persisted. Every call generates a new
    ``import_batch_id`` shared by all transactions of the file.

    Args:
        content: Raw file text
        bank_account_id: Bank account the transactions belong to
        centro_code: Centro owning the bank account
        file_name: Optional original file name, echoed in the result

    Returns:
        Parse result; ``success`` is False only for non Norma 43 input
    """
    import_batch_id = str(uuid.uuid4())
    lines = content.lstrip("\ufeff").splitlines()

    try:
        _check_structure(lines)
    except FormatError as e:
        logger.warning("Rejected %s: %s", file_name or "Norma 43 input", e)
        return Norma43ImportResult(
            success=False,
            transactions_imported=0,
            transactions=(),
            total_credits=Decimal("0.00"),
            total_debits=Decimal("0.00"),
            errors=(str(e),),
            import_batch_id=import_batch_id,
            file_name=file_name,
        )

    movements: list[_Movement] = []
    accounts: list[Norma43Account] = []
    errors: list[str] = []
    warnings: list[str] = []
    state: Optional[_AccountState] = None
    last_movement: Optional[_Movement] = None
    record_count = 0

    def close_account() -> None:
        if state is not None:
            accounts.append(_with_final_balance(state))

    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        record = line.ljust(RECORD_LENGTH)
        code = record[:2]

        try:
            if code == HEADER:
                close_account()
                state = None
                state = _AccountState(header=_parse_header(record))
                last_movement = None
            elif code == MOVEMENT:
                last_movement = None
                if state is None:
                    raise ValueError("movimiento sin registro de cabecera de cuenta")
                movement = _parse_movement(record)
                movements.append(movement)
                last_movement = movement
                if movement.amount < 0:
                    state.debit_count += 1
                    state.debits += -movement.amount
                else:
                    state.credit_count += 1
                    state.credits += movement.amount
            elif code == CONCEPT:
                if last_movement is None:
                    raise ValueError("concepto complementario sin movimiento previo")
                last_movement.concepts.extend(_parse_concepts(record))
            elif code == SUMMARY:
                last_movement = None
                if state is None:
                    raise ValueError("registro final de cuenta sin cabecera")
                warnings.extend(_summary_warnings(state, record))
                close_account()
                state = None
            elif code == END_OF_FILE:
                last_movement = None
                close_account()
                state = None
                expected = _count(record[20:26], "Número de registros")
                if expected != record_count:
                    warnings.append(
                        f"El registro de fin de fichero indica {expected} registros "
                        f"y se han leído {record_count}"
                    )
            else:
                raise ValueError(f"tipo de registro desconocido '{code}'")
        except ValueError as e:
            message = f"Línea {line_number}: {e}"
            logger.warning("Skipped Norma 43 record: %s", message)
            errors.append(message)
        record_count += 1

    close_account()

    transactions = tuple(
        BankTransaction(
            bank_account_id=bank_account_id,
            centro_code=centro_code,
            transaction_date=movement.transaction_date,
            value_date=movement.value_date,
            description=movement.description,
            amount=to_money(movement.amount),
            reference=movement.reference,
            document_number=movement.document_number,
            import_batch_id=import_batch_id,
        )
        for movement in movements
    )
    total_credits = sum_money(t.amount for t in transactions if t.amount > 0)
    total_debits = sum_money(-t.amount for t in transactions if t.amount < 0)
    logger.debug(
        "Parsed %s movements (credits %s, debits %s) with %s errors",
        len(transactions),
        total_credits,
        total_debits,
        len(errors),
    )
    return Norma43ImportResult(
        success=True,
        transactions_imported=len(transactions),
        transactions=transactions,
        total_credits=total_credits,
        total_debits=total_debits,
        errors=tuple(errors),
        import_batch_id=import_batch_id,
        warnings=tuple(warnings),
        accounts=tuple(accounts),
        file_name=file_name,
    )


def _with_final_balance(state: _AccountState) -> Norma43Account:
    header = state.header
    return Norma43Account(
        bank_code=header.bank_code,
        branch_code=header.branch_code,
        account_number=header.account_number,
        start_date=header.start_date,
        end_date=header.end_date,
        initial_balance=header.initial_balance,
        currency_code=header.currency_code,
        account_name=header.account_name,
        final_balance=state.final_balance,
    )


class Norma43ImportService:
    """Service importing Norma 43 statements into bank transactions."""

    def __init__(self, db: Database):
        """Initialize import service.

        Args:
            db: Database instance
        """
        self.db = db

    def import_file(
        self,
        content: str,
        bank_account_id: str,
        centro_code: str,
        file_name: Optional[str] = None,
    ) -> Norma43ImportResult:
        """Parse a statement and store its transactions as pending.

        Nothing is stored when the file is not Norma 43.

        Args:
            content: Raw file text
            bank_account_id: Bank account the statement belongs to
            centro_code: Centro owning the bank account
            file_name: Optional original file name

        Returns:
            Parse result of the file
        """
        result = parse_norma43(content, bank_account_id, centro_code, file_name)
        if result.success and result.transactions:
            saved = self.db.save_bank_transactions(result.transactions)
            logger.info(
                "Imported %s transactions from %s into %s (batch %s)",
                saved,
                file_name or "Norma 43 file",
                bank_account_id,
                result.import_batch_id,
            )
        return result
