"""Journal entry (asiento) domain service.

Every entry admitted into the ledger is validated completely before anything
is written: at least one debit and one credit line, positive amounts, active
accounts, an open period and debits equal to credits within 0.01.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence
from ledgerkit.database.base import Database
from ledgerkit.domain.entities import (
    EntryStatus,
    FiscalYearStatus,
    JournalEntry,
    JournalLine,
    JournalLineInput,
    MovementType,
    PreparedEntry,
)
from ledgerkit.domain.errors import (
    InvalidStateError,
    NotFoundError,
    UnbalancedEntryError,
    ValidationError,
    account_inactive,
    account_not_found,
    entry_not_draft,
    entry_not_found,
    unbalanced_entry,
)
from ledgerkit.domain.fiscal_year import ensure_date_open
from ledgerkit.utils.money import is_balanced, sum_money, to_money

logger = logging.getLogger(__name__)


class JournalService:
    """Service for creating, posting and deleting journal entries."""

    def __init__(self, db: Database):
        """Initialize journal service.

        Args:
            db: Database instance
        """
        self.db = db

    def _validate_lines(
        self, lines: Sequence[JournalLineInput]
    ) -> tuple[tuple[JournalLineInput, ...], Decimal, Decimal]:
        """Validate lines and return them normalized with their debit/credit totals."""
        if not lines:
            raise ValidationError("El asiento debe tener al menos una línea")

        normalized = []
        for number, line in enumerate(lines, start=1):
            try:
                amount = to_money(line.amount)
            except (TypeError, ArithmeticError):
                raise ValidationError(f"Línea {number}: importe no válido '{line.amount}'")
            if amount <= 0:
                raise ValidationError(f"Línea {number}: el importe debe ser mayor que 0")
            account = self.db.get_account(line.account_code)
            if account is None:
                raise ValidationError(account_not_found(line.account_code))
            if not account.active:
                raise ValidationError(account_inactive(line.account_code))
            normalized.append(
                JournalLineInput(
                    account_code=line.account_code,
                    movement_type=MovementType(line.movement_type),
                    amount=amount,
                    description=line.description,
                )
            )

        debits = [line.amount for line in normalized if line.movement_type == MovementType.DEBIT]
        credits = [line.amount for line in normalized if line.movement_type == MovementType.CREDIT]
        if not debits or not credits:
            raise ValidationError("El asiento debe tener al menos una línea al debe y otra al haber")

        total_debit = sum_money(debits)
        total_credit = sum_money(credits)
        if not is_balanced(total_debit, total_credit):
            raise UnbalancedEntryError(unbalanced_entry(total_debit, total_credit))
        return tuple(normalized), total_debit, total_credit

    def _require_entry(self, entry_id: int) -> JournalEntry:
        entry = self.db.get_entry(entry_id)
        if entry is None:
            raise NotFoundError(entry_not_found(entry_id))
        return entry

    def prepare_entry(
        self,
        centro_code: str,
        entry_date: date,
        description: str,
        lines: Sequence[JournalLineInput],
        created_by: Optional[str] = None,
        status: EntryStatus = EntryStatus.POSTED,
        check_period: bool = True,
    ) -> PreparedEntry:
        """Validate an entry and reserve its number without persisting it.

        Args:
            centro_code: Centro the entry belongs to
            entry_date: Accounting date
            description: Entry description
            lines: Debit and credit lines
            created_by: Optional user ID
            status: Status the entry will be saved with
            check_period: If False, the entry may be dated inside a closed
                period (used for entries generated by a closing)

        Returns:
            Prepared entry ready for the ledger repository

        Raises:
            ValidationError: If a line, account or the description is invalid
            PeriodClosedError: If the date is inside a closed period
            UnbalancedEntryError: If debits and credits differ by more than 0.01
        """
        if not centro_code or not centro_code.strip():
            raise ValidationError("El centro es obligatorio")
        if not description or not description.strip():
            raise ValidationError("La descripción del asiento es obligatoria")

        normalized, total_debit, total_credit = self._validate_lines(lines)
        if check_period:
            ensure_date_open(self.db, centro_code, entry_date)

        fiscal_year = self.db.get_fiscal_year_for_date(centro_code, entry_date)
        fiscal_year_id = None
        if fiscal_year is not None and fiscal_year.status == FiscalYearStatus.OPEN:
            fiscal_year_id = fiscal_year.id

        # Numbering happens only after validation succeeds
        entry_number = self.db.next_entry_number(centro_code)
        logger.debug("Reserved entry number %s for centro %s", entry_number, centro_code)

        return PreparedEntry(
            centro_code=centro_code,
            entry_number=entry_number,
            entry_date=entry_date,
            description=description.strip(),
            fiscal_year_id=fiscal_year_id,
            status=status,
            lines=normalized,
            total_debit=total_debit,
            total_credit=total_credit,
            created_by=created_by,
        )

    def create_entry(
        self,
        centro_code: str,
        entry_date: date,
        description: str,
        lines: Sequence[JournalLineInput],
        created_by: Optional[str] = None,
    ) -> JournalEntry:
        """Create and post a balanced journal entry.

        Args:
            centro_code: Centro the entry belongs to
            entry_date: Accounting date
            description: Entry description
            lines: Debit and credit lines
            created_by: Optional user ID

        Returns:
            Posted journal entry

        Raises:
            ValidationError: If a line, account or the description is invalid
            PeriodClosedError: If the date is inside a closed period
            UnbalancedEntryError: If debits and credits differ by more than 0.01
        """
        prepared = self.prepare_entry(centro_code, entry_date, description, lines, created_by)
        entry_id = self.db.save_entry(prepared)
        logger.info(
            "Posted entry %s/%s on %s (%s)",
            centro_code,
            prepared.entry_number,
            entry_date.isoformat(),
            prepared.total_debit,
        )
        return self.db.get_entry(entry_id)

    def create_draft_entry(
        self,
        centro_code: str,
        entry_date: date,
        description: str,
        lines: Sequence[JournalLineInput],
        created_by: Optional[str] = None,
    ) -> JournalEntry:
        """Create a draft entry. Drafts are validated like posted entries and
        consume an entry number, but do not count in balances.

        Raises:
            ValidationError: If a line, account or the description is invalid
            PeriodClosedError: If the date is inside a closed period
            UnbalancedEntryError: If debits and credits differ by more than 0.01
        """
        prepared = self.prepare_entry(
            centro_code, entry_date, description, lines, created_by, status=EntryStatus.DRAFT
        )
        entry_id = self.db.save_entry(prepared)
        logger.info("Created draft entry %s/%s", centro_code, prepared.entry_number)
        return self.db.get_entry(entry_id)

    def post_entry(self, entry_id: int, posted_by: Optional[str] = None) -> JournalEntry:
        """Post a draft entry.

        Raises:
            NotFoundError: If the entry does not exist
            InvalidStateError: If the entry is not a draft
            PeriodClosedError: If the entry date is inside a closed period
        """
        entry = self._require_entry(entry_id)
        if entry.status != EntryStatus.DRAFT:
            raise InvalidStateError(entry_not_draft(entry_id, entry.status.value))
        ensure_date_open(self.db, entry.centro_code, entry.entry_date)

        self.db.update_entry_status(entry_id, EntryStatus.POSTED, posted_by=posted_by)
        logger.info("Posted draft entry %s/%s", entry.centro_code, entry.entry_number)
        return self.db.get_entry(entry_id)

    def replace_draft_lines(self, entry_id: int, lines: Sequence[JournalLineInput]) -> list[JournalLine]:
        """Replace the lines of a draft entry.

        Returns:
            The new persisted lines

        Raises:
            NotFoundError: If the entry does not exist
            InvalidStateError: If the entry is not a draft
            PeriodClosedError: If the entry date is inside a closed period
            ValidationError: If a line or account is invalid
            UnbalancedEntryError: If the new lines do not balance
        """
        entry = self._require_entry(entry_id)
        if entry.status != EntryStatus.DRAFT:
            raise InvalidStateError(entry_not_draft(entry_id, entry.status.value))
        ensure_date_open(self.db, entry.centro_code, entry.entry_date)

        normalized, total_debit, total_credit = self._validate_lines(lines)
        self.db.replace_entry_lines(entry_id, normalized, total_debit, total_credit)
        logger.info("Replaced lines of draft entry %s/%s", entry.centro_code, entry.entry_number)
        return self.db.get_entry_lines(entry_id)

    def delete_draft_entry(self, entry_id: int) -> None:
        """Delete a draft entry. Its number is never handed out again.

        Raises:
            NotFoundError: If the entry does not exist
            InvalidStateError: If the entry is not a draft
            PeriodClosedError: If the entry date is inside a closed period
        """
        entry = self._require_entry(entry_id)
        if entry.status != EntryStatus.DRAFT:
            raise InvalidStateError(entry_not_draft(entry_id, entry.status.value))
        ensure_date_open(self.db, entry.centro_code, entry.entry_date)

        self.db.delete_entry(entry_id)
        logger.info("Deleted draft entry %s/%s", entry.centro_code, entry.entry_number)

    def get_entry(self, entry_id: int) -> Optional[JournalEntry]:
        """Get entry by ID."""
        return self.db.get_entry(entry_id)

    def get_entry_lines(self, entry_id: int) -> list[JournalLine]:
        """Get the lines of an entry ordered by line number."""
        return self.db.get_entry_lines(entry_id)

    def list_entries(
        self,
        centro_code: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[EntryStatus] = None,
    ) -> list[JournalEntry]:
        """List entries of a centro, optionally filtered by date range and status."""
        return self.db.list_entries(centro_code, start_date, end_date, status)
