"""Chart-of-accounts domain service."""

import logging
from typing import Optional
from ledgerkit.database.base import Database
from ledgerkit.domain.entities import Account as AccountEntity, AccountType
from ledgerkit.domain.errors import ConflictError, NotFoundError, ValidationError, account_not_found
from ledgerkit.domain.pgc import account_level, default_account_type

logger = logging.getLogger(__name__)


class AccountService:
    """Service for managing the chart of accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        code: str,
        name: str,
        account_type: Optional[AccountType] = None,
        parent_code: Optional[str] = None,
    ) -> AccountEntity:
        """Create a new account.

        Args:
            code: PGC account code (digits only)
            name: Account name
            account_type: Account type; inferred from the PGC group if None
            parent_code: Optional parent account code

        Returns:
            Created account

        Raises:
            ValidationError: If the code or name is invalid
            ConflictError: If the code already exists
            NotFoundError: If the parent account does not exist
        """
        code = code.strip()
        if not code.isdigit():
            raise ValidationError(f"Código de cuenta no válido '{code}'")
        if not name.strip():
            raise ValidationError("El nombre de la cuenta es obligatorio")
        if self.db.get_account(code) is not None:
            raise ConflictError(f"La cuenta {code} ya existe")
        if parent_code is not None and self.db.get_account(parent_code) is None:
            raise NotFoundError(account_not_found(parent_code))

        if account_type is None:
            account_type = default_account_type(code)

        self.db.create_account(
            code=code,
            name=name.strip(),
            account_type=account_type,
            level=account_level(code),
            parent_code=parent_code,
        )
        logger.info("Created account %s (%s)", code, account_type.value)
        return self.db.get_account(code)

    def get_account(self, code: str) -> Optional[AccountEntity]:
        """Get account by code.

        Args:
            code: Account code

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(code)

    def list_accounts(self, active_only: bool = False) -> list[AccountEntity]:
        """List accounts ordered by code."""
        return self.db.list_accounts(active_only=active_only)

    def deactivate_account(self, code: str) -> None:
        """Deactivate an account so new entries cannot use it.

        Accounts are never deleted because posted lines keep referencing them.

        Raises:
            NotFoundError: If the account does not exist
        """
        if self.db.get_account(code) is None:
            raise NotFoundError(account_not_found(code))
        self.db.set_account_active(code, False)
        logger.info("Deactivated account %s", code)
