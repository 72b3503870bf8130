"""Trial balance (sumas y saldos) service."""

from datetime import date
from decimal import Decimal
from typing import Iterable
from ledgerkit.database.base import Database
from ledgerkit.domain.entities import TrialBalanceRow
from ledgerkit.domain.pgc import default_account_type, is_expense, is_revenue


def period_result(rows: Iterable[TrialBalanceRow]) -> Decimal:
    """Return revenue minus expense over trial balance rows.

    Positive is a profit, negative a loss.
    """
    result = Decimal("0")
    for row in rows:
        if is_revenue(row.account_code, row.account_type) or is_expense(
            row.account_code, row.account_type
        ):
            result -= row.balance
    return result


class BalanceService:
    """Service computing per-account balances from posted entries."""

    def __init__(self, db: Database):
        """Initialize balance service.

        Args:
            db: Database instance
        """
        self.db = db

    def trial_balance(
        self, centro_code: str, start_date: date, end_date: date
    ) -> list[TrialBalanceRow]:
        """Compute the trial balance of a centro for a date range.

        Only posted and closed entries count; drafts are ignored.

        Args:
            centro_code: Centro code
            start_date: First day of the range (inclusive)
            end_date: Last day of the range (inclusive)

        Returns:
            One row per account with movements, sorted by account code
        """
        accounts = {account.code: account for account in self.db.list_accounts()}
        rows = []
        for totals in self.db.get_account_totals(centro_code, start_date, end_date):
            account = accounts.get(totals.account_code)
            rows.append(
                TrialBalanceRow(
                    account_code=totals.account_code,
                    account_name=account.name if account else "",
                    account_type=(
                        account.account_type if account else default_account_type(totals.account_code)
                    ),
                    debit_total=totals.debit_total,
                    credit_total=totals.credit_total,
                )
            )
        return sorted(rows, key=lambda row: row.account_code)

    def account_balance(
        self, centro_code: str, account_code: str, start_date: date, end_date: date
    ) -> Decimal:
        """Return debit minus credit of one account over a date range."""
        for row in self.trial_balance(centro_code, start_date, end_date):
            if row.account_code == account_code:
                return row.balance
        return Decimal("0")

    def period_result(self, centro_code: str, start_date: date, end_date: date) -> Decimal:
        """Return revenue minus expense of a centro over a date range."""
        return period_result(self.trial_balance(centro_code, start_date, end_date))
