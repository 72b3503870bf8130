"""Plan General de Contabilidad (PGC) account classification.

PGC codes are hierarchical: the first digit is the group. Groups 1 to 5 hold
balance-sheet accounts, group 6 expenses and group 7 income.
"""

from ledgerkit.domain.entities import AccountType

EXPENSE_GROUP = 6
INCOME_GROUP = 7


def account_group(account_code: str) -> int:
    """Return the PGC group (first digit) of an account code.

    Raises:
        ValueError: If the code does not start with a digit
    """
    if not account_code or not account_code[0].isdigit():
        raise ValueError(f"Código de cuenta no válido '{account_code}'")
    return int(account_code[0])


def account_level(account_code: str) -> int:
    """Return the PGC hierarchy level of a code.

    Group, subgroup and account are the first 1, 2 and 3 digits. A longer
    code padded with zeros after its third digit is still the account
    (``"4300000"`` is level 3); any other longer code is a subaccount at its
    full length (``"4300001"`` is level 7).
    """
    if len(account_code) <= 3:
        return max(len(account_code), 1)
    if account_code[3:].strip("0"):
        return len(account_code)
    return 3


def is_expense(account_code: str, account_type: AccountType) -> bool:
    """Return True for accounts regularized as expenses."""
    if account_type == AccountType.EXPENSE:
        return True
    if account_type == AccountType.REVENUE:
        return False
    return account_group(account_code) == EXPENSE_GROUP


def is_revenue(account_code: str, account_type: AccountType) -> bool:
    """Return True for accounts regularized as income."""
    if account_type == AccountType.REVENUE:
        return True
    if account_type == AccountType.EXPENSE:
        return False
    return account_group(account_code) == INCOME_GROUP


def is_income_statement(account_code: str, account_type: AccountType) -> bool:
    """Return True for profit-and-loss accounts (zeroed by regularization)."""
    return is_expense(account_code, account_type) or is_revenue(account_code, account_type)


def default_account_type(account_code: str) -> AccountType:
    """Guess the account type of a PGC code from its group."""
    group = account_group(account_code)
    if group == EXPENSE_GROUP:
        return AccountType.EXPENSE
    if group == INCOME_GROUP:
        return AccountType.REVENUE
    if group == 1:
        # Group 1 mixes equity (10-13) and long-term liabilities (14-19)
        return AccountType.EQUITY if account_code[:2] < "14" else AccountType.LIABILITY
    if group in (2, 3):
        return AccountType.ASSET
    if group == 4:
        # Suppliers (40, 41) and payable public bodies (475-477) are liabilities
        if account_code[:2] in ("40", "41") or "475" <= account_code[:3] <= "477":
            return AccountType.LIABILITY
        return AccountType.ASSET
    if group == 5:
        return AccountType.ASSET if account_code[:2] in ("53", "54", "57") else AccountType.LIABILITY
    return AccountType.EQUITY
