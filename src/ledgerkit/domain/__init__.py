"""Domain layer for ledgerkit application."""

from importlib import import_module

_SERVICES = {
    "AccountService": "ledgerkit.domain.account",
    "BalanceService": "ledgerkit.domain.balance",
    "ClosingService": "ledgerkit.domain.closing",
    "FiscalYearService": "ledgerkit.domain.fiscal_year",
    "InvoiceService": "ledgerkit.domain.invoice",
    "JournalService": "ledgerkit.domain.journal",
    "Norma43ImportService": "ledgerkit.domain.norma43",
}

__all__ = list(_SERVICES)


# Services import the database interfaces, which import domain entities, so
# they are resolved lazily to avoid circular imports
def __getattr__(name):
    if name in _SERVICES:
        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
