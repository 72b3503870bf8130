"""Shared domain error messages and error types.

Messages are user-facing and rendered verbatim by the UI, so they are written
in Spanish.
"""

from datetime import date
from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness or overlap violations."""


class UnbalancedEntryError(DomainError):
    """Journal entry debits and credits differ by more than the tolerance."""


class InvalidStateError(DomainError):
    """Operation is illegal for the current status of the entity."""


class PeriodNotReadyError(DomainError):
    """Closing preconditions are not met."""


class AlreadyClosedError(PeriodNotReadyError):
    """The period has already been closed."""


class PeriodClosedError(DomainError):
    """Mutation attempted inside a closed period."""


class FormatError(DomainError):
    """Input file does not have the expected structure."""


NORMA43_INVALID_FORMAT = "El archivo no tiene formato Norma 43 válido"


def account_not_found(account_code: str) -> str:
    """Return message for missing account."""
    return f"La cuenta {account_code} no existe"


def account_inactive(account_code: str) -> str:
    """Return message for a deactivated account."""
    return f"La cuenta {account_code} está inactiva"


def entry_not_found(entry_id: int) -> str:
    """Return message for missing journal entry."""
    return f"El asiento {entry_id} no existe"


def invoice_not_found(invoice_id: int) -> str:
    """Return message for missing invoice."""
    return f"La factura {invoice_id} no existe"


def unbalanced_entry(debit: Decimal, credit: Decimal) -> str:
    """Return message for an entry whose debits and credits differ."""
    return (
        f"El asiento no está cuadrado. Debe: {debit:.2f}, Haber: {credit:.2f}, "
        f"Diferencia: {abs(debit - credit):.2f}"
    )


def entry_not_draft(entry_id: int, status: str) -> str:
    """Return message when a draft-only operation targets another status."""
    return f"El asiento {entry_id} está en estado '{status}'; solo se pueden modificar borradores"


def period_closed(day: date) -> str:
    """Return message for a mutation dated inside a closed period."""
    return f"El período {day.month}/{day.year} está cerrado. No se pueden modificar asientos."


def period_label(year: int, month: int | None) -> str:
    """Return a short human label for a period (``3/2024`` or ``2024``)."""
    return f"{month}/{year}" if month is not None else str(year)


def period_already_closed(year: int, month: int | None) -> str:
    """Return message for a second close of the same period."""
    return f"El período {period_label(year, month)} ya está cerrado"


def validation_failed(messages: list[str]) -> str:
    """Return the aggregated invoice validation message."""
    return f"Validación fallida: {', '.join(messages)}"
