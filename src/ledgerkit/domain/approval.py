"""Invoice approval routing and state machine.

    pending_manager -> pending_accounting -> approved
    pending_manager | pending_accounting -> rejected

``approved`` and ``rejected`` are terminal.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ledgerkit.domain.entities import (
    ApprovalAction,
    ApprovalLevel,
    ApprovalStatus,
    InvoiceReceived,
    UserRole,
)
from ledgerkit.domain.errors import InvalidStateError

DEFAULT_APPROVAL_THRESHOLD = Decimal("500.00")

ALLOWED_TRANSITIONS: dict[ApprovalStatus, frozenset[ApprovalStatus]] = {
    ApprovalStatus.PENDING_MANAGER: frozenset(
        {ApprovalStatus.PENDING_ACCOUNTING, ApprovalStatus.APPROVED, ApprovalStatus.REJECTED}
    ),
    ApprovalStatus.PENDING_ACCOUNTING: frozenset({ApprovalStatus.APPROVED, ApprovalStatus.REJECTED}),
    ApprovalStatus.APPROVED: frozenset(),
    ApprovalStatus.REJECTED: frozenset(),
}

ROLE_LEVELS: dict[UserRole, frozenset[ApprovalLevel]] = {
    UserRole.ADMIN: frozenset({ApprovalLevel.MANAGER, ApprovalLevel.ACCOUNTING}),
    UserRole.MANAGER: frozenset({ApprovalLevel.MANAGER}),
    UserRole.ACCOUNTANT: frozenset({ApprovalLevel.ACCOUNTING}),
    UserRole.VIEWER: frozenset(),
}


@dataclass(frozen=True)
class ApprovalRequirements:
    """Approval path of a new invoice."""

    requires_manager_approval: bool
    requires_accounting_approval: bool
    approval_status: ApprovalStatus


def determine_approval_requirements(
    total: Decimal, threshold: Decimal = DEFAULT_APPROVAL_THRESHOLD
) -> ApprovalRequirements:
    """Route an invoice by its total.

    Totals at or above the threshold need a manager first; every invoice needs
    accounting approval.
    """
    if total >= threshold:
        return ApprovalRequirements(True, True, ApprovalStatus.PENDING_MANAGER)
    return ApprovalRequirements(False, True, ApprovalStatus.PENDING_ACCOUNTING)


def pending_level(status: ApprovalStatus) -> Optional[ApprovalLevel]:
    """Return the approval level an invoice is waiting for, if any."""
    if status == ApprovalStatus.PENDING_MANAGER:
        return ApprovalLevel.MANAGER
    if status == ApprovalStatus.PENDING_ACCOUNTING:
        return ApprovalLevel.ACCOUNTING
    return None


def next_approval_status(
    invoice: InvoiceReceived, level: ApprovalLevel, action: ApprovalAction
) -> ApprovalStatus:
    """Return the status an approval or rejection moves an invoice to.

    Raises:
        InvalidStateError: If the invoice is not waiting for that level
    """
    waiting_for = pending_level(invoice.approval_status)
    if waiting_for is None:
        raise InvalidStateError(
            f"La factura {invoice.invoice_number} está en estado '{invoice.approval_status.value}' "
            f"y no admite más aprobaciones"
        )
    if action == ApprovalAction.REJECTED:
        return ApprovalStatus.REJECTED
    if level != waiting_for:
        raise InvalidStateError(
            f"La factura {invoice.invoice_number} está pendiente de aprobación "
            f"'{waiting_for.value}', no '{level.value}'"
        )
    if level == ApprovalLevel.MANAGER and invoice.requires_accounting_approval:
        return ApprovalStatus.PENDING_ACCOUNTING
    return ApprovalStatus.APPROVED


def can_user_approve(role: UserRole, level: ApprovalLevel) -> bool:
    """Return True if a role may act at an approval level."""
    return level in ROLE_LEVELS.get(role, frozenset())


def validate_status_change(current: ApprovalStatus, new: ApprovalStatus) -> bool:
    """Return True if the approval state machine allows current -> new."""
    return new in ALLOWED_TRANSITIONS[current]
