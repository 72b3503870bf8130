"""Received invoice domain service: registration, approval and posting."""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence, Union
from ledgerkit.config import Settings, get_settings
from ledgerkit.database.base import Database
from ledgerkit.domain.approval import (
    can_user_approve,
    determine_approval_requirements,
    next_approval_status,
    validate_status_change,
)
from ledgerkit.domain.entities import (
    ApprovalAction,
    ApprovalLevel,
    ApprovalStatus,
    InvoiceLineInput,
    InvoiceReceived,
    JournalEntry,
    JournalLineInput,
    UserRole,
)
from ledgerkit.domain.errors import (
    InvalidStateError,
    NotFoundError,
    ValidationError,
    invoice_not_found,
    validation_failed,
)
from ledgerkit.domain.invoice_calculator import build_invoice_lines, calculate_line
from ledgerkit.domain.journal import JournalService
from ledgerkit.utils.money import to_decimal, to_money

logger = logging.getLogger(__name__)


def _validate_invoice(
    supplier_id: str, invoice_number: str, lines: Sequence[InvoiceLineInput]
) -> list[str]:
    """Return every validation problem of an invoice; empty when valid."""
    errors = []
    if not supplier_id or not supplier_id.strip():
        errors.append("El proveedor es obligatorio")
    if not invoice_number or not invoice_number.strip():
        errors.append("El número de factura es obligatorio")
    if not lines:
        errors.append("La factura debe tener al menos una línea")

    for number, line in enumerate(lines, start=1):
        try:
            quantity = to_decimal(line.quantity)
            unit_price = to_decimal(line.unit_price)
            tax_rate = to_decimal(line.tax_rate)
            discount_percentage = to_decimal(line.discount_percentage)
            discount_amount = to_decimal(line.discount_amount)
        except (TypeError, ArithmeticError):
            errors.append(f"Línea {number}: las cantidades e importes deben ser números decimales")
            continue

        line_valid = True
        if quantity <= 0:
            errors.append(f"Línea {number}: la cantidad debe ser mayor que 0")
            line_valid = False
        if unit_price < 0:
            errors.append(f"Línea {number}: el precio unitario no puede ser negativo")
            line_valid = False
        if tax_rate < 0:
            errors.append(f"Línea {number}: el tipo de IVA no puede ser negativo")
        if not 0 <= discount_percentage <= 100:
            errors.append(f"Línea {number}: el descuento debe estar entre 0 y 100")
            line_valid = False
        if discount_amount < 0:
            errors.append(f"Línea {number}: el importe de descuento no puede ser negativo")
            line_valid = False
        if line_valid:
            net = quantity * unit_price * (1 - discount_percentage / 100)
            if discount_amount > net:
                errors.append(f"Línea {number}: el importe de descuento supera el importe de la línea")
    return errors


def _allocate(exact: dict, target: Decimal) -> list[tuple]:
    """Round each exact amount once; the last one takes the cents left to reach target."""
    rounded = [(key, to_money(amount)) for key, amount in exact.items()]
    if rounded:
        key, amount = rounded[-1]
        rounded[-1] = (key, amount + target - sum((value for _, value in rounded), Decimal("0")))
    return [(key, amount) for key, amount in rounded if amount != 0]


def _format_rate(rate: Decimal) -> str:
    """Render a tax rate without trailing zeros (``21``, ``5.5``)."""
    return format(rate.quantize(Decimal("0.01")), "f").rstrip("0").rstrip(".")


class InvoiceService:
    """Service for received (supplier) invoices."""

    def __init__(self, db: Database, settings: Optional[Settings] = None):
        """Initialize invoice service.

        Args:
            db: Database instance
            settings: Business rules; defaults to the environment settings
        """
        self.db = db
        self.settings = settings or get_settings()
        self.journal = JournalService(db)

    def _require_invoice(self, invoice_id: int) -> InvoiceReceived:
        invoice = self.db.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError(invoice_not_found(invoice_id))
        return invoice

    def create_invoice_received(
        self,
        supplier_id: str,
        centro_code: str,
        invoice_number: str,
        invoice_date: date,
        lines: Sequence[InvoiceLineInput],
        due_date: Optional[date] = None,
        notes: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> InvoiceReceived:
        """Register a supplier invoice and route it for approval.

        Args:
            supplier_id: Supplier identifier
            centro_code: Centro receiving the invoice
            invoice_number: Supplier's invoice number
            invoice_date: Invoice date
            lines: Invoice lines
            due_date: Optional payment due date
            notes: Optional notes
            created_by: Optional user ID

        Returns:
            Created invoice with computed amounts and approval status

        Raises:
            ValidationError: If any field or line is invalid; nothing is saved
            ConflictError: If the supplier's invoice number is already registered
        """
        errors = _validate_invoice(supplier_id, invoice_number, lines)
        if errors:
            raise ValidationError(validation_failed(errors))

        invoice_lines, totals = build_invoice_lines(lines)
        if totals.total <= 0:
            raise ValidationError(validation_failed(["El total de la factura debe ser mayor que 0"]))
        requirements = determine_approval_requirements(
            totals.total, self.settings.approval_threshold
        )

        invoice_id = self.db.save_invoice(
            supplier_id=supplier_id.strip(),
            centro_code=centro_code,
            invoice_number=invoice_number.strip(),
            invoice_date=invoice_date,
            lines=invoice_lines,
            subtotal=totals.subtotal,
            tax_total=totals.tax_total,
            total=totals.total,
            requires_manager_approval=requirements.requires_manager_approval,
            requires_accounting_approval=requirements.requires_accounting_approval,
            approval_status=requirements.approval_status,
            due_date=due_date,
            notes=notes,
            created_by=created_by,
        )
        logger.info(
            "Registered invoice %s from %s (total %s, %s)",
            invoice_number,
            supplier_id,
            totals.total,
            requirements.approval_status.value,
        )
        return self.db.get_invoice(invoice_id)

    def get_invoice(self, invoice_id: int) -> Optional[InvoiceReceived]:
        """Get invoice by ID."""
        return self.db.get_invoice(invoice_id)

    def approve_invoice(
        self,
        invoice_id: int,
        approver_id: str,
        approver_role: Union[UserRole, str],
        level: Union[ApprovalLevel, str],
    ) -> InvoiceReceived:
        """Approve an invoice at one level.

        Args:
            invoice_id: Invoice ID
            approver_id: User approving
            approver_role: Role of the approving user
            level: Approval level being granted

        Returns:
            Updated invoice

        Raises:
            NotFoundError: If the invoice does not exist
            ValidationError: If the role or level is unknown or the role may
                not approve at that level
            InvalidStateError: If the invoice is not waiting for that level
        """
        try:
            role = UserRole(approver_role)
            level = ApprovalLevel(level)
        except ValueError:
            raise ValidationError(f"Rol o nivel de aprobación no válido: {approver_role}/{level}")
        if not can_user_approve(role, level):
            raise ValidationError(
                f"El rol '{role.value}' no puede aprobar facturas en el nivel '{level.value}'"
            )

        invoice = self._require_invoice(invoice_id)
        new_status = next_approval_status(invoice, level, ApprovalAction.APPROVED)
        self.db.update_invoice_approval(invoice_id, new_status)
        logger.info(
            "Invoice %s approved at %s level by %s -> %s",
            invoice_id,
            level.value,
            approver_id,
            new_status.value,
        )
        return self.db.get_invoice(invoice_id)

    def reject_invoice(
        self, invoice_id: int, rejected_by: str, reason: Optional[str] = None
    ) -> InvoiceReceived:
        """Reject a pending invoice.

        Raises:
            NotFoundError: If the invoice does not exist
            InvalidStateError: If the invoice is already approved or rejected
        """
        invoice = self._require_invoice(invoice_id)
        if not validate_status_change(invoice.approval_status, ApprovalStatus.REJECTED):
            raise InvalidStateError(
                f"La factura {invoice.invoice_number} está en estado "
                f"'{invoice.approval_status.value}' y no se puede rechazar"
            )
        self.db.update_invoice_approval(
            invoice_id,
            ApprovalStatus.REJECTED,
            rejected_by=rejected_by,
            rejected_reason=reason,
        )
        logger.info("Invoice %s rejected by %s", invoice_id, rejected_by)
        return self.db.get_invoice(invoice_id)

    def build_posting_lines(self, invoice: InvoiceReceived) -> list[JournalLineInput]:
        """Build the journal lines of an invoice.

        One debit per expense account, one input VAT debit per tax rate and a
        single credit to payables for the invoice total. Amounts are summed
        exactly from the lines and rounded once, so the VAT lines add up to
        ``tax_total`` and the expense lines to the rest of ``total``.
        """
        expenses: dict[str, Decimal] = defaultdict(Decimal)
        vat: dict[Decimal, Decimal] = defaultdict(Decimal)
        for line in invoice.lines:
            amounts = calculate_line(
                line.quantity,
                line.unit_price,
                line.discount_percentage,
                line.discount_amount,
                line.tax_rate,
            )
            expenses[line.account_code or self.settings.default_expense_account] += amounts.subtotal
            vat[line.tax_rate] += amounts.tax_amount

        description = f"Factura {invoice.invoice_number}"
        debits = [
            JournalLineInput.debit(code, amount, description)
            for code, amount in _allocate(expenses, invoice.total - invoice.tax_total)
        ]
        debits.extend(
            JournalLineInput.debit(
                self.settings.input_vat_account, amount, f"IVA soportado {_format_rate(rate)}%"
            )
            for rate, amount in _allocate(dict(sorted(vat.items())), invoice.tax_total)
        )
        return debits + [
            JournalLineInput.credit(self.settings.payables_account, invoice.total, description)
        ]

    def post_invoice(self, invoice_id: int, posted_by: Optional[str] = None) -> JournalEntry:
        """Post an approved invoice to the ledger.

        Returns:
            Posted journal entry linked to the invoice

        Raises:
            NotFoundError: If the invoice does not exist
            InvalidStateError: If the invoice is not approved or already posted
            PeriodClosedError: If the invoice date is inside a closed period
            ValidationError: If an account is missing or inactive
        """
        invoice = self._require_invoice(invoice_id)
        if invoice.approval_status != ApprovalStatus.APPROVED:
            raise InvalidStateError(
                f"Solo se pueden contabilizar facturas aprobadas; la factura "
                f"{invoice.invoice_number} está en estado '{invoice.approval_status.value}'"
            )
        if invoice.entry_id is not None:
            raise InvalidStateError(
                f"La factura {invoice.invoice_number} ya está contabilizada en el asiento {invoice.entry_id}"
            )

        prepared = self.journal.prepare_entry(
            invoice.centro_code,
            invoice.invoice_date,
            f"Factura recibida {invoice.invoice_number} - {invoice.supplier_id}",
            self.build_posting_lines(invoice),
            created_by=posted_by,
        )
        entry_id = self.db.save_invoice_entry(invoice_id, prepared)
        logger.info("Invoice %s posted as entry %s", invoice_id, prepared.entry_number)
        return self.db.get_entry(entry_id)
