"""Received invoice commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.cli.options import centro_option
from ledgerkit.domain.entities import ApprovalLevel, InvoiceLineInput, UserRole
from ledgerkit.domain.invoice import InvoiceService
from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.date_parser import parse_date
from ledgerkit.utils.money import format_money


def parse_invoice_line(spec: str) -> InvoiceLineInput:
    """Parse ``DESCRIPTION;QUANTITY;UNIT_PRICE;TAX_RATE[;ACCOUNT]``.

    Semicolons separate fields so amounts may use decimal commas.

    Raises:
        ValueError: If the spec is malformed
    """
    parts = [part.strip() for part in spec.split(";")]
    if len(parts) not in (4, 5):
        raise ValueError(
            f"Línea no válida '{spec}': use DESCRIPCIÓN;CANTIDAD;PRECIO;IVA[;CUENTA]"
        )
    return InvoiceLineInput(
        description=parts[0],
        quantity=parse_amount(parts[1]),
        unit_price=parse_amount(parts[2]),
        tax_rate=parse_amount(parts[3]),
        account_code=parts[4] if len(parts) == 5 and parts[4] else None,
    )


@click.group()
def invoice_group():
    """Register, approve and post supplier invoices."""
    pass


@invoice_group.command("add")
@centro_option
@click.option("--supplier", required=True, help="Supplier identifier")
@click.option("--number", "invoice_number", required=True, help="Supplier invoice number")
@click.option("--date", "invoice_date", required=True, help="Invoice date")
@click.option(
    "--line",
    "line_specs",
    multiple=True,
    help="Line as DESCRIPTION;QUANTITY;UNIT_PRICE;TAX_RATE[;ACCOUNT]; repeat for each line",
)
@click.option("--due", "due_date", help="Payment due date")
@click.option("--notes", help="Notes")
@click.option("--user", "created_by", help="User registering the invoice")
@click.pass_context
def add_invoice(
    ctx,
    centro_code: str,
    supplier: str,
    invoice_number: str,
    invoice_date: str,
    line_specs: tuple[str, ...],
    due_date: str | None,
    notes: str | None,
    created_by: str | None,
):
    """Register a received invoice.

    Examples:
        ledgerkit invoice add --centro C001 --supplier B12345678 --number F-001 \\
            --date 15/01/2024 --line "Carne;10;12,50;10;6000000"
    """
    service = InvoiceService(ctx.obj["db"])
    try:
        created = service.create_invoice_received(
            supplier_id=supplier,
            centro_code=centro_code,
            invoice_number=invoice_number,
            invoice_date=parse_date(invoice_date),
            lines=[parse_invoice_line(spec) for spec in line_specs],
            due_date=parse_date(due_date) if due_date else None,
            notes=notes,
            created_by=created_by,
        )
        click.echo(
            f"Registered invoice {created.invoice_number} (ID: {created.id}) "
            f"total {format_money(created.total)} - {created.approval_status.value}"
        )
    except ValueError as e:
        handle_domain_error(ctx, e)


@invoice_group.command("show")
@click.argument("invoice_id", type=int)
@click.pass_context
def show_invoice(ctx, invoice_id: int):
    """Show an invoice with its lines."""
    service = InvoiceService(ctx.obj["db"])
    found = service.get_invoice(invoice_id)
    if found is None:
        click.echo(f"Error: La factura {invoice_id} no existe", err=True)
        ctx.exit(1)

    click.echo(f"Invoice {found.invoice_number} from {found.supplier_id} ({found.invoice_date})")
    click.echo(f"  Status: {found.approval_status.value}")
    for line in found.lines:
        click.echo(
            f"  {line.line_number:3d} {line.description[:30]:30s} {line.quantity} x {line.unit_price} "
            f"IVA {line.tax_rate}% = {format_money(line.total)}"
        )
    click.echo(f"  Subtotal: {format_money(found.subtotal)}")
    click.echo(f"  IVA:      {format_money(found.tax_total)}")
    click.echo(f"  Total:    {format_money(found.total)}")
    if found.entry_id is not None:
        click.echo(f"  Posted as entry ID {found.entry_id}")
    if found.rejected_reason:
        click.echo(f"  Rejected by {found.rejected_by}: {found.rejected_reason}")


@invoice_group.command("approve")
@click.argument("invoice_id", type=int)
@click.option("--user", "approver_id", required=True, help="Approving user")
@click.option("--role", type=click.Choice([r.value for r in UserRole]), required=True, help="Role of the approving user")
@click.option("--level", type=click.Choice([lvl.value for lvl in ApprovalLevel]), required=True, help="Approval level")
@click.pass_context
def approve_invoice(ctx, invoice_id: int, approver_id: str, role: str, level: str):
    """Approve an invoice at the manager or accounting level."""
    service = InvoiceService(ctx.obj["db"])
    try:
        updated = service.approve_invoice(invoice_id, approver_id, role, level)
        click.echo(f"Invoice {updated.invoice_number} is now {updated.approval_status.value}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@invoice_group.command("reject")
@click.argument("invoice_id", type=int)
@click.option("--user", "rejected_by", required=True, help="Rejecting user")
@click.option("--reason", help="Reason for the rejection")
@click.pass_context
def reject_invoice(ctx, invoice_id: int, rejected_by: str, reason: str | None):
    """Reject a pending invoice."""
    service = InvoiceService(ctx.obj["db"])
    try:
        updated = service.reject_invoice(invoice_id, rejected_by, reason)
        click.echo(f"Invoice {updated.invoice_number} rejected")
    except ValueError as e:
        handle_domain_error(ctx, e)


@invoice_group.command("post")
@click.argument("invoice_id", type=int)
@click.option("--user", "posted_by", help="User posting the invoice")
@click.pass_context
def post_invoice(ctx, invoice_id: int, posted_by: str | None):
    """Post an approved invoice to the journal."""
    service = InvoiceService(ctx.obj["db"])
    try:
        posted = service.post_invoice(invoice_id, posted_by)
        click.echo(f"Posted invoice {invoice_id} as entry {posted.entry_number} (ID: {posted.id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register invoice commands with main CLI."""
    cli.add_command(invoice_group, name="invoice")
