"""Journal entry commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.cli.options import centro_option
from ledgerkit.domain.entities import EntryStatus, JournalLineInput, MovementType
from ledgerkit.domain.journal import JournalService
from ledgerkit.utils.amount_parser import parse_amount
from ledgerkit.utils.date_parser import parse_date
from ledgerkit.utils.money import format_money

SIDES = {
    "d": MovementType.DEBIT,
    "debe": MovementType.DEBIT,
    "debit": MovementType.DEBIT,
    "h": MovementType.CREDIT,
    "haber": MovementType.CREDIT,
    "c": MovementType.CREDIT,
    "credit": MovementType.CREDIT,
}


def parse_line_spec(spec: str) -> JournalLineInput:
    """Parse ``ACCOUNT:D|H:AMOUNT[:DESCRIPTION]`` into a journal line.

    Raises:
        ValueError: If the spec is malformed
    """
    parts = spec.split(":", 3)
    if len(parts) < 3:
        raise ValueError(f"Línea no válida '{spec}': use CUENTA:D|H:IMPORTE[:DESCRIPCIÓN]")
    account_code, side, amount = (part.strip() for part in parts[:3])
    movement_type = SIDES.get(side.lower())
    if movement_type is None:
        raise ValueError(f"Lado no válido '{side}': use D (debe) o H (haber)")
    description = parts[3].strip() if len(parts) == 4 else None
    return JournalLineInput(account_code, movement_type, parse_amount(amount), description)


@click.group()
def entry_group():
    """Manage journal entries (asientos)."""
    pass


@entry_group.command("add")
@centro_option
@click.option("--date", "entry_date", required=True, help="Entry date (DD/MM/YYYY or YYYY-MM-DD)")
@click.option("--description", required=True, help="Entry description")
@click.option(
    "--line",
    "line_specs",
    multiple=True,
    required=True,
    help="Line as ACCOUNT:D|H:AMOUNT[:DESCRIPTION]; repeat for each line",
)
@click.option("--draft", is_flag=True, help="Save as draft instead of posting")
@click.option("--user", "created_by", help="User creating the entry")
@click.pass_context
def add_entry(
    ctx,
    centro_code: str,
    entry_date: str,
    description: str,
    line_specs: tuple[str, ...],
    draft: bool,
    created_by: str | None,
):
    """Create a journal entry.

    Examples:
        ledgerkit entry add --centro C001 --date 15/01/2024 --description "Compra" \\
            --line 6000000:D:100,00 --line 5720000:H:100,00
    """
    service = JournalService(ctx.obj["db"])
    try:
        day = parse_date(entry_date)
        lines = [parse_line_spec(spec) for spec in line_specs]
        create = service.create_draft_entry if draft else service.create_entry
        created = create(centro_code, day, description, lines, created_by)
        click.echo(
            f"Created entry {created.entry_number} (ID: {created.id}, {created.status.value}) "
            f"for {format_money(created.total_debit)}"
        )
    except ValueError as e:
        handle_domain_error(ctx, e)


@entry_group.command("list")
@centro_option
@click.option("--start", help="Start date")
@click.option("--end", help="End date")
@click.option("--status", type=click.Choice([s.value for s in EntryStatus]), help="Filter by status")
@click.option("--lines", "show_lines", is_flag=True, help="Show entry lines")
@click.pass_context
def list_entries(
    ctx, centro_code: str, start: str | None, end: str | None, status: str | None, show_lines: bool
):
    """List journal entries of a centro."""
    service = JournalService(ctx.obj["db"])
    try:
        entries = service.list_entries(
            centro_code,
            parse_date(start) if start else None,
            parse_date(end) if end else None,
            EntryStatus(status) if status else None,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if not entries:
        click.echo("No entries found.")
        return

    for item in entries:
        click.echo(
            f"{item.entry_number:6d} | {item.entry_date} | {item.status.value:6s} | "
            f"{format_money(item.total_debit):>14s} | {item.description}"
        )
        if show_lines:
            for line in service.get_entry_lines(item.id):
                side = "D" if line.movement_type == MovementType.DEBIT else "H"
                click.echo(f"         {line.line_number:3d} {line.account_code:10s} {side} {format_money(line.amount):>14s}")


@entry_group.command("post")
@click.argument("entry_id", type=int)
@click.option("--user", "posted_by", help="User posting the entry")
@click.pass_context
def post_entry(ctx, entry_id: int, posted_by: str | None):
    """Post a draft entry."""
    service = JournalService(ctx.obj["db"])
    try:
        posted = service.post_entry(entry_id, posted_by)
        click.echo(f"Posted entry {posted.entry_number}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@entry_group.command("delete")
@click.argument("entry_id", type=int)
@click.option("--yes", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_entry(ctx, entry_id: int, yes: bool):
    """Delete a draft entry."""
    service = JournalService(ctx.obj["db"])
    if not yes and not click.confirm(f"Delete draft entry {entry_id}?"):
        click.echo("Cancelled.")
        return
    try:
        service.delete_draft_entry(entry_id)
        click.echo(f"Deleted entry {entry_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register entry commands with main CLI."""
    cli.add_command(entry_group, name="entry")
