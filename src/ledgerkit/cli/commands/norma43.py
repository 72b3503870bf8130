"""Norma 43 bank statement import command."""

from pathlib import Path

import click
from ledgerkit.cli.options import centro_option
from ledgerkit.domain.norma43 import Norma43ImportService
from ledgerkit.utils.money import format_money


@click.group()
def norma43_group():
    """Import Norma 43 (AEB 43) bank statements."""
    pass


@norma43_group.command("import")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@centro_option
@click.option("--bank-account", "bank_account_id", required=True, help="Bank account identifier")
@click.option("--encoding", default="latin-1", show_default=True, help="File encoding")
@click.pass_context
def import_statement(ctx, statement_file: str, centro_code: str, bank_account_id: str, encoding: str):
    """Import a Norma 43 statement file as pending bank transactions."""
    service = Norma43ImportService(ctx.obj["db"])
    path = Path(statement_file)

    result = service.import_file(
        path.read_text(encoding=encoding),
        bank_account_id=bank_account_id,
        centro_code=centro_code,
        file_name=path.name,
    )
    if not result.success:
        for error in result.errors:
            click.echo(f"Error: {error}", err=True)
        ctx.exit(1)

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {result.transactions_imported} transactions")
    click.echo(f"  Credits: {format_money(result.total_credits)}")
    click.echo(f"  Debits: {format_money(result.total_debits)}")
    click.echo(f"  Batch: {result.import_batch_id}")
    for warning in result.warnings:
        click.echo(f"  Warning: {warning}")
    if result.errors:
        click.echo(f"  Errors: {len(result.errors)}")
        for error in result.errors:
            click.echo(f"    {error}", err=True)


def register_commands(cli):
    """Register Norma 43 commands with main CLI."""
    cli.add_command(norma43_group, name="norma43")
