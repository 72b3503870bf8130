"""Fiscal year commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.cli.options import centro_option
from ledgerkit.domain.fiscal_year import FiscalYearService
from ledgerkit.utils.date_parser import parse_date


@click.group()
def fiscal_year_group():
    """Manage fiscal years (ejercicios)."""
    pass


@fiscal_year_group.command("open")
@click.argument("year", type=int)
@centro_option
@click.option("--start", help="First day (defaults to January 1)")
@click.option("--end", help="Last day (defaults to December 31)")
@click.pass_context
def open_fiscal_year(ctx, year: int, centro_code: str, start: str | None, end: str | None):
    """Open a fiscal year for a centro.

    Examples:
        ledgerkit fiscal-year open 2024 --centro C001
        ledgerkit fiscal-year open 2024 --centro C001 --start 01/07/2024 --end 30/06/2025
    """
    service = FiscalYearService(ctx.obj["db"])
    try:
        start_date = parse_date(start) if start else None
        end_date = parse_date(end) if end else None
        fiscal_year = service.open_fiscal_year(centro_code, year, start_date, end_date)
        click.echo(
            f"Opened fiscal year {fiscal_year.year} for {centro_code} "
            f"({fiscal_year.start_date} to {fiscal_year.end_date})"
        )
    except ValueError as e:
        handle_domain_error(ctx, e)


@fiscal_year_group.command("list")
@centro_option
@click.pass_context
def list_fiscal_years(ctx, centro_code: str):
    """List the fiscal years of a centro."""
    service = FiscalYearService(ctx.obj["db"])

    years = service.list_fiscal_years(centro_code)
    if not years:
        click.echo("No fiscal years found.")
        return

    for fy in years:
        closed = f" (closed {fy.closing_date})" if fy.closing_date else ""
        click.echo(f"{fy.year} | {fy.start_date} to {fy.end_date} | {fy.status.value}{closed}")


def register_commands(cli):
    """Register fiscal year commands with main CLI."""
    cli.add_command(fiscal_year_group, name="fiscal-year")
