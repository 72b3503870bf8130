"""Period closing commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.cli.options import centro_option
from ledgerkit.domain.closing import ClosingService
from ledgerkit.utils.date_parser import parse_date


@click.group()
def period_group():
    """Close monthly and annual periods."""
    pass


@period_group.command("close")
@click.argument("year", type=int)
@click.argument("month", type=int, required=False)
@centro_option
@click.option("--user", "closed_by", required=True, help="User closing the period")
@click.option("--notes", help="Notes stored with the closing")
@click.option("--date", "closing_date", help="Date of generated entries (defaults to period end)")
@click.pass_context
def close_period(
    ctx,
    year: int,
    month: int | None,
    centro_code: str,
    closed_by: str,
    notes: str | None,
    closing_date: str | None,
):
    """Close a month, or the whole fiscal year when MONTH is omitted.

    Examples:
        ledgerkit period close 2024 1 --centro C001 --user ana
        ledgerkit period close 2024 --centro C001 --user ana
    """
    service = ClosingService(ctx.obj["db"])
    try:
        result = service.close_period(
            centro_code,
            year,
            closed_by,
            month=month,
            notes=notes,
            closing_date=parse_date(closing_date) if closing_date else None,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    period = result.period
    label = f"{period.period_month}/{period.period_year}" if period.period_month else str(period.period_year)
    click.echo(f"Closed period {label} for {centro_code}")
    if period.regularization_entry_id is not None:
        click.echo(f"  Regularization entry ID: {period.regularization_entry_id}")
    if period.closing_entry_id is not None:
        click.echo(f"  Closing entry ID: {period.closing_entry_id}")
    for warning in result.warnings:
        click.echo(f"  Warning: {warning}")


@period_group.command("list")
@click.argument("year", type=int)
@centro_option
@click.pass_context
def list_periods(ctx, year: int, centro_code: str):
    """List recorded periods of a year."""
    service = ClosingService(ctx.obj["db"])

    periods = service.list_periods(centro_code, year)
    if not periods:
        click.echo("No closed periods.")
        return

    for period in periods:
        label = f"{period.period_month:02d}/{period.period_year}" if period.period_month else f"{period.period_year}   "
        click.echo(
            f"{label} | {period.period_type.value:7s} | {period.status.value:6s} | "
            f"{str(period.closing_date or ''):10s} | {period.closed_by or ''}"
        )


def register_commands(cli):
    """Register period commands with main CLI."""
    cli.add_command(period_group, name="period")
