"""Trial balance command."""

import click
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.cli.options import centro_option
from ledgerkit.domain.balance import BalanceService, period_result
from ledgerkit.utils.date_parser import parse_date, period_range
from ledgerkit.utils.money import format_money


@click.command("trial-balance")
@centro_option
@click.option("--year", type=int, help="Year (used when --start/--end are omitted)")
@click.option("--month", type=click.IntRange(1, 12), help="Month within --year")
@click.option("--start", help="Start date")
@click.option("--end", help="End date")
@click.pass_context
def trial_balance(
    ctx,
    centro_code: str,
    year: int | None,
    month: int | None,
    start: str | None,
    end: str | None,
):
    """Show the trial balance (sumas y saldos) of a centro.

    Examples:
        ledgerkit trial-balance --centro C001 --year 2024
        ledgerkit trial-balance --centro C001 --year 2024 --month 3
        ledgerkit trial-balance --centro C001 --start 01/01/2024 --end 31/03/2024
    """
    service = BalanceService(ctx.obj["db"])
    try:
        if start and end:
            start_date, end_date = parse_date(start), parse_date(end)
        elif year is not None:
            start_date, end_date = period_range(year, month)
        else:
            raise click.UsageError("Provide --year or both --start and --end")
        rows = service.trial_balance(centro_code, start_date, end_date)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if not rows:
        click.echo("No posted entries in range.")
        return

    click.echo(f"\nTrial balance {centro_code} {start_date} to {end_date}")
    click.echo("-" * 96)
    for row in rows:
        click.echo(
            f"{row.account_code:10s} {row.account_name[:30]:30s} "
            f"{format_money(row.debit_total):>16s} {format_money(row.credit_total):>16s} "
            f"{format_money(row.balance):>16s}"
        )
    click.echo("-" * 96)
    total_debit = sum(row.debit_total for row in rows)
    total_credit = sum(row.credit_total for row in rows)
    click.echo(f"{'Total':41s} {format_money(total_debit):>16s} {format_money(total_credit):>16s}")
    click.echo(f"Result (revenue - expense): {format_money(period_result(rows))}")


def register_commands(cli):
    """Register trial balance command with main CLI."""
    cli.add_command(trial_balance)
