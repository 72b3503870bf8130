"""Chart-of-accounts commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.entities import AccountType


@click.group()
def account_group():
    """Manage the chart of accounts."""
    pass


@account_group.command("add")
@click.argument("code")
@click.argument("name")
@click.option(
    "--type",
    "account_type",
    type=click.Choice([t.value for t in AccountType]),
    help="Account type (inferred from the PGC group if omitted)",
)
@click.option("--parent", help="Parent account code")
@click.pass_context
def add_account(ctx, code: str, name: str, account_type: str | None, parent: str | None):
    """Add an account to the chart.

    Examples:
        ledgerkit account add 5720000 "Bancos c/c"
        ledgerkit account add 6290000 "Otros servicios" --type expense
    """
    service = AccountService(ctx.obj["db"])
    try:
        account = service.create_account(
            code=code,
            name=name,
            account_type=AccountType(account_type) if account_type else None,
            parent_code=parent,
        )
        click.echo(f"Created account {account.code} '{account.name}' ({account.account_type.value})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option("--active-only", is_flag=True, help="Hide deactivated accounts")
@click.pass_context
def list_accounts(ctx, active_only: bool):
    """List the chart of accounts."""
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts(active_only=active_only)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 70)
    for acc in accounts:
        status = "" if acc.active else " (inactive)"
        click.echo(f"{acc.code:10s} | {acc.name:35s} | {acc.account_type.value}{status}")


@account_group.command("deactivate")
@click.argument("code")
@click.pass_context
def deactivate_account(ctx, code: str):
    """Deactivate an account so new entries cannot use it."""
    service = AccountService(ctx.obj["db"])
    try:
        service.deactivate_account(code)
        click.echo(f"Deactivated account {code}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
