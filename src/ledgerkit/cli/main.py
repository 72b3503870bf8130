"""Main CLI entry point."""

import logging

import click
from ledgerkit.config import get_settings
from ledgerkit.database.factories import create_sqlite_database

# Import and register all commands at module level
from ledgerkit.cli.commands import (
    account,
    balance,
    entry,
    fiscal_year,
    invoice,
    norma43,
    period,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERKIT_DB_PATH environment variable)",
    envvar="LEDGERKIT_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """ledgerkit - Double-entry accounting for restaurant centros.

    Keep the journal, close periods and fiscal years, route supplier invoices
    through approval and import Norma 43 bank statements.
    """
    ctx.ensure_object(dict)

    level = logging.DEBUG if verbose else getattr(logging, get_settings().log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


# Register all commands
account.register_commands(cli)
fiscal_year.register_commands(cli)
entry.register_commands(cli)
balance.register_commands(cli)
period.register_commands(cli)
invoice.register_commands(cli)
norma43.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
