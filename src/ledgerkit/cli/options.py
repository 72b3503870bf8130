"""Shared CLI options."""

import click

centro_option = click.option(
    "--centro",
    "centro_code",
    required=True,
    envvar="LEDGERKIT_CENTRO",
    help="Centro code (defaults to LEDGERKIT_CENTRO environment variable)",
)
