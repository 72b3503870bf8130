"""Application settings loaded from environment variables."""

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Business rules and runtime options for ledgerkit.

    Every field can be overridden with a ``LEDGERKIT_``-prefixed environment
    variable (e.g. ``LEDGERKIT_APPROVAL_THRESHOLD=750``) or a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="LEDGERKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    db_path: Optional[str] = None

    # Logging
    log_level: str = "WARNING"

    # Invoices
    currency: str = "EUR"
    approval_threshold: Decimal = Decimal("500.00")

    # PGC accounts used by generated entries
    result_account: str = "1290000"
    closing_balance_account: str = "1390000"
    payables_account: str = "4000000"
    input_vat_account: str = "4720000"
    default_expense_account: str = "6000000"

    # Closing rules
    generate_annual_closing_entry: bool = True
    require_sequential_months: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
