"""
Configuration Management for Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Data file locations and application limits are read once and validated
at startup, so the ledgers never deal with raw environment values.
"""

from decimal import Decimal
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Location of the CSV files backing the record store."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_TRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / "Documents",
        description="Directory holding the data files"
    )
    users_file: str = Field(
        default="user_credentials.csv",
        description="File name for user records"
    )
    transactions_file: str = Field(
        default="transactions.csv",
        description="File name for transaction records"
    )
    debts_file: str = Field(
        default="debts.csv",
        description="File name for debt records"
    )

    @field_validator("users_file", "transactions_file", "debts_file")
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        """File names are relative to data_dir."""
        if not v or Path(v).name != v:
            raise ValueError(f"Expected a bare file name, got: {v!r}")
        return v

    @property
    def users_path(self) -> Path:
        return self.data_dir.expanduser() / self.users_file

    @property
    def transactions_path(self) -> Path:
        return self.data_dir.expanduser() / self.transactions_file

    @property
    def debts_path(self) -> Path:
        return self.data_dir.expanduser() / self.debts_file


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Defaults for new users
    default_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Currency code used when registering without one"
    )

    # Sanity bound for a single entry
    max_transaction_amount: Decimal = Field(
        default=Decimal("100000000"),
        gt=0,
        description="Largest amount accepted for a single transaction or debt"
    )

    @field_validator("default_currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.upper()


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an
    additional "<name>_error" entry for each failure.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
