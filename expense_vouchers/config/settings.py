"""
Configuration Management for Expense Vouchers

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every setting has a working default so the core runs without a .env file.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class VoucherSettings(BaseSettings):
    """Voucher numbering and amount display configuration."""

    model_config = SettingsConfigDict(
        env_prefix="VOUCHER_",
        extra="ignore"
    )

    number_prefix: str = Field(
        default="EXP",
        min_length=1,
        description="Leading tag of voucher numbers (EXP-<year>-<counter>)"
    )
    counter_width: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Minimum zero-padded width of the voucher counter"
    )
    currency_symbol: str = Field(
        default="ج.م",
        description="Currency symbol printed after amounts"
    )
    decimals: int = Field(
        default=2,
        ge=0,
        le=6,
        description="Fraction digits shown for amounts"
    )


class StorageSettings(BaseSettings):
    """Local JSON storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        extra="ignore"
    )

    data_dir: str = Field(
        default="data",
        description="Directory holding the local JSON files"
    )
    records_file: str = Field(
        default="operating_expenses.json",
        description="File name of the expense records list"
    )
    counters_file: str = Field(
        default="expense_counters.json",
        description="File name of the fallback voucher counters"
    )

    # Retry behaviour for record store reads
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts before a storage read is considered failed"
    )
    retry_wait_min: float = Field(
        default=0.5,
        ge=0.0,
        description="Minimum wait between retries (seconds)"
    )
    retry_wait_max: float = Field(
        default=4.0,
        ge=0.0,
        description="Maximum wait between retries (seconds)"
    )

    @field_validator('records_file', 'counters_file')
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        """File names must not point outside data_dir."""
        if Path(v).name != v:
            raise ValueError(f"Expected a bare file name, got {v!r}")
        return v

    @property
    def records_path(self) -> Path:
        return Path(self.data_dir) / self.records_file

    @property
    def counters_path(self) -> Path:
        return Path(self.data_dir) / self.counters_file


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

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Validation thresholds
    future_date_tolerance_days: int = Field(
        default=7,
        ge=0,
        description="How many days in the future an expense date can be"
    )


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
    def voucher(self) -> VoucherSettings:
        return VoucherSettings()

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

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for each failure. Useful for startup checks.
    """
    results = {}
    settings = get_settings()

    for name in ("voucher", "storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
