"""Configuration package."""

from expense_vouchers.config.settings import (
    AppSettings,
    Settings,
    StorageSettings,
    VoucherSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "Settings",
    "StorageSettings",
    "VoucherSettings",
    "get_settings",
    "validate_all_settings",
]
