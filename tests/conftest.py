"""Shared fixtures for the expense voucher tests."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from expense_vouchers.config import StorageSettings, VoucherSettings
from expense_vouchers.models import ExpenseRecord


def build_record(
    expense_id: str,
    expense_date=date(2025, 3, 10),
    category: str = "rent",
    amount="100",
    expense_number=None,
    recipient_name: str = "محمد",
    description: str = "",
    created_at=None,
) -> ExpenseRecord:
    return ExpenseRecord(
        id=expense_id,
        expense_number=expense_number,
        expense_date=expense_date,
        category=category,
        amount=Decimal(amount),
        recipient_name=recipient_name,
        description=description,
        created_at=created_at,
    )


@pytest.fixture
def make_record():
    """Factory for ExpenseRecord with sensible defaults."""
    return build_record


@pytest.fixture
def utc():
    """Build an aware UTC datetime."""
    def _utc(*args) -> datetime:
        return datetime(*args, tzinfo=timezone.utc)
    return _utc


@pytest.fixture
def voucher_settings() -> VoucherSettings:
    return VoucherSettings(
        number_prefix="EXP",
        counter_width=3,
        currency_symbol="ج.م",
        decimals=2,
    )


@pytest.fixture
def fast_storage_settings(tmp_path) -> StorageSettings:
    """Storage settings with no waiting between retries."""
    return StorageSettings(
        data_dir=str(tmp_path),
        retry_attempts=2,
        retry_wait_min=0.0,
        retry_wait_max=0.0,
    )
