"""
Data Models Package

This package contains all Pydantic models used by the expense voucher core.
"""

from expense_vouchers.models.expense import (
    CATEGORY_NAMES,
    EPOCH_DATE,
    PAGE_SIZE,
    ExpenseCategory,
    ExpenseDraft,
    ExpenseRecord,
    ExpenseType,
    FilterResult,
    FilterState,
    SortOrder,
    ValidationIssue,
    ValidationResult,
    VoucherText,
    category_display_name,
    is_known_category,
)
from expense_vouchers.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "CATEGORY_NAMES",
    "EPOCH_DATE",
    "PAGE_SIZE",
    "ExpenseCategory",
    "ExpenseDraft",
    "ExpenseRecord",
    "ExpenseType",
    "FilterResult",
    "FilterState",
    "SortOrder",
    "ValidationIssue",
    "ValidationResult",
    "VoucherText",
    "category_display_name",
    "is_known_category",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
