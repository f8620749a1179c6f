"""Services package."""

from expense_vouchers.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    CounterStorageInterface,
    DuplicateError,
    ExpenseStorageInterface,
    InMemoryAuditStorage,
    InMemoryCounterStorage,
    InMemoryExpenseStorage,
    JsonFileCounterStorage,
    JsonFileExpenseStorage,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "ConnectionError",
    "CounterStorageInterface",
    "DuplicateError",
    "ExpenseStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryCounterStorage",
    "InMemoryExpenseStorage",
    "JsonFileCounterStorage",
    "JsonFileExpenseStorage",
    "NotFoundError",
    "StorageError",
]
