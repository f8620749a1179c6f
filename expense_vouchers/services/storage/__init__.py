"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Ships a local JSON file backend and an in-memory backend.
"""

from expense_vouchers.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    CounterStorageInterface,
    DuplicateError,
    ExpenseStorageInterface,
    NotFoundError,
    RecordPredicate,
    StorageError,
)
from expense_vouchers.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryCounterStorage,
    InMemoryExpenseStorage,
)
from expense_vouchers.services.storage.json_file import (
    JsonFile,
    JsonFileCounterStorage,
    JsonFileExpenseStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "CounterStorageInterface",
    "ExpenseStorageInterface",
    "RecordPredicate",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryCounterStorage",
    "InMemoryExpenseStorage",
    # JSON file implementation
    "JsonFile",
    "JsonFileCounterStorage",
    "JsonFileExpenseStorage",
]
