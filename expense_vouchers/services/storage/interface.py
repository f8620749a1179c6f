"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the local JSON files for a real database later
2. Use in-memory storage for testing
3. Keep the query engine and voucher numbering decoupled from storage

The core only ever consumes get_all(); the remaining record operations
exist for the create/edit/delete flow in the orchestrator.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from expense_vouchers.models.expense import ExpenseRecord
from expense_vouchers.models.audit import AuditEvent


RecordPredicate = Callable[[ExpenseRecord], bool]


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense record storage (the record store).

    Any storage implementation (JSON file, SQLite, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def get_all(
        self,
        predicate: Optional[RecordPredicate] = None,
    ) -> list[ExpenseRecord]:
        """
        Load every stored expense, optionally filtered.

        Args:
            predicate: Keep only records for which this returns True

        Returns:
            Records in storage order

        Raises:
            StorageError: If the store cannot be read
        """
        pass

    @abstractmethod
    async def get_by_id(self, expense_id: str) -> Optional[ExpenseRecord]:
        """
        Retrieve an expense by its ID.

        Returns:
            The expense if found, None otherwise
        """
        pass

    @abstractmethod
    async def insert(self, record: ExpenseRecord) -> bool:
        """
        Store a new expense.

        Raises:
            DuplicateError: If an expense with the same id exists
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def update(self, expense_id: str, record: ExpenseRecord) -> bool:
        """
        Replace a stored expense.

        Raises:
            NotFoundError: If the expense doesn't exist
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, expense_id: str) -> bool:
        """
        Delete an expense by ID.

        Returns:
            True if deleted, False if it did not exist
        """
        pass


class CounterStorageInterface(ABC):
    """
    Persisted fallback counters for voucher numbering.

    One integer per voucher-number prefix (e.g. "EXP-2025-"). Used when
    the record store cannot be scanned.
    """

    @abstractmethod
    async def get_counter(self, key: str) -> int:
        """Current counter for key, 0 if never set."""
        pass

    @abstractmethod
    async def set_counter(self, key: str, value: int) -> None:
        """Persist a new counter value for key."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not reach the storage backend."""
    pass
