"""
In-Memory Storage Implementation

Keeps records, counters and audit events in process memory.
Used by the test suite and when embedding the core without persistence.
"""

from typing import Iterable, Optional

from expense_vouchers.models.audit import AuditEvent
from expense_vouchers.models.expense import ExpenseRecord
from expense_vouchers.services.storage.interface import (
    AuditStorageInterface,
    CounterStorageInterface,
    DuplicateError,
    ExpenseStorageInterface,
    NotFoundError,
    RecordPredicate,
)


class InMemoryExpenseStorage(ExpenseStorageInterface):
    """Expense store backed by a dict, in insertion order."""

    def __init__(self, records: Optional[Iterable[ExpenseRecord]] = None):
        self._records: dict[str, ExpenseRecord] = {}
        for record in records or []:
            self._records[record.id] = record

    async def get_all(
        self,
        predicate: Optional[RecordPredicate] = None,
    ) -> list[ExpenseRecord]:
        records = list(self._records.values())
        if predicate is not None:
            records = [record for record in records if predicate(record)]
        return records

    async def get_by_id(self, expense_id: str) -> Optional[ExpenseRecord]:
        return self._records.get(expense_id)

    async def insert(self, record: ExpenseRecord) -> bool:
        if record.id in self._records:
            raise DuplicateError(f"Expense already exists: {record.id}")
        self._records[record.id] = record
        return True

    async def update(self, expense_id: str, record: ExpenseRecord) -> bool:
        if expense_id not in self._records:
            raise NotFoundError(f"Expense not found: {expense_id}")
        self._records[expense_id] = record
        return True

    async def delete(self, expense_id: str) -> bool:
        return self._records.pop(expense_id, None) is not None


class InMemoryCounterStorage(CounterStorageInterface):
    """Fallback counters backed by a dict."""

    def __init__(self, counters: Optional[dict[str, int]] = None):
        self._counters = dict(counters or {})

    async def get_counter(self, key: str) -> int:
        return self._counters.get(key, 0)

    async def set_counter(self, key: str, value: int) -> None:
        self._counters[key] = value


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit trail kept in a list."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
