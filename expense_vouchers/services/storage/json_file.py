"""
Local JSON File Storage Implementation

DESIGN DECISION: The desktop tool keeps a local fallback store for when
its database is unavailable. We model it as two JSON files:
1. The expense list, one object per record with the stored camelCase keys
2. A map of voucher-number prefix -> fallback counter

TRADEOFFS:
- Whole-file rewrite on every change (fine for a single office's vouchers)
- No locking between processes (same single-writer assumption as the
  voucher numbering)

Writes go to a temporary file first and are then renamed over the
original, so a crash never leaves a half-written file behind.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional, Union

import structlog
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from expense_vouchers.config import StorageSettings, get_settings
from expense_vouchers.models.expense import ExpenseRecord
from expense_vouchers.services.storage.interface import (
    CounterStorageInterface,
    DuplicateError,
    ExpenseStorageInterface,
    NotFoundError,
    RecordPredicate,
    StorageError,
)


logger = structlog.get_logger(__name__)


class JsonFile:
    """
    Low-level JSON file wrapper.

    Retries transient OS errors (file briefly locked by a virus scanner
    or a sync client) before giving up.
    """

    def __init__(self, path: Union[str, Path], default: Any):
        self._path = Path(path)
        self._default = default

    @property
    def path(self) -> Path:
        return self._path

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _read_text(self) -> Optional[str]:
        if not self._path.exists():
            return None
        return self._path.read_text(encoding="utf-8")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _write_text(self, text: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(text, encoding="utf-8")
        os.replace(tmp_path, self._path)

    def load(self) -> Any:
        """Parsed file content, or the default when the file doesn't exist."""
        try:
            text = self._read_text()
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read {self._path}: {e}")

        if text is None or not text.strip():
            return self._default
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt JSON in {self._path}: {e}")

        if not isinstance(data, type(self._default)):
            raise StorageError(
                f"Unexpected content in {self._path}: "
                f"expected {type(self._default).__name__}, got {type(data).__name__}"
            )
        return data

    def save(self, data: Any) -> None:
        try:
            self._write_text(json.dumps(data, ensure_ascii=False, indent=2))
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}")


class JsonFileExpenseStorage(ExpenseStorageInterface):
    """
    Expense store kept in a single JSON list.

    Rows that no longer validate are skipped on read (and logged) rather
    than failing the whole list.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        settings: Optional[StorageSettings] = None,
    ):
        if path is None:
            settings = settings or get_settings().storage
            path = settings.records_path
        self._file = JsonFile(path, default=[])

    def _load_rows(self) -> list[dict]:
        return [row for row in self._file.load() if isinstance(row, dict)]

    def _row_to_record(self, row: dict) -> Optional[ExpenseRecord]:
        try:
            return ExpenseRecord.model_validate(row)
        except ValidationError as e:
            logger.warning(
                "expense_row_skipped",
                path=str(self._file.path),
                expense_id=row.get("id"),
                error=str(e),
            )
            return None

    async def get_all(
        self,
        predicate: Optional[RecordPredicate] = None,
    ) -> list[ExpenseRecord]:
        records = []
        for row in self._load_rows():
            if not row.get("id"):  # Skip rows without an identity
                continue
            record = self._row_to_record(row)
            if record is None:
                continue
            if predicate is not None and not predicate(record):
                continue
            records.append(record)
        return records

    async def get_by_id(self, expense_id: str) -> Optional[ExpenseRecord]:
        for row in self._load_rows():
            if row.get("id") == expense_id:
                return self._row_to_record(row)
        return None

    async def insert(self, record: ExpenseRecord) -> bool:
        rows = self._load_rows()
        if any(row.get("id") == record.id for row in rows):
            raise DuplicateError(f"Expense already exists: {record.id}")
        rows.append(record.to_storage_dict())
        self._file.save(rows)
        return True

    async def update(self, expense_id: str, record: ExpenseRecord) -> bool:
        rows = self._load_rows()
        for idx, row in enumerate(rows):
            if row.get("id") == expense_id:
                rows[idx] = record.to_storage_dict()
                self._file.save(rows)
                return True
        raise NotFoundError(f"Expense not found: {expense_id}")

    async def delete(self, expense_id: str) -> bool:
        rows = self._load_rows()
        remaining = [row for row in rows if row.get("id") != expense_id]
        if len(remaining) == len(rows):
            return False
        self._file.save(remaining)
        return True


class JsonFileCounterStorage(CounterStorageInterface):
    """Fallback voucher counters kept in a JSON object keyed by prefix."""

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        settings: Optional[StorageSettings] = None,
    ):
        if path is None:
            settings = settings or get_settings().storage
            path = settings.counters_path
        self._file = JsonFile(path, default={})

    async def get_counter(self, key: str) -> int:
        value = self._file.load().get(key, 0)
        try:
            return int(value)
        except (TypeError, ValueError):
            return 0

    async def set_counter(self, key: str, value: int) -> None:
        counters = self._file.load()
        counters[key] = int(value)
        self._file.save(counters)
