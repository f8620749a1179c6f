"""Tests for the in-memory and JSON file storage adapters."""

import asyncio
import json
from datetime import date
from decimal import Decimal

import pytest

from expense_vouchers.models import AuditEventBuilder
from expense_vouchers.services.storage import (
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryExpenseStorage,
    JsonFile,
    JsonFileCounterStorage,
    JsonFileExpenseStorage,
    NotFoundError,
    StorageError,
)


class TestInMemoryExpenseStorage:
    """Tests for the dict-backed record store."""

    def test_insert_and_get(self, make_record):
        storage = InMemoryExpenseStorage()
        record = make_record("a")
        asyncio.run(storage.insert(record))

        assert asyncio.run(storage.get_by_id("a")) == record
        assert asyncio.run(storage.get_by_id("missing")) is None

    def test_duplicate_insert(self, make_record):
        storage = InMemoryExpenseStorage([make_record("a")])
        with pytest.raises(DuplicateError):
            asyncio.run(storage.insert(make_record("a")))

    def test_update_missing(self, make_record):
        storage = InMemoryExpenseStorage()
        with pytest.raises(NotFoundError):
            asyncio.run(storage.update("a", make_record("a")))

    def test_predicate(self, make_record):
        storage = InMemoryExpenseStorage([
            make_record("a", category="rent"),
            make_record("b", category="salaries"),
        ])
        salaries = asyncio.run(storage.get_all(lambda r: r.is_salary))
        assert [r.id for r in salaries] == ["b"]

    def test_delete(self, make_record):
        storage = InMemoryExpenseStorage([make_record("a")])
        assert asyncio.run(storage.delete("a")) is True
        assert asyncio.run(storage.delete("a")) is False


class TestInMemoryAuditStorage:
    """Tests for the append-only audit list."""

    def test_recent_events_newest_first(self):
        storage = InMemoryAuditStorage()
        first = AuditEventBuilder.expense_deleted("a", "EXP-2025-001")
        second = AuditEventBuilder.expense_deleted("b", "EXP-2025-002")
        asyncio.run(storage.append_event(first))
        asyncio.run(storage.append_event(second))

        events = asyncio.run(storage.get_recent_events(limit=1))
        assert events == [second]


class TestJsonFile:
    """Tests for the low-level JSON file wrapper."""

    def test_missing_file_returns_default(self, tmp_path):
        assert JsonFile(tmp_path / "nope.json", default=[]).load() == []

    def test_round_trip_keeps_arabic_text(self, tmp_path):
        path = tmp_path / "sub" / "data.json"
        json_file = JsonFile(path, default={})
        json_file.save({"name": "إيجار"})

        assert "إيجار" in path.read_text(encoding="utf-8")
        assert json_file.load() == {"name": "إيجار"}
        assert not path.with_name("data.json.tmp").exists()

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFile(path, default=[]).load()

    def test_invalid_utf8_is_a_storage_error(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_bytes(b'[{"id": "a", "recipientName": "\xff\xfe"}]')
        with pytest.raises(StorageError):
            JsonFile(path, default=[]).load()

    def test_wrong_top_level_type(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{}", encoding="utf-8")
        with pytest.raises(StorageError):
            JsonFile(path, default=[]).load()


class TestJsonFileExpenseStorage:
    """Tests for the JSON file record store."""

    def test_stored_rows_use_camel_case_keys(self, tmp_path, make_record):
        path = tmp_path / "expenses.json"
        storage = JsonFileExpenseStorage(path)
        asyncio.run(storage.insert(make_record("a", expense_number="EXP-2025-001", amount="12.50")))

        rows = json.loads(path.read_text(encoding="utf-8"))
        assert rows[0]["id"] == "a"
        assert rows[0]["expenseNumber"] == "EXP-2025-001"
        assert rows[0]["recipientName"] == "محمد"
        assert rows[0]["date"] == "2025-03-10"

        loaded = asyncio.run(storage.get_by_id("a"))
        assert loaded.amount == Decimal("12.50")
        assert loaded.expense_date == date(2025, 3, 10)

    def test_reads_rows_written_by_other_tools(self, tmp_path):
        path = tmp_path / "expenses.json"
        path.write_text(json.dumps([
            {
                "id": "legacy",
                "date": "2025-01-05T10:00:00.000Z",
                "category": "car",
                "amount": 250,
                "recipientName": "سائق",
                "createdAt": "2025-01-05T10:00:00.000Z",
            },
            {"category": "rent", "amount": 1},
            {"id": "negative", "amount": -5},
            "not a row",
        ], ensure_ascii=False), encoding="utf-8")

        records = asyncio.run(JsonFileExpenseStorage(path).get_all())

        assert [r.id for r in records] == ["legacy"]
        assert records[0].expense_date == date(2025, 1, 5)
        assert records[0].amount == Decimal(250)
        assert records[0].created_at is not None

    def test_update_and_delete(self, tmp_path, make_record):
        storage = JsonFileExpenseStorage(tmp_path / "expenses.json")
        asyncio.run(storage.insert(make_record("a")))
        asyncio.run(storage.insert(make_record("b")))

        updated = make_record("a", amount="999")
        asyncio.run(storage.update("a", updated))
        assert asyncio.run(storage.get_by_id("a")).amount == Decimal("999")

        assert asyncio.run(storage.delete("b")) is True
        assert asyncio.run(storage.delete("b")) is False
        assert [r.id for r in asyncio.run(storage.get_all())] == ["a"]

    def test_update_missing(self, tmp_path, make_record):
        storage = JsonFileExpenseStorage(tmp_path / "expenses.json")
        with pytest.raises(NotFoundError):
            asyncio.run(storage.update("a", make_record("a")))

    def test_duplicate_insert(self, tmp_path, make_record):
        storage = JsonFileExpenseStorage(tmp_path / "expenses.json")
        asyncio.run(storage.insert(make_record("a")))
        with pytest.raises(DuplicateError):
            asyncio.run(storage.insert(make_record("a")))

    def test_path_from_settings(self, fast_storage_settings, make_record):
        storage = JsonFileExpenseStorage(settings=fast_storage_settings)
        asyncio.run(storage.insert(make_record("a")))
        assert fast_storage_settings.records_path.exists()


class TestJsonFileCounterStorage:
    """Tests for the JSON file fallback counters."""

    def test_counters_per_key(self, tmp_path):
        storage = JsonFileCounterStorage(tmp_path / "counters.json")
        assert asyncio.run(storage.get_counter("EXP-2025-")) == 0

        asyncio.run(storage.set_counter("EXP-2025-", 7))
        asyncio.run(storage.set_counter("EXP-2026-", 1))

        reopened = JsonFileCounterStorage(tmp_path / "counters.json")
        assert asyncio.run(reopened.get_counter("EXP-2025-")) == 7
        assert asyncio.run(reopened.get_counter("EXP-2026-")) == 1

    def test_non_numeric_counter_reads_as_zero(self, tmp_path):
        path = tmp_path / "counters.json"
        path.write_text('{"EXP-2025-": "abc"}', encoding="utf-8")
        assert asyncio.run(JsonFileCounterStorage(path).get_counter("EXP-2025-")) == 0
