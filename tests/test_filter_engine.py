"""
Tests for the expense list query engine.

All tests pass an explicit `today` so the current-month default is
deterministic.
"""

from datetime import date
from decimal import Decimal

import pytest

from expense_vouchers.models import (
    ExpenseRecord,
    ExpenseType,
    FilterResult,
    FilterState,
    SortOrder,
)
from expense_vouchers.queries import (
    FilterEngine,
    effective_window,
    month_bounds,
    sort_records,
)


TODAY = date(2025, 3, 15)


@pytest.fixture
def engine() -> FilterEngine:
    return FilterEngine()


class TestEffectiveWindow:
    """Tests for the current-month default."""

    def test_month_bounds(self):
        assert month_bounds(date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))
        assert month_bounds(date(2025, 12, 31)) == (date(2025, 12, 1), date(2025, 12, 31))

    def test_empty_state_uses_current_month(self):
        assert effective_window(FilterState(), TODAY) == (date(2025, 3, 1), date(2025, 3, 31))

    def test_search_disables_default(self):
        state = FilterState(search_query="ايجار")
        assert effective_window(state, TODAY) == (None, None)

    def test_single_bound_is_kept_open_ended(self):
        state = FilterState(date_from=date(2025, 1, 1))
        assert effective_window(state, TODAY) == (date(2025, 1, 1), None)

    def test_state_is_not_modified(self, engine):
        state = FilterState()
        result = engine.apply([], state, today=TODAY)
        assert state.date_from is None and state.date_to is None
        assert result.effective_date_from == date(2025, 3, 1)
        assert result.effective_date_to == date(2025, 3, 31)


class TestDefaultWindow:
    """Tests for which records the default window shows."""

    def test_only_current_month_shown(self, engine, make_record):
        records = [
            make_record("a", expense_date=date(2025, 3, 1)),
            make_record("b", expense_date=date(2025, 3, 31)),
            make_record("c", expense_date=date(2025, 2, 28)),
            make_record("d", expense_date=date(2025, 4, 1)),
        ]
        result = engine.apply(records, FilterState(), today=TODAY)
        assert [r.id for r in result.page] == ["b", "a"]

    def test_search_covers_all_time(self, engine, make_record):
        records = [
            make_record("old", expense_date=date(2020, 1, 1), description="فاتورة كهرباء"),
            make_record("new", expense_date=date(2025, 3, 2), description="فاتورة"),
        ]
        result = engine.apply(records, FilterState(search_query="فاتورة"), today=TODAY)
        assert {r.id for r in result.page} == {"old", "new"}


class TestSearch:
    """Tests for free-text search."""

    def test_matches_category_display_name(self, engine, make_record):
        records = [
            make_record("rent", category="rent"),
            make_record("car", category="car"),
        ]
        result = engine.apply(records, FilterState(search_query="إيجار"), today=TODAY)
        assert [r.id for r in result.page] == ["rent"]

    def test_matches_recipient_case_insensitive(self, engine, make_record):
        records = [
            make_record("a", recipient_name="Ahmed Ali"),
            make_record("b", recipient_name="Omar"),
        ]
        result = engine.apply(records, FilterState(search_query="  ahmed "), today=TODAY)
        assert [r.id for r in result.page] == ["a"]

    def test_missing_fields_do_not_match(self, engine, make_record):
        record = make_record("a", recipient_name=None, description=None, category="")
        result = engine.apply([record], FilterState(search_query="x"), today=TODAY)
        assert result.total_count == 0


class TestDateRange:
    """Tests for the inclusive date range."""

    def test_bounds_are_inclusive(self, engine, make_record):
        records = [
            make_record("before", expense_date=date(2025, 1, 9)),
            make_record("first", expense_date=date(2025, 1, 10)),
            make_record("last", expense_date=date(2025, 1, 20)),
            make_record("after", expense_date=date(2025, 1, 21)),
        ]
        state = FilterState(date_from=date(2025, 1, 10), date_to=date(2025, 1, 20))
        result = engine.apply(records, state, today=TODAY)
        assert {r.id for r in result.page} == {"first", "last"}

    def test_missing_date_reads_as_epoch(self, engine, make_record):
        record = make_record("nodate", expense_date=None)
        state = FilterState(date_to=date(1970, 1, 1))
        result = engine.apply([record], state, today=TODAY)
        assert [r.id for r in result.page] == ["nodate"]

    def test_blank_inputs_are_unset(self):
        state = FilterState(date_from="", date_to="", type_filter="", category_filter="")
        assert state.date_from is None
        assert state.type_filter is None
        assert state.category_filter is None


class TestTypeAndCategory:
    """Tests for the expense type and category filters."""

    @pytest.fixture
    def records(self, make_record):
        return [
            make_record("salary", category="salaries"),
            make_record("rent", category="rent"),
            make_record("car", category="car"),
        ]

    def _ids(self, engine, records, **kwargs):
        state = FilterState(date_from=date(2025, 1, 1), **kwargs)
        return {r.id for r in engine.apply(records, state, today=TODAY).page}

    def test_salaries_only(self, engine, records):
        assert self._ids(engine, records, type_filter=ExpenseType.SALARIES) == {"salary"}

    def test_operational_excludes_salaries(self, engine, records):
        assert self._ids(engine, records, type_filter="operational") == {"rent", "car"}

    def test_operational_with_category(self, engine, records):
        ids = self._ids(engine, records, type_filter="operational", category_filter="car")
        assert ids == {"car"}

    def test_salaries_ignores_category(self, engine, records):
        ids = self._ids(engine, records, type_filter="salaries", category_filter="car")
        assert ids == {"salary"}

    def test_category_without_type(self, engine, records):
        assert self._ids(engine, records, category_filter="rent") == {"rent"}


class TestSorting:
    """Tests for sort orders and tie-breaking."""

    def test_date_desc_breaks_ties_on_created_at(self, make_record, utc):
        early = make_record("early", created_at=utc(2025, 3, 10, 8))
        late = make_record("late", created_at=utc(2025, 3, 10, 9))
        older = make_record("older", expense_date=date(2025, 3, 9))

        assert [r.id for r in sort_records([early, older, late], SortOrder.DATE_DESC)] == [
            "late", "early", "older",
        ]
        assert [r.id for r in sort_records([late, older, early], SortOrder.DATE_ASC)] == [
            "older", "early", "late",
        ]

    def test_updated_at_used_when_created_at_missing(self, make_record, utc):
        a = make_record("a")
        b = make_record("b").model_copy(update={"updated_at": utc(2025, 1, 1)})
        assert [r.id for r in sort_records([a, b], SortOrder.DATE_DESC)] == ["b", "a"]

    def test_amount_sort_is_stable(self, make_record):
        records = [
            make_record("x", amount="50"),
            make_record("y", amount="10"),
            make_record("z", amount="50"),
        ]
        assert [r.id for r in sort_records(records, SortOrder.AMOUNT_DESC)] == ["x", "z", "y"]
        assert [r.id for r in sort_records(records, SortOrder.AMOUNT_ASC)] == ["y", "x", "z"]

    def test_unknown_sort_key_is_newest_first(self):
        assert FilterState(sort_by="bogus").sort_by == SortOrder.DATE_DESC

    def test_records_are_not_mutated(self, engine, make_record):
        records = [make_record("b", amount="1"), make_record("a", amount="2")]
        engine.apply(records, FilterState(sort_by="amount-desc", search_query="محمد"), today=TODAY)
        assert [r.id for r in records] == ["b", "a"]


class TestPagination:
    """Tests for page clamping and slicing."""

    @pytest.fixture
    def records(self, make_record):
        return [
            make_record(f"r{i:02d}", amount=str(i))
            for i in range(45)
        ]

    def _state(self, **kwargs) -> FilterState:
        return FilterState(date_from=date(2025, 1, 1), sort_by="amount-asc", **kwargs)

    def test_pages_and_slice(self, engine, records):
        result = engine.apply(records, self._state(page=3), today=TODAY)
        assert result.total_count == 45
        assert result.total_pages == 3
        assert result.clamped_page == 3
        assert [r.id for r in result.page] == [f"r{i:02d}" for i in range(40, 45)]
        assert result.first_item_number == 41
        assert result.last_item_number == 45
        assert result.has_previous and not result.has_next

    def test_page_past_end_goes_to_first(self, engine, records):
        result = engine.apply(records, self._state(page=9), today=TODAY)
        assert result.clamped_page == 1
        assert result.page[0].id == "r00"
        assert len(result.page) == 20

    def test_no_matches_keeps_requested_page(self, engine):
        result = engine.apply([], self._state(page=4), today=TODAY)
        assert result.total_pages == 0
        assert result.clamped_page == 4
        assert result.page == []
        assert result.first_item_number == 0

    def test_custom_page_size(self, engine, records):
        result = engine.apply(records, self._state(page_size=10, page=5), today=TODAY)
        assert result.total_pages == 5
        assert len(result.page) == 5

    def test_page_must_be_positive(self):
        with pytest.raises(ValueError):
            FilterState(page=0)


class TestVisiblePageNumbers:
    """Tests for the page button window."""

    def _result(self, page: int, total_pages: int) -> FilterResult:
        return FilterResult(total_count=total_pages * 20, total_pages=total_pages, clamped_page=page)

    def test_centred_window(self):
        assert self._result(5, 10).visible_page_numbers() == [3, 4, 5, 6, 7]

    def test_window_shifts_at_edges(self):
        assert self._result(1, 10).visible_page_numbers() == [1, 2, 3, 4, 5]
        assert self._result(10, 10).visible_page_numbers() == [6, 7, 8, 9, 10]

    def test_fewer_pages_than_window(self):
        assert self._result(2, 3).visible_page_numbers() == [1, 2, 3]

    def test_no_pages(self):
        assert self._result(1, 0).visible_page_numbers() == []


class TestLenientRecords:
    """Tests that malformed stored values still load."""

    def test_malformed_values(self):
        record = ExpenseRecord.model_validate({
            "id": "x",
            "date": "not-a-date",
            "amount": "abc",
            "createdAt": "garbage",
        })
        assert record.expense_date is None
        assert record.amount == Decimal(0)
        assert record.created_at is None
        assert record.tiebreak_timestamp == 0.0
