"""
Expense List Query Engine

DESIGN DECISION: Filtering is a pure function of (records, FilterState).
Every filter, sort or page change recomputes the visible page from the
full record list. Nothing is cached, so there is nothing to invalidate.

Order of operations:
1. Effective date window (current month when nothing is entered)
2. Free-text search
3. Inclusive date range
4. Expense type / category
5. Sort
6. Page clamp (out of range -> page 1)
7. Slice

GUARANTEES:
- Never raises for any record content: a missing date sorts and filters
  as the epoch, a missing amount as 0
- Never mutates the records or the state
"""

import calendar
import math
from datetime import date
from typing import Iterable, Optional

import structlog

from expense_vouchers.models.expense import (
    ExpenseRecord,
    ExpenseType,
    FilterResult,
    FilterState,
    SortOrder,
)


logger = structlog.get_logger(__name__)


def month_bounds(day: date) -> tuple[date, date]:
    """First and last calendar day of the month containing day."""
    last_day = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last_day)


def effective_window(
    state: FilterState,
    today: Optional[date] = None,
) -> tuple[Optional[date], Optional[date]]:
    """
    The date bounds actually applied for a state.

    With no date bounds and no search text, the list shows the current
    month. As soon as any of the three is set, the user's bounds are
    used as entered (either side may stay open).
    """
    if state.date_from is None and state.date_to is None and not state.search_query:
        return month_bounds(today or date.today())
    return state.date_from, state.date_to


def _matches_search(record: ExpenseRecord, term: str) -> bool:
    for text in (record.category_name, record.description, record.recipient_name):
        if text and term in text.lower():
            return True
    return False


def _matches_type(record: ExpenseRecord, state: FilterState) -> bool:
    if state.type_filter == ExpenseType.SALARIES:
        return record.is_salary
    if state.type_filter == ExpenseType.OPERATIONAL:
        if record.is_salary:
            return False
        return not state.category_filter or record.category == state.category_filter
    # No type chosen: a bare category filter still applies
    return not state.category_filter or record.category == state.category_filter


def sort_records(records: list[ExpenseRecord], sort_by: SortOrder) -> list[ExpenseRecord]:
    """
    Sort for display.

    Date sorts break ties on created_at (then updated_at) in the same
    direction. Amount sorts have no secondary key; Python's sort is
    stable, so equal amounts keep their incoming order.
    """
    if sort_by in (SortOrder.AMOUNT_DESC, SortOrder.AMOUNT_ASC):
        return sorted(
            records,
            key=lambda r: r.amount,
            reverse=sort_by == SortOrder.AMOUNT_DESC,
        )
    return sorted(
        records,
        key=lambda r: (r.effective_date, r.tiebreak_timestamp),
        reverse=sort_by != SortOrder.DATE_ASC,
    )


class FilterEngine:
    """
    Produces one page of the expense list.

    Stateless; a single instance can serve any number of list screens.
    The page size travels in the FilterState.
    """

    def filter(
        self,
        records: Iterable[ExpenseRecord],
        state: FilterState,
        today: Optional[date] = None,
    ) -> list[ExpenseRecord]:
        """All records matching the state, sorted, before pagination."""
        date_from, date_to = effective_window(state, today)
        matched = list(records)

        if state.search_query:
            term = state.search_query.strip().lower()
            matched = [r for r in matched if _matches_search(r, term)]

        if date_from is not None:
            matched = [r for r in matched if r.effective_date >= date_from]
        if date_to is not None:
            # Day granularity: the whole last day is included
            matched = [r for r in matched if r.effective_date <= date_to]

        if state.type_filter or state.category_filter:
            matched = [r for r in matched if _matches_type(r, state)]

        return sort_records(matched, state.sort_by)

    def apply(
        self,
        records: Iterable[ExpenseRecord],
        state: FilterState,
        today: Optional[date] = None,
    ) -> FilterResult:
        """
        Filter, sort and paginate records for a state.

        A requested page past the end goes back to page 1, not to the
        last page. With no matches the requested page is kept and the
        page is empty.
        """
        today = today or date.today()
        page_size = state.page_size
        date_from, date_to = effective_window(state, today)
        matched = self.filter(records, state, today)

        total_count = len(matched)
        total_pages = math.ceil(total_count / page_size)

        page = state.page
        if page > total_pages and total_pages > 0:
            page = 1

        start = (page - 1) * page_size
        end = min(page * page_size, total_count)

        logger.debug(
            "filters_applied",
            total_count=total_count,
            total_pages=total_pages,
            requested_page=state.page,
            page=page,
            sort_by=state.sort_by.value,
        )

        return FilterResult(
            page=matched[start:end],
            total_count=total_count,
            total_pages=total_pages,
            clamped_page=page,
            page_size=page_size,
            effective_date_from=date_from,
            effective_date_to=date_to,
        )
