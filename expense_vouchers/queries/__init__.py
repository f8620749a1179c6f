"""Expense list query package."""

from expense_vouchers.queries.engine import (
    FilterEngine,
    effective_window,
    month_bounds,
    sort_records,
)

__all__ = ["FilterEngine", "effective_window", "month_bounds", "sort_records"]
