"""Expense form validation package."""

from expense_vouchers.validation.validator import ExpenseValidator

__all__ = ["ExpenseValidator"]
