"""
Expense Vouchers - Source Package

Core of an operating-expense voucher tool: querying recorded expenses,
Arabic numeral and amount-in-words formatting for printed vouchers,
and year-scoped voucher numbering.

DESIGN PRINCIPLES:
1. The core never mutates records, it only derives views
2. Formatting and querying always return a value
3. Storage layer is swappable
4. Every write is auditable
"""

__version__ = "1.0.0"
__author__ = "Expense Vouchers Team"
