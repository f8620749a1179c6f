"""Voucher numbering package."""

from expense_vouchers.numbering.allocator import (
    SequenceAllocator,
    format_voucher_number,
    next_voucher_number,
    parse_voucher_counter,
    voucher_prefix,
)

__all__ = [
    "SequenceAllocator",
    "format_voucher_number",
    "next_voucher_number",
    "parse_voucher_counter",
    "voucher_prefix",
]
