"""
Voucher Number Allocation

Voucher numbers look like EXP-2025-007: a fixed tag, the year, and a
counter zero-padded to at least three digits. Counters restart every
year and are only unique within their year prefix.

DESIGN DECISION: There is no central sequence. The next number is the
highest counter already stored under this year's prefix, plus one.
Gaps left by deleted vouchers are never reused.

If the record store cannot be read, numbering falls back to a persisted
per-prefix counter. After every successful scan that counter is brought
up to date, so the fallback continues from the last scanned number.

KNOWN LIMITATION (kept on purpose): "scan max, add one" takes no lock
and reserves nothing. Two voucher flows that both read the records
before either one saves will compute the same number and store a
duplicate. The tool assumes one writer at a time. Moving to a real
guarantee means an atomic per-year counter behind a single writer, a
unique constraint on expenseNumber with retry on conflict, or both.
"""

import re
from datetime import date
from typing import Iterable, Optional

import structlog
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from expense_vouchers.audit import AuditLogger
from expense_vouchers.config import StorageSettings, VoucherSettings, get_settings
from expense_vouchers.models.expense import ExpenseRecord
from expense_vouchers.services.storage import (
    CounterStorageInterface,
    ExpenseStorageInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)

DEFAULT_PREFIX = "EXP"
DEFAULT_COUNTER_WIDTH = 3


def voucher_prefix(year: int, prefix: str = DEFAULT_PREFIX) -> str:
    """The year-scoped prefix, e.g. voucher_prefix(2025) -> "EXP-2025-"."""
    return f"{prefix}-{year}-"


def format_voucher_number(
    year_prefix: str,
    counter: int,
    width: int = DEFAULT_COUNTER_WIDTH,
) -> str:
    return f"{year_prefix}{counter:0{width}d}"


def parse_voucher_counter(number: Optional[str], year_prefix: str) -> int:
    """
    The counter of a voucher number under a given prefix.

    Reads the digit run right after the prefix; anything else is 0.
    """
    if not number or not number.startswith(year_prefix):
        return 0
    match = re.match(re.escape(year_prefix) + r"(\d+)", number)
    return int(match.group(1)) if match else 0


def next_voucher_number(
    existing_records: Iterable[ExpenseRecord],
    year: int,
    prefix: str = DEFAULT_PREFIX,
    width: int = DEFAULT_COUNTER_WIDTH,
) -> str:
    """
    Next voucher number for a year from a full scan of existing records.

    Numbers under other years' prefixes are ignored.
    """
    year_prefix = voucher_prefix(year, prefix)
    highest = max(
        (parse_voucher_counter(record.expense_number, year_prefix) for record in existing_records),
        default=0,
    )
    return format_voucher_number(year_prefix, highest + 1, width)


class SequenceAllocator:
    """
    Allocates the voucher number for a new expense.

    Never raises: a store that stays unreadable after the configured
    retries is answered from the fallback counter, and a counter store
    that also fails is read as 0 and logged.
    """

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        counter_storage: CounterStorageInterface,
        voucher_settings: Optional[VoucherSettings] = None,
        storage_settings: Optional[StorageSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        settings = get_settings()
        self._storage = storage
        self._counters = counter_storage
        self._voucher_settings = voucher_settings or settings.voucher
        self._storage_settings = storage_settings or settings.storage
        self._audit_logger = audit_logger

    def prefix_for(self, year: int) -> str:
        return voucher_prefix(year, self._voucher_settings.number_prefix)

    async def _fetch_records(self) -> list[ExpenseRecord]:
        """Read every record, retrying transient storage errors."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._storage_settings.retry_attempts),
            wait=wait_exponential(
                multiplier=self._storage_settings.retry_wait_min,
                min=self._storage_settings.retry_wait_min,
                max=self._storage_settings.retry_wait_max,
            ),
            retry=retry_if_exception_type(StorageError),
            reraise=True,
        ):
            with attempt:
                return await self._storage.get_all()
        return []

    async def _read_counter(self, year_prefix: str) -> int:
        try:
            return await self._counters.get_counter(year_prefix)
        except StorageError as e:
            logger.error("fallback_counter_read_failed", prefix=year_prefix, error=str(e))
            return 0

    async def _write_counter(self, year_prefix: str, counter: int) -> None:
        try:
            await self._counters.set_counter(year_prefix, counter)
        except StorageError as e:
            logger.error(
                "fallback_counter_write_failed",
                prefix=year_prefix,
                counter=counter,
                error=str(e),
            )

    async def _next_from_counter(self, year_prefix: str, reason: str) -> str:
        counter = await self._read_counter(year_prefix) + 1
        await self._write_counter(year_prefix, counter)

        logger.warning("voucher_number_from_counter", prefix=year_prefix, counter=counter, reason=reason)
        if self._audit_logger:
            await self._audit_logger.log_counter_fallback(
                prefix=year_prefix,
                counter=counter,
                reason=reason,
            )
        return format_voucher_number(year_prefix, counter, self._voucher_settings.counter_width)

    async def next_number(self, year: Optional[int] = None) -> str:
        """
        Allocate the next voucher number for a year (default: this year).

        The number is not reserved; see the module docstring.
        """
        year = year or date.today().year
        year_prefix = self.prefix_for(year)

        try:
            records = await self._fetch_records()
        except StorageError as e:
            return await self._next_from_counter(year_prefix, reason=str(e))

        number = next_voucher_number(
            records,
            year,
            prefix=self._voucher_settings.number_prefix,
            width=self._voucher_settings.counter_width,
        )
        # Keep the fallback counter in step with the scan
        await self._write_counter(year_prefix, parse_voucher_counter(number, year_prefix))

        if self._audit_logger:
            await self._audit_logger.log_voucher_number_allocated(number, source="scan")
        return number
