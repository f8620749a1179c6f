"""
Main Orchestrator for Expense Vouchers

This module ties the core components together and defines the flows a
UI drives:
1. List (load all records -> FilterEngine -> one page)
2. Create (validate -> allocate voucher number -> insert)
3. Edit (validate -> keep id and voucher number -> update)
4. Delete
5. Voucher text (the strings a print template needs)

DESIGN DECISION: The orchestrator is the only place that writes to the
record store, and every write is audited. The formatter and the
query engine it calls are pure.
"""

from datetime import date, datetime, timezone
from typing import Optional

import structlog

from expense_vouchers.audit import AuditLogger
from expense_vouchers.config import VoucherSettings, get_settings
from expense_vouchers.formatting import (
    format_localized_currency,
    format_localized_date,
    number_to_words,
)
from expense_vouchers.models.expense import (
    ExpenseDraft,
    ExpenseRecord,
    FilterResult,
    FilterState,
    ValidationResult,
    VoucherText,
)
from expense_vouchers.numbering import SequenceAllocator
from expense_vouchers.queries import FilterEngine
from expense_vouchers.services.storage import (
    CounterStorageInterface,
    ExpenseStorageInterface,
    NotFoundError,
    StorageError,
)
from expense_vouchers.validation import ExpenseValidator


logger = structlog.get_logger(__name__)

# Fields a user may change when editing a voucher
EDITABLE_FIELDS = (
    "expense_date",
    "category",
    "amount",
    "recipient_name",
    "description",
)


class ExpenseService:
    """
    Orchestrates the expense voucher flows.

    Every list refresh reloads the full record set and recomputes the
    page from scratch; nothing is cached between calls.
    """

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        counter_storage: CounterStorageInterface,
        validator: Optional[ExpenseValidator] = None,
        allocator: Optional[SequenceAllocator] = None,
        engine: Optional[FilterEngine] = None,
        audit_logger: Optional[AuditLogger] = None,
        voucher_settings: Optional[VoucherSettings] = None,
    ):
        self._storage = storage
        self._validator = validator or ExpenseValidator()
        self._allocator = allocator or SequenceAllocator(
            storage,
            counter_storage,
            voucher_settings=voucher_settings,
            audit_logger=audit_logger,
        )
        self._engine = engine or FilterEngine()
        self._audit_logger = audit_logger
        self._voucher_settings = voucher_settings or get_settings().voucher

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    async def load_records(self) -> list[ExpenseRecord]:
        """
        Load every stored expense.

        A store that can't be read yields an empty list so the screen
        still renders; the failure is audited.
        """
        try:
            return await self._storage.get_all()
        except StorageError as e:
            logger.error("records_load_failed", error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_records_load_failed(str(e))
            return []

    async def list_expenses(
        self,
        state: FilterState,
        today: Optional[date] = None,
    ) -> FilterResult:
        """The requested page of the expense list."""
        records = await self.load_records()
        return self._engine.apply(records, state, today=today)

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    async def _reject(self, result: ValidationResult, expense_id: Optional[str] = None) -> None:
        if self._audit_logger:
            await self._audit_logger.log_validation_failed(
                issues=[issue.model_dump() for issue in result.issues if issue.severity == "error"],
                expense_id=expense_id,
            )

    async def create_expense(
        self,
        draft: ExpenseDraft,
        created_by: Optional[str] = None,
        today: Optional[date] = None,
    ) -> tuple[Optional[ExpenseRecord], ValidationResult]:
        """
        Validate and store a new expense.

        Returns:
            (record, validation) - record is None when validation failed

        Raises:
            StorageError: If the insert fails (after auditing it)
        """
        validation = self._validator.validate(draft, today=today)
        if not validation.is_valid:
            await self._reject(validation)
            return None, validation

        # Voucher numbers are scoped to the year the voucher is created in
        expense_number = await self._allocator.next_number((today or date.today()).year)
        now = datetime.now(timezone.utc)

        record = ExpenseRecord(
            expense_number=expense_number,
            expense_date=draft.expense_date,
            category=draft.resolved_category,
            amount=draft.amount,
            recipient_name=draft.recipient_name,
            description=draft.description,
            created_at=now,
            updated_at=now,
            created_by=created_by,
        )

        try:
            await self._storage.insert(record)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_save_failed(record.id, "create", str(e))
            raise

        if self._audit_logger:
            await self._audit_logger.log_expense_created(
                expense_id=record.id,
                expense_number=record.expense_number,
                amount=str(record.amount),
                actor=created_by,
            )
        return record, validation

    async def update_expense(
        self,
        expense_id: str,
        draft: ExpenseDraft,
        today: Optional[date] = None,
    ) -> tuple[Optional[ExpenseRecord], ValidationResult]:
        """
        Validate and apply an edit.

        id, expense_number, created_at and created_by never change. A
        legacy record without a voucher number is given one.

        Raises:
            NotFoundError: If the expense doesn't exist
            StorageError: If the update fails (after auditing it)
        """
        existing = await self._storage.get_by_id(expense_id)
        if existing is None:
            raise NotFoundError(f"Expense not found: {expense_id}")

        validation = self._validator.validate(draft, today=today)
        if not validation.is_valid:
            await self._reject(validation, expense_id)
            return None, validation

        expense_number = existing.expense_number
        if not expense_number:
            expense_number = await self._allocator.next_number((today or date.today()).year)

        changes = {
            "expense_date": draft.expense_date,
            "category": draft.resolved_category,
            "amount": draft.amount,
            "recipient_name": draft.recipient_name,
            "description": draft.description,
        }
        changed_fields = [name for name in EDITABLE_FIELDS if getattr(existing, name) != changes[name]]

        updated = existing.model_copy(update={
            **changes,
            "expense_number": expense_number,
            "updated_at": datetime.now(timezone.utc),
        })

        try:
            await self._storage.update(expense_id, updated)
        except NotFoundError:
            raise
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_save_failed(expense_id, "update", str(e))
            raise

        if self._audit_logger:
            await self._audit_logger.log_expense_updated(
                expense_id=expense_id,
                expense_number=expense_number,
                changed_fields=changed_fields,
            )
        return updated, validation

    async def delete_expense(self, expense_id: str) -> bool:
        """
        Delete an expense.

        Raises:
            NotFoundError: If the expense doesn't exist
            StorageError: If the delete fails (after auditing it)
        """
        existing = await self._storage.get_by_id(expense_id)
        if existing is None:
            raise NotFoundError(f"Expense not found: {expense_id}")

        try:
            deleted = await self._storage.delete(expense_id)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_save_failed(expense_id, "delete", str(e))
            raise

        if deleted and self._audit_logger:
            await self._audit_logger.log_expense_deleted(expense_id, existing.expense_number)
        return deleted

    # -------------------------------------------------------------------------
    # Voucher output
    # -------------------------------------------------------------------------

    def voucher_text(self, record: ExpenseRecord) -> VoucherText:
        """Display strings for one voucher (list row or printout)."""
        settings = self._voucher_settings
        return VoucherText(
            expense_number=record.expense_number or "-",
            date_text=format_localized_date(record.expense_date),
            category_name=record.category_name,
            amount_text=format_localized_currency(
                record.amount,
                settings.currency_symbol,
                settings.decimals,
            ),
            amount_in_words=number_to_words(record.amount),
            recipient_name=record.recipient_name or "-",
            description=record.description or "-",
        )
