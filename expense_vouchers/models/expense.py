"""
Core Data Models for Expense Vouchers

These models define the schemas for all data flowing through the core:
1. ExpenseRecord - one recorded operating expense (one printable voucher)
2. FilterState / FilterResult - the list screen's query and its output
3. ExpenseDraft - what the expense form submits
4. ValidationIssue / ValidationResult - form check outcomes

DESIGN DECISION: Records are read leniently. A row with a malformed date,
amount or timestamp still loads (as None / 0) so the list, the sort and
the voucher printout keep working. Strictness belongs to the form checks
in expense_vouchers.validation, not to reading stored data.

Stored rows use camelCase keys (expenseNumber, recipientName, ...);
model_dump(by_alias=True) writes them back the same way.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from expense_vouchers.formatting.numerals import to_decimal


EPOCH_DATE = date(1970, 1, 1)

# Fixed number of rows on one page of the expense list
PAGE_SIZE = 20


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Known expense categories.

    SALARIES is the distinguished value: a salary voucher has no
    sub-category. Every other category is an "operational" expense.
    Stored records may also carry free-form tags outside this set.
    """
    SALARIES = "salaries"
    CAR = "car"
    SHIPPING = "shipping"
    RENT = "rent"
    ELECTRICITY = "electricity"
    INTERNET = "internet"
    PACKAGING = "packaging"
    MAINTENANCE = "maintenance"
    OTHER = "other"


CATEGORY_NAMES = {
    ExpenseCategory.SALARIES.value: "مرتبات",
    ExpenseCategory.CAR.value: "مصاريف تشغيل سيارة",
    ExpenseCategory.SHIPPING.value: "شحن",
    ExpenseCategory.RENT.value: "إيجار",
    ExpenseCategory.ELECTRICITY.value: "كهرباء",
    ExpenseCategory.INTERNET.value: "إنترنت",
    ExpenseCategory.PACKAGING.value: "تغليف",
    ExpenseCategory.MAINTENANCE.value: "صيانة",
    ExpenseCategory.OTHER.value: "مصروفات أخرى",
}


def category_display_name(category: Optional[str]) -> str:
    """Arabic display name of a category; unknown tags display as themselves."""
    if not category:
        return ""
    return CATEGORY_NAMES.get(str(category), str(category))


def is_known_category(category: Optional[str]) -> bool:
    return bool(category) and str(category) in CATEGORY_NAMES


class ExpenseType(str, Enum):
    """Top-level split of expenses: salaries vs everything else."""
    SALARIES = "salaries"
    OPERATIONAL = "operational"


class SortOrder(str, Enum):
    """Sort options of the expense list."""
    DATE_DESC = "date-desc"   # Newest first (default)
    DATE_ASC = "date-asc"
    AMOUNT_DESC = "amount-desc"
    AMOUNT_ASC = "amount-asc"


# =============================================================================
# LENIENT PARSERS
# =============================================================================

def parse_calendar_date(value: Any) -> Optional[date]:
    """
    Read a stored date value at day granularity.

    Accepts date, datetime, or an ISO string (a timestamp string is cut
    to its date part). Anything else is None.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Read a stored ISO timestamp, or None if missing or malformed."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# CORE EXPENSE MODEL
# =============================================================================

class ExpenseRecord(BaseModel):
    """
    A recorded operating expense.

    id and expense_number are assigned once at creation and never
    change; every other field may be edited. The core only reads
    records, it never mutates them.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    id: str = Field(
        default_factory=lambda: f"expense_{uuid4().hex}",
        description="Opaque stable identifier"
    )
    expense_number: Optional[str] = Field(
        default=None,
        alias="expenseNumber",
        description="Voucher number, EXP-<year>-<counter>"
    )
    expense_date: Optional[date] = Field(
        default=None,
        alias="date",
        description="Effective voucher date (None when missing or malformed)"
    )
    category: str = Field(
        default=ExpenseCategory.OTHER.value,
        description="Category value or free-form tag"
    )
    amount: Decimal = Field(
        default=Decimal(0),
        ge=0,
        description="Amount in pounds"
    )
    recipient_name: Optional[str] = Field(
        default=None,
        alias="recipientName",
    )
    description: Optional[str] = None
    created_at: Optional[datetime] = Field(
        default=None,
        alias="createdAt",
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        alias="updatedAt",
    )
    created_by: Optional[str] = Field(
        default=None,
        alias="createdBy",
    )

    @field_validator('expense_date', mode='before')
    @classmethod
    def coerce_date(cls, v: Any) -> Optional[date]:
        return parse_calendar_date(v)

    @field_validator('created_at', 'updated_at', mode='before')
    @classmethod
    def coerce_timestamp(cls, v: Any) -> Optional[datetime]:
        return parse_timestamp(v)

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, v: Any) -> Decimal:
        """Missing or non-numeric amounts read as 0."""
        return to_decimal(v)

    @field_validator('category', mode='before')
    @classmethod
    def coerce_category(cls, v: Any) -> str:
        if isinstance(v, Enum):
            return v.value
        return "" if v is None else str(v)

    @field_validator('expense_number', 'recipient_name', 'description', 'created_by', mode='before')
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @property
    def effective_date(self) -> date:
        """The voucher date, or the epoch when it is missing."""
        return self.expense_date or EPOCH_DATE

    @property
    def tiebreak_timestamp(self) -> float:
        """
        POSIX seconds of created_at, falling back to updated_at, then 0.

        Naive timestamps are read as UTC.
        """
        stamp = self.created_at or self.updated_at
        if stamp is None:
            return 0.0
        if stamp.tzinfo is None:
            stamp = stamp.replace(tzinfo=timezone.utc)
        return stamp.timestamp()

    @property
    def is_salary(self) -> bool:
        return self.category == ExpenseCategory.SALARIES.value

    @property
    def expense_type(self) -> ExpenseType:
        return ExpenseType.SALARIES if self.is_salary else ExpenseType.OPERATIONAL

    @property
    def category_name(self) -> str:
        return category_display_name(self.category)

    def to_storage_dict(self) -> dict:
        """Serialize with the stored camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# LIST QUERY MODELS
# =============================================================================

class FilterState(BaseModel):
    """
    Everything the expense list is currently filtered, sorted and paged by.

    Immutable: the UI builds a new state for every change
    (state.model_copy(update={"page": 2})) and hands it to the
    FilterEngine. Empty form inputs ("") read as "not set".
    """
    model_config = ConfigDict(frozen=True)

    search_query: str = ""
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    type_filter: Optional[ExpenseType] = None
    category_filter: Optional[str] = None
    sort_by: SortOrder = SortOrder.DATE_DESC
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=PAGE_SIZE, ge=1)

    @field_validator('search_query', mode='before')
    @classmethod
    def none_to_empty(cls, v: Any) -> str:
        return "" if v is None else v

    @field_validator('date_from', 'date_to', 'type_filter', mode='before')
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator('category_filter', mode='before')
    @classmethod
    def coerce_category(cls, v: Any) -> Optional[str]:
        if isinstance(v, Enum):
            return v.value
        return _blank_to_none(v)

    @field_validator('sort_by', mode='before')
    @classmethod
    def unknown_sort_is_default(cls, v: Any) -> SortOrder:
        """An unrecognised sort key falls back to newest first."""
        try:
            return SortOrder(v)
        except ValueError:
            return SortOrder.DATE_DESC


class FilterResult(BaseModel):
    """
    One page of the filtered expense list.

    effective_date_from / effective_date_to report the date window that
    was actually applied, including the current-month default, so a UI
    can show it in its date inputs.
    """

    page: list[ExpenseRecord] = Field(default_factory=list)
    total_count: int = Field(ge=0)
    total_pages: int = Field(ge=0)
    clamped_page: int = Field(ge=1)
    page_size: int = Field(default=PAGE_SIZE, ge=1)
    effective_date_from: Optional[date] = None
    effective_date_to: Optional[date] = None

    @property
    def first_item_number(self) -> int:
        """1-based position of the first row on this page (0 when empty)."""
        if not self.page:
            return 0
        return (self.clamped_page - 1) * self.page_size + 1

    @property
    def last_item_number(self) -> int:
        if not self.page:
            return 0
        return self.first_item_number + len(self.page) - 1

    @property
    def has_previous(self) -> bool:
        return self.clamped_page > 1

    @property
    def has_next(self) -> bool:
        return self.clamped_page < self.total_pages

    def visible_page_numbers(self, max_pages: int = 5) -> list[int]:
        """
        Page buttons to show: a window of at most max_pages centred on
        the current page and shifted to stay inside 1..total_pages.
        """
        if self.total_pages == 0 or max_pages < 1:
            return []
        start = max(1, self.clamped_page - max_pages // 2)
        end = min(self.total_pages, start + max_pages - 1)
        if end - start < max_pages - 1:
            start = max(1, end - max_pages + 1)
        return list(range(start, end + 1))


# =============================================================================
# FORM AND VOUCHER MODELS
# =============================================================================

class ExpenseDraft(BaseModel):
    """
    Raw values submitted by the expense form.

    Everything is optional here; ExpenseValidator reports what is
    missing or wrong.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    expense_type: Optional[ExpenseType] = None
    category: Optional[str] = None
    expense_date: Optional[date] = None
    amount: Optional[Decimal] = None
    recipient_name: Optional[str] = None
    description: Optional[str] = None

    @field_validator('expense_type', 'expense_date', 'recipient_name', 'description', mode='before')
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator('category', mode='before')
    @classmethod
    def coerce_category(cls, v: Any) -> Optional[str]:
        if isinstance(v, Enum):
            return v.value
        return _blank_to_none(v)

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount(cls, v: Any) -> Optional[Decimal]:
        """Blank stays None; anything non-numeric reads as 0."""
        v = _blank_to_none(v)
        return None if v is None else to_decimal(v)

    @property
    def resolved_category(self) -> Optional[str]:
        """A salaries voucher always carries the salaries category."""
        if self.expense_type == ExpenseType.SALARIES:
            return ExpenseCategory.SALARIES.value
        return self.category


class VoucherText(BaseModel):
    """Display strings of one voucher, ready for a print template."""

    expense_number: str
    date_text: str
    category_name: str
    amount_text: str
    amount_in_words: str
    recipient_name: str
    description: str


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'future_date')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """Result of checking one submitted expense form."""

    validated_at: datetime = Field(
        default_factory=_utcnow
    )
    is_valid: bool = Field(
        ...,
        description="True when no error-level issue was found"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    # Warnings don't block but should be shown
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
