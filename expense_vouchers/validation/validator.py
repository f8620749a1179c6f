"""
Expense Form Validation

DESIGN DECISION: The query engine and the formatters accept anything and
substitute safe defaults. Strictness lives here, at the one place new
data enters the system: the expense form.

Checks (errors block saving):
- An expense type must be chosen
- Operational expenses need a category; salaries never do
- The amount must be a number greater than zero
- The recipient name is required
- The voucher date is required

Warnings (shown, but don't block):
- Date further in the future than the configured tolerance
- A category outside the known list

IMPORTANT: Validation NEVER silently fixes issues.
It reports them for the user to correct.
"""

from datetime import date, timedelta
from typing import Optional

from expense_vouchers.config import AppSettings, get_settings
from expense_vouchers.models.expense import (
    ExpenseDraft,
    ExpenseType,
    ValidationIssue,
    ValidationResult,
    is_known_category,
)


class ExpenseValidator:
    """Validates a submitted expense form."""

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _validate_required(self, draft: ExpenseDraft) -> list[ValidationIssue]:
        issues = []

        if draft.expense_type is None:
            issues.append(ValidationIssue(
                field="expense_type",
                issue_type="missing",
                message="Expense type is required",
                severity="error",
                suggested_fix="Choose salaries or operational",
            ))
        elif draft.expense_type == ExpenseType.OPERATIONAL and not draft.category:
            issues.append(ValidationIssue(
                field="category",
                issue_type="missing",
                message="Operational expenses need a category",
                severity="error",
                suggested_fix="Choose the operational expense category",
            ))

        if draft.amount is None or draft.amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing" if draft.amount is None else "invalid_value",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="Enter a valid amount",
            ))

        if not draft.recipient_name:
            issues.append(ValidationIssue(
                field="recipient_name",
                issue_type="missing",
                message="Recipient name is required",
                severity="error",
            ))

        if draft.expense_date is None:
            issues.append(ValidationIssue(
                field="expense_date",
                issue_type="missing",
                message="Voucher date is required",
                severity="error",
            ))

        return issues

    def _validate_semantic(
        self,
        draft: ExpenseDraft,
        today: date,
    ) -> list[ValidationIssue]:
        issues = []

        max_future_date = today + timedelta(days=self._settings.future_date_tolerance_days)
        if draft.expense_date and draft.expense_date > max_future_date:
            issues.append(ValidationIssue(
                field="expense_date",
                issue_type="future_date",
                message=f"Voucher date ({draft.expense_date}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        category = draft.resolved_category
        if category and not is_known_category(category):
            issues.append(ValidationIssue(
                field="category",
                issue_type="unknown_category",
                message=f"Category '{category}' is not one of the standard categories",
                severity="warning",
            ))

        return issues

    def validate(
        self,
        draft: ExpenseDraft,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """
        Run all checks on a submitted form.

        Args:
            draft: The submitted form values
            today: Reference date for the future-date check

        Returns:
            ValidationResult with all issues found
        """
        issues = self._validate_required(draft)
        issues.extend(self._validate_semantic(draft, today or date.today()))

        return ValidationResult(
            is_valid=not any(issue.severity == "error" for issue in issues),
            issues=issues,
            warnings=[issue.message for issue in issues if issue.severity == "warning"],
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []

        if result.has_errors:
            lines.append("Please fix the following before saving:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
