"""
Audit Models for Expense Vouchers

Every write to the expense store, and every time voucher numbering has
to fall back to the local counter, is logged for audit purposes.

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Expense lifecycle
    EXPENSE_CREATED = "expense_created"
    EXPENSE_UPDATED = "expense_updated"
    EXPENSE_DELETED = "expense_deleted"
    SAVE_FAILED = "save_failed"
    VALIDATION_FAILED = "validation_failed"

    # Voucher numbering
    VOUCHER_NUMBER_ALLOCATED = "voucher_number_allocated"
    COUNTER_FALLBACK_USED = "counter_fallback_used"

    # Storage and system events
    RECORDS_LOAD_FAILED = "records_load_failed"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'voucher_number')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    # User action tracking
    actor: Optional[str] = Field(
        default=None,
        description="Who triggered the event (createdBy of the expense)"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "actor": self.actor,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_created(expense_id, number, amount)
        event = AuditEventBuilder.counter_fallback_used(prefix, counter, reason)
    """

    @staticmethod
    def expense_created(
        expense_id: str,
        expense_number: Optional[str],
        amount: str,
        actor: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_CREATED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense created: {expense_number} - {amount}",
            details={
                "expense_number": expense_number,
                "amount": amount,
            },
            actor=actor,
        )

    @staticmethod
    def expense_updated(
        expense_id: str,
        expense_number: Optional[str],
        changed_fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_UPDATED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense updated: {expense_number}",
            details={
                "expense_number": expense_number,
                "changed_fields": changed_fields,
            },
        )

    @staticmethod
    def expense_deleted(
        expense_id: str,
        expense_number: Optional[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense deleted: {expense_number}",
            details={
                "expense_number": expense_number,
            },
        )

    @staticmethod
    def save_failed(
        expense_id: str,
        operation: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense {operation} failed",
            details={
                "operation": operation,
            },
            error_message=error_message,
        )

    @staticmethod
    def validation_failed(
        issues: list[dict],
        expense_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            entity_id=expense_id,
            description=f"Expense form rejected with {len(issues)} issues",
            details={
                "issues": issues,
            },
        )

    @staticmethod
    def voucher_number_allocated(
        expense_number: str,
        source: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VOUCHER_NUMBER_ALLOCATED,
            entity_type="voucher_number",
            entity_id=expense_number,
            description=f"Voucher number allocated: {expense_number}",
            details={
                "source": source,
            },
        )

    @staticmethod
    def counter_fallback_used(
        prefix: str,
        counter: int,
        reason: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COUNTER_FALLBACK_USED,
            severity=AuditSeverity.WARNING,
            entity_type="voucher_number",
            description=f"Record store unavailable, used local counter for {prefix}",
            details={
                "prefix": prefix,
                "counter": counter,
            },
            error_message=reason,
        )

    @staticmethod
    def records_load_failed(
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORDS_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="expense",
            description="Could not load expense records",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
