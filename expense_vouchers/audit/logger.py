"""
Audit Logger

DESIGN DECISION: Every write to the expense store is logged.
This provides:
1. Complete traceability of who created or changed which voucher
2. Debugging capability when voucher numbering falls back to the counter
3. An action log the UI can show

The audit logger:
- Is async so it can share the storage backend's event loop
- Gracefully handles failures (doesn't crash the app if logging fails)
"""

from typing import Optional

import structlog

from expense_vouchers.models.audit import AuditEvent, AuditEventBuilder
from expense_vouchers.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(ensure_ascii=False)
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit store (for persistence and the action log screen)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("expense_vouchers.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_expense_created(
        self,
        expense_id: str,
        expense_number: Optional[str],
        amount: str,
        actor: Optional[str] = None,
    ) -> None:
        await self.log(AuditEventBuilder.expense_created(
            expense_id=expense_id,
            expense_number=expense_number,
            amount=amount,
            actor=actor,
        ))

    async def log_expense_updated(
        self,
        expense_id: str,
        expense_number: Optional[str],
        changed_fields: list[str],
    ) -> None:
        await self.log(AuditEventBuilder.expense_updated(
            expense_id=expense_id,
            expense_number=expense_number,
            changed_fields=changed_fields,
        ))

    async def log_expense_deleted(
        self,
        expense_id: str,
        expense_number: Optional[str],
    ) -> None:
        await self.log(AuditEventBuilder.expense_deleted(
            expense_id=expense_id,
            expense_number=expense_number,
        ))

    async def log_save_failed(
        self,
        expense_id: str,
        operation: str,
        error_message: str,
    ) -> None:
        await self.log(AuditEventBuilder.save_failed(
            expense_id=expense_id,
            operation=operation,
            error_message=error_message,
        ))

    async def log_validation_failed(
        self,
        issues: list[dict],
        expense_id: Optional[str] = None,
    ) -> None:
        await self.log(AuditEventBuilder.validation_failed(
            issues=issues,
            expense_id=expense_id,
        ))

    async def log_voucher_number_allocated(
        self,
        expense_number: str,
        source: str,
    ) -> None:
        await self.log(AuditEventBuilder.voucher_number_allocated(
            expense_number=expense_number,
            source=source,
        ))

    async def log_counter_fallback(
        self,
        prefix: str,
        counter: int,
        reason: str,
    ) -> None:
        await self.log(AuditEventBuilder.counter_fallback_used(
            prefix=prefix,
            counter=counter,
            reason=reason,
        ))

    async def log_records_load_failed(self, error_message: str) -> None:
        await self.log(AuditEventBuilder.records_load_failed(error_message))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))
