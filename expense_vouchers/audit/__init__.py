"""Audit logging package."""

from expense_vouchers.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
