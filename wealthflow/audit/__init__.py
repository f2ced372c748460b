"""Audit logging package."""

from wealthflow.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
