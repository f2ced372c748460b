"""
Audit Models for WealthFlow

Every load, save, migration, import and mutation produces an audit event.
This provides:
1. Traceability of what happened to the user's ledger
2. Debugging information when storage misbehaves
3. A way to explain why an import or edit was refused

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Grouped by the layer that emits them.
    """
    # Persistence
    STORE_LOADED = "store_loaded"
    STORE_SEEDED = "store_seeded"
    STORE_SAVED = "store_saved"
    STORE_RESET = "store_reset"
    LEGACY_UPGRADED = "legacy_upgraded"
    BACKEND_FAILED = "backend_failed"

    # Migration
    MIGRATION_APPLIED = "migration_applied"

    # Backup
    IMPORT_ACCEPTED = "import_accepted"
    IMPORT_REJECTED = "import_rejected"
    EXPORT_CREATED = "export_created"

    # User mutations
    MUTATION_APPLIED = "mutation_applied"
    MUTATION_REJECTED = "mutation_rejected"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


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
        default_factory=_utc_now,
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
        description="Type of entity (e.g., 'store', 'account', 'transaction')"
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
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
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
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.store_loaded(transaction_count=12)
        event = AuditEventBuilder.mutation_rejected("delete_account", "a1", [...])
    """

    @staticmethod
    def store_loaded(
        transaction_count: int,
        warning: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_LOADED,
            severity=AuditSeverity.WARNING if warning else AuditSeverity.INFO,
            entity_type="store",
            description="Store loaded",
            details={"transaction_count": transaction_count},
            error_message=warning,
        )

    @staticmethod
    def store_seeded() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_SEEDED,
            entity_type="store",
            description="Empty backend seeded with the default store",
        )

    @staticmethod
    def store_saved(updated_at: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_SAVED,
            severity=AuditSeverity.DEBUG,
            entity_type="store",
            description="Store saved",
            details={"updated_at": updated_at},
        )

    @staticmethod
    def store_reset() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_RESET,
            severity=AuditSeverity.WARNING,
            entity_type="store",
            description="Persisted store cleared",
            is_user_action=True,
        )

    @staticmethod
    def legacy_upgraded(success: bool, error: Optional[str] = None) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEGACY_UPGRADED,
            severity=AuditSeverity.INFO if success else AuditSeverity.WARNING,
            entity_type="store",
            description=(
                "Legacy store migrated into the current backend"
                if success else "Legacy store could not be parsed and was skipped"
            ),
            error_message=error,
        )

    @staticmethod
    def backend_failed(operation: str, error: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKEND_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="store",
            description=f"Storage backend failed during {operation}",
            details={"operation": operation},
            error_message=error,
        )

    @staticmethod
    def migration_applied(from_version: int, to_version: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MIGRATION_APPLIED,
            entity_type="store",
            description=f"Store migrated from v{from_version} to v{to_version}",
            details={"from_version": from_version, "to_version": to_version},
        )

    @staticmethod
    def import_accepted(transaction_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_ACCEPTED,
            entity_type="store",
            description="Backup imported and replaced local data",
            details={"transaction_count": transaction_count},
            is_user_action=True,
        )

    @staticmethod
    def import_rejected(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="store",
            description="Backup import rejected",
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def export_created(filename: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_CREATED,
            entity_type="store",
            description=f"Backup exported: {filename}",
            details={"filename": filename},
            is_user_action=True,
        )

    @staticmethod
    def mutation_applied(operation: str, entity_id: Optional[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MUTATION_APPLIED,
            entity_id=entity_id,
            description=f"{operation} applied",
            details={"operation": operation},
            is_user_action=True,
        )

    @staticmethod
    def mutation_rejected(
        operation: str,
        entity_id: Optional[str],
        issues: list[dict],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MUTATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_id=entity_id,
            description=f"{operation} rejected",
            details={"operation": operation, "issues": issues},
            is_user_action=True,
        )
