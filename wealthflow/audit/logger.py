"""
Audit Logger

DESIGN DECISION: Every load, save, import and mutation is logged.
This provides:
1. Traceability of changes to the ledger
2. Debugging capability when the storage backend misbehaves
3. A recent-history view the settings panel can show

The audit logger:
- Never raises (a logging failure must not break a save)
- Keeps a bounded in-memory trail alongside the structured log
"""

from collections import deque
from typing import Optional

import structlog

from wealthflow.models.audit import AuditEvent, AuditEventBuilder


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
        structlog.processors.JSONRenderer()
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
    2. An in-memory trail (for the UI's recent activity view)
    """

    def __init__(self, max_events: int = 500):
        self._events: deque[AuditEvent] = deque(maxlen=max_events)
        self._logger = structlog.get_logger("wealthflow.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event locally and append it to the trail."""
        self._events.append(event)

        log_dict = event.to_log_dict()
        try:
            if event.severity.value == "error":
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # The trail already has the event; a broken log handler is not fatal
            self._events.append(
                AuditEventBuilder.backend_failed("audit_log", str(e))
            )

    def recent_events(self, limit: int = 50) -> list[AuditEvent]:
        """Most recent events, newest first."""
        return list(reversed(self._events))[:limit]

    def log_store_loaded(
        self,
        transaction_count: int,
        warning: Optional[str] = None,
    ) -> None:
        self.log(AuditEventBuilder.store_loaded(transaction_count, warning))

    def log_store_seeded(self) -> None:
        self.log(AuditEventBuilder.store_seeded())

    def log_store_saved(self, updated_at: str) -> None:
        self.log(AuditEventBuilder.store_saved(updated_at))

    def log_store_reset(self) -> None:
        self.log(AuditEventBuilder.store_reset())

    def log_legacy_upgraded(self, success: bool, error: Optional[str] = None) -> None:
        self.log(AuditEventBuilder.legacy_upgraded(success, error))

    def log_backend_failed(self, operation: str, error: str) -> None:
        self.log(AuditEventBuilder.backend_failed(operation, error))

    def log_migration_applied(self, from_version: int, to_version: int) -> None:
        self.log(AuditEventBuilder.migration_applied(from_version, to_version))

    def log_import_accepted(self, transaction_count: int) -> None:
        self.log(AuditEventBuilder.import_accepted(transaction_count))

    def log_import_rejected(self, reason: str) -> None:
        self.log(AuditEventBuilder.import_rejected(reason))

    def log_export_created(self, filename: str) -> None:
        self.log(AuditEventBuilder.export_created(filename))

    def log_mutation(
        self,
        operation: str,
        entity_id: Optional[str],
        issues: Optional[list[dict]] = None,
    ) -> None:
        """Log a mutation as applied, or as rejected when issues are given."""
        if issues:
            self.log(AuditEventBuilder.mutation_rejected(operation, entity_id, issues))
        else:
            self.log(AuditEventBuilder.mutation_applied(operation, entity_id))
