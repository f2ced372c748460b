"""
Store Persistence

Wraps a StoreBackend with the load/save/reset contract the rest of the app
relies on:

- ``load`` always returns a usable Store. Backend failures degrade to a
  fresh default store plus a warning for the UI banner.
- ``save`` is best effort. Failures are logged and swallowed so the user
  keeps working in memory.
- ``reset`` clears persisted state before an imported backup replaces it.

The one-time upgrade from the legacy single-key blob also lives here: if
the blob exists and the upgrade has never run, it is migrated, written,
and marked so it is never processed again.
"""

import json
from typing import Optional

import structlog

from wealthflow.audit import AuditLogger
from wealthflow.ids import Clock, IdGenerator, iso_timestamp, new_id, utc_now
from wealthflow.migrations import create_default_store, detect_schema_version, migrate
from wealthflow.models.ledger import CURRENT_SCHEMA_VERSION, LoadResult, Store
from wealthflow.services.storage.interface import StoreBackend


FRESH_WORKSPACE_WARNING = (
    "We could not access local database storage. "
    "WealthFlow started with a fresh local workspace."
)


class StorePersistence:
    """
    Load/save/reset boundary between the ledger and a storage backend.

    Nothing raised by the backend escapes this class.
    """

    def __init__(
        self,
        backend: StoreBackend,
        new_id: IdGenerator = new_id,
        now: Clock = utc_now,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._backend = backend
        self._new_id = new_id
        self._now = now
        self._audit_logger = audit_logger
        self._logger = structlog.get_logger(__name__)

    @property
    def backend(self) -> StoreBackend:
        return self._backend

    def stamp(self, store: Store) -> Store:
        """Copy of ``store`` with ``updated_at`` set to now."""
        return store.model_copy(update={"updated_at": iso_timestamp(self._now)})

    async def _write(self, store: Store) -> Store:
        stamped = self.stamp(store)
        await self._backend.write_store(stamped.to_document())
        return stamped

    async def _upgrade_legacy_once(self) -> None:
        if await self._backend.legacy_migrated():
            return

        raw = await self._backend.read_legacy()
        if raw:
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError as e:
                # Unreadable legacy data is skipped; the marker is still set below
                if self._audit_logger:
                    self._audit_logger.log_legacy_upgraded(False, str(e))
            else:
                await self._write(migrate(parsed, new_id=self._new_id, now=self._now))
                if self._audit_logger:
                    self._audit_logger.log_legacy_upgraded(True)

        await self._backend.mark_legacy_migrated()

    async def load(self) -> LoadResult:
        """
        Load the store, upgrading legacy data and migrating old schemas.

        An empty backend is seeded with the default store. A document that
        is not already canonical is migrated and written back.
        """
        try:
            await self._upgrade_legacy_once()

            document = await self._backend.read_store()
            if document is None:
                store = await self._write(
                    create_default_store(new_id=self._new_id, now=self._now)
                )
                if self._audit_logger:
                    self._audit_logger.log_store_seeded()
                    self._audit_logger.log_store_loaded(0)
                return LoadResult(store=store)

            version = detect_schema_version(document)
            store = migrate(document, new_id=self._new_id, now=self._now)

            if version is not None and version < CURRENT_SCHEMA_VERSION and self._audit_logger:
                self._audit_logger.log_migration_applied(version, CURRENT_SCHEMA_VERSION)

            if store.to_document() != document:
                store = await self._write(store)

        except Exception as e:
            self._logger.error("store_load_failed", error=str(e))
            if self._audit_logger:
                self._audit_logger.log_backend_failed("load", str(e))
                self._audit_logger.log_store_loaded(0, FRESH_WORKSPACE_WARNING)
            return LoadResult(
                store=create_default_store(new_id=self._new_id, now=self._now),
                warning=FRESH_WORKSPACE_WARNING,
            )

        if self._audit_logger:
            self._audit_logger.log_store_loaded(len(store.transactions))
        return LoadResult(store=store)

    async def save(self, store: Store) -> Store:
        """
        Persist ``store`` with a fresh ``updated_at``.

        Returns the stamped store whether or not the write succeeded; a
        failed write is logged and otherwise ignored.
        """
        stamped = self.stamp(store)
        try:
            await self._backend.write_store(stamped.to_document())
        except Exception as e:
            self._logger.warning("store_save_failed", error=str(e))
            if self._audit_logger:
                self._audit_logger.log_backend_failed("save", str(e))
            return stamped

        if self._audit_logger:
            self._audit_logger.log_store_saved(stamped.updated_at)
        return stamped

    async def reset(self) -> None:
        """Clear persisted state. Failures are logged and ignored."""
        try:
            await self._backend.clear()
        except Exception as e:
            self._logger.warning("store_reset_failed", error=str(e))
            if self._audit_logger:
                self._audit_logger.log_backend_failed("reset", str(e))
            return

        if self._audit_logger:
            self._audit_logger.log_store_reset()
