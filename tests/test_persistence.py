"""Tests for storage backends and the persistence boundary."""

import asyncio
import json

import pytest

from wealthflow.audit import AuditLogger
from wealthflow.config import StorageSettings
from wealthflow.ids import SequentialIds
from wealthflow.models.audit import AuditEventType
from wealthflow.services.storage import (
    FRESH_WORKSPACE_WARNING,
    CorruptDocumentError,
    InMemoryStoreBackend,
    JsonFileStoreBackend,
    StorePersistence,
)


LEGACY_BLOB = json.dumps({
    "accounts": [{"id": "a1", "name": "Checking"}],
    "budgets": [],
    "transactions": [
        {"id": "t1", "type": "expense", "date": "2024-01-03", "amount": 12,
         "accountId": "a1", "category": "Coffee"},
    ],
})


def _event_types(audit_logger):
    return [event.event_type for event in audit_logger.recent_events()]


class TestStorePersistenceLoad:
    """Tests for StorePersistence.load."""

    def test_empty_backend_is_seeded(self, fixed_now):
        """Test first run writes the default store."""
        backend = InMemoryStoreBackend(legacy_migrated=True)
        audit = AuditLogger()
        persistence = StorePersistence(
            backend, new_id=SequentialIds(), now=fixed_now, audit_logger=audit
        )

        result = asyncio.run(persistence.load())

        assert result.warning is None
        assert [a.name for a in result.store.accounts] == ["Main Checking", "Credit Card"]
        assert backend.document == result.store.to_document()
        assert AuditEventType.STORE_SEEDED in _event_types(audit)

    def test_current_store_is_not_rewritten(self, sample_store):
        """Test a canonical document loads without a write."""
        backend = InMemoryStoreBackend(sample_store.to_document(), legacy_migrated=True)
        result = asyncio.run(StorePersistence(backend).load())

        assert result.store == sample_store
        assert backend.write_count == 0

    def test_legacy_document_is_migrated_and_written_back(self, fixed_now):
        """Test an old-schema document is upgraded in place."""
        backend = InMemoryStoreBackend(json.loads(LEGACY_BLOB), legacy_migrated=True)
        audit = AuditLogger()
        result = asyncio.run(
            StorePersistence(backend, now=fixed_now, audit_logger=audit).load()
        )

        assert [c.name for c in result.store.categories] == ["Coffee"]
        assert backend.document["schemaVersion"] == 2
        assert AuditEventType.MIGRATION_APPLIED in _event_types(audit)

    def test_legacy_blob_upgraded_once(self, fixed_now):
        """Test the legacy blob is migrated and the marker set."""
        backend = InMemoryStoreBackend(legacy_blob=LEGACY_BLOB)
        persistence = StorePersistence(backend, now=fixed_now)

        result = asyncio.run(persistence.load())
        assert [tx.id for tx in result.store.transactions] == ["t1"]
        assert asyncio.run(backend.legacy_migrated()) is True

        # A later reset must not resurrect the legacy data
        asyncio.run(persistence.reset())
        reloaded = asyncio.run(persistence.load())
        assert reloaded.store.transactions == []

    def test_unreadable_legacy_blob_is_skipped(self):
        """Test a corrupt legacy blob is ignored but still marked."""
        backend = InMemoryStoreBackend(legacy_blob="{not json")
        result = asyncio.run(StorePersistence(backend).load())

        assert result.warning is None
        assert result.store.transactions == []
        assert asyncio.run(backend.legacy_migrated()) is True

    def test_backend_failure_falls_back(self):
        """Test blocked storage degrades to a default store and warning."""
        backend = InMemoryStoreBackend()
        backend.fail = True
        audit = AuditLogger()
        result = asyncio.run(StorePersistence(backend, audit_logger=audit).load())

        assert result.warning == FRESH_WORKSPACE_WARNING
        assert len(result.store.accounts) == 2
        assert AuditEventType.BACKEND_FAILED in _event_types(audit)


class TestStorePersistenceWrites:
    """Tests for save and reset."""

    def test_save_stamps_updated_at(self, sample_store, fixed_now):
        """Test every write refreshes updatedAt."""
        backend = InMemoryStoreBackend(legacy_migrated=True)
        saved = asyncio.run(StorePersistence(backend, now=fixed_now).save(sample_store))

        assert saved.updated_at == "2024-05-15T12:00:00.000Z"
        assert backend.document["updatedAt"] == saved.updated_at

    def test_save_failure_is_swallowed(self, sample_store):
        """Test a failed save does not raise."""
        backend = InMemoryStoreBackend()
        backend.fail = True
        audit = AuditLogger()
        saved = asyncio.run(StorePersistence(backend, audit_logger=audit).save(sample_store))

        assert saved.accounts == sample_store.accounts
        assert _event_types(audit)[0] == AuditEventType.BACKEND_FAILED

    def test_reset_clears(self, sample_store):
        """Test reset removes the persisted document."""
        backend = InMemoryStoreBackend(sample_store.to_document())
        asyncio.run(StorePersistence(backend).reset())
        assert backend.document is None


class TestJsonFileStoreBackend:
    """Tests for the local JSON file backend."""

    def _backend(self, tmp_path):
        return JsonFileStoreBackend(StorageSettings(data_dir=tmp_path / "data"))

    def test_missing_store_reads_none(self, tmp_path):
        """Test a fresh directory has nothing stored."""
        backend = self._backend(tmp_path)
        assert asyncio.run(backend.read_store()) is None
        assert asyncio.run(backend.read_legacy()) is None
        assert asyncio.run(backend.legacy_migrated()) is False

    def test_write_then_read(self, tmp_path, sample_store):
        """Test documents persist to disk."""
        backend = self._backend(tmp_path)
        asyncio.run(backend.write_store(sample_store.to_document()))

        assert backend.store_path.exists()
        assert asyncio.run(backend.read_store()) == sample_store.to_document()
        assert not list(backend.data_dir.glob("*.tmp"))

    def test_clear_and_marker(self, tmp_path, sample_store):
        """Test clear removes the store and the marker persists."""
        backend = self._backend(tmp_path)
        asyncio.run(backend.write_store(sample_store.to_document()))
        asyncio.run(backend.clear())
        asyncio.run(backend.mark_legacy_migrated())

        assert asyncio.run(backend.read_store()) is None
        assert asyncio.run(backend.legacy_migrated()) is True

    def test_corrupt_store_raises(self, tmp_path):
        """Test invalid JSON is reported as corrupt."""
        backend = self._backend(tmp_path)
        backend.data_dir.mkdir(parents=True)
        backend.store_path.write_text("{oops", encoding="utf-8")

        with pytest.raises(CorruptDocumentError):
            asyncio.run(backend.read_store())

    def test_corrupt_store_loads_fresh_workspace(self, tmp_path):
        """Test persistence degrades when the file cannot be decoded."""
        backend = self._backend(tmp_path)
        backend.data_dir.mkdir(parents=True)
        backend.store_path.write_text("[]", encoding="utf-8")

        result = asyncio.run(StorePersistence(backend).load())
        assert result.warning == FRESH_WORKSPACE_WARNING

    def test_legacy_file_is_upgraded(self, tmp_path):
        """Test the legacy file feeds the first load."""
        backend = self._backend(tmp_path)
        backend.data_dir.mkdir(parents=True)
        backend.legacy_path.write_text(LEGACY_BLOB, encoding="utf-8")

        result = asyncio.run(StorePersistence(backend).load())
        assert [c.name for c in result.store.categories] == ["Coffee"]
        assert backend.marker_path.exists()
        assert json.loads(backend.store_path.read_text(encoding="utf-8"))["schemaVersion"] == 2
