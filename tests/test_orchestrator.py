"""Tests for the ledger session."""

import asyncio

from wealthflow.audit import AuditLogger
from wealthflow.config import Settings, StorageSettings
from wealthflow.ids import SequentialIds
from wealthflow.models.audit import AuditEventType
from wealthflow.models.ledger import TransactionType
from wealthflow.orchestrator import LedgerSession, create_app_components
from wealthflow.services.backup import export_json
from wealthflow.services.storage import (
    FRESH_WORKSPACE_WARNING,
    InMemoryStoreBackend,
    JsonFileStoreBackend,
    StorePersistence,
)
from wealthflow.validation import TransactionDraft


def _session(backend, fixed_now, audit=None):
    persistence = StorePersistence(
        backend, new_id=SequentialIds(), now=fixed_now, audit_logger=audit
    )
    return LedgerSession(
        persistence,
        settings=Settings(),
        audit_logger=audit,
        new_id=SequentialIds("new"),
        now=fixed_now,
    )


class TestSessionLifecycle:
    """Tests for loading and saving through the session."""

    def test_load_existing_store(self, sample_store, fixed_now):
        """Test the session adopts the persisted store."""
        backend = InMemoryStoreBackend(sample_store.to_document(), legacy_migrated=True)
        session = _session(backend, fixed_now)
        store = asyncio.run(session.load())

        assert store == sample_store
        assert session.warning is None

    def test_load_failure_sets_warning(self, fixed_now):
        """Test blocked storage surfaces the banner text."""
        backend = InMemoryStoreBackend()
        backend.fail = True
        session = _session(backend, fixed_now)
        asyncio.run(session.load())

        assert session.warning == FRESH_WORKSPACE_WARNING
        assert len(session.store.accounts) == 2

    def test_mutation_is_persisted(self, sample_store, fixed_now):
        """Test successful mutations replace the store and save it."""
        backend = InMemoryStoreBackend(sample_store.to_document(), legacy_migrated=True)
        audit = AuditLogger()
        session = _session(backend, fixed_now, audit)
        asyncio.run(session.load())

        result = asyncio.run(session.add_account("Brokerage"))

        assert result.ok
        assert session.store.account_name("new-1") == "Brokerage"
        assert backend.document["accounts"][-1]["name"] == "Brokerage"
        assert session.store.updated_at == "2024-05-15T12:00:00.000Z"
        assert audit.recent_events()[0].event_type == AuditEventType.MUTATION_APPLIED

    def test_refused_mutation_changes_nothing(self, sample_store, fixed_now):
        """Test refusals keep the store and skip the write."""
        backend = InMemoryStoreBackend(sample_store.to_document(), legacy_migrated=True)
        audit = AuditLogger()
        session = _session(backend, fixed_now, audit)
        asyncio.run(session.load())

        result = asyncio.run(session.delete_account("a1"))

        assert not result.ok
        assert session.store == sample_store
        assert backend.write_count == 0
        assert audit.recent_events()[0].event_type == AuditEventType.MUTATION_REJECTED

    def test_save_transaction_updates_views(self, sample_store, fixed_now):
        """Test derived views follow the new store."""
        backend = InMemoryStoreBackend(sample_store.to_document(), legacy_migrated=True)
        session = _session(backend, fixed_now)
        asyncio.run(session.load())

        draft = TransactionDraft(
            date="2024-05-14", amount="100", type=TransactionType.EXPENSE,
            account_id="a2", category_id="c-dining", vendor="Bistro",
        )
        asyncio.run(session.save_transaction(draft))

        assert session.balances()["a2"] == 200
        assert session.month_summary("2024-05").expense == 165
        assert session.suggestions("bis")[0].vendor == "Bistro"
        assert session.budget_progress()[0].spent == 125
        assert "Bistro" in [v.name for v in session.vendor_spend()]
        assert session.top_categories("2024-05")[0].name == "Dining"
        assert session.available_months() == ["2024-05", "2024-04"]
        assert "Savings" in session.flow_graph().node_names()


class TestSessionBackup:
    """Tests for import and export through the session."""

    def test_export(self, sample_store, fixed_now):
        """Test export returns a dated filename and the JSON text."""
        backend = InMemoryStoreBackend(sample_store.to_document(), legacy_migrated=True)
        session = _session(backend, fixed_now)
        asyncio.run(session.load())

        filename, text = session.export_backup()
        assert filename == "wealthflow-backup-2024-05-15.json"
        assert text == export_json(sample_store, now=fixed_now)

    def test_import_replaces_store(self, sample_store, fixed_now):
        """Test an accepted import replaces local data."""
        backend = InMemoryStoreBackend(legacy_migrated=True)
        audit = AuditLogger()
        session = _session(backend, fixed_now, audit)
        asyncio.run(session.load())

        result = asyncio.run(session.import_backup(export_json(sample_store, now=fixed_now)))

        assert result.ok
        assert session.store.accounts == sample_store.accounts
        assert backend.document["transactions"] == sample_store.to_document()["transactions"]
        assert audit.recent_events()[0].event_type == AuditEventType.IMPORT_ACCEPTED

    def test_rejected_import_keeps_store(self, sample_store, fixed_now):
        """Test a bad file leaves everything as it was."""
        backend = InMemoryStoreBackend(sample_store.to_document(), legacy_migrated=True)
        session = _session(backend, fixed_now)
        asyncio.run(session.load())

        result = asyncio.run(session.import_backup("not json"))

        assert not result.ok
        assert session.store == sample_store
        assert backend.document == sample_store.to_document()


class TestAppComponents:
    """Tests for the component factory."""

    def test_wires_json_backend(self, tmp_path):
        """Test the factory builds a session over the data directory."""

        class _Settings(Settings):
            @property
            def storage(self) -> StorageSettings:
                return StorageSettings(data_dir=tmp_path)

        session = create_app_components(_Settings())
        store = asyncio.run(session.load())

        assert isinstance(session._persistence.backend, JsonFileStoreBackend)
        assert (tmp_path / "store.json").exists()
        assert len(store.accounts) == 2
