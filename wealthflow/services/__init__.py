"""Services package."""

from wealthflow.services.backup import (
    backup_filename,
    export_json,
    export_payload,
    parse_backup,
)
from wealthflow.services.storage import (
    FRESH_WORKSPACE_WARNING,
    BackendUnavailableError,
    CorruptDocumentError,
    InMemoryStoreBackend,
    JsonFileStoreBackend,
    StorageError,
    StoreBackend,
    StorePersistence,
)

__all__ = [
    # Backup
    "backup_filename",
    "export_json",
    "export_payload",
    "parse_backup",
    # Storage
    "FRESH_WORKSPACE_WARNING",
    "BackendUnavailableError",
    "CorruptDocumentError",
    "InMemoryStoreBackend",
    "JsonFileStoreBackend",
    "StorageError",
    "StoreBackend",
    "StorePersistence",
]
