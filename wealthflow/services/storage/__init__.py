"""
Storage Services Package

Provides the abstract backend interface, concrete backends and the
load/save/reset persistence boundary.
"""

from wealthflow.services.storage.interface import (
    BackendUnavailableError,
    CorruptDocumentError,
    StorageError,
    StoreBackend,
)
from wealthflow.services.storage.json_file import JsonFileStoreBackend
from wealthflow.services.storage.memory import InMemoryStoreBackend
from wealthflow.services.storage.persistence import (
    FRESH_WORKSPACE_WARNING,
    StorePersistence,
)

__all__ = [
    # Interfaces
    "StoreBackend",
    # Exceptions
    "BackendUnavailableError",
    "CorruptDocumentError",
    "StorageError",
    # Implementations
    "InMemoryStoreBackend",
    "JsonFileStoreBackend",
    # Persistence boundary
    "FRESH_WORKSPACE_WARNING",
    "StorePersistence",
]
