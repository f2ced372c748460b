"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the persistence
backend. This allows us to:
1. Keep the ledger core free of any I/O
2. Use in-memory storage for testing
3. Swap the local JSON files for another local store later

The interface is intentionally small: the whole store is read and
replaced as one document. There is a single writer, so no locking.
"""

from abc import ABC, abstractmethod
from typing import Optional


class StoreBackend(ABC):
    """
    Abstract interface for store persistence.

    Implementations raise StorageError (or a subclass) on failure. They do
    NOT migrate or validate; StorePersistence does that.
    """

    @abstractmethod
    async def read_store(self) -> Optional[dict]:
        """
        Read the persisted store document.

        Returns:
            The raw document, or None if nothing has been saved yet

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def write_store(self, document: dict) -> None:
        """
        Replace the persisted store document atomically.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove the persisted store document."""
        pass

    @abstractmethod
    async def read_legacy(self) -> Optional[str]:
        """
        Read the raw legacy single-key blob, if one exists.

        Returns:
            The blob's text, or None when there is no legacy data
        """
        pass

    @abstractmethod
    async def legacy_migrated(self) -> bool:
        """Has the one-time legacy upgrade already run?"""
        pass

    @abstractmethod
    async def mark_legacy_migrated(self) -> None:
        """Record that the legacy upgrade has run so it never runs again."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class BackendUnavailableError(StorageError):
    """The storage backend could not be reached or opened."""
    pass


class CorruptDocumentError(StorageError):
    """The persisted document exists but cannot be decoded."""
    pass
