"""
In-Memory Storage Backend

Keeps the store document in a dict. Used by tests and by callers that do
not want anything written to disk.
"""

import copy
from typing import Optional

from wealthflow.services.storage.interface import BackendUnavailableError, StoreBackend


class InMemoryStoreBackend(StoreBackend):
    """
    Dict-backed StoreBackend.

    Set ``fail = True`` to make every operation raise
    BackendUnavailableError, simulating blocked storage.
    """

    def __init__(
        self,
        document: Optional[dict] = None,
        legacy_blob: Optional[str] = None,
        legacy_migrated: bool = False,
    ):
        self._document = copy.deepcopy(document)
        self._legacy_blob = legacy_blob
        self._legacy_migrated = legacy_migrated
        self.fail = False
        self.write_count = 0

    def _check(self) -> None:
        if self.fail:
            raise BackendUnavailableError("In-memory backend is set to fail")

    @property
    def document(self) -> Optional[dict]:
        return copy.deepcopy(self._document)

    async def read_store(self) -> Optional[dict]:
        self._check()
        return copy.deepcopy(self._document)

    async def write_store(self, document: dict) -> None:
        self._check()
        self._document = copy.deepcopy(document)
        self.write_count += 1

    async def clear(self) -> None:
        self._check()
        self._document = None

    async def read_legacy(self) -> Optional[str]:
        self._check()
        return self._legacy_blob

    async def legacy_migrated(self) -> bool:
        self._check()
        return self._legacy_migrated

    async def mark_legacy_migrated(self) -> None:
        self._check()
        self._legacy_migrated = True
