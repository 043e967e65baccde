"""
History Ledger Port

Architectural Intent:
- Port interface for the append-only promotion history
- Only the append/query contract matters to the engine; storage belongs to
  the repository implementation
"""

from abc import ABC, abstractmethod
from typing import Optional

from kubepromote.domain.entities.history_entry import HistoryEntry


class HistoryLedgerPort(ABC):
    """
    Port interface for recording and querying promoted versions.
    """

    @abstractmethod
    def append(self, namespace: str, version: str, label: str) -> HistoryEntry:
        """
        Records a promoted version. Duplicates are legal.
        Raises PersistenceError on write failure.
        """
        pass

    @abstractmethod
    def find_previous(
        self, namespace: str, current_version: str, label: str
    ) -> Optional[str]:
        """
        Returns the version recorded before the most recent entry for
        ``current_version`` in the same (namespace, label), or None.
        """
        pass

    @abstractmethod
    def entries(
        self, namespace: str, label: str, limit: int = 20
    ) -> list[HistoryEntry]:
        """
        Returns the most recent entries for (namespace, label), newest first.
        """
        pass

    @abstractmethod
    def verify_schema(self) -> None:
        """
        Raises PersistenceError if the ledger storage is missing or incomplete.
        """
        pass
