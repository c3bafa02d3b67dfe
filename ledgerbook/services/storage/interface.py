"""
Abstract Storage Interface

DESIGN DECISION: The ledger talks to an abstract storage interface, not to
a file. This allows us to:
1. Keep the aggregation engine free of path handling
2. Use in-memory storage for testing
3. Swap the flat file for something else later

The interface is intentionally tiny: the ledger is loaded whole at startup
and written whole on save.
"""

from abc import ABC, abstractmethod
from typing import Iterable

from ledgerbook.models.entry import Entry
from ledgerbook.models.records import LoadResult


class EntryStorageInterface(ABC):
    """
    Abstract interface for ledger persistence.

    Any storage implementation (flat file, database, etc.)
    must implement these methods.
    """

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable description of where the entries live."""
        pass

    @abstractmethod
    def exists(self) -> bool:
        """True if something has been persisted at this location."""
        pass

    @abstractmethod
    def load(self) -> LoadResult:
        """
        Read every persisted entry.

        Returns:
            LoadResult with the readable entries and a diagnostic per bad row

        Raises:
            RecordNotFoundError: If nothing has been persisted yet
            RecordIOError: If the storage exists but cannot be read
        """
        pass

    @abstractmethod
    def save(self, entries: Iterable[Entry]) -> int:
        """
        Replace the persisted entries with the given ones.

        Args:
            entries: Entries in the order they should be stored

        Returns:
            Number of entries written

        Raises:
            RecordIOError: If the write fails at any point
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class RecordNotFoundError(StorageError):
    """Nothing has been persisted at the requested location."""

    def __init__(self, location: str):
        self.location = location
        super().__init__(f"Ledger file not found: {location}")


class RecordIOError(StorageError):
    """The ledger file could not be opened, read or written."""

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"I/O error on {location}: {reason}")


class RowParseError(StorageError):
    """
    A single record row could not be parsed.

    Raised and caught inside the codec only; callers see the
    corresponding RowDiagnostic instead.
    """
    pass
