"""
Storage Services Package

Provides the abstract storage interface and the flat-file implementation
used to persist the ledger between sessions.
"""

from ledgerbook.services.storage.interface import (
    EntryStorageInterface,
    RecordIOError,
    RecordNotFoundError,
    RowParseError,
    StorageError,
)
from ledgerbook.services.storage.csv_codec import (
    HEADER,
    CsvEntryCodec,
    CsvFileEntryStorage,
)

__all__ = [
    # Interfaces
    "EntryStorageInterface",
    # Exceptions
    "RecordIOError",
    "RecordNotFoundError",
    "RowParseError",
    "StorageError",
    # Flat-file implementation
    "HEADER",
    "CsvEntryCodec",
    "CsvFileEntryStorage",
]
