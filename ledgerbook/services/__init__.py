"""Services package."""

from ledgerbook.services.storage import (
    CsvEntryCodec,
    CsvFileEntryStorage,
    EntryStorageInterface,
    RecordIOError,
    RecordNotFoundError,
    RowParseError,
    StorageError,
)

__all__ = [
    # Storage services
    "CsvEntryCodec",
    "CsvFileEntryStorage",
    "EntryStorageInterface",
    "RecordIOError",
    "RecordNotFoundError",
    "RowParseError",
    "StorageError",
]
