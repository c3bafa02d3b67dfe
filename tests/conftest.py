"""Shared fixtures for the Ledgerbook tests."""

from datetime import datetime
from decimal import Decimal
from typing import Iterable

import pytest

from ledgerbook.models.entry import Entry, EntryKind
from ledgerbook.models.records import LoadResult
from ledgerbook.services.storage import (
    EntryStorageInterface,
    RecordIOError,
    RecordNotFoundError,
)


class InMemoryEntryStorage(EntryStorageInterface):
    """Storage double that keeps saved entries in a list."""

    def __init__(self, entries=None, fail_with: str = None):
        self.saved = None if entries is None else list(entries)
        self.fail_with = fail_with
        self.save_calls = 0

    @property
    def location(self) -> str:
        return "memory://ledger"

    def exists(self) -> bool:
        return self.saved is not None

    def load(self) -> LoadResult:
        if self.fail_with:
            raise RecordIOError(self.location, self.fail_with)
        if self.saved is None:
            raise RecordNotFoundError(self.location)
        return LoadResult(entries=list(self.saved), total_lines=len(self.saved))

    def save(self, entries: Iterable[Entry]) -> int:
        self.save_calls += 1
        if self.fail_with:
            raise RecordIOError(self.location, self.fail_with)
        self.saved = list(entries)
        return len(self.saved)


def make_entry(amount, day: str, category: str, kind: EntryKind) -> Entry:
    """Entry at noon on an ISO date."""
    return Entry(
        amount=Decimal(str(amount)),
        timestamp=datetime.fromisoformat(f"{day}T12:00:00"),
        category=category,
        kind=kind,
    )


@pytest.fixture
def income():
    return EntryKind.INCOME


@pytest.fixture
def expense():
    return EntryKind.EXPENSE


@pytest.fixture
def sample_entries():
    """The three-entry scenario: salary and food in January, food in February."""
    return [
        make_entry(100, "2023-01-15", "Salary", EntryKind.INCOME),
        make_entry(40, "2023-01-20", "Food", EntryKind.EXPENSE),
        make_entry(60, "2023-02-01", "Food", EntryKind.EXPENSE),
    ]
