"""
Ledger Aggregation Engine

DESIGN DECISION: Month-scoped reads are cached, everything else is not.

Monthly summaries are what the UI asks for over and over, so the ledger
keeps a per-month cache of entry subsets and summaries. add_entry marks
only the entry's own month stale; the next read of that month recomputes
it from a scan of all entries and stores it again. Months nobody writes
to keep their cached values, and months nobody reads are never
recomputed.

Filters (by category, kind, date range, amount range) and the
whole-ledger totals are plain linear scans. Caching them would add a
second invalidation surface for no measurable gain.

GUARANTEES:
- Every month-scoped read reflects every entry added before it
- net_amount always equals total_income - total_expenses
- Callers only ever receive copies of cached data
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Iterator, Optional, Union
from uuid import UUID

import structlog

from ledgerbook.audit import AuditLogger, create_correlation_id
from ledgerbook.config import get_settings
from ledgerbook.ledger.cache import MonthlyCache
from ledgerbook.models.entry import Entry, EntryKind, MonthlySummary
from ledgerbook.models.records import LoadResult
from ledgerbook.services.storage import (
    EntryStorageInterface,
    RecordIOError,
    RecordNotFoundError,
    StorageError,
)
from ledgerbook.validation import (
    InvalidYearMonthError,
    normalize_to_day,
    validate_year_month,
)

logger = structlog.get_logger(__name__)

DateLike = Union[date, datetime]


class Ledger:
    """
    Owns the ordered entry collection and its monthly cache.

    Single-threaded by contract: an embedding application that shares a
    Ledger between threads must serialise every call itself.
    """

    def __init__(
        self,
        storage: Optional[EntryStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        min_year: Optional[int] = None,
        max_year: Optional[int] = None,
    ):
        """
        Initialize an empty ledger.

        Args:
            storage: Where load() and save() read and write entries.
                    If None, the ledger is memory-only.
            audit_logger: Receives an event for every mutation and file
                    operation. If None, only module logging happens.
            min_year: Oldest year accepted by month queries
                    (defaults to settings).
            max_year: Newest year accepted by month queries
                    (defaults to settings).
        """
        if min_year is None or max_year is None:
            ledger_settings = get_settings().ledger
            min_year = ledger_settings.min_year if min_year is None else min_year
            max_year = ledger_settings.max_year if max_year is None else max_year
        if min_year > max_year:
            raise ValueError("min_year cannot be greater than max_year")

        self._storage = storage
        self._audit_logger = audit_logger
        self._min_year = min_year
        self._max_year = max_year
        self._entries: list[Entry] = []
        self._cache = MonthlyCache()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_entry(self, entry: Entry) -> None:
        """
        Append an entry and mark its month stale.

        Other months' cached values are left untouched.
        """
        if not isinstance(entry, Entry):
            raise TypeError(f"Expected Entry, got {type(entry).__name__}")

        month_key = entry.month_key
        self._entries.append(entry)
        self._cache.mark_dirty(month_key)

        if self._audit_logger:
            self._audit_logger.log_entry_added(
                month_key=month_key,
                category=entry.category,
                kind=entry.kind.value,
                amount=str(entry.amount),
            )

    def add_entries(self, entries: Iterable[Entry]) -> int:
        """Add entries one by one; returns how many were added."""
        count = 0
        for entry in entries:
            self.add_entry(entry)
            count += 1
        return count

    def invalidate(self, year_month: Optional[str] = None) -> list[str]:
        """
        Mark one month, or every cached month, stale.

        Needed only when a caller changes an entry that is already in
        the ledger; add_entry invalidates on its own.
        """
        if year_month is None:
            months = self._cache.mark_all_dirty()
        else:
            months = [self._validated(year_month, "invalidate")]
            self._cache.mark_dirty(months[0])

        if self._audit_logger:
            self._audit_logger.log_cache_invalidated(months=months)
        return months

    # ------------------------------------------------------------------
    # Point queries (uncached linear scans)
    # ------------------------------------------------------------------

    def all_entries(self) -> tuple[Entry, ...]:
        """Snapshot of all entries in insertion order."""
        return tuple(self._entries)

    def entries_by_category(self, category: str) -> list[Entry]:
        return [e for e in self._entries if e.category == category]

    def entries_by_kind(self, kind: Union[EntryKind, str]) -> list[Entry]:
        kind = EntryKind(kind)
        return [e for e in self._entries if e.kind is kind]

    def entries_by_date_range(self, start: DateLike, end: DateLike) -> list[Entry]:
        """
        Entries whose calendar day lies in [start, end].

        Both bounds are inclusive and compared by day, so the time of
        day of either the bounds or the entries does not matter.
        """
        start_day = normalize_to_day(start)
        end_day = normalize_to_day(end)
        return [e for e in self._entries if start_day <= e.day <= end_day]

    def entries_by_amount_range(
        self,
        minimum: Union[Decimal, int, str],
        maximum: Union[Decimal, int, str],
    ) -> list[Entry]:
        """Entries with minimum <= amount <= maximum."""
        low = Decimal(str(minimum))
        high = Decimal(str(maximum))
        return [e for e in self._entries if low <= e.amount <= high]

    # ------------------------------------------------------------------
    # Month-scoped queries (cached)
    # ------------------------------------------------------------------

    def entries_by_month(self, year_month: str) -> list[Entry]:
        """
        Entries whose month key equals year_month, in insertion order.

        Raises:
            InvalidYearMonthError: If year_month is not a valid YYYY-MM key
        """
        month_key = self._validated(year_month, "entries_by_month")
        return self._month_entries(month_key)

    def monthly_summary(self, year_month: str) -> MonthlySummary:
        """
        Income, expense and net totals for one month.

        A month without entries yields a zero summary.

        Raises:
            InvalidYearMonthError: If year_month is not a valid YYYY-MM key
        """
        month_key = self._validated(year_month, "monthly_summary")

        cached = self._cache.get_summary(month_key)
        if cached is not None:
            return cached

        logger.debug("cache_miss", month=month_key, value="summary")
        summary = MonthlySummary.from_entries(self._month_entries(month_key))
        self._cache.store_summary(month_key, summary)
        return summary

    summary_of = monthly_summary

    def all_monthly_summaries(self) -> dict[str, MonthlySummary]:
        """
        Summary for every month that has at least one entry.

        Computed in a single pass over all entries, so it always reflects
        the current collection. The pass also refreshes the cache for
        every month it sees and empties cached months it no longer sees.
        """
        grouped: dict[str, list[Entry]] = {}
        for entry in self._entries:
            grouped.setdefault(entry.month_key, []).append(entry)

        summaries = {}
        for month_key in sorted(grouped):
            month_entries = grouped[month_key]
            summary = MonthlySummary.from_entries(month_entries)
            self._cache.store_entries(month_key, month_entries)
            self._cache.store_summary(month_key, summary)
            summaries[month_key] = summary

        # A month can lose all its entries when a stored entry's timestamp
        # is reassigned; its cached values must not outlive this pass.
        for month_key in self._cache.cached_months:
            if month_key not in grouped:
                self._cache.store_entries(month_key, [])
                self._cache.store_summary(month_key, MonthlySummary.empty())
        return summaries

    def _month_entries(self, month_key: str) -> list[Entry]:
        cached = self._cache.get_entries(month_key)
        if cached is not None:
            return cached

        logger.debug("cache_miss", month=month_key, value="entries")
        month_entries = [e for e in self._entries if e.month_key == month_key]
        self._cache.store_entries(month_key, month_entries)
        return list(month_entries)

    def _validated(self, year_month: str, operation: str) -> str:
        try:
            return validate_year_month(year_month, self._min_year, self._max_year)
        except InvalidYearMonthError as e:
            if self._audit_logger:
                self._audit_logger.log_invalid_query(
                    operation=operation,
                    value=str(year_month),
                    reason=e.reason,
                )
            raise

    # ------------------------------------------------------------------
    # Whole-ledger totals (uncached)
    # ------------------------------------------------------------------

    def _total(self, kind: EntryKind) -> Decimal:
        return sum((e.amount for e in self._entries if e.kind is kind), Decimal("0"))

    def total_income(self) -> Decimal:
        return self._total(EntryKind.INCOME)

    def total_expenses(self) -> Decimal:
        return self._total(EntryKind.EXPENSE)

    def net_total(self) -> Decimal:
        return self.total_income() - self.total_expenses()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self, correlation_id: Optional[UUID] = None) -> LoadResult:
        """
        Replace the in-memory entries with what the storage holds.

        A missing ledger file is not an error: the ledger starts empty
        and an empty LoadResult is returned.

        Raises:
            StorageError: If no storage is configured
            RecordIOError: If the file exists but cannot be read; the
                    in-memory entries are left as they were
        """
        storage = self._require_storage()
        correlation_id = correlation_id or create_correlation_id()

        try:
            result = storage.load()
        except RecordNotFoundError:
            logger.info("ledger_file_missing", location=storage.location)
            if self._audit_logger:
                self._audit_logger.log_ledger_file_missing(
                    path=storage.location,
                    correlation_id=correlation_id,
                )
            result = LoadResult()
        except RecordIOError as e:
            if self._audit_logger:
                self._audit_logger.log_storage_failed(
                    operation="load",
                    path=storage.location,
                    error_message=e.reason,
                    correlation_id=correlation_id,
                )
            raise

        self._entries = list(result.entries)
        self._cache.clear()

        if self._audit_logger:
            for diagnostic in result.diagnostics:
                self._audit_logger.log_row_rejected(
                    path=storage.location,
                    line_number=diagnostic.line_number,
                    message=diagnostic.message,
                    raw_line=diagnostic.raw_line,
                    correlation_id=correlation_id,
                )
            self._audit_logger.log_ledger_loaded(
                path=storage.location,
                entry_count=result.success_count,
                error_count=result.error_count,
                total_lines=result.total_lines,
                correlation_id=correlation_id,
            )
        return result

    def save(self, correlation_id: Optional[UUID] = None) -> int:
        """
        Write every entry to the storage, in insertion order.

        Raises:
            StorageError: If no storage is configured
            RecordIOError: If the write fails
        """
        storage = self._require_storage()

        try:
            count = storage.save(list(self._entries))
        except RecordIOError as e:
            if self._audit_logger:
                self._audit_logger.log_storage_failed(
                    operation="save",
                    path=storage.location,
                    error_message=e.reason,
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            self._audit_logger.log_ledger_saved(
                path=storage.location,
                row_count=count,
                correlation_id=correlation_id,
            )
        return count

    def _require_storage(self) -> EntryStorageInterface:
        if self._storage is None:
            raise StorageError("This ledger has no storage configured")
        return self._storage

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def storage(self) -> Optional[EntryStorageInterface]:
        return self._storage

    @property
    def cache_stats(self) -> dict[str, int]:
        return self._cache.stats()

    @property
    def dirty_months(self) -> list[str]:
        return self._cache.dirty_months

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(tuple(self._entries))
