"""
Per-month cache with a dirty set.

Two kinds of values are cached per month key: the subset of entries that
fall in the month, and the MonthlySummary computed from them. A write
marks only its own month stale; a read of a stale or absent month is a
miss, and the caller recomputes and stores the value, which clears the
stale flag for that kind of value only.
"""

from typing import Optional

from ledgerbook.models.entry import Entry, MonthlySummary


class MonthlyCache:
    """
    Month-keyed cache owned by exactly one Ledger.

    Values handed out are copies; the internal maps never leave this class.
    """

    def __init__(self):
        self._entries: dict[str, list[Entry]] = {}
        self._summaries: dict[str, MonthlySummary] = {}
        self._stale_entries: set[str] = set()
        self._stale_summaries: set[str] = set()

    def mark_dirty(self, month_key: str) -> None:
        self._stale_entries.add(month_key)
        self._stale_summaries.add(month_key)

    def mark_all_dirty(self) -> list[str]:
        """Mark every cached month stale and return the affected keys."""
        months = sorted(set(self._entries) | set(self._summaries))
        self._stale_entries.update(months)
        self._stale_summaries.update(months)
        return months

    def clear(self) -> None:
        self._entries.clear()
        self._summaries.clear()
        self._stale_entries.clear()
        self._stale_summaries.clear()

    def get_entries(self, month_key: str) -> Optional[list[Entry]]:
        """Cached entries for the month, or None on a miss."""
        if month_key in self._stale_entries or month_key not in self._entries:
            return None
        return list(self._entries[month_key])

    def store_entries(self, month_key: str, entries: list[Entry]) -> None:
        self._entries[month_key] = list(entries)
        self._stale_entries.discard(month_key)

    def get_summary(self, month_key: str) -> Optional[MonthlySummary]:
        """Cached summary for the month, or None on a miss."""
        if month_key in self._stale_summaries:
            return None
        return self._summaries.get(month_key)

    def store_summary(self, month_key: str, summary: MonthlySummary) -> None:
        self._summaries[month_key] = summary
        self._stale_summaries.discard(month_key)

    def is_dirty(self, month_key: str) -> bool:
        return month_key in self._stale_entries or month_key in self._stale_summaries

    @property
    def cached_months(self) -> list[str]:
        """Months holding at least one fresh value."""
        fresh = {m for m in self._entries if m not in self._stale_entries}
        fresh |= {m for m in self._summaries if m not in self._stale_summaries}
        return sorted(fresh)

    @property
    def dirty_months(self) -> list[str]:
        return sorted(self._stale_entries | self._stale_summaries)

    def stats(self) -> dict[str, int]:
        return {
            "cached_months": len(self.cached_months),
            "dirty_months": len(self.dirty_months),
        }
