"""Ledger aggregation package."""

from ledgerbook.ledger.cache import MonthlyCache
from ledgerbook.ledger.engine import Ledger

__all__ = ["Ledger", "MonthlyCache"]
