"""
Ledgerbook - Source Package

A personal ledger of dated income and expense entries with fast,
cache-backed monthly aggregation and a forgiving flat-file format.

DESIGN PRINCIPLES:
1. Monthly aggregates are always consistent with the stored entries
2. Only the month touched by a write is ever invalidated
3. One bad row never discards the rest of a file
4. Fail loudly on file and argument problems, quietly on row problems
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Ledgerbook Team"
