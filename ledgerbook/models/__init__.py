"""
Data Models Package

This package contains all Pydantic models used in Ledgerbook.
All data flowing through the ledger and the codec conforms to these schemas.
"""

from ledgerbook.models.entry import (
    Entry,
    EntryKind,
    MonthlySummary,
)
from ledgerbook.models.records import (
    LoadResult,
    RowDiagnostic,
)
from ledgerbook.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "Entry",
    "EntryKind",
    "MonthlySummary",
    # Load outcome models
    "LoadResult",
    "RowDiagnostic",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
