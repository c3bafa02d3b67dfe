"""
Audit Models for Ledgerbook

Every change to the ledger and every load or save is recorded as an
audit event. This provides:
1. A trail of what was added during a session
2. A record of which rows of a file were rejected and why
3. Debugging information when a save fails

DESIGN DECISION: Audit events are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Mutations
    ENTRY_ADDED = "entry_added"
    CACHE_INVALIDATED = "cache_invalidated"

    # Persistence
    LEDGER_LOADED = "ledger_loaded"
    LEDGER_FILE_MISSING = "ledger_file_missing"
    ROW_REJECTED = "row_rejected"
    LEDGER_SAVED = "ledger_saved"
    LOAD_FAILED = "load_failed"
    SAVE_FAILED = "save_failed"

    # Queries
    INVALID_QUERY = "invalid_query"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'entry', 'ledger_file', 'query')"
    )
    entity_ref: Optional[str] = Field(
        default=None,
        description="Reference to the entity (month key, file path, ...)"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all rows of one load)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_ref": self.entity_ref,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_row(self) -> list[str]:
        """
        Flatten to a list of strings, e.g. for an audit CSV export.

        Columns: [event_id, timestamp, event_type, severity, entity_type,
        entity_ref, correlation_id, description, details_json, error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_ref or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entry_added("2023-01", "Salary", "INCOME", "100")
        event = AuditEventBuilder.ledger_saved(path, 12)
    """

    @staticmethod
    def entry_added(
        month_key: str,
        category: str,
        kind: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_ADDED,
            severity=AuditSeverity.DEBUG,
            entity_type="entry",
            entity_ref=month_key,
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} of {amount} added to {category}",
            details={
                "category": category,
                "kind": kind,
                "amount": amount,
            },
        )

    @staticmethod
    def cache_invalidated(
        months: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CACHE_INVALIDATED,
            severity=AuditSeverity.DEBUG,
            entity_type="cache",
            correlation_id=correlation_id,
            description=f"Monthly cache invalidated for {len(months)} month(s)",
            details={"months": months},
        )

    @staticmethod
    def ledger_loaded(
        path: str,
        entry_count: int,
        error_count: int,
        total_lines: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_LOADED,
            severity=AuditSeverity.WARNING if error_count else AuditSeverity.INFO,
            entity_type="ledger_file",
            entity_ref=path,
            correlation_id=correlation_id,
            description=(
                f"Loaded {entry_count} of {total_lines} rows"
                + (f" ({error_count} rejected)" if error_count else "")
            ),
            details={
                "entry_count": entry_count,
                "error_count": error_count,
                "total_lines": total_lines,
            },
        )

    @staticmethod
    def ledger_file_missing(
        path: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_FILE_MISSING,
            entity_type="ledger_file",
            entity_ref=path,
            correlation_id=correlation_id,
            description="No ledger file yet, starting with an empty ledger",
        )

    @staticmethod
    def row_rejected(
        path: str,
        line_number: int,
        message: str,
        raw_line: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ROW_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="ledger_file",
            entity_ref=path,
            correlation_id=correlation_id,
            description=f"Line {line_number} rejected: {message}"[:500],
            details={
                "line_number": line_number,
                "raw_line": raw_line,
            },
        )

    @staticmethod
    def ledger_saved(
        path: str,
        row_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_SAVED,
            entity_type="ledger_file",
            entity_ref=path,
            correlation_id=correlation_id,
            description=f"Saved {row_count} entries",
            details={"row_count": row_count},
        )

    @staticmethod
    def storage_failed(
        operation: str,
        path: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        event_type = (
            AuditEventType.SAVE_FAILED
            if operation == "save"
            else AuditEventType.LOAD_FAILED
        )
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.ERROR,
            entity_type="ledger_file",
            entity_ref=path,
            correlation_id=correlation_id,
            description=f"Ledger {operation} failed",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def invalid_query(
        operation: str,
        value: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVALID_QUERY,
            severity=AuditSeverity.WARNING,
            entity_type="query",
            entity_ref=value,
            correlation_id=correlation_id,
            description=f"Rejected {operation} query: {reason}"[:500],
            details={"operation": operation, "value": value},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
