"""
Audit Logger

DESIGN DECISION: Every change to the ledger and every file operation is
logged. This provides:
1. Traceability of what a session added
2. Visibility of rows rejected while loading a hand-edited file
3. Debugging capability when a save fails

The audit logger:
- Is synchronous, like the rest of the ledger
- Keeps a bounded in-memory history the UI can show
- Supports correlation IDs to trace related events
"""

import logging
import sys
from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from ledgerbook.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def _processors(json_output: bool) -> list:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure structlog on top of stdlib logging.

    Safe to call more than once; the last call wins.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
    )
    logging.getLogger("ledgerbook").setLevel(level.upper())

    structlog.configure(
        processors=_processors(json_output),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Configure structlog for local logging
structlog.configure(
    processors=_processors(json_output=True),
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An in-memory history (for display during the session)
    """

    def __init__(self, history_limit: int = 1000):
        """
        Initialize audit logger.

        Args:
            history_limit: Number of most recent events kept in memory.
        """
        self._history: deque[AuditEvent] = deque(maxlen=history_limit)
        self._logger = structlog.get_logger("ledgerbook.audit")

    def log(self, event: AuditEvent) -> AuditEvent:
        """
        Log an audit event.

        Always logs locally and records the event in the history.
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity is AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity is AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        self._history.append(event)
        return event

    def recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent events, newest first."""
        events = list(self._history)
        events.reverse()
        return events[:limit]

    def events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        """All retained events for one correlation ID, in the order logged."""
        return [e for e in self._history if e.correlation_id == correlation_id]

    def log_entry_added(
        self,
        month_key: str,
        category: str,
        kind: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.entry_added(
            month_key=month_key,
            category=category,
            kind=kind,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_cache_invalidated(
        self,
        months: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.cache_invalidated(
            months=months,
            correlation_id=correlation_id,
        ))

    def log_ledger_loaded(
        self,
        path: str,
        entry_count: int,
        error_count: int,
        total_lines: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a completed load."""
        self.log(AuditEventBuilder.ledger_loaded(
            path=path,
            entry_count=entry_count,
            error_count=error_count,
            total_lines=total_lines,
            correlation_id=correlation_id,
        ))

    def log_ledger_file_missing(
        self,
        path: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.ledger_file_missing(
            path=path,
            correlation_id=correlation_id,
        ))

    def log_row_rejected(
        self,
        path: str,
        line_number: int,
        message: str,
        raw_line: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log one rejected row of a ledger file."""
        self.log(AuditEventBuilder.row_rejected(
            path=path,
            line_number=line_number,
            message=message,
            raw_line=raw_line,
            correlation_id=correlation_id,
        ))

    def log_ledger_saved(
        self,
        path: str,
        row_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.ledger_saved(
            path=path,
            row_count=row_count,
            correlation_id=correlation_id,
        ))

    def log_storage_failed(
        self,
        operation: str,
        path: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed load or save."""
        self.log(AuditEventBuilder.storage_failed(
            operation=operation,
            path=path,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_invalid_query(
        self,
        operation: str,
        value: str,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.invalid_query(
            operation=operation,
            value=value,
            reason=reason,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a logical operation (e.g., a load) and
    pass it to every event that belongs to it.
    """
    return uuid4()
