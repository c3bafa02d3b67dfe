"""
Main Orchestrator for Ledgerbook

This module ties the components together for a hosting application
(the Streamlit dashboard, a menu-driven CLI, a script):
1. Resolve settings, configure logging
2. Build the codec, the file storage, the audit logger and the ledger
3. Load the ledger file at startup (a missing file means an empty ledger)
4. Save on demand and, optionally, when the session closes

DESIGN DECISION: The core never reads configuration or resolves paths.
Everything environment-specific is decided here and passed down.
"""

from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional, Union

import structlog

from ledgerbook.audit import AuditLogger, configure_logging, create_correlation_id
from ledgerbook.config import Settings, get_settings
from ledgerbook.ledger import Ledger
from ledgerbook.models.entry import Entry, EntryKind
from ledgerbook.models.records import LoadResult
from ledgerbook.services.storage import CsvEntryCodec, CsvFileEntryStorage

logger = structlog.get_logger(__name__)


class LedgerSession:
    """
    One working session over a ledger.

    Usage:
        with create_session() as session:
            session.add(Decimal("100"), date(2023, 1, 15), "Salary", EntryKind.INCOME)
            print(session.ledger.monthly_summary("2023-01"))
    """

    def __init__(
        self,
        ledger: Ledger,
        audit_logger: Optional[AuditLogger] = None,
        save_on_close: bool = True,
    ):
        self._ledger = ledger
        self._audit_logger = audit_logger
        self._save_on_close = save_on_close
        self._last_load: Optional[LoadResult] = None
        self._persisted_count = 0

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def audit_logger(self) -> Optional[AuditLogger]:
        return self._audit_logger

    @property
    def last_load(self) -> Optional[LoadResult]:
        """Outcome of the most recent load, including rejected rows."""
        return self._last_load

    @property
    def has_unsaved_changes(self) -> bool:
        # The ledger only grows, so a length check is enough.
        return len(self._ledger) != self._persisted_count

    def start(self) -> LoadResult:
        """Load the ledger file into memory."""
        correlation_id = create_correlation_id()
        result = self._ledger.load(correlation_id=correlation_id)
        self._last_load = result
        self._persisted_count = len(self._ledger)

        if result.has_errors:
            logger.warning(
                "ledger_loaded_with_errors",
                errors=result.error_count,
                entries=result.success_count,
            )
        return result

    def add(
        self,
        amount: Union[Decimal, int, str],
        timestamp: Union[date, datetime],
        category: str,
        kind: Union[EntryKind, str],
    ) -> Entry:
        """
        Build an Entry from raw values and add it to the ledger.

        Raises:
            pydantic.ValidationError: If the values do not form a valid entry
                    (zero or negative amount, blank category, unknown kind)
        """
        entry = Entry(
            amount=amount,
            timestamp=timestamp,
            category=category,
            kind=kind,
        )
        self._ledger.add_entry(entry)
        return entry

    def save(self) -> int:
        count = self._ledger.save(correlation_id=create_correlation_id())
        self._persisted_count = len(self._ledger)
        return count

    def close(self) -> None:
        """Save if configured to and there is something new to save."""
        if self._save_on_close and self.has_unsaved_changes:
            self.save()

    def __enter__(self) -> 'LedgerSession':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # Do not persist a session that ended in an error.
        if exc_type is None:
            self.close()
        elif self._audit_logger:
            self._audit_logger.log_error(
                error_type=exc_type.__name__,
                error_message=str(exc),
                details={"unsaved_changes": self.has_unsaved_changes},
            )


def create_session(
    settings: Optional[Settings] = None,
    path: Optional[Union[str, Path]] = None,
    load: bool = True,
) -> LedgerSession:
    """
    Factory function to create a ready-to-use session.

    Args:
        settings: Settings to use. Defaults to get_settings().
        path: Ledger file path. Overrides the configured data_dir/filename.
        load: Whether to load the ledger file immediately.

    Returns:
        LedgerSession (already loaded if load=True)
    """
    settings = settings or get_settings()

    logging_settings = settings.logging
    configure_logging(logging_settings.level, logging_settings.json_output)

    storage_settings = settings.storage
    ledger_settings = settings.ledger

    codec = CsvEntryCodec(
        timestamp_format=storage_settings.timestamp_format,
        encoding=storage_settings.encoding,
    )
    storage = CsvFileEntryStorage(
        path if path is not None else storage_settings.ledger_path,
        codec,
    )
    audit_logger = AuditLogger()

    ledger = Ledger(
        storage=storage,
        audit_logger=audit_logger,
        min_year=ledger_settings.min_year,
        max_year=ledger_settings.max_year,
    )

    session = LedgerSession(
        ledger,
        audit_logger=audit_logger,
        save_on_close=ledger_settings.save_on_close,
    )
    if load:
        session.start()
    return session
