"""Tests for the audit logger."""

import pytest

from ledgerbook.audit import AuditLogger, configure_logging, create_correlation_id
from ledgerbook.models.audit import AuditEventBuilder, AuditEventType, AuditSeverity


class TestAuditLogger:
    """Tests for AuditLogger history and helpers."""

    def test_log_returns_and_records_event(self):
        audit = AuditLogger()
        event = AuditEventBuilder.ledger_saved("f.csv", 3)
        assert audit.log(event) is event
        assert audit.recent_events() == [event]

    def test_recent_events_newest_first(self):
        audit = AuditLogger()
        audit.log_ledger_file_missing("f.csv")
        audit.log_ledger_saved("f.csv", 0)

        events = audit.recent_events()
        assert [e.event_type for e in events] == [
            AuditEventType.LEDGER_SAVED,
            AuditEventType.LEDGER_FILE_MISSING,
        ]
        assert len(audit.recent_events(limit=1)) == 1

    def test_history_is_bounded(self):
        audit = AuditLogger(history_limit=5)
        for i in range(12):
            audit.log_entry_added("2023-01", "Food", "EXPENSE", str(i + 1))

        events = audit.recent_events()
        assert len(events) == 5
        assert events[0].details["amount"] == "12"
        assert events[-1].details["amount"] == "8"

    def test_events_by_correlation_id(self):
        audit = AuditLogger()
        load_id = create_correlation_id()
        other_id = create_correlation_id()

        audit.log_row_rejected("f.csv", 3, "bad amount", "x,y,z,w", correlation_id=load_id)
        audit.log_ledger_saved("f.csv", 1, correlation_id=other_id)
        audit.log_ledger_loaded("f.csv", 1, 1, 2, correlation_id=load_id)

        related = audit.events_by_correlation_id(load_id)
        assert [e.event_type for e in related] == [
            AuditEventType.ROW_REJECTED,
            AuditEventType.LEDGER_LOADED,
        ]

    def test_correlation_ids_are_unique(self):
        assert create_correlation_id() != create_correlation_id()

    def test_severities(self):
        audit = AuditLogger()
        audit.log_storage_failed("load", "f.csv", "permission denied")
        audit.log_invalid_query("monthly_summary", "2023-13", "expected YYYY-MM")
        audit.log_cache_invalidated(["2023-01"])
        audit.log_error("RuntimeError", "boom", details={"unsaved_changes": True})

        error, cache, query, failed = audit.recent_events()
        assert failed.severity == AuditSeverity.ERROR
        assert failed.event_type == AuditEventType.LOAD_FAILED
        assert query.severity == AuditSeverity.WARNING
        assert cache.severity == AuditSeverity.DEBUG
        assert cache.details["months"] == ["2023-01"]
        assert error.event_type == AuditEventType.SYSTEM_ERROR
        assert error.error_message == "boom"

    def test_long_rejection_messages_are_truncated(self):
        audit = AuditLogger()
        audit.log_row_rejected("f.csv", 2, "x" * 1000, "raw")
        assert len(audit.recent_events(1)[0].description) == 500


class TestConfigureLogging:
    """configure_logging can be called repeatedly with either renderer."""

    @pytest.mark.parametrize("json_output", [True, False])
    def test_configure_and_log(self, json_output):
        configure_logging("DEBUG", json_output=json_output)
        AuditLogger().log_ledger_saved("f.csv", 1)
        configure_logging("INFO", json_output=True)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
