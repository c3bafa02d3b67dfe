"""
Integration tests for LedgerSession and create_session.

These go through the real file codec in a temporary directory.
"""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from ledgerbook.models.audit import AuditEventType
from ledgerbook.models.entry import EntryKind
from ledgerbook.orchestrator import create_session
from ledgerbook.services.storage import RecordIOError


@pytest.fixture
def ledger_path(tmp_path):
    return tmp_path / "data" / "transactions.csv"


class TestCreateSession:
    """Tests for the session factory."""

    def test_new_session_without_file(self, ledger_path):
        session = create_session(path=ledger_path)
        assert len(session.ledger) == 0
        assert session.last_load is not None
        assert session.last_load.total_lines == 0
        assert session.has_unsaved_changes is False

    def test_without_loading(self, ledger_path):
        session = create_session(path=ledger_path, load=False)
        assert session.last_load is None

    def test_add_save_and_reload(self, ledger_path):
        session = create_session(path=ledger_path)
        session.add(Decimal("100"), date(2023, 1, 15), "Salary", EntryKind.INCOME)
        session.add("40", date(2023, 1, 20), "Food", "EXPENSE")
        assert session.has_unsaved_changes is True

        assert session.save() == 2
        assert session.has_unsaved_changes is False
        assert ledger_path.is_file()

        reloaded = create_session(path=ledger_path)
        assert len(reloaded.ledger) == 2
        assert reloaded.ledger.monthly_summary("2023-01").net_amount == Decimal("60")

    def test_load_report_lists_bad_rows(self, ledger_path):
        ledger_path.parent.mkdir(parents=True)
        ledger_path.write_text(
            "Amount,Date,Category,Kind\n"
            "100,2023-01-15,Salary,INCOME\n"
            "1O0,2023-01-16,Food,EXPENSE\n",
            encoding="utf-8",
        )
        session = create_session(path=ledger_path)
        assert session.last_load.success_count == 1
        assert [d.line_number for d in session.last_load.diagnostics] == [3]

    def test_unreadable_file_raises(self, tmp_path):
        with pytest.raises(RecordIOError):
            create_session(path=tmp_path)

    def test_invalid_entry_is_not_added(self, ledger_path):
        session = create_session(path=ledger_path)
        with pytest.raises(ValidationError):
            session.add(Decimal("0"), date(2023, 1, 1), "Food", EntryKind.EXPENSE)
        with pytest.raises(ValidationError):
            session.add(Decimal("5"), date(2023, 1, 1), "Food", "TRANSFER")
        assert len(session.ledger) == 0


class TestSessionLifecycle:
    """Save-on-close behaviour."""

    def test_context_manager_saves_on_close(self, ledger_path):
        with create_session(path=ledger_path) as session:
            session.add(Decimal("12.50"), date(2023, 3, 1), "Books", EntryKind.EXPENSE)

        assert ledger_path.read_text(encoding="utf-8").splitlines()[1] == (
            "12.50,2023-03-01T00:00:00,Books,EXPENSE"
        )

    def test_close_without_changes_does_not_write(self, ledger_path):
        with create_session(path=ledger_path):
            pass
        assert not ledger_path.exists()

    def test_error_inside_session_skips_save(self, ledger_path):
        with pytest.raises(RuntimeError):
            with create_session(path=ledger_path) as session:
                session.add(Decimal("1"), date(2023, 3, 1), "Books", EntryKind.EXPENSE)
                raise RuntimeError("boom")

        assert not ledger_path.exists()
        event = session.audit_logger.recent_events(1)[0]
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.details == {"unsaved_changes": True}

    def test_save_on_close_can_be_disabled(self, ledger_path, monkeypatch):
        monkeypatch.setenv("LEDGER_SAVE_ON_CLOSE", "false")
        with create_session(path=ledger_path) as session:
            session.add(Decimal("1"), date(2023, 3, 1), "Books", EntryKind.EXPENSE)
        assert not ledger_path.exists()

    def test_configured_data_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LEDGER_STORAGE_DATA_DIR", str(tmp_path / "profile"))
        monkeypatch.setenv("LEDGER_STORAGE_TIMESTAMP_FORMAT", "epoch")
        with create_session() as session:
            session.add(Decimal("1"), date(2023, 3, 1), "Books", EntryKind.EXPENSE)

        saved = tmp_path / "profile" / "transactions.csv"
        date_field = saved.read_text(encoding="utf-8").splitlines()[1].split(",")[1]
        assert date_field.isdigit()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
