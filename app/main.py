"""
Streamlit Frontend for Ledgerbook

A small dashboard over one ledger file:
- Add income and expense entries
- See one month's totals, or every month at a glance
- See which rows of the ledger file could not be read
- Save explicitly

The dashboard only calls the session and ledger interfaces; all
aggregation and file handling lives in the ledgerbook package.
"""

from datetime import date
from decimal import Decimal

import streamlit as st
from pydantic import ValidationError

from ledgerbook.models.entry import EntryKind
from ledgerbook.orchestrator import LedgerSession, create_session
from ledgerbook.services.storage import RecordIOError
from ledgerbook.validation import InvalidYearMonthError


# Page configuration
st.set_page_config(
    page_title="Ledgerbook",
    page_icon="📒",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_session() -> LedgerSession:
    """Get or create the ledger session (cached for the server process)."""
    return create_session()


def main():
    """Main application entry point."""
    try:
        session = get_session()
    except RecordIOError as e:
        st.error(f"Could not read the ledger file: {e}")
        st.stop()

    st.sidebar.title("📒 Ledgerbook")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["➕ Add Entry", "📅 Monthly Summary", "📊 All Months", "⚠️ Load Report"],
        index=0,
    )

    st.sidebar.markdown("---")
    if session.has_unsaved_changes:
        st.sidebar.warning("You have unsaved entries.")
    if st.sidebar.button("💾 Save ledger", type="primary"):
        try:
            count = session.save()
            st.sidebar.success(f"Saved {count} entries.")
        except RecordIOError as e:
            st.sidebar.error(f"Save failed: {e}")

    if page == "➕ Add Entry":
        render_add_page(session)
    elif page == "📅 Monthly Summary":
        render_month_page(session)
    elif page == "📊 All Months":
        render_all_months_page(session)
    elif page == "⚠️ Load Report":
        render_load_report(session)


def render_add_page(session: LedgerSession):
    st.title("➕ Add Entry")

    with st.form("add_entry", clear_on_submit=True):
        amount = st.number_input("Amount", min_value=0.0, step=1.0, format="%.2f")
        entry_date = st.date_input("Date", value=date.today())
        category = st.text_input("Category")
        kind = st.radio("Kind", [k.label for k in EntryKind], horizontal=True)
        submitted = st.form_submit_button("Add")

    if submitted:
        try:
            entry = session.add(
                amount=Decimal(str(amount)),
                timestamp=entry_date,
                category=category,
                kind=EntryKind(kind.upper()),
            )
            st.success(f"Added {entry.display_string}")
        except ValidationError as e:
            st.error(f"Entry not added: {e.errors()[0]['msg']}")


def render_month_page(session: LedgerSession):
    st.title("📅 Monthly Summary")

    year_month = st.text_input("Month (YYYY-MM)", value=date.today().strftime("%Y-%m"))
    try:
        summary = session.ledger.monthly_summary(year_month)
        entries = session.ledger.entries_by_month(year_month)
    except InvalidYearMonthError as e:
        st.error(str(e))
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Income", f"{summary.total_income:.2f}")
    col2.metric("Expenses", f"{summary.total_expenses:.2f}")
    col3.metric("Net", f"{summary.net_amount:.2f}")

    if entries:
        st.dataframe(
            [
                {
                    "Date": e.formatted_date,
                    "Kind": e.kind.label,
                    "Category": e.category,
                    "Amount": e.formatted_amount,
                }
                for e in entries
            ],
            use_container_width=True,
        )
    else:
        st.info("No entries for this month.")


def render_all_months_page(session: LedgerSession):
    st.title("📊 All Months")

    summaries = session.ledger.all_monthly_summaries()
    if not summaries:
        st.info("The ledger is empty.")
        return

    st.dataframe(
        [
            {
                "Month": month,
                "Income": f"{s.total_income:.2f}",
                "Expenses": f"{s.total_expenses:.2f}",
                "Net": f"{s.net_amount:.2f}",
            }
            for month, s in summaries.items()
        ],
        use_container_width=True,
    )

    st.markdown("---")
    col1, col2, col3 = st.columns(3)
    col1.metric("Total income", f"{session.ledger.total_income():.2f}")
    col2.metric("Total expenses", f"{session.ledger.total_expenses():.2f}")
    col3.metric("Net", f"{session.ledger.net_total():.2f}")


def render_load_report(session: LedgerSession):
    st.title("⚠️ Load Report")

    result = session.last_load
    if result is None:
        st.info("The ledger has not been loaded from a file.")
        return

    st.markdown(
        f"Read **{result.success_count}** of **{result.total_lines}** rows "
        f"from `{session.ledger.storage.location}`."
    )
    for warning in result.warnings:
        st.warning(warning)

    if result.has_errors:
        st.dataframe(
            [
                {"Line": d.line_number, "Problem": d.message, "Row": d.raw_line}
                for d in result.diagnostics
            ],
            use_container_width=True,
        )
    else:
        st.success("Every row was read successfully.")


if __name__ == "__main__":
    main()
