"""Streamlit front-end for merging broker reports."""
from __future__ import annotations

import streamlit as st

from broker_report import ParseOptions, ReportError, ReportSet, build_report_set
from broker_report.domain.models import AccountId
from broker_report.infrastructure.repositories.directory_repositories import InMemoryStatementRepository
from broker_report.presentation.summary_report import (
    cash_flows_to_rows,
    contributions_to_rows,
    metadata_to_rows,
    positions_to_rows,
    render_csv,
    render_xlsx,
    rows_to_dataframe,
)


st.set_page_config(page_title="Broker Reports", layout="wide")
st.title("Broker Report Merger")


def load_reports(files: list[tuple[str, bytes]], options: ParseOptions) -> ReportSet:
    repository = InMemoryStatementRepository(files)
    return build_report_set(
        repository.list_sources(),
        lambda builder: builder.with_options(options).parse(),
    )


if "reports" not in st.session_state:
    st.session_state["reports"] = None


uploaded = st.file_uploader("Upload reports", type=["html", "htm"], accept_multiple_files=True)

col1, col2, col3, col4 = st.columns(4)
with col1:
    load_valuation = st.checkbox("Asset valuation", value=True)
with col2:
    load_cash_flow = st.checkbox("Cash flow", value=True)
with col3:
    load_portfolio = st.checkbox("Portfolio", value=True)
with col4:
    load_iis = st.checkbox("IIS contributions", value=True)

run_btn = st.button("Parse reports", disabled=not uploaded)
if run_btn and uploaded:
    options = ParseOptions(
        load_asset_valuation=load_valuation,
        load_cash_flow=load_cash_flow,
        load_portfolio=load_portfolio,
        load_iis_contributions=load_iis,
    )
    with st.spinner("Parsing..."):
        try:
            st.session_state["reports"] = load_reports([(f.name, f.read()) for f in uploaded], options)
        except ReportError as exc:
            st.session_state["reports"] = None
            st.error(f"Could not parse reports: {exc}")

report_set: ReportSet | None = st.session_state.get("reports")
if report_set is None:
    st.info("Upload reports and parse them first.")
else:
    accounts = [str(account) for account in report_set.accounts()]
    selected = st.selectbox("Account", ["All accounts", *accounts])
    scope = report_set if selected == "All accounts" else report_set.by_account(AccountId(selected))

    metadata_rows = metadata_to_rows(scope)
    cash_rows = cash_flows_to_rows(scope.merge_cash_flows())
    position_rows = positions_to_rows(scope.merge_positions())
    contribution_rows = contributions_to_rows(scope)

    st.metric("Reports", len(metadata_rows))

    tabs = st.tabs(["Reports", "Cash flows", "Positions", "IIS contributions"])
    with tabs[0]:
        st.dataframe(rows_to_dataframe(metadata_rows))
    with tabs[1]:
        st.dataframe(rows_to_dataframe(cash_rows))
        st.download_button(
            "Download cash flows CSV",
            data=render_csv(cash_rows),
            file_name="cash_flows.csv",
            mime="text/csv",
        )
    with tabs[2]:
        st.dataframe(rows_to_dataframe(position_rows))
        st.download_button(
            "Download positions CSV",
            data=render_csv(position_rows),
            file_name="positions.csv",
            mime="text/csv",
        )
    with tabs[3]:
        st.dataframe(rows_to_dataframe(contribution_rows))

    st.download_button(
        "Download all sheets (XLSX)",
        data=render_xlsx(
            {
                "reports": metadata_rows,
                "cash_flows": cash_rows,
                "positions": position_rows,
                "iis_contributions": contribution_rows,
            }
        ),
        file_name="broker_reports.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
