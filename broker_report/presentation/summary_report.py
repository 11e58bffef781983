"""Tabular renderings of reports and merged summaries."""
from __future__ import annotations

import csv
import html
import io
from typing import Iterable, Mapping, Sequence

import pandas as pd

from broker_report.domain.models import CashFlowSummary, MergedPosition, Report
from broker_report.infrastructure.parsing.utils import format_date

Rows = list[dict[str, str]]


def metadata_to_rows(reports: Iterable[Report]) -> Rows:
    rows: Rows = []
    for report in reports:
        meta = report.meta
        rows.append(
            {
                "source": report.source or "",
                "contract_number": meta.contract_number,
                "account_kind": meta.account_kind.value,
                "investor_name": meta.investor_name,
                "period_start": format_date(meta.period_start),
                "period_end": format_date(meta.period_end),
                "generated_at": format_date(meta.generated_at),
            }
        )
    return rows


def cash_flows_to_rows(summary: CashFlowSummary) -> Rows:
    return [
        {
            "kind": row.kind.name,
            "description": row.description_raw,
            "amount": str(row.amount),
            "currency": row.currency,
        }
        for row in summary.rows
    ]


def positions_to_rows(positions: Sequence[MergedPosition]) -> Rows:
    return [
        {
            "isin": position.isin,
            "name": position.name,
            "price_currency": position.price_currency,
            "qty_start": str(position.qty_start),
            "qty_end": str(position.qty_end),
            "qty_delta": str(position.qty_delta),
            "value_start_no_ai": str(position.value_start_no_ai),
            "value_end_no_ai": str(position.value_end_no_ai),
            "value_delta": str(position.value_delta),
        }
        for position in positions
    ]


def contributions_to_rows(reports: Iterable[Report]) -> Rows:
    rows: Rows = []
    for report in reports:
        if report.iis_contributions is None:
            continue
        for item in report.iis_contributions.rows:
            rows.append(
                {
                    "contract_number": report.meta.contract_number,
                    "year": str(item.year),
                    "limit_rub": str(item.limit_rub),
                    "date": format_date(item.date),
                    "amount": str(item.amount),
                    "operation_reason": item.operation_reason,
                    "remaining_limit": str(item.remaining_limit),
                }
            )
    return rows


def render_csv(rows: Rows) -> bytes:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(rows[0].keys()) if rows else [])
    if rows:
        writer.writeheader()
        writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def render_html(rows: Rows, empty_message: str = "No rows.") -> str:
    if not rows:
        return f"<p>{html.escape(empty_message)}</p>"
    header = "".join(f"<th>{html.escape(col)}</th>" for col in rows[0].keys())
    body_parts = []
    for row in rows:
        body_parts.append("<tr>" + "".join(f"<td>{html.escape(value)}</td>" for value in row.values()) + "</tr>")
    body_html = "".join(body_parts)
    return f"<table><thead><tr>{header}</tr></thead><tbody>{body_html}</tbody></table>"


def rows_to_dataframe(rows: Rows) -> pd.DataFrame:
    return pd.DataFrame(rows)


def render_xlsx(sheets: Mapping[str, Rows]) -> bytes:
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="xlsxwriter") as writer:
        for sheet_name, rows in sheets.items():
            rows_to_dataframe(rows).to_excel(writer, sheet_name=sheet_name[:31], index=False)
    return buf.getvalue()
