"""Command-line entrypoint for parsing and merging broker reports."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from broker_report.application.use_cases import build_report_set
from broker_report.domain.errors import ReportError
from broker_report.domain.models import AccountId, Report
from broker_report.domain.repositories import StatementSource
from broker_report.infrastructure.parsing.builder import ParseOptions
from broker_report.infrastructure.repositories.directory_repositories import (
    DirectoryStatementRepository,
    FileStatementSource,
)
from broker_report.presentation.summary_report import (
    cash_flows_to_rows,
    positions_to_rows,
    render_csv,
    rows_to_dataframe,
)

logger = logging.getLogger(__name__)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Parse Sberbank HTML broker reports and merge their tables")
    parser.add_argument("paths", nargs="+", help="Report files or directories with reports")
    parser.add_argument("--merge", action="store_true", help="Print cash flows and positions merged over all reports")
    parser.add_argument("--account", type=str, help="Only use reports of this contract number")
    parser.add_argument("--no-valuation", action="store_true", help="Skip the asset valuation table")
    parser.add_argument("--no-cash-flow", action="store_true", help="Skip the cash flow summary table")
    parser.add_argument("--no-portfolio", action="store_true", help="Skip the securities portfolio table")
    parser.add_argument("--no-iis", action="store_true", help="Skip the IIS contributions table")
    parser.add_argument("--csv-dir", type=str, help="Write merged tables as CSV files into this directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def collect_sources(paths: Sequence[str]) -> list[StatementSource]:
    sources: list[StatementSource] = []
    for raw_path in paths:
        path = Path(raw_path)
        if path.is_dir():
            sources.extend(DirectoryStatementRepository(path).list_sources())
        else:
            sources.append(FileStatementSource(path))
    return sources


def print_report(report: Report) -> None:
    meta = report.meta
    print(f"Счёт: {meta.account_id}, период {meta.period_start} - {meta.period_end}")
    print(f"Инвестор: {meta.investor_name}")
    print(f"Договор: {meta.contract_number}")
    if report.asset_valuation is not None:
        valuation = report.asset_valuation
        print(f"Оценка активов: {len(valuation.rows)} строк, итоговое изменение {valuation.total_delta}")
    if report.portfolio is not None:
        markets = report.portfolio.markets
        positions = sum(len(market.positions) for market in markets)
        print(f"Портфель: {len(markets)} площадок, {positions} позиций")
    if report.cash_flow_summary is not None:
        cash = report.cash_flow_summary
        totals = ", ".join(f"{amount} {currency}" for currency, amount in sorted(cash.totals_by_currency().items()))
        print(f"Движение ДС: {len(cash.rows)} строк, сумма {totals or 0}")
    if report.iis_contributions is not None:
        print(f"Взносы на ИИС: {len(report.iis_contributions.rows)} записей")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    options = ParseOptions(
        load_asset_valuation=not args.no_valuation,
        load_cash_flow=not args.no_cash_flow,
        load_portfolio=not args.no_portfolio,
        load_iis_contributions=not args.no_iis,
    )
    try:
        report_set = build_report_set(
            collect_sources(args.paths),
            lambda builder: builder.with_options(options).parse(),
        )
    except (ReportError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    scope = report_set.by_account(AccountId(args.account)) if args.account else report_set
    for report in scope:
        if report.source:
            print(f"\n{report.source}")
        print_report(report)

    if not args.merge:
        return 0

    cash_rows = cash_flows_to_rows(scope.merge_cash_flows())
    position_rows = positions_to_rows(scope.merge_positions())

    print("\nMerged cash flows")
    print("=================")
    print(rows_to_dataframe(cash_rows).to_string(index=False) if cash_rows else "No cash flow rows.")
    print("\nMerged positions")
    print("================")
    print(rows_to_dataframe(position_rows).to_string(index=False) if position_rows else "No positions.")

    if args.csv_dir:
        out_dir = Path(args.csv_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        (out_dir / "cash_flows.csv").write_bytes(render_csv(cash_rows))
        (out_dir / "positions.csv").write_bytes(render_csv(position_rows))
        logger.info(f"Merged tables written to {out_dir}")

    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
