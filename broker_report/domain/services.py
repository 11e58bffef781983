"""Domain services: cash-flow classification and cross-report aggregation."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Mapping

from .models import (
    CashFlowKind,
    CashFlowRow,
    CashFlowSummary,
    MergedPosition,
    Money,
    Report,
    SecurityPosition,
)

# Checked in order, first match wins.
CASH_FLOW_PHRASES: tuple[tuple[str, CashFlowKind], ...] = (
    ("входящий остаток", CashFlowKind.OPENING_BALANCE),
    ("сальдо расчетов по сделкам", CashFlowKind.TRADES_NET),
    ("корпоративные действия", CashFlowKind.CORPORATE_ACTIONS),
    ("комиссия брокера", CashFlowKind.BROKER_FEE),
    ("комиссия биржи", CashFlowKind.EXCHANGE_FEE),
    ("исходящий остаток", CashFlowKind.CLOSING_BALANCE),
)


def classify_cash_flow(description: str) -> CashFlowKind:
    lower = description.lower()
    for phrase, kind in CASH_FLOW_PHRASES:
        if phrase in lower:
            return kind
    return CashFlowKind.UNKNOWN


@dataclass
class _CashFlowGroup:
    amount: Money
    description_raw: str


def merge_cash_flows(reports: Iterable[Report]) -> CashFlowSummary:
    """Sum cash-flow rows of all reports by (kind, currency).

    The description kept for a group is the one of the first row seen for its key.
    Currencies are never mixed. Rows are ordered by kind, then currency.
    """
    groups: dict[tuple[CashFlowKind, str], _CashFlowGroup] = {}
    for report in reports:
        if report.cash_flow_summary is None:
            continue
        for row in report.cash_flow_summary.rows:
            group = groups.setdefault(row.key(), _CashFlowGroup(Decimal("0"), row.description_raw))
            group.amount += row.amount

    return CashFlowSummary(
        rows=tuple(
            CashFlowRow(
                kind=kind,
                description_raw=group.description_raw,
                amount=group.amount,
                currency=currency,
            )
            for (kind, currency), group in sorted(groups.items(), key=lambda item: item[0])
        )
    )


def _iter_positions(reports: Iterable[Report]) -> Iterable[SecurityPosition]:
    for report in reports:
        if report.portfolio is not None:
            yield from report.portfolio.iter_positions()


def merge_positions(reports: Iterable[Report]) -> list[MergedPosition]:
    """Sum positions of every market of every report by ISIN.

    Name and price currency come from the first occurrence. The same ISIN quoted in
    different currencies collapses into one row; filter by currency beforehand when
    that matters.
    """
    merged: dict[str, MergedPosition] = {}
    for position in _iter_positions(reports):
        current = merged.get(position.isin)
        if current is None:
            merged[position.isin] = MergedPosition(
                isin=position.isin,
                name=position.name,
                price_currency=position.price_currency,
                qty_start=position.qty_start,
                qty_end=position.qty_end,
                value_start_no_ai=position.value_start_no_ai,
                value_end_no_ai=position.value_end_no_ai,
                qty_delta=position.qty_delta,
                value_delta=position.value_delta,
            )
            continue
        merged[position.isin] = MergedPosition(
            isin=current.isin,
            name=current.name,
            price_currency=current.price_currency,
            qty_start=current.qty_start + position.qty_start,
            qty_end=current.qty_end + position.qty_end,
            value_start_no_ai=current.value_start_no_ai + position.value_start_no_ai,
            value_end_no_ai=current.value_end_no_ai + position.value_end_no_ai,
            qty_delta=current.qty_delta + position.qty_delta,
            value_delta=current.value_delta + position.value_delta,
        )
    return [merged[isin] for isin in sorted(merged)]


def positions_by_isin(positions: Iterable[MergedPosition]) -> Mapping[str, MergedPosition]:
    return {position.isin: position for position in positions}
