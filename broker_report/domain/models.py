"""Domain models for parsed broker reports.

These dataclasses capture one statement's sections and the rows produced when
several statements are merged. Money is always ``Decimal``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Iterable, Sequence

Money = Decimal


@dataclass(frozen=True, order=True)
class AccountId:
    """Contract number identifying an account across reports."""

    value: str

    def __str__(self) -> str:
        return self.value


class AccountKind(Enum):
    BROKER = "broker"
    IIS = "iis"


@dataclass(frozen=True)
class ReportMetadata:
    """Report header: period, owner and account."""

    account_id: AccountId
    account_kind: AccountKind
    period_start: date
    period_end: date
    generated_at: date
    investor_name: str
    contract_number: str


@dataclass(frozen=True)
class ValuationRow:
    """Row of the "Оценка активов, руб." table for one venue."""

    venue: str
    start_securities: Money
    start_cash: Money
    start_total: Money
    end_securities: Money
    end_cash: Money
    end_total: Money
    delta_securities: Money
    delta_cash: Money
    delta_total: Money


@dataclass(frozen=True)
class AssetValuation:
    rows: Sequence[ValuationRow] = field(default_factory=tuple)
    total_delta: Money = Decimal("0")


class CashFlowKind(IntEnum):
    """Cash-flow summary row type; declaration order is the sort order."""

    OPENING_BALANCE = 0
    TRADES_NET = 1
    CORPORATE_ACTIONS = 2
    BROKER_FEE = 3
    EXCHANGE_FEE = 4
    CLOSING_BALANCE = 5
    UNKNOWN = 6


@dataclass(frozen=True)
class CashFlowRow:
    kind: CashFlowKind
    description_raw: str
    amount: Money
    currency: str

    def key(self) -> tuple[CashFlowKind, str]:
        return (self.kind, self.currency)


@dataclass(frozen=True)
class CashFlowSummary:
    rows: Sequence[CashFlowRow] = field(default_factory=tuple)

    def totals_by_currency(self) -> dict[str, Money]:
        totals: dict[str, Money] = {}
        for row in self.rows:
            totals[row.currency] = totals.get(row.currency, Decimal("0")) + row.amount
        return totals


@dataclass(frozen=True)
class SecurityPosition:
    """Security holding at the start and end of the period."""

    name: str
    isin: str
    price_currency: str

    qty_start: Money
    nominal_start: Money
    price_start: Money
    value_start_no_ai: Money
    accrued_interest_start: Money

    qty_end: Money
    nominal_end: Money
    price_end: Money
    value_end_no_ai: Money
    accrued_interest_end: Money

    qty_delta: Money
    value_delta: Money

    planned_in_qty: Money
    planned_out_qty: Money
    planned_end_qty: Money


@dataclass(frozen=True)
class PortfolioMarket:
    name: str
    positions: Sequence[SecurityPosition] = field(default_factory=tuple)


@dataclass(frozen=True)
class Portfolio:
    markets: Sequence[PortfolioMarket] = field(default_factory=tuple)

    def iter_positions(self) -> Iterable[SecurityPosition]:
        for market in self.markets:
            yield from market.positions


@dataclass(frozen=True)
class IisContribution:
    """Top-up of an individual investment account (ИИС)."""

    year: int
    limit_rub: Money
    date: date
    amount: Money
    operation_reason: str
    remaining_limit: Money


@dataclass(frozen=True)
class IisContributionsTable:
    rows: Sequence[IisContribution] = field(default_factory=tuple)


@dataclass(frozen=True)
class Report:
    """Everything extracted from one statement. Absent sections are ``None``."""

    meta: ReportMetadata
    asset_valuation: AssetValuation | None = None
    cash_flow_summary: CashFlowSummary | None = None
    portfolio: Portfolio | None = None
    iis_contributions: IisContributionsTable | None = None
    source: str | None = None


@dataclass(frozen=True)
class MergedPosition:
    """Position summed by ISIN over every market of every report."""

    isin: str
    name: str
    price_currency: str
    qty_start: Money
    qty_end: Money
    value_start_no_ai: Money
    value_end_no_ai: Money
    qty_delta: Money
    value_delta: Money
