"""Parsers for the individual report tables."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterator, Sequence

from bs4 import Tag

from broker_report.config import SETTINGS
from broker_report.domain.errors import MissingFieldError, NumberFormatError, TableNotFoundError
from broker_report.domain.models import (
    AssetValuation,
    CashFlowRow,
    CashFlowSummary,
    IisContribution,
    IisContributionsTable,
    Money,
    Portfolio,
    PortfolioMarket,
    SecurityPosition,
    ValuationRow,
)
from broker_report.domain.services import classify_cash_flow
from broker_report.infrastructure.parsing.document import StatementDocument
from broker_report.infrastructure.parsing.locator import find_table_with_headers
from broker_report.infrastructure.parsing.utils import collect_text, parse_date, parse_money_or_zero

logger = logging.getLogger(__name__)

VALUATION_SELECTOR = "table.RatingAssets"
VALUATION_HEADERS = ("Торговая площадка", "Оценка портфеля ЦБ")
CASH_FLOW_HEADERS = ("Описание", "Сумма", "Валюта")
PORTFOLIO_HEADERS = (
    "ISIN",
    "Рыночная стоимость, без НКД",
    "Рыночная цена",
    "Плановые зачисления",
)
PORTFOLIO_HEADER_DEPTH = 2
IIS_HEADERS = (
    "Год",
    "Лимит, руб.",
    "Дата операции",
    "Сумма, руб.",
    "Основание операции",
    "Остаток лимита",
)

VALUATION_SKIP_ROWS = 3
CASH_FLOW_SKIP_ROWS = 2
PORTFOLIO_SKIP_ROWS = 3
IIS_SKIP_ROWS = 3

MARKET_PREFIX = "Площадка"


def iter_data_rows(table: Tag, skip: int) -> Iterator[list[str]]:
    """Yield normalized ``td`` texts of every row after the header rows."""
    for idx, row in enumerate(table.find_all("tr")):
        if idx < skip:
            continue
        yield [collect_text(cell) for cell in row.find_all("td")]


def _is_blank(cells: Sequence[str]) -> bool:
    return all(not cell for cell in cells)


def _locate_valuation(document: StatementDocument) -> Tag:
    table = find_table_with_headers(document, (), selector=VALUATION_SELECTOR)
    if table is None:
        table = find_table_with_headers(document, VALUATION_HEADERS)
    if table is None:
        raise TableNotFoundError("RatingAssets")
    return table


def _valuation_row(cells: Sequence[str]) -> ValuationRow:
    return ValuationRow(
        venue=cells[0],
        start_securities=parse_money_or_zero(cells[1], "ЦБ начало"),
        start_cash=parse_money_or_zero(cells[2], "Денежные средства начало"),
        start_total=parse_money_or_zero(cells[3], "Всего начало"),
        end_securities=parse_money_or_zero(cells[4], "ЦБ конец"),
        end_cash=parse_money_or_zero(cells[5], "Денежные средства конец"),
        end_total=parse_money_or_zero(cells[6], "Всего конец"),
        delta_securities=parse_money_or_zero(cells[7], "ЦБ изменение"),
        delta_cash=parse_money_or_zero(cells[8], "Денежные средства изменение"),
        delta_total=parse_money_or_zero(cells[9], "Всего изменение"),
    )


def parse_asset_valuation(document: StatementDocument) -> AssetValuation:
    table = _locate_valuation(document)

    rows: list[ValuationRow] = []
    total_delta: Money | None = None
    for cells in iter_data_rows(table, VALUATION_SKIP_ROWS):
        if not cells:
            continue
        if "итого" in cells[0].lower():
            total_delta = parse_money_or_zero(cells[-1], "Итого")
            continue
        if len(cells) < 10:
            continue
        rows.append(_valuation_row(cells))

    if total_delta is None:
        total_delta = sum((row.delta_total for row in rows), Decimal("0"))

    logger.debug(f"Asset valuation: {len(rows)} venues, total delta {total_delta}")
    return AssetValuation(rows=tuple(rows), total_delta=total_delta)


def parse_cash_flow_summary(document: StatementDocument) -> CashFlowSummary:
    table = find_table_with_headers(document, CASH_FLOW_HEADERS)
    if table is None:
        raise TableNotFoundError("CashFlowSummary")

    rows: list[CashFlowRow] = []
    for cells in iter_data_rows(table, CASH_FLOW_SKIP_ROWS):
        if len(cells) < 3 or _is_blank(cells):
            continue
        description = cells[0]
        rows.append(
            CashFlowRow(
                kind=classify_cash_flow(description),
                description_raw=description,
                amount=parse_money_or_zero(cells[1], "Сумма ДС"),
                currency=cells[2],
            )
        )

    logger.debug(f"Cash flow summary: {len(rows)} rows")
    return CashFlowSummary(rows=tuple(rows))


@dataclass(frozen=True)
class _MarketGrouping:
    """Fold state: finished markets plus the group currently being filled."""

    markets: tuple[PortfolioMarket, ...] = ()
    current: PortfolioMarket | None = None

    def start(self, name: str) -> "_MarketGrouping":
        return _MarketGrouping(markets=self._flushed(), current=PortfolioMarket(name=name))

    def add(self, position: SecurityPosition) -> "_MarketGrouping":
        current = self.current or PortfolioMarket(name=SETTINGS.unknown_market_name)
        return replace(self, current=replace(current, positions=(*current.positions, position)))

    def finish(self) -> tuple[PortfolioMarket, ...]:
        return self._flushed()

    def _flushed(self) -> tuple[PortfolioMarket, ...]:
        if self.current is None:
            return self.markets
        return (*self.markets, self.current)


def _security_position(cells: Sequence[str]) -> SecurityPosition:
    return SecurityPosition(
        name=cells[0],
        isin=cells[1],
        price_currency=cells[2],
        qty_start=parse_money_or_zero(cells[3], "Количество начало"),
        nominal_start=parse_money_or_zero(cells[4], "Номинал начало"),
        price_start=parse_money_or_zero(cells[5], "Цена начало"),
        value_start_no_ai=parse_money_or_zero(cells[6], "Стоимость без НКД начало"),
        accrued_interest_start=parse_money_or_zero(cells[7], "НКД начало"),
        qty_end=parse_money_or_zero(cells[8], "Количество конец"),
        nominal_end=parse_money_or_zero(cells[9], "Номинал конец"),
        price_end=parse_money_or_zero(cells[10], "Цена конец"),
        value_end_no_ai=parse_money_or_zero(cells[11], "Стоимость без НКД конец"),
        accrued_interest_end=parse_money_or_zero(cells[12], "НКД конец"),
        qty_delta=parse_money_or_zero(cells[13], "Количество изменение"),
        value_delta=parse_money_or_zero(cells[14], "Стоимость изменение"),
        planned_in_qty=parse_money_or_zero(cells[15], "Плановые зачисления"),
        planned_out_qty=parse_money_or_zero(cells[16], "Плановые списания"),
        planned_end_qty=parse_money_or_zero(cells[17], "Плановый исходящий остаток"),
    )


def market_name(cell: str) -> str:
    name = cell[len(MARKET_PREFIX):]
    if name.startswith(":"):
        name = name[1:]
    return name.strip()


def parse_portfolio(document: StatementDocument) -> Portfolio:
    table = find_table_with_headers(document, PORTFOLIO_HEADERS, header_depth=PORTFOLIO_HEADER_DEPTH)
    if table is None:
        raise TableNotFoundError("Portfolio")

    grouping = _MarketGrouping()
    for cells in iter_data_rows(table, PORTFOLIO_SKIP_ROWS):
        if not cells:
            continue
        if cells[0].startswith(MARKET_PREFIX):
            grouping = grouping.start(market_name(cells[0]))
            continue
        if len(cells) < 18:
            continue
        grouping = grouping.add(_security_position(cells))

    markets = grouping.finish()
    logger.debug(f"Portfolio: {len(markets)} markets, {sum(len(m.positions) for m in markets)} positions")
    return Portfolio(markets=markets)


@dataclass(frozen=True)
class _ContributionState:
    """Year and limit carried over to rows that leave those cells blank."""

    year: int | None = None
    limit: Money | None = None
    rows: tuple[IisContribution, ...] = ()

    def advance(self, cells: Sequence[str]) -> "_ContributionState":
        state = self
        if cells[0]:
            state = replace(state, year=_parse_year(cells[0]))
        if cells[1]:
            state = replace(state, limit=_parse_limit(cells[1], "Лимит ИИС"))
        if not cells[2]:
            return state

        if state.year is None:
            raise MissingFieldError("Год")
        row = IisContribution(
            year=state.year,
            limit_rub=state.limit if state.limit is not None else Decimal("0"),
            date=parse_date(cells[2]),
            amount=parse_money_or_zero(cells[3], "Сумма ИИС"),
            operation_reason=cells[4],
            remaining_limit=_parse_limit(cells[5], "Остаток лимита"),
        )
        return replace(state, rows=(*state.rows, row))


def _parse_year(value: str) -> int:
    text = value.strip()
    try:
        return int(text)
    except ValueError as exc:
        raise NumberFormatError(text, "Год") from exc


def _parse_limit(value: str, column: str) -> Money:
    if SETTINGS.no_limit_sentinel in value.lower():
        return Decimal("0")
    return parse_money_or_zero(value, column)


def parse_iis_contributions(document: StatementDocument) -> IisContributionsTable:
    table = find_table_with_headers(document, IIS_HEADERS)
    if table is None:
        raise TableNotFoundError("IISContributions")

    state = _ContributionState()
    for cells in iter_data_rows(table, IIS_SKIP_ROWS):
        if len(cells) < 6 or _is_blank(cells):
            continue
        state = state.advance(cells)

    logger.debug(f"IIS contributions: {len(state.rows)} operations")
    return IisContributionsTable(rows=state.rows)
