"""Build a ``Report`` from one statement, choosing which tables to load."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, TypeVar

from broker_report.domain.errors import TableNotFoundError
from broker_report.domain.models import Report
from broker_report.infrastructure.parsing.document import RawReport, StatementDocument
from broker_report.infrastructure.parsing.metadata import extract_metadata
from broker_report.infrastructure.parsing.sections import (
    parse_asset_valuation,
    parse_cash_flow_summary,
    parse_iis_contributions,
    parse_portfolio,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class ParseOptions:
    load_asset_valuation: bool = True
    load_cash_flow: bool = True
    load_portfolio: bool = True
    load_iis_contributions: bool = True

    @classmethod
    def everything(cls) -> "ParseOptions":
        return cls()

    @classmethod
    def meta_only(cls) -> "ParseOptions":
        return cls(
            load_asset_valuation=False,
            load_cash_flow=False,
            load_portfolio=False,
            load_iis_contributions=False,
        )


def parse_optional(enabled: bool, loader: Callable[[], T]) -> T | None:
    """Run a table parser, turning a missing table into ``None``.

    A disabled section is never parsed. Only ``TableNotFoundError`` is recovered;
    every other error aborts the whole report.
    """
    if not enabled:
        return None
    try:
        return loader()
    except TableNotFoundError as exc:
        logger.debug(f"Section absent: {exc.table}")
        return None


def parse_report(raw: RawReport, options: ParseOptions | None = None) -> Report:
    options = options or ParseOptions.everything()
    document = StatementDocument.parse(raw)
    meta = extract_metadata(document)

    report = Report(
        meta=meta,
        asset_valuation=parse_optional(options.load_asset_valuation, lambda: parse_asset_valuation(document)),
        cash_flow_summary=parse_optional(options.load_cash_flow, lambda: parse_cash_flow_summary(document)),
        portfolio=parse_optional(options.load_portfolio, lambda: parse_portfolio(document)),
        iis_contributions=parse_optional(
            options.load_iis_contributions, lambda: parse_iis_contributions(document)
        ),
        source=raw.source,
    )
    logger.info(f"Parsed report for contract {meta.contract_number} ({meta.period_start} - {meta.period_end})")
    return report


class ReportBuilder:
    """Fluent selection of the tables to parse.

    Example::

        report = ReportBuilder(raw).cash_flow(True).portfolio(False).parse()
    """

    def __init__(self, raw: RawReport, options: ParseOptions | None = None) -> None:
        self._raw = raw
        self._options = options or ParseOptions.everything()

    @property
    def options(self) -> ParseOptions:
        return self._options

    def asset_valuation(self, enabled: bool) -> "ReportBuilder":
        return ReportBuilder(self._raw, replace(self._options, load_asset_valuation=enabled))

    def cash_flow(self, enabled: bool) -> "ReportBuilder":
        return ReportBuilder(self._raw, replace(self._options, load_cash_flow=enabled))

    def portfolio(self, enabled: bool) -> "ReportBuilder":
        return ReportBuilder(self._raw, replace(self._options, load_portfolio=enabled))

    def iis_contributions(self, enabled: bool) -> "ReportBuilder":
        return ReportBuilder(self._raw, replace(self._options, load_iis_contributions=enabled))

    def with_options(self, options: ParseOptions) -> "ReportBuilder":
        return ReportBuilder(self._raw, options)

    def parse(self) -> Report:
        return parse_report(self._raw, self._options)
