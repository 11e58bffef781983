"""A batch of parsed reports and the views aggregated over it."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Sequence

from .models import AccountId, CashFlowSummary, MergedPosition, Report
from .services import merge_cash_flows, merge_positions


class AccountReports:
    """Reports of one account, filtered again on every iteration."""

    def __init__(self, reports: Sequence[Report], account_id: AccountId) -> None:
        self._reports = reports
        self._account_id = account_id

    @property
    def account_id(self) -> AccountId:
        return self._account_id

    def __iter__(self) -> Iterator[Report]:
        return (report for report in self._reports if report.meta.account_id == self._account_id)

    def merge_cash_flows(self) -> CashFlowSummary:
        return merge_cash_flows(self)

    def merge_positions(self) -> list[MergedPosition]:
        return merge_positions(self)


@dataclass(frozen=True)
class ReportSet:
    """Reports of a batch in load order. Aggregates are recomputed on each call."""

    reports: Sequence[Report] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.reports)

    def __iter__(self) -> Iterator[Report]:
        return iter(self.reports)

    def by_account(self, account_id: AccountId) -> AccountReports:
        return AccountReports(self.reports, account_id)

    def accounts(self) -> list[AccountId]:
        seen: dict[AccountId, None] = {}
        for report in self.reports:
            seen.setdefault(report.meta.account_id, None)
        return list(seen)

    def merge_cash_flows(self) -> CashFlowSummary:
        return merge_cash_flows(self.reports)

    def merge_positions(self) -> list[MergedPosition]:
        return merge_positions(self.reports)
