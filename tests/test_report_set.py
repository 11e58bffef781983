from datetime import date
from decimal import Decimal

from broker_report.domain.models import (
    AccountId,
    AccountKind,
    CashFlowKind,
    CashFlowRow,
    CashFlowSummary,
    Portfolio,
    PortfolioMarket,
    Report,
    ReportMetadata,
    SecurityPosition,
)
from broker_report.domain.report_set import ReportSet
from broker_report.domain.services import classify_cash_flow, merge_positions, positions_by_isin


def make_meta(contract: str) -> ReportMetadata:
    return ReportMetadata(
        account_id=AccountId(contract),
        account_kind=AccountKind.BROKER,
        period_start=date(2024, 1, 1),
        period_end=date(2024, 3, 31),
        generated_at=date(2024, 4, 1),
        investor_name="Петр Петров",
        contract_number=contract,
    )


def make_cash_row(description: str, amount: str, currency: str = "RUB") -> CashFlowRow:
    return CashFlowRow(
        kind=classify_cash_flow(description),
        description_raw=description,
        amount=Decimal(amount),
        currency=currency,
    )


def make_position(isin: str, qty: str, value: str, name: str = "Бумага", currency: str = "RUB") -> SecurityPosition:
    zero = Decimal("0")
    return SecurityPosition(
        name=name,
        isin=isin,
        price_currency=currency,
        qty_start=Decimal(qty),
        nominal_start=zero,
        price_start=Decimal("100"),
        value_start_no_ai=Decimal(value),
        accrued_interest_start=zero,
        qty_end=Decimal(qty) + 1,
        nominal_end=zero,
        price_end=Decimal("110"),
        value_end_no_ai=Decimal(value) * 2,
        accrued_interest_end=zero,
        qty_delta=Decimal("1"),
        value_delta=Decimal(value),
        planned_in_qty=zero,
        planned_out_qty=zero,
        planned_end_qty=zero,
    )


def make_report(contract: str, cash_rows=(), markets=None) -> Report:
    return Report(
        meta=make_meta(contract),
        cash_flow_summary=CashFlowSummary(rows=tuple(cash_rows)),
        portfolio=Portfolio(markets=tuple(markets)) if markets is not None else None,
    )


REPORT_A = make_report(
    "A1",
    cash_rows=[
        make_cash_row("Входящий остаток", "100.00"),
        make_cash_row("Комиссия брокера", "-1.10"),
        make_cash_row("Входящий остаток", "5.00", "USD"),
    ],
    markets=[
        PortfolioMarket("Фондовый рынок", (make_position("RU1", "10", "1000"),)),
        PortfolioMarket("Внебиржевой рынок", (make_position("RU2", "3", "300"), make_position("RU1", "1", "50"))),
    ],
)
REPORT_B = make_report(
    "B2",
    cash_rows=[
        make_cash_row("Входящий остаток на 01.04.2024", "50.00"),
        make_cash_row("Комиссия биржи", "-0.40"),
        make_cash_row("Прочее", "7"),
    ],
    markets=[PortfolioMarket("Фондовый рынок", (make_position("RU1", "2", "200", name="Другое имя", currency="USD"),))],
)
REPORT_A_EMPTY = make_report("A1")


def cash_map(summary: CashFlowSummary) -> dict:
    return {row.key(): row.amount for row in summary.rows}


def test_merge_cash_flows_groups_by_kind_and_currency():
    summary = ReportSet(reports=(REPORT_A, REPORT_B)).merge_cash_flows()

    assert cash_map(summary) == {
        (CashFlowKind.OPENING_BALANCE, "RUB"): Decimal("150.00"),
        (CashFlowKind.OPENING_BALANCE, "USD"): Decimal("5.00"),
        (CashFlowKind.BROKER_FEE, "RUB"): Decimal("-1.10"),
        (CashFlowKind.EXCHANGE_FEE, "RUB"): Decimal("-0.40"),
        (CashFlowKind.UNKNOWN, "RUB"): Decimal("7"),
    }
    assert [row.key() for row in summary.rows] == sorted(row.key() for row in summary.rows)
    assert summary.rows[0].description_raw == "Входящий остаток"


def test_merge_cash_flows_is_commutative():
    forward = ReportSet(reports=(REPORT_A, REPORT_B)).merge_cash_flows()
    backward = ReportSet(reports=(REPORT_B, REPORT_A)).merge_cash_flows()

    assert cash_map(forward) == cash_map(backward)
    assert [row.key() for row in forward.rows] == [row.key() for row in backward.rows]


def test_merge_positions_sums_by_isin():
    merged = positions_by_isin(ReportSet(reports=(REPORT_A, REPORT_B)).merge_positions())

    assert list(merged) == ["RU1", "RU2"]
    ru1 = merged["RU1"]
    assert ru1.qty_start == Decimal("13")
    assert ru1.qty_end == Decimal("16")
    assert ru1.value_start_no_ai == Decimal("1250")
    assert ru1.value_end_no_ai == Decimal("2500")
    assert ru1.qty_delta == Decimal("3")
    assert ru1.value_delta == Decimal("1250")
    # First occurrence wins even when the currency differs.
    assert ru1.name == "Бумага"
    assert ru1.price_currency == "RUB"


def test_merge_positions_of_same_report_twice_doubles_sums():
    single = positions_by_isin(merge_positions([REPORT_A]))
    doubled = positions_by_isin(merge_positions([REPORT_A, REPORT_A]))

    for isin, position in single.items():
        twice = doubled[isin]
        assert twice.qty_start == position.qty_start * 2
        assert twice.qty_end == position.qty_end * 2
        assert twice.value_start_no_ai == position.value_start_no_ai * 2
        assert twice.value_end_no_ai == position.value_end_no_ai * 2
        assert twice.qty_delta == position.qty_delta * 2
        assert twice.value_delta == position.value_delta * 2
        assert (twice.name, twice.price_currency) == (position.name, position.price_currency)


def test_reports_without_sections_are_ignored_by_merges():
    report_set = ReportSet(reports=(REPORT_A_EMPTY,))

    assert report_set.merge_cash_flows().rows == ()
    assert report_set.merge_positions() == []


def test_by_account_is_a_lazy_view():
    reports = [REPORT_A, REPORT_B]
    view = ReportSet(reports=reports).by_account(AccountId("A1"))

    assert list(view) == [REPORT_A]
    reports.append(REPORT_A_EMPTY)
    assert list(view) == [REPORT_A, REPORT_A_EMPTY]
    assert list(view) == [REPORT_A, REPORT_A_EMPTY]


def test_by_account_merges():
    view = ReportSet(reports=(REPORT_A, REPORT_B)).by_account(AccountId("B2"))

    assert cash_map(view.merge_cash_flows())[(CashFlowKind.EXCHANGE_FEE, "RUB")] == Decimal("-0.40")
    assert [position.isin for position in view.merge_positions()] == ["RU1"]


def test_accounts_in_first_seen_order():
    report_set = ReportSet(reports=(REPORT_B, REPORT_A, REPORT_A_EMPTY))

    assert report_set.accounts() == [AccountId("B2"), AccountId("A1")]
    assert len(report_set) == 3
