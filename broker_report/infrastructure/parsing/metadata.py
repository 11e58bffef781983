"""Report header extraction: period, investor and contract."""
from __future__ import annotations

import logging
import re

from broker_report.config import SETTINGS
from broker_report.domain.errors import MissingFieldError, PatternMismatchError
from broker_report.domain.models import AccountId, AccountKind, ReportMetadata
from broker_report.infrastructure.parsing.document import StatementDocument
from broker_report.infrastructure.parsing.utils import (
    block_text,
    capitalize_words,
    capture_text,
    collect_text,
    parse_date,
)

logger = logging.getLogger(__name__)

PERIOD_RE = re.compile(
    r"за период с\s+(\d{2}\.\d{2}\.\d{4})\s+по\s+(\d{2}\.\d{2}\.\d{4}),\s*дата создания\s+(\d{2}\.\d{2}\.\d{4})"
)
# The name ends at a line break or where the contract part of the block starts.
INVESTOR_RE = re.compile(r"Инвестор:\s*([^\n<]+?)\s*(?:Договор|\n|$)")
CONTRACT_RE = re.compile(r"Договор[^A-Za-z0-9]*([A-Za-z0-9]+)")

IIS_MARKERS = ("индивидуального инвестиционного счета", "иис")


def classify_account(investor_text: str) -> AccountKind:
    lower = investor_text.lower()
    if any(marker in lower for marker in IIS_MARKERS):
        return AccountKind.IIS
    return AccountKind.BROKER


def _find_investor_block(document: StatementDocument) -> str | None:
    for paragraph in document.select("p"):
        text = block_text(paragraph)
        if "инвестор" in text.lower():
            return text
    return None


def extract_metadata(document: StatementDocument) -> ReportMetadata:
    heading = document.select_one(SETTINGS.heading_selector)
    if heading is None:
        raise MissingFieldError("heading")
    heading_text = collect_text(heading)

    period = PERIOD_RE.search(heading_text)
    if period is None:
        raise PatternMismatchError(heading_text)
    period_start = parse_date(period.group(1))
    period_end = parse_date(period.group(2))
    generated_at = parse_date(period.group(3))
    if period_start > period_end:
        raise PatternMismatchError(heading_text)

    investor_text = _find_investor_block(document)
    if investor_text is None:
        raise MissingFieldError("investor")

    investor_name = capture_text(investor_text, INVESTOR_RE)
    if investor_name is None:
        raise PatternMismatchError(investor_text)
    contract_number = capture_text(investor_text, CONTRACT_RE)
    if contract_number is None:
        raise PatternMismatchError(investor_text)

    meta = ReportMetadata(
        account_id=AccountId(contract_number),
        account_kind=classify_account(investor_text),
        period_start=period_start,
        period_end=period_end,
        generated_at=generated_at,
        investor_name=capitalize_words(investor_name),
        contract_number=contract_number,
    )
    logger.debug(
        f"Report header: contract {meta.contract_number} ({meta.account_kind.value}), "
        f"{meta.period_start} - {meta.period_end}"
    )
    return meta
