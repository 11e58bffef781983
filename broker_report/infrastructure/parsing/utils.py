"""Shared parsing utilities: number, date and text normalization."""
from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from bs4 import Comment, NavigableString, Tag

from broker_report.config import SETTINGS
from broker_report.domain.errors import DateFormatError, NumberFormatError
from broker_report.domain.models import Money

# Plain space, NBSP and narrow NBSP are thousands separators in these reports.
_NUMBER_NOISE = str.maketrans("", "", " \u00a0\u202f+")
_DECIMAL_RE = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")
_DATE_RE = re.compile(r"\d{2}\.\d{2}\.\d{4}")


def normalize_text(text: str) -> str:
    return " ".join(text.split())


def normalize_number(text: str) -> str:
    return text.translate(_NUMBER_NOISE).strip()


def parse_money_or_zero(value: str, column: str) -> Money:
    """Parse a money cell, treating a blank cell as zero.

    Blank cells in the statements mean "no movement", so they are not an error.
    Anything else that is not a plain decimal literal raises ``NumberFormatError``
    with the original text and the column name.
    """
    normalized = normalize_number(value)
    if not normalized:
        return Decimal("0")
    if not _DECIMAL_RE.fullmatch(normalized):
        raise NumberFormatError(value.strip(), column)
    try:
        return SETTINGS.decimal_context.create_decimal(normalized)
    except InvalidOperation as exc:
        raise NumberFormatError(value.strip(), column) from exc


def parse_date(value: str) -> date:
    """Parse a ``dd.mm.yyyy`` date."""
    text = value.strip()
    if not _DATE_RE.fullmatch(text):
        raise DateFormatError(text)
    try:
        return datetime.strptime(text, "%d.%m.%Y").date()
    except ValueError as exc:
        raise DateFormatError(text) from exc


def format_date(value: date) -> str:
    return value.strftime("%d.%m.%Y")


def collect_text(element: Tag) -> str:
    return normalize_text(element.get_text())


def capture_text(text: str, pattern: re.Pattern[str]) -> str | None:
    match = pattern.search(text)
    if match is None:
        return None
    return match.group(1)


def capitalize_words(text: str) -> str:
    # Investor names come in any case: "петр петров", "ПЕТР ПЕТРОВ".
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split())


def block_text(element: Tag) -> str:
    """Raw text of an element with ``<br>`` turned into line breaks."""
    parts: list[str] = []
    for node in element.descendants:
        if isinstance(node, Tag):
            if node.name == "br":
                parts.append("\n")
        elif isinstance(node, NavigableString) and not isinstance(node, Comment):
            parts.append(str(node))
    return "".join(parts)
