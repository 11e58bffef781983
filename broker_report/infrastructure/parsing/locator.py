"""Locate report tables by the text of their header rows."""
from __future__ import annotations

from typing import Sequence

from bs4 import Tag

from broker_report.config import SETTINGS
from broker_report.infrastructure.parsing.document import StatementDocument
from broker_report.infrastructure.parsing.utils import collect_text


def header_row_matches(row: Tag, required_headers: Sequence[str]) -> bool:
    headers = [collect_text(cell) for cell in row.find_all(["td", "th"])]
    return all(any(target in header for header in headers) for target in required_headers)


def find_table_with_headers(
    document: StatementDocument,
    required_headers: Sequence[str],
    header_depth: int | None = None,
    selector: str = "table",
) -> Tag | None:
    """Return the first table whose header rows contain every required phrase.

    Up to ``header_depth`` leading rows are examined (default 1) and each row is
    checked on its own: one row must hold all the phrases, matched as substrings.
    Headers split across two rows are not joined. ``None`` means the section is
    absent from this statement variant.
    """
    depth = header_depth if header_depth is not None else SETTINGS.default_header_depth
    for table in document.select(selector):
        rows = table.find_all("tr", limit=depth)
        if any(header_row_matches(row, required_headers) for row in rows):
            return table
    return None
