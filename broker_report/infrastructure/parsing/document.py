"""Raw statement text and the parsed HTML tree built from it."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

from broker_report.config import SETTINGS
from broker_report.domain.errors import MarkupError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawReport:
    """Statement HTML that has not been parsed yet."""

    html: str
    source: str | None = None

    @classmethod
    def from_str(cls, html: str, source: str | None = None) -> "RawReport":
        return cls(html=html, source=source)

    @classmethod
    def from_bytes(cls, data: bytes, source: str | None = None) -> "RawReport":
        try:
            html = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MarkupError(f"statement is not valid UTF-8: {exc}") from exc
        return cls(html=html, source=source)

    @classmethod
    def from_reader(cls, reader: IO[str] | IO[bytes], source: str | None = None) -> "RawReport":
        content = reader.read()
        if isinstance(content, bytes):
            return cls.from_bytes(content, source=source)
        return cls(html=content, source=source)

    @classmethod
    def from_path(cls, path: Path | str) -> "RawReport":
        path = Path(path)
        return cls.from_bytes(path.read_bytes(), source=str(path))


class StatementDocument:
    """Parsed statement tree offering element lookup by CSS selector."""

    def __init__(self, soup: BeautifulSoup) -> None:
        self._soup = soup

    @classmethod
    def parse(cls, raw: RawReport) -> "StatementDocument":
        try:
            soup = BeautifulSoup(raw.html, SETTINGS.html_parser)
        except ParserRejectedMarkup as exc:
            raise MarkupError(str(exc)) from exc
        logger.debug(f"Parsed statement markup ({len(raw.html)} chars) from {raw.source or '<memory>'}")
        return cls(soup)

    def select(self, selector: str) -> list[Tag]:
        return self._soup.select(selector)

    def select_one(self, selector: str) -> Tag | None:
        return self._soup.select_one(selector)
