"""File-system and in-memory statement repositories."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from broker_report.config import SETTINGS
from broker_report.domain.repositories import StatementRepository, StatementSource
from broker_report.infrastructure.parsing.document import RawReport

logger = logging.getLogger(__name__)


def is_statement_name(name: str) -> bool:
    suffix = Path(name).suffix
    return suffix[1:].lower() in SETTINGS.statement_extensions


@dataclass(frozen=True)
class FileStatementSource(StatementSource):
    path: Path

    @property
    def identifier(self) -> str:
        return str(self.path)

    def read_text(self) -> str:
        return RawReport.from_path(self.path).html


@dataclass(frozen=True)
class InMemoryStatementSource(StatementSource):
    name: str
    content: str

    @property
    def identifier(self) -> str:
        return self.name

    def read_text(self) -> str:
        return self.content


class DirectoryStatementRepository(StatementRepository):
    """HTML statements lying directly in one directory, sorted by path."""

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory)

    def list_sources(self) -> Sequence[StatementSource]:
        sources: list[StatementSource] = []
        for path in sorted(self._directory.iterdir()):
            if not path.is_file():
                continue
            if not is_statement_name(path.name):
                logger.debug(f"Skipping non-statement file {path.name}")
                continue
            sources.append(FileStatementSource(path))
        logger.info(f"Found {len(sources)} statements in {self._directory}")
        return sources


class InMemoryStatementRepository(StatementRepository):
    """Statements that were read elsewhere, e.g. uploaded files."""

    def __init__(self, items: Iterable[tuple[str, str | bytes]]) -> None:
        self._sources: list[StatementSource] = []
        for name, content in items:
            if isinstance(content, bytes):
                content = RawReport.from_bytes(content, source=name).html
            self._sources.append(InMemoryStatementSource(name=name, content=content))

    def list_sources(self) -> Sequence[StatementSource]:
        return sorted(
            (source for source in self._sources if is_statement_name(source.identifier)),
            key=lambda source: source.identifier,
        )
