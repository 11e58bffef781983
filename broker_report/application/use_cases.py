"""Application services orchestrating batch report loading."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

from broker_report.domain.errors import ReportError
from broker_report.domain.models import Report
from broker_report.domain.report_set import ReportSet
from broker_report.domain.repositories import StatementRepository, StatementSource
from broker_report.infrastructure.parsing.builder import ParseOptions, ReportBuilder
from broker_report.infrastructure.parsing.document import RawReport
from broker_report.infrastructure.repositories.directory_repositories import (
    DirectoryStatementRepository,
    is_statement_name,
)

logger = logging.getLogger(__name__)

ConfigureBuilder = Callable[[ReportBuilder], Report]


def _parse_all(builder: ReportBuilder) -> Report:
    return builder.parse()


def build_report_set(
    sources: Iterable[StatementSource],
    configure: ConfigureBuilder | None = None,
) -> ReportSet:
    """Parse every HTML statement of a batch into one ``ReportSet``.

    Sources are filtered by extension and sorted by identifier so repeated runs
    give identical aggregates. The first failing statement aborts the batch.
    """
    configure = configure or _parse_all
    ordered = sorted(
        (source for source in sources if is_statement_name(source.identifier)),
        key=lambda source: source.identifier,
    )

    reports: list[Report] = []
    for source in ordered:
        raw = RawReport.from_str(source.read_text(), source=source.identifier)
        try:
            reports.append(configure(ReportBuilder(raw)))
        except ReportError:
            logger.error(f"Failed to parse statement {source.identifier}")
            raise
    logger.info(f"Loaded {len(reports)} reports")
    return ReportSet(reports=tuple(reports))


@dataclass(slots=True)
class ReportLoadingContext:
    repository: StatementRepository
    options: ParseOptions = field(default_factory=ParseOptions)


class LoadReportSetUseCase:
    def __init__(self, context: ReportLoadingContext) -> None:
        self._context = context

    def execute(self) -> ReportSet:
        options = self._context.options
        sources = self._context.repository.list_sources()
        return build_report_set(sources, lambda builder: builder.with_options(options).parse())


def load_report_set(directory: Path | str, options: ParseOptions | None = None) -> ReportSet:
    context = ReportLoadingContext(
        repository=DirectoryStatementRepository(directory),
        options=options or ParseOptions.everything(),
    )
    return LoadReportSetUseCase(context).execute()
