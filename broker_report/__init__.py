"""Parsing and merging of Sberbank HTML broker reports."""
from broker_report.application.use_cases import (
    LoadReportSetUseCase,
    ReportLoadingContext,
    build_report_set,
    load_report_set,
)
from broker_report.domain.errors import (
    DateFormatError,
    MarkupError,
    MissingFieldError,
    NumberFormatError,
    PatternMismatchError,
    ReportError,
    TableNotFoundError,
)
from broker_report.domain.models import AccountId, AccountKind, CashFlowKind, Report
from broker_report.domain.report_set import ReportSet
from broker_report.infrastructure.parsing.builder import ParseOptions, ReportBuilder
from broker_report.infrastructure.parsing.document import RawReport

__all__ = [
    "AccountId",
    "AccountKind",
    "CashFlowKind",
    "DateFormatError",
    "LoadReportSetUseCase",
    "MarkupError",
    "MissingFieldError",
    "NumberFormatError",
    "ParseOptions",
    "PatternMismatchError",
    "RawReport",
    "Report",
    "ReportBuilder",
    "ReportError",
    "ReportLoadingContext",
    "ReportSet",
    "TableNotFoundError",
    "build_report_set",
    "load_report_set",
]
