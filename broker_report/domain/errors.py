"""Errors raised while parsing and aggregating broker reports."""
from __future__ import annotations


class ReportError(Exception):
    """Base class for every report parsing failure."""


class MarkupError(ReportError):
    def __init__(self, message: str) -> None:
        super().__init__(f"HTML parsing error: {message}")
        self.message = message


class TableNotFoundError(ReportError):
    """The expected table is absent from this statement variant."""

    def __init__(self, table: str) -> None:
        super().__init__(f"Table '{table}' not found")
        self.table = table


class NumberFormatError(ReportError):
    def __init__(self, value: str, column: str) -> None:
        super().__init__(f"Invalid number '{value}' in column '{column}'")
        self.value = value
        self.column = column


class DateFormatError(ReportError):
    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid date '{value}'")
        self.value = value


class MissingFieldError(ReportError):
    def __init__(self, field: str) -> None:
        super().__init__(f"Required field '{field}' missing")
        self.field = field


class PatternMismatchError(ReportError):
    """Text did not have the shape a regular expression expected."""

    def __init__(self, text: str) -> None:
        super().__init__(f"Pattern did not match: {text}")
        self.text = text
