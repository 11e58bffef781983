"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from typing import Protocol, Sequence


class StatementSource(Protocol):
    """One statement whose text has been or can be read."""

    @property
    def identifier(self) -> str:
        ...

    def read_text(self) -> str:
        ...


class StatementRepository(Protocol):
    """Provides the statements of a batch."""

    def list_sources(self) -> Sequence[StatementSource]:
        ...
