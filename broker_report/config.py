"""Central configuration for the broker report package."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Context


@dataclass(slots=True, frozen=True)
class Settings:
    decimal_context: Context
    default_header_depth: int
    statement_extensions: frozenset[str]
    unknown_market_name: str
    no_limit_sentinel: str
    heading_selector: str
    html_parser: str


SETTINGS = Settings(
    decimal_context=Context(prec=28),
    default_header_depth=1,
    statement_extensions=frozenset({"html", "htm"}),
    unknown_market_name="Неизвестно",
    no_limit_sentinel="ограничений нет",
    heading_selector="h3",
    html_parser="lxml",
)
