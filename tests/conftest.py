from pathlib import Path

import pytest

from broker_report.infrastructure.parsing.document import RawReport

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def broker_raw() -> RawReport:
    return RawReport.from_path(FIXTURES_DIR / "broker_report.html")


@pytest.fixture
def iis_raw() -> RawReport:
    return RawReport.from_path(FIXTURES_DIR / "iis_report.html")
