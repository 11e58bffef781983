import shutil
from pathlib import Path

import pytest

from broker_report.application.use_cases import (
    LoadReportSetUseCase,
    ReportLoadingContext,
    build_report_set,
    load_report_set,
)
from broker_report.domain.errors import MarkupError, MissingFieldError, PatternMismatchError
from broker_report.infrastructure.parsing.builder import ParseOptions
from broker_report.infrastructure.repositories.directory_repositories import (
    DirectoryStatementRepository,
    InMemoryStatementRepository,
    InMemoryStatementSource,
    is_statement_name,
)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("report.html", True),
        ("REPORT.HTM", True),
        ("report.Html", True),
        ("report.xlsx", False),
        ("report.html.bak", False),
        ("html", False),
    ],
)
def test_is_statement_name(name: str, expected: bool):
    assert is_statement_name(name) is expected


def test_directory_repository_sorts_and_filters(tmp_path: Path):
    for name in ["b.html", "a.HTM", "notes.txt", "c.htm"]:
        (tmp_path / name).write_text("<html></html>", encoding="utf-8")
    (tmp_path / "nested.html").mkdir()

    sources = DirectoryStatementRepository(tmp_path).list_sources()

    assert [Path(source.identifier).name for source in sources] == ["a.HTM", "b.html", "c.htm"]


def test_directory_repository_missing_directory(tmp_path: Path):
    with pytest.raises(OSError):
        DirectoryStatementRepository(tmp_path / "missing").list_sources()


def test_in_memory_repository_decodes_bytes():
    repository = InMemoryStatementRepository([("b.html", "<p>b</p>"), ("a.htm", "<p>a</p>".encode("utf-8")), ("x.csv", "")])

    sources = repository.list_sources()

    assert [source.identifier for source in sources] == ["a.htm", "b.html"]
    assert sources[0].read_text() == "<p>a</p>"


def test_in_memory_repository_rejects_invalid_utf8():
    with pytest.raises(MarkupError):
        InMemoryStatementRepository([("a.html", b"\xff\xfe\xfa")])


def test_load_report_set_from_directory(fixtures_dir: Path):
    report_set = load_report_set(fixtures_dir)

    assert len(report_set) == 2
    assert [report.meta.contract_number for report in report_set] == ["100ABC", "I000XYZ"]


def test_use_case_applies_options(fixtures_dir: Path):
    context = ReportLoadingContext(
        repository=DirectoryStatementRepository(fixtures_dir),
        options=ParseOptions.meta_only(),
    )

    report_set = LoadReportSetUseCase(context).execute()

    assert all(report.cash_flow_summary is None for report in report_set)


def test_build_report_set_orders_sources_by_identifier(fixtures_dir: Path):
    broker = (fixtures_dir / "broker_report.html").read_text(encoding="utf-8")
    iis = (fixtures_dir / "iis_report.html").read_text(encoding="utf-8")
    sources = [
        InMemoryStatementSource("2.html", broker),
        InMemoryStatementSource("1.html", iis),
        InMemoryStatementSource("readme.txt", "not a statement"),
    ]

    report_set = build_report_set(sources)

    assert [report.source for report in report_set] == ["1.html", "2.html"]


def test_build_report_set_aborts_on_first_bad_statement(fixtures_dir: Path):
    broker = (fixtures_dir / "broker_report.html").read_text(encoding="utf-8")
    sources = [
        InMemoryStatementSource("a.html", broker),
        InMemoryStatementSource("b.html", "<html><body><p>empty</p></body></html>"),
    ]

    with pytest.raises(MissingFieldError):
        build_report_set(sources)


def test_load_report_set_with_broken_file(fixtures_dir: Path, tmp_path: Path):
    shutil.copy(fixtures_dir / "broker_report.html", tmp_path / "a.html")
    (tmp_path / "b.html").write_text("<html><h3>Отчет</h3></html>", encoding="utf-8")

    with pytest.raises(PatternMismatchError):
        load_report_set(tmp_path)
