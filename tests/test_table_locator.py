from broker_report.infrastructure.parsing.document import RawReport, StatementDocument
from broker_report.infrastructure.parsing.locator import find_table_with_headers


def make_document(body: str) -> StatementDocument:
    return StatementDocument.parse(RawReport.from_str(f"<html><body>{body}</body></html>"))


def make_table(table_id: str, *rows: list[str]) -> str:
    body = "".join("<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>" for row in rows)
    return f'<table id="{table_id}">{body}</table>'


def test_first_matching_table_wins():
    document = make_document(
        make_table("other", ["Дата", "Код"])
        + make_table("first", ["Описание операции", "Сумма, руб.", "Валюта"])
        + make_table("second", ["Описание", "Сумма", "Валюта"])
    )

    table = find_table_with_headers(document, ["Описание", "Сумма", "Валюта"])

    assert table is not None
    assert table["id"] == "first"


def test_missing_phrase_rejects_table():
    document = make_document(make_table("t", ["Описание", "Сумма"]))

    assert find_table_with_headers(document, ["Описание", "Сумма", "Валюта"]) is None


def test_headers_in_second_row_need_depth():
    document = make_document(make_table("t", ["Портфель"], ["ISIN", "Рыночная цена"], ["1", "2"]))

    assert find_table_with_headers(document, ["ISIN", "Рыночная цена"]) is None
    found = find_table_with_headers(document, ["ISIN", "Рыночная цена"], header_depth=2)
    assert found is not None and found["id"] == "t"


def test_phrases_split_across_rows_do_not_match():
    document = make_document(make_table("t", ["ISIN"], ["Рыночная цена"]))

    assert find_table_with_headers(document, ["ISIN", "Рыночная цена"], header_depth=2) is None


def test_th_cells_and_whitespace_are_normalized():
    document = make_document(
        '<table id="t"><tr><th>Рыночная\u00a0стоимость,\n без НКД</th><th>ISIN</th></tr></table>'
    )

    table = find_table_with_headers(document, ["Рыночная стоимость, без НКД", "ISIN"])

    assert table is not None


def test_selector_narrows_candidates():
    document = make_document(
        make_table("plain", ["Торговая площадка"]) + '<table class="RatingAssets" id="rating"><tr><td>x</td></tr></table>'
    )

    table = find_table_with_headers(document, [], selector="table.RatingAssets")

    assert table is not None and table["id"] == "rating"


def test_no_tables():
    assert find_table_with_headers(make_document("<p>nothing</p>"), ["ISIN"]) is None
