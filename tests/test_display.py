from __future__ import annotations

from rich.console import Console

from table_editor.display import NO_MATCH_TEXT, build_grid, pager_line, summary_line
from table_editor.models import Row, SortConfig, TableData, ViewState
from table_editor.query import query


def _render(renderable: object) -> str:
    console = Console(record=True, width=120)
    console.print(renderable)
    return console.export_text()


def _numbered(n: int) -> TableData:
    return TableData(
        headers=["n", "created date"],
        rows=[Row(i, {"n": i, "created date": "2024-02-01"}) for i in range(1, n + 1)],
    )


def test_grid_marks_sorted_header_and_formats_dates() -> None:
    table = _numbered(3)
    sort = SortConfig("n", "desc")
    result = query(table, ViewState(sort=sort))

    text = _render(build_grid(table, result, sort=sort))

    assert "n ↓" in text
    assert "Feb 1, 2024" in text
    assert "2024-02-01" not in text


def test_grid_inserts_gap_row_before_tail() -> None:
    table = _numbered(40)
    result = query(table, ViewState())

    lines = _render(build_grid(table, result)).splitlines()

    gap_line = next(i for i, line in enumerate(lines) if "... 5 more records ..." in line)
    assert " 30 " in lines[gap_line - 1]
    assert " 36 " in lines[gap_line + 1]


def test_grid_shows_no_match_message() -> None:
    table = _numbered(3)
    result = query(table, ViewState(search_term="zzz"))

    assert NO_MATCH_TEXT in _render(build_grid(table, result))


def test_summary_and_pager_lines() -> None:
    table = _numbered(100)
    result = query(table, ViewState(page=2))

    assert summary_line(table, result) == "100 rows found (Total: 100) x 2 columns"
    assert pager_line(result) == "Page 2 of 4 | 31 - 60 records + last 5 | pages: 1 [2] 3 4"


def test_pager_line_is_empty_for_short_results() -> None:
    assert pager_line(query(_numbered(35), ViewState())) == ""
