"""Terminal grid rendering for a query result."""

from __future__ import annotations

from rich.table import Table as RichTable
from rich.text import Text

from table_editor.formatting import DEFAULT_CLASSIFIER, ColumnClassifier, format_cell
from table_editor.models import QueryResult, SortConfig, TableData
from table_editor.query import page_numbers, page_range_label

NO_MATCH_TEXT = "No data matches your search"


def _header_label(header: str, sort: SortConfig | None) -> str:
    if sort is not None and sort.key == header:
        return f"{header} {'↓' if sort.descending else '↑'}"
    return header


def build_grid(
    table: TableData,
    result: QueryResult,
    *,
    sort: SortConfig | None = None,
    classifier: ColumnClassifier = DEFAULT_CLASSIFIER,
) -> RichTable:
    """Lay out *result* as a rich table: row number column, then one column per header.

    A dim separator row marks the records hidden between the page body and
    the pinned tail.
    """
    grid = RichTable(show_lines=False, header_style="bold")
    grid.add_column("#", justify="right", style="dim")
    for header in table.headers:
        grid.add_column(_header_label(header, sort), overflow="fold", min_width=8)

    if result.no_match:
        grid.add_row("", Text(NO_MATCH_TEXT, style="italic"), *[""] * (len(table.headers) - 1))
        return grid

    gap_drawn = False
    for display_row in result.rows:
        if display_row.tail and result.has_tail_gap and not gap_drawn:
            grid.add_row("", Text(result.gap_label, style="dim"), *[""] * (len(table.headers) - 1))
            gap_drawn = True
        grid.add_row(
            str(display_row.index),
            *[format_cell(display_row.row.get(h), h, classifier) for h in table.headers],
        )
    return grid


def summary_line(table: TableData, result: QueryResult) -> str:
    return (
        f"{result.total_filtered} rows found (Total: {result.total_rows}) "
        f"x {len(table.headers)} columns"
    )


def pager_line(result: QueryResult) -> str:
    """``Page 2 of 4 | 31 - 60 records + last 5 | pages: 1 [2] 3 4``."""
    if not result.paginated:
        return ""
    pages = " ".join(
        f"[{n}]" if n == result.page else str(n)
        for n in page_numbers(result.page, result.max_page)
    )
    return (
        f"Page {result.page} of {result.max_page} | {page_range_label(result)} "
        f"| pages: {pages}"
    )
