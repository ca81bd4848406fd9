"""Query engine — filter, then sort, then paginate with a pinned tail.

Every function here is pure: the view is derived from a ``TableData`` and a
``ViewState`` and nothing is cached between calls.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from functools import cmp_to_key
from numbers import Real

from table_editor import PAGE_SIZE, TAIL_SIZE
from table_editor.formatting import stringify
from table_editor.models import (
    CellValue,
    DisplayRow,
    QueryResult,
    Row,
    SortConfig,
    TableData,
    ViewState,
)

# ── Filter ───────────────────────────────────────────────────────


def filter_rows(rows: Sequence[Row], term: str) -> list[Row]:
    """Keep rows where any value contains *term* (case-insensitive)."""
    if not term:
        return list(rows)
    needle = term.lower()
    return [
        row for row in rows
        if any(needle in stringify(v).lower() for v in row.values.values())
    ]


# ── Sort ─────────────────────────────────────────────────────────


def _is_number(value: CellValue) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def compare_values(a: CellValue, b: CellValue, *, descending: bool = False) -> int:
    """Three-way compare for sorting.

    Missing values go last whatever the direction; two numbers compare
    numerically; anything else compares as lowercased text.
    """
    if a == b:
        return 0
    if a is None:
        return 1
    if b is None:
        return -1

    sign = -1 if descending else 1
    if _is_number(a) and _is_number(b):
        return sign * ((a > b) - (a < b))  # type: ignore[operator]

    a_text = stringify(a).lower()
    b_text = stringify(b).lower()
    return sign * ((a_text > b_text) - (a_text < b_text))


def sort_rows(rows: Sequence[Row], sort: SortConfig | None) -> list[Row]:
    """Stable sort of *rows* by ``sort.key``; ``None`` keeps the original order."""
    if sort is None:
        return list(rows)
    key = sort.key
    descending = sort.descending

    def _cmp(r1: Row, r2: Row) -> int:
        return compare_values(r1.get(key), r2.get(key), descending=descending)

    return sorted(rows, key=cmp_to_key(_cmp))


# ── Paginate ─────────────────────────────────────────────────────


def max_page_for(total: int, page_size: int = PAGE_SIZE, tail_size: int = TAIL_SIZE) -> int:
    if total <= page_size + tail_size:
        return 1
    return math.ceil((total - tail_size) / page_size)


def paginate(
    rows: Sequence[Row],
    page: int,
    *,
    total_rows: int | None = None,
    page_size: int = PAGE_SIZE,
    tail_size: int = TAIL_SIZE,
) -> QueryResult:
    """Slice one page of *rows* and pin the last ``tail_size`` rows below it.

    Short results (at most ``page_size + tail_size`` rows) are shown whole.
    Tail rows keep their absolute position in *rows* as display index.
    """
    total = len(rows)
    total_rows = total if total_rows is None else total_rows

    if total <= page_size + tail_size:
        return QueryResult(
            rows=[DisplayRow(i + 1, row) for i, row in enumerate(rows)],
            total_filtered=total,
            total_rows=total_rows,
            page=1,
            max_page=1,
            paginated=False,
        )

    max_page = max_page_for(total, page_size, tail_size)
    page = min(max(page, 1), max_page)
    tail_start = total - tail_size
    start = (page - 1) * page_size
    end = min(start + page_size, tail_start)

    body = [DisplayRow(start + i + 1, row) for i, row in enumerate(rows[start:end])]
    tail = [
        DisplayRow(tail_start + offset + 1, row, tail=True)
        for offset, row in enumerate(rows[tail_start:])
    ]
    return QueryResult(
        rows=body + tail,
        total_filtered=total,
        total_rows=total_rows,
        page=page,
        max_page=max_page,
        paginated=True,
        hidden_count=tail_start - end,
    )


def query(table: TableData, view: ViewState) -> QueryResult:
    """Derive the display rows for *view*: filter, then sort, then paginate."""
    rows = filter_rows(table.rows, view.search_term)
    rows = sort_rows(rows, view.sort)
    return paginate(rows, view.page, total_rows=len(table.rows))


# ── Pager helpers ────────────────────────────────────────────────


def page_numbers(page: int, max_page: int, width: int = 5) -> list[int]:
    """Page buttons to offer: the first *width* pages, sliding once past page 3."""
    first = 1
    if max_page > width and page > 3:
        first = page - 2
    return [n for n in range(first, first + min(width, max_page)) if n <= max_page]


def page_range_label(result: QueryResult, page_size: int = PAGE_SIZE) -> str:
    """``"31 - 60 records + last 5"`` style summary of the visible body."""
    tail_size = sum(1 for r in result.rows if r.tail)
    first = (result.page - 1) * page_size + 1
    last = min(result.page * page_size, result.total_filtered - tail_size)
    return f"{first:,} - {last:,} records + last {tail_size}"
