"""Data models used across the package."""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from numbers import Integral
from pathlib import PurePath
from typing import Any, Literal, Union

CellValue = Union[str, int, float, None]
SortDirection = Literal["asc", "desc"]
EditKind = Literal["rename", "drop-column", "drop-row"]

_SORT_DIRECTIONS: tuple[str, ...] = ("asc", "desc")
_EDIT_KINDS: tuple[str, ...] = ("rename", "drop-column", "drop-row")


def _to_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 1:
        raise ValueError(f"{field_name} must be >= 1")
    return result


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


def _to_string_list(values: Sequence[Any] | None, field_name: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of strings")
    normalized: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"{field_name} items must be strings")
        normalized.append(item)
    return normalized


# ── Table ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Row:
    """One record, keyed by header name.

    ``row_id`` is assigned at parse time and survives every edit, so rows
    are removed by id rather than by object identity.
    """

    row_id: int
    values: Mapping[str, CellValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "row_id", _to_positive_int(self.row_id, "row_id"))
        object.__setattr__(self, "values", dict(self.values))

    def get(self, header: str) -> CellValue:
        return self.values.get(header)


@dataclass
class TableData:
    """Canonical in-memory table: ordered unique headers plus ordered rows.

    Contract invariants: headers are unique, row ids are unique, and every
    row's keys are a subset of ``headers``.
    """

    headers: list[str] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.headers = _to_string_list(self.headers, "headers")
        if len(set(self.headers)) != len(self.headers):
            dupes = sorted(h for h, n in Counter(self.headers).items() if n > 1)
            raise ValueError(f"headers must be unique (duplicated: {', '.join(dupes)})")

        self.rows = list(self.rows)
        known = set(self.headers)
        row_ids: set[int] = set()
        for row in self.rows:
            if not isinstance(row, Row):
                raise TypeError("rows items must be Row instances")
            if row.row_id in row_ids:
                raise ValueError(f"row ids must be unique (duplicated: {row.row_id})")
            row_ids.add(row.row_id)
            unknown = set(row.values) - known
            if unknown:
                raise ValueError(
                    f"row {row.row_id} has keys not in headers: {', '.join(sorted(unknown))}"
                )

    def find_row(self, row_id: int) -> Row | None:
        for row in self.rows:
            if row.row_id == row_id:
                return row
        return None

    def to_dict(self) -> dict[str, Any]:
        """Return the submission payload ``{"headers": [...], "rows": [...]}``."""
        return {
            "headers": list(self.headers),
            "rows": [dict(row.values) for row in self.rows],
        }


@dataclass(frozen=True)
class UploadedFile:
    """A file blob as delivered by an upload: name, bytes and optional MIME type."""

    name: str
    content: bytes
    mime_type: str | None = None

    @property
    def suffix(self) -> str:
        return PurePath(self.name).suffix.lower()


# ── View state ───────────────────────────────────────────────────


@dataclass(frozen=True)
class SortConfig:
    key: str
    direction: SortDirection = "asc"

    def __post_init__(self) -> None:
        if self.direction not in _SORT_DIRECTIONS:
            raise ValueError(f"Invalid sort direction: {self.direction!r}. Use asc/desc.")

    @property
    def descending(self) -> bool:
        return self.direction == "desc"


@dataclass(frozen=True)
class ViewState:
    """Transient, user-supplied query parameters for the grid.

    Changing the search term or the sort sends the view back to page 1.
    """

    search_term: str = ""
    sort: SortConfig | None = None
    page: int = 1

    def __post_init__(self) -> None:
        if not isinstance(self.search_term, str):
            raise TypeError("search_term must be a string")
        object.__setattr__(self, "page", _to_positive_int(self.page, "page"))

    def with_search(self, term: str) -> ViewState:
        if term == self.search_term:
            return self
        return replace(self, search_term=term, page=1)

    def with_sort(self, sort: SortConfig | None) -> ViewState:
        if sort == self.sort:
            return self
        return replace(self, sort=sort, page=1)

    def toggle_sort(self, key: str) -> ViewState:
        """Header click: ascending first, descending on a repeat click."""
        direction: SortDirection = "asc"
        if self.sort is not None and self.sort.key == key and self.sort.direction == "asc":
            direction = "desc"
        return replace(self, sort=SortConfig(key, direction), page=1)

    def with_page(self, page: int) -> ViewState:
        return replace(self, page=max(1, int(page)))


# ── Query output ─────────────────────────────────────────────────


@dataclass(frozen=True)
class DisplayRow:
    index: int
    row: Row
    tail: bool = False


@dataclass
class QueryResult:
    """Display-ready slice of a table for one view state."""

    rows: list[DisplayRow] = field(default_factory=list)
    total_filtered: int = 0
    total_rows: int = 0
    page: int = 1
    max_page: int = 1
    paginated: bool = False
    hidden_count: int = 0

    def __post_init__(self) -> None:
        self.total_filtered = _to_non_negative_int(self.total_filtered, "total_filtered")
        self.total_rows = _to_non_negative_int(self.total_rows, "total_rows")
        self.hidden_count = _to_non_negative_int(self.hidden_count, "hidden_count")
        self.page = _to_positive_int(self.page, "page")
        self.max_page = _to_positive_int(self.max_page, "max_page")
        if self.total_filtered > self.total_rows:
            raise ValueError("total_filtered must be <= total_rows")

    @property
    def has_tail_gap(self) -> bool:
        return self.hidden_count > 0

    @property
    def no_match(self) -> bool:
        return self.total_filtered == 0

    @property
    def gap_label(self) -> str:
        return f"... {self.hidden_count} more records ..."


# ── Edits ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Edit:
    """One structural edit directive.

    ``target`` is a header name for ``rename``/``drop-column`` and a row id
    for ``drop-row``; ``new_name`` is only used by ``rename``.
    """

    kind: EditKind
    target: str | int
    new_name: str | None = None

    def __post_init__(self) -> None:
        if self.kind not in _EDIT_KINDS:
            raise ValueError(f"Invalid edit kind: {self.kind!r}")
        if self.kind == "rename" and self.new_name is None:
            raise ValueError("rename edits need a new_name")
