"""Structural table edits — pure functions returning a new ``TableData``."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from table_editor.errors import (
    DuplicateHeaderError,
    EmptyHeaderError,
    InvalidEditError,
    UnknownHeaderError,
)
from table_editor.models import Edit, Row, TableData

# ── Column / row edits ───────────────────────────────────────────


def remove_column(table: TableData, name: str) -> TableData:
    """Drop *name* from the headers and every row. Unknown names are a no-op."""
    if name not in table.headers:
        return TableData(headers=table.headers, rows=table.rows)

    headers = [h for h in table.headers if h != name]
    rows = [
        Row(row.row_id, {k: v for k, v in row.values.items() if k != name})
        if name in row.values
        else row
        for row in table.rows
    ]
    return TableData(headers=headers, rows=rows)


def remove_row(table: TableData, row: Row | int) -> TableData:
    """Drop exactly the row with *row*'s id; unmatched ids leave the table as is."""
    row_id = row.row_id if isinstance(row, Row) else row
    return TableData(
        headers=table.headers,
        rows=[r for r in table.rows if r.row_id != row_id],
    )


def rename_header(table: TableData, old: str, new: str) -> TableData:
    """Rename column *old* to *new*, keeping its position and every row id.

    Raises
    ------
    EmptyHeaderError
        If *new* is empty or whitespace only.
    UnknownHeaderError
        If *old* is not a column.
    DuplicateHeaderError
        If *new* already names a different column.
    """
    if not new.strip():
        raise EmptyHeaderError("Column name cannot be empty")
    if old not in table.headers:
        raise UnknownHeaderError(f"No column named {old!r}")
    if new != old and new in table.headers:
        raise DuplicateHeaderError("A column with this name already exists")
    if new == old:
        return TableData(headers=table.headers, rows=table.rows)

    headers = [new if h == old else h for h in table.headers]
    rows = [
        Row(row.row_id, {(new if k == old else k): v for k, v in row.values.items()})
        if old in row.values
        else row
        for row in table.rows
    ]
    return TableData(headers=headers, rows=rows)


# ── Edit directives ──────────────────────────────────────────────


def apply_edit(table: TableData, edit: Edit) -> TableData:
    if edit.kind == "rename":
        return rename_header(table, str(edit.target), str(edit.new_name))
    if edit.kind == "drop-column":
        return remove_column(table, str(edit.target))
    return remove_row(table, int(edit.target))


def apply_edits(table: TableData, edits: Iterable[Edit]) -> TableData:
    """Apply *edits* in order; the first rejected edit aborts the whole batch."""
    for edit in edits:
        table = apply_edit(table, edit)
    return table


def parse_rename(raw: str) -> Edit:
    """Parse an ``old=new`` rename pair."""
    if "=" not in raw:
        raise InvalidEditError(f"Invalid rename value: {raw!r}  (expected old=new)")
    old, new = raw.split("=", 1)
    old = old.strip()
    if not old:
        raise InvalidEditError("rename entries must name the column to rename (old=new)")
    return Edit("rename", old, new.strip())


def parse_row_id(raw: str) -> int:
    try:
        row_id = int(raw.strip())
    except ValueError as exc:
        raise InvalidEditError(f"Invalid row id: {raw!r}  (expected a positive integer)") from exc
    if row_id < 1:
        raise InvalidEditError(f"Invalid row id: {raw!r}  (expected a positive integer)")
    return row_id


def parse_edit(line: str) -> Edit:
    """Parse one edits-file directive.

    Accepted forms::

        rename Old Name=New Name
        drop-column Notes
        drop-row 12
    """
    command, _, arg = line.strip().partition(" ")
    arg = arg.strip()
    if not arg:
        raise InvalidEditError(f"Edit directive needs an argument: {line.strip()!r}")
    if command == "rename":
        return parse_rename(arg)
    if command == "drop-column":
        return Edit("drop-column", arg)
    if command == "drop-row":
        return Edit("drop-row", parse_row_id(arg))
    raise InvalidEditError(
        f"Unknown edit directive {command!r} (expected rename, drop-column or drop-row)"
    )


def load_edits(path: Path | None) -> list[Edit]:
    """Return the edit directives listed in an edits file."""
    if not path:
        return []
    if not path.exists():
        raise InvalidEditError(f"Edits file not found: {path} (expected lines like rename a=b)")
    if path.is_dir():
        raise InvalidEditError(f"Edits file is a directory, not a file: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InvalidEditError(f"Cannot read edits file {path}: {exc}") from exc

    edits: list[Edit] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        edits.append(parse_edit(stripped))
    return edits
