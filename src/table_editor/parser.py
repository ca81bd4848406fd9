"""Parser — turn an uploaded CSV or Excel file into a ``TableData``."""

from __future__ import annotations

import io
import re
import zipfile
from collections.abc import Iterable, Sequence
from datetime import date, datetime, time
from itertools import count
from typing import Any, Callable, Literal, cast

import pandas as pd
from openpyxl import load_workbook
from openpyxl.cell.cell import Cell
from openpyxl.utils.exceptions import InvalidFileException

from table_editor.errors import (
    EmptyFileError,
    NoHeadersFoundError,
    UnreadableFileError,
    UnsupportedFormatError,
)
from table_editor.formatting import stringify
from table_editor.models import Row, TableData, UploadedFile

FileFormat = Literal["csv", "xlsx", "xls"]

_CSV_ENCODINGS: tuple[str, ...] = ("utf-8-sig", "utf-8", "latin-1")
_OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
_DECIMALS_RE = re.compile(r"0\.(0+)")


# ── Format dispatch ──────────────────────────────────────────────


def detect_format(upload: UploadedFile) -> FileFormat:
    """Pick a parser: extension first, then MIME type, else fail.

    Raises
    ------
    UnsupportedFormatError
        If neither the extension nor the MIME type names a supported format.
    """
    suffix = upload.suffix
    if suffix == ".csv":
        return "csv"
    if suffix == ".xlsx":
        return "xlsx"
    if suffix == ".xls":
        return "xls"

    mime = (upload.mime_type or "").lower()
    if "spreadsheet" in mime or "ms-excel" in mime:
        return "xls" if upload.content.startswith(_OLE2_MAGIC) else "xlsx"
    if "text/csv" in mime:
        return "csv"

    raise UnsupportedFormatError(
        f"Unsupported file format for {upload.name!r}. Please upload a CSV or Excel file "
        "(.csv, .xlsx, .xls)."
    )


def parse_file(upload: UploadedFile) -> TableData:
    """Parse *upload* into a table. Row ids start at 1 in file order."""
    fmt = detect_format(upload)
    if not upload.content:
        raise EmptyFileError(f"Empty file: {upload.name}")

    if fmt == "csv":
        return parse_csv_text(decode_text(upload.content))
    if fmt == "xlsx":
        grid, first_column = read_xlsx_grid(upload.content)
        return grid_to_table(grid, first_column=first_column)
    return grid_to_table(read_xls_grid(upload.content))


# ── Shared helpers ───────────────────────────────────────────────


def unique_headers(names: Iterable[str]) -> list[str]:
    """Suffix repeated names with `` (2)``, `` (3)``… so every header is unique."""
    result: list[str] = []
    seen: set[str] = set()
    for name in names:
        candidate = name
        n = 2
        while candidate in seen:
            candidate = f"{name} ({n})"
            n += 1
        seen.add(candidate)
        result.append(candidate)
    return result


def _synthesize_blank_headers(names: Sequence[str], first_column: int = 1) -> list[str]:
    return [
        name if name else f"Column {idx}"
        for idx, name in enumerate(names, start=first_column)
    ]


# ── CSV ──────────────────────────────────────────────────────────


def decode_text(content: bytes) -> str:
    last_exc: Exception | None = None
    for encoding in _CSV_ENCODINGS:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError as exc:
            last_exc = exc
    raise UnreadableFileError("Could not decode CSV text") from last_exc


def parse_csv_text(text: str) -> TableData:
    """Naive CSV split: lines on ``\\n``, fields on ``,``, every field trimmed.

    Quoted commas and embedded newlines are not supported. Short rows are
    padded with ``""``; extra trailing fields are ignored.
    """
    stripped = text.strip()
    if not stripped:
        raise EmptyFileError("Empty file")

    lines = stripped.split("\n")
    raw_headers = [h.strip() for h in lines[0].split(",")]
    if not any(raw_headers):
        raise NoHeadersFoundError("No headers found in CSV file")
    headers = unique_headers(_synthesize_blank_headers(raw_headers))

    ids = count(1)
    rows: list[Row] = []
    for line in lines[1:]:
        values = [v.strip() for v in line.split(",")]
        row_values = {
            header: values[idx] if idx < len(values) else ""
            for idx, header in enumerate(headers)
        }
        rows.append(Row(next(ids), row_values))
    return TableData(headers=headers, rows=rows)


# ── Spreadsheets ─────────────────────────────────────────────────


def _fixed_decimals(number_format: str) -> int | None:
    match = _DECIMALS_RE.search(number_format)
    if match:
        return len(match.group(1))
    if "0" in number_format:
        return 0
    return None


def _render_number(value: float, number_format: str) -> str:
    fmt = number_format or "General"
    if fmt == "General" or fmt == "@":
        return stringify(value)
    decimals = _fixed_decimals(fmt)
    if "%" in fmt:
        return f"{value * 100:.{decimals or 0}f}%"
    if decimals is None:
        return stringify(value)
    if "," in fmt:
        return f"{value:,.{decimals}f}"
    return f"{value:.{decimals}f}"


def cell_text(value: Any, number_format: str = "General") -> str:
    """Display text for a spreadsheet value, approximating the sheet's rendering."""
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, (int, float)):
        return _render_number(float(value), number_format)
    return str(value)


def _cell_display(cell: Cell) -> str:
    return cell_text(cell.value, cell.number_format)


def read_xlsx_grid(content: bytes) -> tuple[list[list[str]], int]:
    """Return the first worksheet's bounding range as display-text rows.

    The second item is the 1-based column index where the range starts.
    """
    try:
        wb = load_workbook(io.BytesIO(content), data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as exc:
        raise UnreadableFileError(f"Could not read Excel workbook: {exc}") from exc
    try:
        if not wb.worksheets:
            raise NoHeadersFoundError("No data found in Excel file")
        ws = wb.worksheets[0]
        grid = [
            [_cell_display(cell) for cell in row]
            for row in ws.iter_rows(
                min_row=ws.min_row,
                max_row=ws.max_row,
                min_col=ws.min_column,
                max_col=ws.max_column,
            )
        ]
        return grid, ws.min_column
    finally:
        wb.close()


def read_xls_grid(content: bytes) -> list[list[str]]:
    """Return the first sheet of a legacy ``.xls`` workbook as text rows."""
    read_excel = cast(Callable[..., pd.DataFrame], getattr(pd, "read_excel"))
    try:
        df = read_excel(io.BytesIO(content), engine="xlrd", header=None, dtype=object)
    except ImportError as exc:
        raise UnreadableFileError(
            "Unsupported .xls input unless 'xlrd' is installed. "
            "Either convert to .xlsx or add dependency: pip install xlrd"
        ) from exc
    except Exception as exc:
        # xlrd's XLRDError and CompDocError derive from Exception directly
        raise UnreadableFileError(f"Could not read Excel workbook: {exc}") from exc
    return [[cell_text(v) for v in record] for record in df.itertuples(index=False)]


def grid_to_table(grid: Sequence[Sequence[str]], *, first_column: int = 1) -> TableData:
    """Build a table from a text grid.

    The first row with any non-empty cell holds the headers; blank header
    cells become ``Column <n>``. Later rows that are entirely empty are
    dropped.
    """
    header_idx = next((i for i, cells in enumerate(grid) if any(cells)), None)
    if header_idx is None:
        raise NoHeadersFoundError("No data found in Excel file")

    width = max(len(cells) for cells in grid)
    header_cells = list(grid[header_idx]) + [""] * (width - len(grid[header_idx]))
    headers = unique_headers(_synthesize_blank_headers(header_cells, first_column))

    ids = count(1)
    rows: list[Row] = []
    for cells in grid[header_idx + 1:]:
        if not any(cells):
            continue
        row_values = {
            header: cells[idx] if idx < len(cells) else ""
            for idx, header in enumerate(headers)
        }
        rows.append(Row(next(ids), row_values))
    return TableData(headers=headers, rows=rows)
