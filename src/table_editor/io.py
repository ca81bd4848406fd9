"""I/O helpers — read uploads from disk, write JSON payloads."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from table_editor.errors import UnreadableFileError
from table_editor.models import TableData, UploadedFile
from table_editor.parser import parse_file

# ── Loading ──────────────────────────────────────────────────────


def read_upload(path: Path, mime_type: str | None = None) -> UploadedFile:
    """Read *path* into an ``UploadedFile`` blob.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    UnreadableFileError
        If *path* is a directory or cannot be read.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    if path.is_dir():
        raise UnreadableFileError(f"Input path is a directory, not a file: {path}")
    try:
        content = path.read_bytes()
    except OSError as exc:
        raise UnreadableFileError(f"Failed to read file {path}: {exc}") from exc
    return UploadedFile(name=path.name, content=content, mime_type=mime_type)


def load_table(path: Path, mime_type: str | None = None) -> TableData:
    """Read and parse a CSV or Excel file from disk."""
    return parse_file(read_upload(path, mime_type=mime_type))


# ── Writing ──────────────────────────────────────────────────────


def write_json(path: Path, data: Any) -> Path:
    """Write *data* as pretty-printed JSON to *path* (atomic)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(payload, encoding="utf-8")
    tmp_path.replace(path)
    return path
