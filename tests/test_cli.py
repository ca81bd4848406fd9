"""CLI integration smoke tests for table-editor."""

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest
from typer.testing import CliRunner

import table_editor.cli as cli_mod
from table_editor import __version__
from table_editor.cli import app
from table_editor.errors import SubmissionError
from table_editor.models import TableData

runner = CliRunner()


def _write_csv(tmp_path: Path, name: str, rows: str) -> Path:
    path = tmp_path / name
    path.write_text(rows)
    return path


def _people_csv(tmp_path: Path) -> Path:
    return _write_csv(
        tmp_path,
        "people.csv",
        "name,city,notes\nAnn,Oslo,x\nBob,Rome,y\nCy,Lima,z\n",
    )


def test_preview_writes_payload_with_edits_applied(tmp_path: Path) -> None:
    csv_path = _people_csv(tmp_path)
    out_path = tmp_path / "out" / "payload.json"

    result = runner.invoke(
        app,
        [
            "preview",
            "--input", str(csv_path),
            "--rename", "city=town",
            "--drop-column", "notes",
            "--drop-row", "2",
            "--out", str(out_path),
            "--quiet",
        ],
    )

    assert result.exit_code == 0
    payload = json.loads(out_path.read_text())
    assert payload == {
        "headers": ["name", "town"],
        "rows": [{"name": "Ann", "town": "Oslo"}, {"name": "Cy", "town": "Lima"}],
    }


def test_preview_edits_file_runs_before_flag_edits(tmp_path: Path) -> None:
    csv_path = _people_csv(tmp_path)
    edits_path = tmp_path / "edits.txt"
    edits_path.write_text("# cleanup\nrename city=town\n")
    out_path = tmp_path / "payload.json"

    result = runner.invoke(
        app,
        [
            "preview",
            "--input", str(csv_path),
            "--edits", str(edits_path),
            "--rename", "town=place",
            "--out", str(out_path),
            "--quiet",
        ],
    )

    assert result.exit_code == 0
    assert json.loads(out_path.read_text())["headers"] == ["name", "place", "notes"]


def test_preview_duplicate_rename_exits_2(tmp_path: Path) -> None:
    csv_path = _people_csv(tmp_path)

    result = runner.invoke(
        app, ["preview", "--input", str(csv_path), "--rename", "city=name", "--quiet"]
    )

    assert result.exit_code == 2
    assert "already exists" in result.stdout


def test_preview_malformed_rename_exits_2(tmp_path: Path) -> None:
    csv_path = _people_csv(tmp_path)

    result = runner.invoke(app, ["preview", "--input", str(csv_path), "--rename", "city"])

    assert result.exit_code == 2


def test_preview_unsupported_file_exits_2(tmp_path: Path) -> None:
    txt_path = _write_csv(tmp_path, "notes.txt", "a,b\n1,2\n")

    result = runner.invoke(app, ["preview", "--input", str(txt_path), "--quiet"])

    assert result.exit_code == 2
    assert "Unsupported file format" in result.stdout


def test_preview_mime_hint_accepts_unknown_extension(tmp_path: Path) -> None:
    path = _write_csv(tmp_path, "export.dat", "a,b\n1,2\n")
    out_path = tmp_path / "payload.json"

    result = runner.invoke(
        app,
        ["preview", "--input", str(path), "--mime", "text/csv", "--out", str(out_path), "--quiet"],
    )

    assert result.exit_code == 0
    assert json.loads(out_path.read_text())["headers"] == ["a", "b"]


def test_preview_unknown_sort_column_exits_2(tmp_path: Path) -> None:
    csv_path = _people_csv(tmp_path)

    result = runner.invoke(app, ["preview", "--input", str(csv_path), "--sort", "age"])

    assert result.exit_code == 2
    assert "Unknown sort column" in result.stdout
    assert "name, city, notes" in result.stdout


def test_preview_shows_pinned_tail_gap(tmp_path: Path) -> None:
    rows = "\n".join(f"item{i}" for i in range(1, 41))
    csv_path = _write_csv(tmp_path, "items.csv", "item\n" + rows + "\n")

    result = runner.invoke(app, ["preview", "--input", str(csv_path)])

    assert result.exit_code == 0
    assert "40 rows found (Total: 40) x 1 columns" in result.stdout
    assert "... 5 more records ..." in result.stdout
    assert "item40" in result.stdout
    assert "item31" not in result.stdout
    assert "Page 1 of 2" in result.stdout


def test_preview_sort_and_page_two(tmp_path: Path) -> None:
    rows = "\n".join(f"{i},item{i}" for i in range(1, 41))
    csv_path = _write_csv(tmp_path, "items.csv", "n,item\n" + rows + "\n")

    result = runner.invoke(
        app, ["preview", "--input", str(csv_path), "--sort", "item", "--page", "2"]
    )

    assert result.exit_code == 0
    assert "item ↑" in result.stdout
    assert "Page 2 of 2" in result.stdout
    assert "more records" not in result.stdout


def test_preview_search_without_match_shows_message(tmp_path: Path) -> None:
    csv_path = _people_csv(tmp_path)

    result = runner.invoke(app, ["preview", "--input", str(csv_path), "--search", "zzz"])

    assert result.exit_code == 0
    assert "0 rows found (Total: 3)" in result.stdout
    assert "No data matches your search" in result.stdout


def test_preview_formats_date_columns(tmp_path: Path) -> None:
    csv_path = _write_csv(tmp_path, "orders.csv", "order date,item\n2024-01-15,Widget\n")

    result = runner.invoke(app, ["preview", "--input", str(csv_path)])

    assert result.exit_code == 0
    assert "Jan 15, 2024" in result.stdout


def test_preview_unexpected_error_exits_1(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    csv_path = _people_csv(tmp_path)

    def _boom(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(cli_mod, "write_json", _boom)

    result = runner.invoke(
        app,
        ["preview", "--input", str(csv_path), "--out", str(tmp_path / "p.json"), "--quiet"],
    )

    assert result.exit_code == 1
    assert "Unexpected internal error: disk on fire" in result.stdout


def test_submit_success_exits_0(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    csv_path = _people_csv(tmp_path)
    captured: dict[str, object] = {}

    def _fake_submit(table: TableData, base_url: str, *, timeout: float = 30.0) -> str:
        captured["payload"] = table.to_dict()
        captured["url"] = base_url
        captured["timeout"] = timeout
        return "Stored 2 rows"

    monkeypatch.setattr(cli_mod, "submit_table", _fake_submit)

    result = runner.invoke(
        app,
        [
            "submit",
            "--input", str(csv_path),
            "--url", "http://localhost:3000",
            "--drop-row", "1",
            "--timeout", "5",
        ],
    )

    assert result.exit_code == 0
    assert "✓ Stored 2 rows" in result.stdout
    assert captured["url"] == "http://localhost:3000"
    assert captured["timeout"] == 5.0
    payload = captured["payload"]
    assert isinstance(payload, dict)
    assert [row["name"] for row in payload["rows"]] == ["Bob", "Cy"]


def test_submit_failure_exits_1(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    csv_path = _people_csv(tmp_path)

    def _fake_submit(table: TableData, base_url: str, *, timeout: float = 30.0) -> str:
        raise SubmissionError("Database unavailable")

    monkeypatch.setattr(cli_mod, "submit_table", _fake_submit)

    result = runner.invoke(
        app, ["submit", "--input", str(csv_path), "--url", "http://x", "--quiet"]
    )

    assert result.exit_code == 1
    assert "Failed to submit: Database unavailable" in result.stdout


def test_submit_bad_input_exits_2(tmp_path: Path) -> None:
    empty = _write_csv(tmp_path, "empty.csv", "")

    result = runner.invoke(app, ["submit", "--input", str(empty), "--url", "http://x"])

    assert result.exit_code == 2
    assert "Empty file" in result.stdout


def test_version_flag_prints_and_exits() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert "table-editor" in result.stdout
    assert f"v{__version__}" in result.stdout


def test_preview_drop_row_with_unknown_id_exits_2(tmp_path: Path) -> None:
    csv_path = _people_csv(tmp_path)
    out_path = tmp_path / "payload.json"

    result = runner.invoke(
        app,
        ["preview", "--input", str(csv_path), "--drop-row", "999", "--out", str(out_path)],
    )

    assert result.exit_code == 2
    assert "no row with id 999" in result.stdout
    assert "+ drop row 999" not in result.stdout
    assert not out_path.exists()


def test_preview_corrupt_xls_exits_2(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    xls_path = tmp_path / "legacy.xls"
    xls_path.write_bytes(b"not a workbook")

    class _EngineError(Exception):
        pass

    def _fake_read_excel(*args: object, **kwargs: object) -> pd.DataFrame:
        del args, kwargs
        raise _EngineError("Unsupported format, or corrupt file")

    monkeypatch.setattr(pd, "read_excel", _fake_read_excel)

    result = runner.invoke(app, ["preview", "--input", str(xls_path), "--quiet"])

    assert result.exit_code == 2
    assert "Could not read Excel workbook" in result.stdout
