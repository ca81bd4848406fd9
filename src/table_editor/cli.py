"""CLI entry point for table-editor."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from table_editor import __version__
from table_editor.display import build_grid, pager_line, summary_line
from table_editor.errors import InvalidEditError, ParseError
from table_editor.io import read_upload, write_json
from table_editor.models import Edit, SortConfig, TableData
from table_editor.query import query
from table_editor.session import EditorSession
from table_editor.submit import DEFAULT_TIMEOUT, submit_table
from table_editor.table import load_edits, parse_rename, parse_row_id

app = typer.Typer(
    name="tedit",
    help="table-editor — Upload, tidy and submit CSV/Excel tables.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {msg}")


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"table-editor v{__version__}")
        raise typer.Exit()


def _collect_edits(
    edits_file: Path | None,
    renames: list[str] | None,
    drop_columns: list[str] | None,
    drop_rows: list[str] | None,
) -> list[Edit]:
    """Edits file first, then ``--rename``, ``--drop-column``, ``--drop-row``."""
    edits = load_edits(edits_file)
    edits.extend(parse_rename(raw) for raw in renames or [])
    edits.extend(Edit("drop-column", name) for name in drop_columns or [])
    edits.extend(Edit("drop-row", parse_row_id(raw)) for raw in drop_rows or [])
    return edits


def _current_table(session: EditorSession) -> TableData:
    if session.table is None:
        raise ParseError(session.error or "No table loaded")
    return session.table


def _apply_to_session(session: EditorSession, edits: list[Edit], echo: Callable[..., None]) -> None:
    for edit in edits:
        if edit.kind == "rename":
            ok = session.rename(str(edit.target), str(edit.new_name))
            label = f"rename {edit.target!r} -> {edit.new_name!r}"
        elif edit.kind == "drop-column":
            ok = session.remove_column(str(edit.target))
            label = f"drop column {edit.target!r}"
        else:
            row_id = int(edit.target)
            label = f"drop row {row_id}"
            if _current_table(session).find_row(row_id) is None:
                raise InvalidEditError(f"Cannot {label}: no row with id {row_id}")
            ok = session.remove_row(row_id)
        if not ok:
            raise InvalidEditError(f"Cannot {label}: {session.error}")
        echo(f"  [green]+[/green] {label}")


def _load_session(
    input_file: Path,
    mime_type: str | None,
    edits: list[Edit],
    echo: Callable[..., None],
) -> EditorSession:
    session = EditorSession()
    echo("[blue]>[/blue] Loading input file …")
    if not session.load(read_upload(input_file, mime_type=mime_type)):
        raise ParseError(session.error)
    table = _current_table(session)
    echo(f"  {len(table.rows)} rows x {len(table.headers)} columns")
    if edits:
        echo("[blue]>[/blue] Applying edits …")
        _apply_to_session(session, edits, echo)
    return session


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """table-editor CLI."""


# ── preview command ──────────────────────────────────────────────


@app.command()
def preview(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to CSV, XLSX or XLS input file.",
        exists=True, readable=True,
    ),
    mime_type: str | None = typer.Option(
        None, "--mime",
        help="MIME type hint, used when the file name has no known extension.",
    ),
    search: str = typer.Option(
        "", "--search", "-s",
        help="Only show rows where any cell contains this text (case-insensitive).",
    ),
    sort_key: str | None = typer.Option(
        None, "--sort",
        help="Column to sort by.",
    ),
    descending: bool = typer.Option(
        False, "--desc",
        help="Sort descending (with --sort).",
    ),
    page: int = typer.Option(
        1, "--page", "-p", min=1,
        help="Page to show; clamped to the last page.",
    ),
    renames: list[str] | None = typer.Option(
        None, "--rename", "-r",
        help="Rename a column: old=new. Repeatable.",
    ),
    drop_columns: list[str] | None = typer.Option(
        None, "--drop-column",
        help="Remove a column by name. Repeatable.",
    ),
    drop_rows: list[str] | None = typer.Option(
        None, "--drop-row",
        help="Remove a row by id (its 1-based position in the uploaded file). Repeatable.",
    ),
    edits_file: Path | None = typer.Option(
        None, "--edits",
        help="File of edit directives (rename a=b / drop-column c / drop-row 3).",
    ),
    out: Path | None = typer.Option(
        None, "--out", "-o",
        help="Write the edited table as a JSON submission payload.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress informational output and the grid.",
    ),
) -> None:
    """Parse a file, apply edits, and show one page of the grid."""
    echo = _printer(quiet)
    try:
        edits = _collect_edits(edits_file, renames, drop_columns, drop_rows)
        session = _load_session(input_file, mime_type, edits, echo)
    except (FileNotFoundError, ValueError, OSError) as exc:
        _err(str(exc))
        raise typer.Exit(code=2)

    try:
        table = _current_table(session)
        if sort_key is not None:
            if sort_key not in table.headers:
                _err(f"Unknown sort column: {sort_key!r}")
                console.print(f"  Columns: {', '.join(table.headers)}")
                raise typer.Exit(code=2)
            session.view = session.view.with_sort(
                SortConfig(sort_key, "desc" if descending else "asc")
            )
        session.search(search)
        session.go_to_page(page)
        result = query(table, session.view)

        if not quiet:
            console.print(Panel(
                f"[bold]table-editor[/bold] v{__version__}\nInput: {input_file}",
                title="Data Preview", border_style="blue",
            ))
            console.print(f"  {summary_line(table, result)}")
            console.print(build_grid(table, result, sort=session.view.sort))
            footer = pager_line(result)
            if footer:
                console.print(f"  {footer}", highlight=False)

        if out is not None:
            payload_path = write_json(out, table.to_dict())
            echo(f"  Payload -> {payload_path}")
    except typer.Exit:
        raise
    except Exception as exc:
        _err(f"Unexpected internal error: {exc}")
        raise typer.Exit(code=1)


# ── submit command ───────────────────────────────────────────────


@app.command()
def submit(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to CSV, XLSX or XLS input file.",
        exists=True, readable=True,
    ),
    url: str = typer.Option(
        ..., "--url", "-u",
        help="Backend base URL, e.g. http://localhost:3000",
    ),
    mime_type: str | None = typer.Option(
        None, "--mime",
        help="MIME type hint, used when the file name has no known extension.",
    ),
    renames: list[str] | None = typer.Option(
        None, "--rename", "-r",
        help="Rename a column: old=new. Repeatable.",
    ),
    drop_columns: list[str] | None = typer.Option(
        None, "--drop-column",
        help="Remove a column by name. Repeatable.",
    ),
    drop_rows: list[str] | None = typer.Option(
        None, "--drop-row",
        help="Remove a row by id (its 1-based position in the uploaded file). Repeatable.",
    ),
    edits_file: Path | None = typer.Option(
        None, "--edits",
        help="File of edit directives (rename a=b / drop-column c / drop-row 3).",
    ),
    timeout: float = typer.Option(
        DEFAULT_TIMEOUT, "--timeout",
        help="Request timeout in seconds.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress informational output.",
    ),
) -> None:
    """Parse a file, apply edits, and submit the table to the backend.

    Exit 0 = accepted, exit 1 = backend/network failure, exit 2 = bad input.
    """
    echo = _printer(quiet)
    try:
        edits = _collect_edits(edits_file, renames, drop_columns, drop_rows)
        session = _load_session(input_file, mime_type, edits, echo)
    except (FileNotFoundError, ValueError, OSError) as exc:
        _err(str(exc))
        raise typer.Exit(code=2)

    def _submitter(table: TableData) -> str:
        return submit_table(table, url, timeout=timeout)

    try:
        echo(f"[blue]>[/blue] Submitting data to {url} …")
        if not session.submit(_submitter):
            _err(session.message.removeprefix("✗ "))
            raise typer.Exit(code=1)
        if not quiet:
            console.print(Panel(
                f"[green]{session.message}[/green]",
                title="Submitted", border_style="green",
            ))
    except typer.Exit:
        raise
    except Exception as exc:
        _err(f"Unexpected internal error: {exc}")
        raise typer.Exit(code=1)
