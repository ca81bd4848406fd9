"""Editor session — one uploaded table, its view state, and the submit outcome."""

from __future__ import annotations

from collections.abc import Callable

from table_editor.errors import EditError, ParseError, SubmissionError
from table_editor.models import QueryResult, Row, TableData, UploadedFile, ViewState
from table_editor.parser import parse_file
from table_editor.query import query
from table_editor.table import remove_column, remove_row, rename_header

Submitter = Callable[[TableData], str]


class EditorSession:
    """Holds the table being edited and threads an immutable ``ViewState``.

    Uploads are tagged with a generation token; a completion whose token is
    no longer current is ignored, so a slow first upload cannot overwrite a
    later one.
    """

    def __init__(self, parser: Callable[[UploadedFile], TableData] = parse_file) -> None:
        self._parser = parser
        self._generation = 0
        self.table: TableData | None = None
        self.view = ViewState()
        self.error = ""
        self.message = ""

    # ── Upload lifecycle ─────────────────────────────────────────

    def begin_upload(self) -> int:
        self._generation += 1
        self.error = ""
        return self._generation

    def complete_upload(self, token: int, upload: UploadedFile) -> bool:
        """Parse *upload* and install it if *token* is still current.

        Returns ``True`` when the table was installed. Parse failures are
        stored in ``error`` and leave the current table untouched.
        """
        if token != self._generation:
            return False
        try:
            table = self._parser(upload)
        except ParseError as exc:
            self.error = str(exc) or "Failed to parse file"
            return False
        if token != self._generation:
            return False
        self.table = table
        self.view = ViewState()
        self.error = ""
        self.message = ""
        return True

    def load(self, upload: UploadedFile) -> bool:
        return self.complete_upload(self.begin_upload(), upload)

    def reset(self) -> None:
        """Forget the current table (the "upload new file" action)."""
        self._generation += 1
        self.table = None
        self.view = ViewState()
        self.error = ""

    # ── Edits ────────────────────────────────────────────────────

    def _apply(self, edit: Callable[[TableData], TableData]) -> bool:
        if self.table is None:
            return False
        try:
            self.table = edit(self.table)
        except EditError as exc:
            self.error = str(exc)
            return False
        self.error = ""
        return True

    def rename(self, old: str, new: str) -> bool:
        return self._apply(lambda t: rename_header(t, old, new))

    def remove_column(self, name: str) -> bool:
        return self._apply(lambda t: remove_column(t, name))

    def remove_row(self, row: Row | int) -> bool:
        return self._apply(lambda t: remove_row(t, row))

    # ── View state ───────────────────────────────────────────────

    def search(self, term: str) -> None:
        self.view = self.view.with_search(term)

    def sort(self, key: str) -> None:
        self.view = self.view.toggle_sort(key)

    def go_to_page(self, page: int) -> None:
        self.view = self.view.with_page(page)

    def view_rows(self) -> QueryResult | None:
        if self.table is None:
            return None
        return query(self.table, self.view)

    # ── Submission ───────────────────────────────────────────────

    def submit(self, submitter: Submitter) -> bool:
        """Send the table through *submitter*; clear it only on success."""
        if self.table is None:
            return False
        self.message = ""
        try:
            result = submitter(self.table)
        except SubmissionError as exc:
            self.message = f"✗ Failed to submit: {exc}"
            return False
        self.message = f"✓ {result or 'Data submitted successfully'}"
        self.table = None
        self.view = ViewState()
        return True
