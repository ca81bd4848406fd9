"""Exception taxonomy shared by the parser, table edits and submission."""

from __future__ import annotations


class TableEditorError(Exception):
    """Base class for every error raised by table-editor."""


# ── Parsing ──────────────────────────────────────────────────────


class ParseError(TableEditorError, ValueError):
    """The uploaded file could not be turned into a table."""


class EmptyFileError(ParseError):
    pass


class UnreadableFileError(ParseError):
    pass


class UnsupportedFormatError(ParseError):
    pass


class NoHeadersFoundError(ParseError):
    pass


# ── Editing ──────────────────────────────────────────────────────


class EditError(TableEditorError, ValueError):
    """A structural edit was rejected; the table is left unchanged."""


class DuplicateHeaderError(EditError):
    pass


class EmptyHeaderError(EditError):
    pass


class UnknownHeaderError(EditError):
    pass


class InvalidEditError(EditError):
    """An edit directive (CLI flag or edits-file line) is malformed."""


# ── Submission ───────────────────────────────────────────────────


class SubmissionError(TableEditorError, RuntimeError):
    """The backend rejected the payload or could not be reached."""
