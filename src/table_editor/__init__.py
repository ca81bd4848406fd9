"""table-editor — Upload, tidy and submit tabular data files."""

__version__ = "0.1.0"

PAGE_SIZE: int = 30
"""Rows per page in the grid body."""

TAIL_SIZE: int = 5
"""Trailing records pinned below every page."""

SUBMIT_PATH: str = "/api/submit-data"

SUPPORTED_EXTENSIONS: tuple[str, ...] = (".csv", ".xlsx", ".xls")
