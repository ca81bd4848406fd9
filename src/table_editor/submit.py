"""Submission client — POST the edited table to the backend."""

from __future__ import annotations

from typing import Any

import requests

from table_editor import SUBMIT_PATH
from table_editor.errors import SubmissionError
from table_editor.models import TableData

DEFAULT_TIMEOUT = 30.0


def submit_url(base_url: str) -> str:
    return base_url.rstrip("/") + SUBMIT_PATH


def _json_body(response: requests.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def submit_table(table: TableData, base_url: str, *, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Send *table* as ``{"headers": [...], "rows": [...]}`` and return the backend message.

    Raises
    ------
    SubmissionError
        On transport failure, a non-2xx status, or a JSON ``error`` field.
        The backend's ``error`` text is surfaced verbatim.
    """
    url = submit_url(base_url)
    try:
        response = requests.post(url, json=table.to_dict(), timeout=timeout)
    except requests.RequestException as exc:
        raise SubmissionError(f"Could not reach {url}: {exc}") from exc

    body = _json_body(response)
    if not response.ok:
        raise SubmissionError(str(body.get("error") or f"HTTP {response.status_code}"))
    if body.get("error"):
        raise SubmissionError(str(body["error"]))
    return str(body.get("message") or "Data submitted successfully")
