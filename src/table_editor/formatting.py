"""Cell formatting — value to display text, with pluggable column classifiers."""

from __future__ import annotations

import math
from collections.abc import Iterable
from enum import Enum
from typing import Any, Protocol

import pandas as pd

MONTH_ABBREVIATIONS: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


class ColumnKind(str, Enum):
    text = "text"
    date = "date"


class ColumnClassifier(Protocol):
    def classify(self, header: str) -> ColumnKind: ...


class HeaderKeywordClassifier:
    """Tag a column as a date column when its header mentions a keyword.

    Matching is a case-insensitive substring test, so ``"Created Date"`` and
    ``"timestamp"`` both count with the default keywords.
    """

    def __init__(self, keywords: Iterable[str] = ("date", "time")) -> None:
        self.keywords = tuple(k.lower() for k in keywords)

    def classify(self, header: str) -> ColumnKind:
        lowered = header.lower()
        if any(k in lowered for k in self.keywords):
            return ColumnKind.date
        return ColumnKind.text


DEFAULT_CLASSIFIER: ColumnClassifier = HeaderKeywordClassifier()


# ── Value coercion ───────────────────────────────────────────────


def _format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def stringify(value: Any) -> str:
    """Default string coercion; ``None`` becomes ``""`` and ``2.0`` becomes ``"2"``."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_number(value)
    return str(value)


def _has_month_name(text: str) -> bool:
    return any(month in text for month in MONTH_ABBREVIATIONS)


def format_date_text(text: str) -> str:
    """Render *text* as ``Jan 5, 2024`` when it parses as a date, else unchanged."""
    if _has_month_name(text):
        return text
    if not text.strip():
        return text
    try:
        parsed = pd.to_datetime(text, errors="coerce", format="mixed")
    except (ValueError, TypeError, OverflowError):
        return text
    if pd.isna(parsed):
        return text
    return f"{MONTH_ABBREVIATIONS[parsed.month - 1]} {parsed.day}, {parsed.year:04d}"


def format_cell(
    value: Any,
    header: str,
    classifier: ColumnClassifier = DEFAULT_CLASSIFIER,
) -> str:
    """Render one cell for display. Never raises for odd values."""
    if value is None:
        return ""
    if isinstance(value, str) and classifier.classify(header) is ColumnKind.date:
        return format_date_text(value)
    return stringify(value)
