"""Header-row lookups for tables whose column order is not fixed."""
from __future__ import annotations

from typing import Any, Dict, Iterable, Sequence

from .errors import SchemaError

QUESTION_HEADERS = [
    "ID",
    "Category",
    "Subject",
    "Topic",
    "Question",
    "Option A",
    "Option B",
    "Option C",
    "Option D",
    "Correct Answer",
    "Explanation",
    "Image URL",
]

REQUIRED_QUESTION_COLUMNS = [
    "ID",
    "Category",
    "Subject",
    "Topic",
    "Question",
    "Option A",
    "Option B",
    "Correct Answer",
]

USER_HEADERS = ["Timestamp", "Name", "ID Number", "Score", "Quiz Mode"]

RESPONSE_HEADERS = [
    "Timestamp",
    "User",
    "Quiz ID",
    "Question ID",
    "User Answer",
    "Is Correct",
    "Score",
    "Timed Out",
]


def build_header_map(header_row: Sequence[Any]) -> Dict[str, int]:
    """Map each trimmed header name to its zero-based column position.

    Blank headers are skipped; for duplicate names the first column wins.
    """
    header_map: Dict[str, int] = {}
    for idx, raw in enumerate(header_row):
        name = "" if raw is None else str(raw).strip()
        if name and name not in header_map:
            header_map[name] = idx
    return header_map


def require_columns(header_map: Dict[str, int], required: Iterable[str]) -> None:
    for name in required:
        if name not in header_map:
            raise SchemaError(name)


def cell(row: Sequence[Any], header_map: Dict[str, int], name: str) -> str:
    """Trimmed string value of ``name`` in ``row`` ("" when absent)."""
    idx = header_map.get(name)
    if idx is None or idx >= len(row):
        return ""
    value = row[idx]
    if value is None:
        return ""
    return str(value).strip()


__all__ = [
    "QUESTION_HEADERS",
    "REQUIRED_QUESTION_COLUMNS",
    "USER_HEADERS",
    "RESPONSE_HEADERS",
    "build_header_map",
    "require_columns",
    "cell",
]
