"""Question selection: filter options, filtering, sampling and shaping."""
from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .errors import (
    MissingColumnError,
    NoDataError,
    NoMatchError,
    NoValidQuestionsError,
    SchemaError,
    SelectionError,
    StoreAccessError,
)
from .models import (
    ALL,
    DEFAULT_COUNT,
    DEFAULT_EXPLANATION,
    FilterCriteria,
    FilterOptions,
    QuestionRecord,
    SelectionResult,
)
from .schema import REQUIRED_QUESTION_COLUMNS, build_header_map, cell, require_columns
from .store import Row, TabularStore

logger = logging.getLogger(__name__)

FILTER_COLUMNS = (
    ("category", "Category"),
    ("subject", "Subject"),
    ("topic", "Topic"),
)


def load_questions(store: TabularStore, table_name: str) -> Tuple[Dict[str, int], List[Row]]:
    """Read the whole question table once; return (header map, data rows)."""
    table = store.get_table(table_name)
    if table is None:
        raise SelectionError(f"Question sheet '{table_name}' not found.")
    try:
        rows = table.read_all()
    except StoreAccessError as exc:
        raise SelectionError(exc.user_message)
    if not rows:
        return {}, []
    return build_header_map(rows[0]), rows[1:]


def collect_filter_options(rows: Sequence[Row], header_map: Dict[str, int]) -> FilterOptions:
    values: Dict[str, set] = {attr: set() for attr, _ in FILTER_COLUMNS}
    for row in rows:
        for attr, column in FILTER_COLUMNS:
            value = cell(row, header_map, column)
            if value:
                values[attr].add(value)
    return FilterOptions(
        categories=sorted(values["category"]),
        subjects=sorted(values["subject"]),
        topics=sorted(values["topic"]),
    )


def _matches(row: Row, header_map: Dict[str, int], criteria: FilterCriteria) -> bool:
    if not cell(row, header_map, "ID"):
        return False
    for attr, column in FILTER_COLUMNS:
        wanted = getattr(criteria, attr)
        if wanted and wanted != ALL and cell(row, header_map, column) != wanted:
            return False
    return True


def shuffle_in_place(items: List[Any], rng: Optional[random.Random] = None) -> None:
    """Fisher-Yates: every permutation equally likely."""
    rng = rng or random
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]


def row_to_question(row: Row, header_map: Dict[str, int]) -> QuestionRecord:
    options = {key: cell(row, header_map, f"Option {key}") for key in ("A", "B", "C", "D")}
    return QuestionRecord(
        id=cell(row, header_map, "ID"),
        category=cell(row, header_map, "Category"),
        subject=cell(row, header_map, "Subject"),
        topic=cell(row, header_map, "Topic"),
        text=cell(row, header_map, "Question"),
        options=options,
        correct_answer=cell(row, header_map, "Correct Answer").upper(),
        explanation=cell(row, header_map, "Explanation") or DEFAULT_EXPLANATION,
        image_url=cell(row, header_map, "Image URL") or None,
    )


def select_questions(
    all_rows: Sequence[Row],
    header_map: Dict[str, int],
    criteria: FilterCriteria,
    rng: Optional[random.Random] = None,
) -> SelectionResult:
    if not all_rows:
        raise NoDataError()

    try:
        require_columns(header_map, REQUIRED_QUESTION_COLUMNS)
    except SchemaError as exc:
        raise MissingColumnError(exc.column)

    filter_options = collect_filter_options(all_rows, header_map)

    matching = [list(row) for row in all_rows if _matches(row, header_map, criteria)]
    if not matching:
        raise NoMatchError()

    if criteria.randomize:
        shuffle_in_place(matching, rng)

    count = criteria.count if isinstance(criteria.count, int) and criteria.count > 0 else DEFAULT_COUNT
    questions: List[QuestionRecord] = []
    for row in matching[:count]:
        record = row_to_question(row, header_map)
        if record.is_valid():
            questions.append(record)
        else:
            logger.info("[QUIZ] skipping incomplete question row id=%r", record.id)

    if not questions:
        raise NoValidQuestionsError()

    return SelectionResult(questions=questions, filter_options=filter_options)


__all__ = [
    "FILTER_COLUMNS",
    "load_questions",
    "collect_filter_options",
    "shuffle_in_place",
    "row_to_question",
    "select_questions",
]
