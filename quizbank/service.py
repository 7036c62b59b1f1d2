"""Client-facing operations.

Both operations always return an envelope, ``{"success": True, ...}`` or
``{"success": False, "error": "<message>"}``; no exception escapes. The
``*_with_status`` variants also return the HTTP status the web layer sends.
"""
from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .errors import (
    LockTimeoutError,
    PayloadError,
    QuizError,
    RecordError,
    StoreAccessError,
    StoreUnavailableError,
)
from .locking import DEFAULT_LOCK_TIMEOUT, lock_for
from .models import FilterCriteria, QuizSummary, ResponseRecord, UserDetails
from .recorder import RESPONSES_TABLE, USERS_TABLE, record_results
from .selector import load_questions, select_questions
from .store import open_store

logger = logging.getLogger(__name__)

QUESTIONS_TABLE = "Questions"

Envelope = Dict[str, Any]


def _failure(message: str) -> Envelope:
    return {"success": False, "error": message}


def _status_for(exc: QuizError) -> int:
    if isinstance(exc, (LockTimeoutError, StoreUnavailableError, StoreAccessError)):
        return 503
    if isinstance(exc, RecordError):
        return 500
    return 400


def fetch_quiz_data_with_status(
    criteria: Union[FilterCriteria, Mapping[str, Any], None],
    store_identifier: str,
    questions_table: str = QUESTIONS_TABLE,
    rng: Optional[random.Random] = None,
) -> Tuple[Envelope, int]:
    try:
        if not isinstance(criteria, FilterCriteria):
            criteria = FilterCriteria.from_payload(criteria)
        store = open_store(store_identifier)
        header_map, rows = load_questions(store, questions_table)
        result = select_questions(rows, header_map, criteria, rng=rng)
    except QuizError as exc:
        logger.info("[QUIZ] selection failed: %s", exc)
        return _failure(exc.user_message), _status_for(exc)
    except Exception:
        logger.exception("[QUIZ] unexpected failure loading questions")
        return _failure("Could not load quiz questions."), 500

    logger.info("[QUIZ] served %d questions", len(result.questions))
    return {
        "success": True,
        "questions": [q.to_dict() for q in result.questions],
        "filterOptions": result.filter_options.to_dict(),
    }, 200


def fetch_quiz_data(
    criteria: Union[FilterCriteria, Mapping[str, Any], None],
    store_identifier: str,
    questions_table: str = QUESTIONS_TABLE,
    rng: Optional[random.Random] = None,
) -> Envelope:
    return fetch_quiz_data_with_status(criteria, store_identifier, questions_table, rng)[0]


def _parse_responses(payload: Any) -> List[ResponseRecord]:
    if payload is None:
        return []
    if not isinstance(payload, Sequence) or isinstance(payload, (str, bytes)):
        raise PayloadError("Responses must be a list.")
    return [
        item if isinstance(item, ResponseRecord) else ResponseRecord.from_payload(item)
        for item in payload
    ]


def submit_results_with_status(
    user_details: Union[UserDetails, Mapping[str, Any], None],
    quiz_summary: Union[QuizSummary, Mapping[str, Any], None],
    responses: Any,
    store_identifier: str,
    users_table: str = USERS_TABLE,
    responses_table: str = RESPONSES_TABLE,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
) -> Tuple[Envelope, int]:
    try:
        user = user_details if isinstance(user_details, UserDetails) else UserDetails.from_payload(user_details)
        summary = quiz_summary if isinstance(quiz_summary, QuizSummary) else QuizSummary.from_payload(quiz_summary)
        records = _parse_responses(responses)

        store = open_store(store_identifier)
        message = record_results(
            store,
            lock_for(store.identifier),
            user,
            summary,
            records,
            timeout=lock_timeout,
            users_table=users_table,
            responses_table=responses_table,
        )
    except QuizError as exc:
        logger.warning("[SUBMIT] rejected: %s", exc)
        return _failure(exc.user_message), _status_for(exc)
    except Exception as exc:
        logger.exception("[SUBMIT] unexpected failure")
        return _failure(f"Failed to record results: {exc}"), 500

    return {"success": True, "message": message}, 200


def submit_results(
    user_details: Union[UserDetails, Mapping[str, Any], None],
    quiz_summary: Union[QuizSummary, Mapping[str, Any], None],
    responses: Any,
    store_identifier: str,
    users_table: str = USERS_TABLE,
    responses_table: str = RESPONSES_TABLE,
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT,
) -> Envelope:
    return submit_results_with_status(
        user_details,
        quiz_summary,
        responses,
        store_identifier,
        users_table,
        responses_table,
        lock_timeout,
    )[0]


__all__ = [
    "QUESTIONS_TABLE",
    "fetch_quiz_data",
    "fetch_quiz_data_with_status",
    "submit_results",
    "submit_results_with_status",
]
