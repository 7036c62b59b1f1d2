"""Result recording: one summary row plus a batch of response rows per quiz."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from .errors import InternalRecordError, RecordError, StoreAccessError, StoreUnavailableError
from .locking import DEFAULT_LOCK_TIMEOUT, StoreLock
from .models import QuizSummary, ResponseRecord, ResponseRow, SummaryRow, UserDetails
from .provisioner import ensure_table
from .schema import RESPONSE_HEADERS, USER_HEADERS
from .store import TabularStore

logger = logging.getLogger(__name__)

USERS_TABLE = "Users"
RESPONSES_TABLE = "Responses"


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def build_response_rows(
    timestamp: str,
    user: UserDetails,
    summary: QuizSummary,
    responses: Sequence[ResponseRecord],
) -> List[ResponseRow]:
    quiz_id = summary.mode.quiz_id
    return [
        ResponseRow(
            timestamp=timestamp,
            user=user.name,
            quiz_id=quiz_id,
            question_id=r.question_id,
            user_answer=r.user_answer,
            is_correct=r.is_correct,
            score=1 if r.is_correct else 0,
            timed_out=r.timed_out,
        )
        for r in responses
    ]


def _write_results(
    store: TabularStore,
    user: UserDetails,
    summary: QuizSummary,
    responses: Sequence[ResponseRecord],
    users_table: str,
    responses_table: str,
    timestamp: str,
) -> None:
    users = ensure_table(store, users_table, USER_HEADERS)
    users.append_row(
        SummaryRow(
            timestamp=timestamp,
            name=user.name,
            id_number=user.id_number,
            score=summary.score_text,
            mode=summary.mode.describe(),
        ).to_row()
    )

    if not responses:
        return

    table = ensure_table(store, responses_table, RESPONSE_HEADERS)
    rows = [r.to_row() for r in build_response_rows(timestamp, user, summary, responses)]
    table.append_rows(table.row_count() + 1, rows)


def record_results(
    store: TabularStore,
    lock: StoreLock,
    user: UserDetails,
    summary: QuizSummary,
    responses: Sequence[ResponseRecord],
    timeout: float = DEFAULT_LOCK_TIMEOUT,
    users_table: str = USERS_TABLE,
    responses_table: str = RESPONSES_TABLE,
    clock: Optional[Callable[[], str]] = None,
) -> str:
    """Append the summary and responses while holding the store lock.

    Raises ``LockTimeoutError`` if the lock is not free within ``timeout``
    seconds, ``StoreUnavailableError`` when a table cannot be reached and
    ``InternalRecordError`` for anything else. The lock is always released
    before this returns or raises.
    """
    with lock.acquire(timeout):
        timestamp = (clock or _utc_timestamp)()
        try:
            store.refresh()
            _write_results(store, user, summary, responses, users_table, responses_table, timestamp)
        except StoreAccessError as exc:
            logger.error("[SUBMIT] store access failed for %s: %s", exc.table, exc.detail)
            raise StoreUnavailableError(exc.table)
        except RecordError:
            raise
        except Exception as exc:
            logger.exception("[SUBMIT] unexpected failure recording results for %s", user.name)
            raise InternalRecordError(str(exc))

    logger.info(
        "[SUBMIT] user=%s score=%s responses=%d quiz=%s",
        user.name,
        summary.score_text,
        len(responses),
        summary.mode.quiz_id,
    )
    return f"Results recorded for {user.name}."


__all__ = ["USERS_TABLE", "RESPONSES_TABLE", "build_response_rows", "record_results"]
