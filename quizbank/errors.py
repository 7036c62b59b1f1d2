"""Exception types shared by the selector, recorder and store backends."""
from __future__ import annotations

from typing import Optional


class QuizError(Exception):
    """Base class for every error that maps to a client-facing message."""

    message = "Something went wrong."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)

    @property
    def user_message(self) -> str:
        return str(self)


class PayloadError(QuizError):
    message = "Invalid request payload."


class SchemaError(QuizError):
    def __init__(self, column: str) -> None:
        self.column = column
        super().__init__(f"Missing required column: {column}")


class StoreAccessError(QuizError):
    """Raised by store backends when a table cannot be reached."""

    def __init__(self, table: str, detail: str = "") -> None:
        self.table = table
        self.detail = detail
        super().__init__(f"Could not access the '{table}' sheet.")


# --- Selection -------------------------------------------------------------

class SelectionError(QuizError):
    message = "Could not load quiz questions."


class NoDataError(SelectionError):
    message = "The question bank is empty."


class NoMatchError(SelectionError):
    message = "No questions match the selected filters."


class NoValidQuestionsError(SelectionError):
    message = "No valid questions found for the selected filters."


class MissingColumnError(SelectionError):
    def __init__(self, column: str) -> None:
        self.column = column
        super().__init__(f"Missing required column: {column}")


# --- Recording -------------------------------------------------------------

class RecordError(QuizError):
    message = "Failed to record results."


class LockTimeoutError(RecordError):
    message = "The server is busy saving other results. Please try again."


class StoreUnavailableError(RecordError):
    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(f"Could not access the '{table}' sheet.")


class InternalRecordError(RecordError):
    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Failed to record results: {detail}")


__all__ = [
    "QuizError",
    "PayloadError",
    "SchemaError",
    "StoreAccessError",
    "SelectionError",
    "NoDataError",
    "NoMatchError",
    "NoValidQuestionsError",
    "MissingColumnError",
    "RecordError",
    "LockTimeoutError",
    "StoreUnavailableError",
    "InternalRecordError",
]
