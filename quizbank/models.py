"""Typed records exchanged between the client, the pipelines and the store.

Client payloads use camelCase keys; rows are plain lists in table column
order. Conversion in both directions happens only here.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .errors import PayloadError

ALL = "All"
DEFAULT_COUNT = 10
DEFAULT_EXPLANATION = "No explanation provided."
OPTION_KEYS = ("A", "B", "C", "D")


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _criterion(value: Any) -> Optional[str]:
    text = _text(value)
    if not text or text == ALL:
        return None
    return text


def _positive_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def _whole_number(value: Any, label: str) -> int:
    """Integer from a JSON number or numeric string; fractions are rejected."""
    if isinstance(value, bool):
        raise PayloadError(f"Quiz {label} must be a whole number.")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise PayloadError(f"Quiz {label} must be a whole number.")


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


@dataclass
class QuestionRecord:
    id: str
    category: str
    subject: str
    topic: str
    text: str
    options: Dict[str, str]
    correct_answer: str
    explanation: str = DEFAULT_EXPLANATION
    image_url: Optional[str] = None

    def is_valid(self) -> bool:
        return bool(
            self.id
            and self.text
            and self.options.get("A")
            and self.options.get("B")
            and self.correct_answer in OPTION_KEYS
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "category": self.category,
            "subject": self.subject,
            "topic": self.topic,
            "text": self.text,
            "options": dict(self.options),
            "correctAnswer": self.correct_answer,
            "explanation": self.explanation,
            "imageUrl": self.image_url,
        }


@dataclass
class FilterCriteria:
    category: Optional[str] = None
    subject: Optional[str] = None
    topic: Optional[str] = None
    count: int = DEFAULT_COUNT
    randomize: bool = False

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> "FilterCriteria":
        payload = payload or {}
        return cls(
            category=_criterion(payload.get("category")),
            subject=_criterion(payload.get("subject")),
            topic=_criterion(payload.get("topic")),
            count=_positive_int(payload.get("count"), DEFAULT_COUNT),
            randomize=_flag(payload.get("randomize", False)),
        )


@dataclass
class FilterOptions:
    categories: List[str] = field(default_factory=list)
    subjects: List[str] = field(default_factory=list)
    topics: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "categories": list(self.categories),
            "subjects": list(self.subjects),
            "topics": list(self.topics),
        }


@dataclass
class SelectionResult:
    questions: List[QuestionRecord]
    filter_options: FilterOptions


@dataclass
class UserDetails:
    name: str
    id_number: str

    @classmethod
    def from_payload(cls, payload: Any) -> "UserDetails":
        if not isinstance(payload, Mapping):
            raise PayloadError("User details are missing.")
        name = _text(payload.get("name"))
        if not name:
            raise PayloadError("User name is required.")
        return cls(name=name, id_number=_text(payload.get("idNumber")))


@dataclass
class QuizMode:
    num_questions: int
    time_per_question: int
    category: str = ALL
    subject: str = ALL
    topic: str = ALL

    @classmethod
    def from_payload(cls, payload: Any) -> "QuizMode":
        payload = payload if isinstance(payload, Mapping) else {}
        return cls(
            num_questions=_positive_int(payload.get("numQuestions"), DEFAULT_COUNT),
            time_per_question=_positive_int(payload.get("timePerQuestion"), 0),
            category=_text(payload.get("category")) or ALL,
            subject=_text(payload.get("subject")) or ALL,
            topic=_text(payload.get("topic")) or ALL,
        )

    @property
    def quiz_id(self) -> str:
        return f"{self.category}-{self.subject}-{self.topic}"

    def describe(self) -> str:
        return (
            f"Questions: {self.num_questions}, "
            f"Time/Question: {self.time_per_question}s, "
            f"Category: {self.category}, "
            f"Subject: {self.subject}, "
            f"Topic: {self.topic}"
        )


@dataclass
class QuizSummary:
    score: int
    total_questions: int
    mode: QuizMode

    @classmethod
    def from_payload(cls, payload: Any) -> "QuizSummary":
        if not isinstance(payload, Mapping):
            raise PayloadError("Quiz summary is missing.")
        score = _whole_number(payload.get("score"), "score")
        total = _whole_number(payload.get("totalQuestions"), "totalQuestions")
        if score < 0 or total <= 0:
            raise PayloadError("Quiz score must be >= 0 and total > 0.")
        if score > total:
            raise PayloadError("Quiz score cannot exceed the number of questions.")
        return cls(score=score, total_questions=total, mode=QuizMode.from_payload(payload.get("mode")))

    @property
    def score_text(self) -> str:
        return f"{self.score}/{self.total_questions}"


@dataclass
class ResponseRecord:
    question_id: str
    user_answer: str
    is_correct: bool
    timed_out: bool = False

    @classmethod
    def from_payload(cls, payload: Any) -> "ResponseRecord":
        if not isinstance(payload, Mapping):
            raise PayloadError("Each response must be an object.")
        return cls(
            question_id=_text(payload.get("questionId")),
            user_answer=_text(payload.get("userAnswer")),
            is_correct=_flag(payload.get("isCorrect", False)),
            timed_out=_flag(payload.get("timedOut", False)),
        )


@dataclass
class SummaryRow:
    timestamp: str
    name: str
    id_number: str
    score: str
    mode: str

    def to_row(self) -> List[Any]:
        return [self.timestamp, self.name, self.id_number, self.score, self.mode]


@dataclass
class ResponseRow:
    timestamp: str
    user: str
    quiz_id: str
    question_id: str
    user_answer: str
    is_correct: bool
    score: int
    timed_out: bool

    def to_row(self) -> List[Any]:
        return [
            self.timestamp,
            self.user,
            self.quiz_id,
            self.question_id,
            self.user_answer,
            self.is_correct,
            self.score,
            self.timed_out,
        ]


__all__ = [
    "ALL",
    "DEFAULT_COUNT",
    "DEFAULT_EXPLANATION",
    "OPTION_KEYS",
    "QuestionRecord",
    "FilterCriteria",
    "FilterOptions",
    "SelectionResult",
    "UserDetails",
    "QuizMode",
    "QuizSummary",
    "ResponseRecord",
    "SummaryRow",
    "ResponseRow",
]
