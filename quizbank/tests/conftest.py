"""Test configuration and fixtures."""

import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]

# Ensure the package root is importable without an install
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from quizbank.app import app
from quizbank.schema import QUESTION_HEADERS
from quizbank.store import MemoryStore, open_store, reset_memory_stores

STORE_ID = "memory:test"


def question_row(qid, category="Math", subject="Algebra", topic="Linear", **overrides):
    """Build a Questions row in QUESTION_HEADERS order."""
    values = {
        "ID": qid,
        "Category": category,
        "Subject": subject,
        "Topic": topic,
        "Question": f"Question {qid}?",
        "Option A": f"A{qid}",
        "Option B": f"B{qid}",
        "Option C": f"C{qid}",
        "Option D": f"D{qid}",
        "Correct Answer": "a",
        "Explanation": f"Because {qid}",
        "Image URL": "",
    }
    values.update(overrides)
    return [values[h] for h in QUESTION_HEADERS]


@pytest.fixture
def question_rows():
    return [
        question_row("q1"),
        question_row("q2", topic="Quadratics"),
        question_row("q3", subject="Geometry", topic="Angles"),
        question_row("h1", category="Science", subject="Physics", topic="Motion"),
        question_row("h2", category="Science", subject="Chemistry", topic="Atoms"),
    ]


@pytest.fixture
def store(question_rows):
    reset_memory_stores()
    store = open_store(STORE_ID)
    assert isinstance(store, MemoryStore)
    store.add_table("Questions", [QUESTION_HEADERS] + question_rows)
    yield store
    reset_memory_stores()


@pytest.fixture
def client(store):
    """Flask test client wired to the in-memory store."""
    previous = dict(app.config)
    app.config["TESTING"] = True
    app.config["QUIZ_STORE"] = STORE_ID
    app.config["QUIZ_QUESTIONS_SHEET"] = "Questions"
    app.config["QUIZ_USERS_SHEET"] = "Users"
    app.config["QUIZ_RESPONSES_SHEET"] = "Responses"
    app.config["QUIZ_LOCK_TIMEOUT"] = 2
    try:
        with app.test_client() as client:
            yield client
    finally:
        app.config.clear()
        app.config.update(previous)
