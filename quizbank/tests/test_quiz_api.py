"""End-to-end checks through the Flask endpoints."""

import json

from conftest import STORE_ID, question_row
from quizbank.schema import QUESTION_HEADERS
from quizbank.store import open_store


def submission(responses=10):
    return {
        "userDetails": {"name": "Ann Lee", "idNumber": "S-42"},
        "quizSummary": {
            "score": 7,
            "totalQuestions": 10,
            "mode": {
                "numQuestions": 10,
                "timePerQuestion": 30,
                "category": "Math",
                "subject": "Algebra",
                "topic": "All",
            },
        },
        "responses": [
            {"questionId": f"q{i}", "userAnswer": "A", "isCorrect": i < 7, "timedOut": False}
            for i in range(responses)
        ],
    }


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}


def test_math_questions_returned_in_order(client):
    store = open_store(STORE_ID)
    store.tables.clear()
    store.add_table(
        "Questions",
        [QUESTION_HEADERS, question_row("m1"), question_row("m2"), question_row("m3")],
    )
    resp = client.post("/api/quiz-data", json={"category": "Math", "count": 10, "randomize": False})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["success"] is True
    assert [q["id"] for q in data["questions"]] == ["m1", "m2", "m3"]
    assert data["filterOptions"]["categories"] == ["Math"]
    first = data["questions"][0]
    assert first["options"]["A"] == "Am1"
    assert first["correctAnswer"] == "A"


def test_no_history_questions(client):
    resp = client.post("/api/quiz-data", json={"category": "History"})
    assert resp.status_code == 400
    assert resp.get_json() == {"success": False, "error": "No questions match the selected filters."}


def test_query_string_criteria(client):
    resp = client.get("/api/quiz-data?category=Science&count=1")
    data = resp.get_json()
    assert data["success"] is True
    assert [q["id"] for q in data["questions"]] == ["h1"]


def test_randomized_request_returns_subset(client):
    resp = client.post("/api/quiz-data", json={"count": 3, "randomize": True})
    data = resp.get_json()
    assert len(data["questions"]) == 3
    assert len({q["id"] for q in data["questions"]}) == 3


def test_missing_question_sheet(client):
    client.application.config["QUIZ_QUESTIONS_SHEET"] = "Elsewhere"
    data = client.get("/api/quiz-data").get_json()
    assert data["success"] is False
    assert "Elsewhere" in data["error"]


def test_missing_column_message(client):
    store = open_store(STORE_ID)
    store.tables.clear()
    store.add_table("Questions", [["ID", "Category"], ["q1", "Math"]])
    data = client.get("/api/quiz-data").get_json()
    assert data == {"success": False, "error": "Missing required column: Subject"}


def test_submit_records_summary_and_responses(client):
    resp = client.post("/api/results", data=json.dumps(submission()), content_type="application/json")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["success"] is True
    assert "Ann Lee" in data["message"]

    store = open_store(STORE_ID)
    users = store.get_table("Users").read_all()
    assert len(users) == 2
    assert users[1][1:4] == ["Ann Lee", "S-42", "7/10"]

    body = store.get_table("Responses").read_all()[1:]
    assert len(body) == 10
    assert len({r[0] for r in body}) == 1
    assert {r[2] for r in body} == {"Math-Algebra-All"}
    assert sum(r[6] for r in body) == 7


def test_submit_rejects_bad_payloads(client):
    resp = client.post("/api/results", data="nope", content_type="text/plain")
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False

    payload = submission()
    payload["quizSummary"]["totalQuestions"] = 0
    resp = client.post("/api/results", json=payload)
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False
    assert open_store(STORE_ID).get_table("Users") is None


def test_submit_times_out_when_store_busy(client):
    from quizbank.locking import lock_for

    client.application.config["QUIZ_LOCK_TIMEOUT"] = 0.05
    handle = lock_for(STORE_ID).acquire(timeout=1)
    try:
        resp = client.post("/api/results", json=submission())
    finally:
        handle.release()
    assert resp.status_code == 503
    assert resp.get_json()["success"] is False
