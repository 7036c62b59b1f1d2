import os
from typing import Any, Dict

from flask import Flask, jsonify, request
from dotenv import load_dotenv

from .locking import DEFAULT_LOCK_TIMEOUT
from .recorder import RESPONSES_TABLE, USERS_TABLE
from .service import QUESTIONS_TABLE, fetch_quiz_data_with_status, submit_results_with_status
from .store import resolve_store_identifier


# Load environment
load_dotenv()

app = Flask(__name__)
app.secret_key = os.environ.get("FLASK_SECRET", "dev-secret")
app.config["JSON_SORT_KEYS"] = False


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    try:
        return float(raw) if raw else default
    except ValueError:
        app.logger.warning("[CONFIG] %s=%r is not a number; using %s", name, raw, default)
        return default


app.config.update(
    QUIZ_STORE=resolve_store_identifier(os.environ.get("QUIZ_STORE")),
    QUIZ_QUESTIONS_SHEET=os.environ.get("QUIZ_QUESTIONS_SHEET", QUESTIONS_TABLE),
    QUIZ_USERS_SHEET=os.environ.get("QUIZ_USERS_SHEET", USERS_TABLE),
    QUIZ_RESPONSES_SHEET=os.environ.get("QUIZ_RESPONSES_SHEET", RESPONSES_TABLE),
    QUIZ_LOCK_TIMEOUT=_float_env("QUIZ_LOCK_TIMEOUT", DEFAULT_LOCK_TIMEOUT),
)


def _request_payload() -> Dict[str, Any]:
    if request.method == "GET":
        return request.args.to_dict()
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@app.route("/health")
def health():
    return jsonify({"status": "ok"})


@app.route("/api/quiz-data", methods=["GET", "POST"])
def quiz_data():
    envelope, status = fetch_quiz_data_with_status(
        _request_payload(),
        app.config["QUIZ_STORE"],
        questions_table=app.config["QUIZ_QUESTIONS_SHEET"],
    )
    return jsonify(envelope), status


@app.route("/api/results", methods=["POST"])
def results():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"success": False, "error": "Invalid payload"}), 400

    envelope, status = submit_results_with_status(
        data.get("userDetails"),
        data.get("quizSummary"),
        data.get("responses"),
        app.config["QUIZ_STORE"],
        users_table=app.config["QUIZ_USERS_SHEET"],
        responses_table=app.config["QUIZ_RESPONSES_SHEET"],
        lock_timeout=app.config["QUIZ_LOCK_TIMEOUT"],
    )
    if envelope["success"]:
        app.logger.info("[SUBMIT] %s", envelope["message"])
    return jsonify(envelope), status


if __name__ == "__main__":
    app.run(debug=os.environ.get("FLASK_DEBUG") == "1")
