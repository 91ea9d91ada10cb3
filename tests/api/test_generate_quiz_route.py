from __future__ import annotations

from types import SimpleNamespace

from fastapi.testclient import TestClient

from quizgen.api.routes import quiz_helpers
from quizgen.game.questions.types import ValidatedQuestion
from quizgen.generation.errors import GenerationError
from quizgen.generation.types import GenerationResult, QuizRequest
from quizgen.main import app

QUESTION = ValidatedQuestion(question="Red planet?", options=("Venus", "Jupiter", "Mars", "Mercury"), correct_answer="Mars")


class _Generator:
    def __init__(self, *, result: GenerationResult | None = None, error: Exception | None = None) -> None:
        self.requests: list[QuizRequest] = []
        self._result = result
        self._error = error

    async def generate(self, request: QuizRequest) -> GenerationResult:
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        assert self._result is not None
        return self._result


def _settings(**overrides: object) -> SimpleNamespace:
    base = {"quiz_max_questions": 20}
    base.update(overrides)
    return SimpleNamespace(**base)


def _patch(monkeypatch, generator: _Generator) -> None:
    monkeypatch.setattr(quiz_helpers, "build_generator", lambda: generator)
    monkeypatch.setattr(quiz_helpers, "get_settings", lambda: _settings())


def test_generate_quiz_returns_questions(monkeypatch) -> None:
    generator = _Generator(
        result=GenerationResult(questions=(QUESTION,), requested_count=2, attempts_used=1, model="m", warnings=("partial",))
    )
    _patch(monkeypatch, generator)

    client = TestClient(app)
    response = client.post(
        "/generate-quiz",
        json={"topic": " Planets ", "numQuestions": 2, "difficulty": "easy", "language": "English"},
    )

    assert response.status_code == 200
    assert response.json() == {
        "questions": [
            {"question": "Red planet?", "options": ["Venus", "Jupiter", "Mars", "Mercury"], "correctAnswer": "Mars"}
        ],
        "warnings": ["partial"],
    }
    assert generator.requests[0].topic == "Planets"
    assert generator.requests[0].question_count == 2
    assert generator.requests[0].difficulty.value == "easy"


def test_generate_quiz_returns_500_with_bounded_preview(monkeypatch) -> None:
    error = GenerationError("Could not generate a valid quiz.", attempts=3, last_error_kind="extraction", preview="nope")
    _patch(monkeypatch, _Generator(error=error))

    client = TestClient(app)
    response = client.post("/generate-quiz", json={"topic": "Planets", "numQuestions": 2, "difficulty": "easy", "language": "English"})

    assert response.status_code == 500
    assert response.json() == {"error": "Could not generate a valid quiz.", "attempts": 3, "preview": "nope"}


def test_generate_quiz_rejects_invalid_payload(monkeypatch) -> None:
    _patch(monkeypatch, _Generator())

    client = TestClient(app)
    for payload in (
        {"topic": "", "numQuestions": 2, "difficulty": "easy", "language": "English"},
        {"topic": "Planets", "numQuestions": 0, "difficulty": "easy", "language": "English"},
        {"topic": "Planets", "numQuestions": 2, "difficulty": "insane", "language": "English"},
    ):
        response = client.post("/generate-quiz", json=payload)
        assert response.status_code == 422


def test_generate_quiz_rejects_too_many_questions(monkeypatch) -> None:
    _patch(monkeypatch, _Generator())

    client = TestClient(app)
    response = client.post("/generate-quiz", json={"topic": "Planets", "numQuestions": 21, "difficulty": "easy", "language": "English"})

    assert response.status_code == 422
    assert response.json() == {"detail": {"code": "E_TOO_MANY_QUESTIONS", "max_questions": 20}}


def test_generate_quiz_rejects_start_while_in_flight(monkeypatch) -> None:
    _patch(monkeypatch, _Generator())

    client = TestClient(app)
    quiz_helpers.generation_guard._in_flight.add("client:busy")
    try:
        response = client.post(
            "/generate-quiz",
            headers={"X-Client-Id": "busy"},
            json={"topic": "Planets", "numQuestions": 2, "difficulty": "easy", "language": "English"},
        )
    finally:
        quiz_helpers.generation_guard._in_flight.discard("client:busy")

    assert response.status_code == 409
    assert response.json() == {"error": "generation already in progress"}


def test_generate_quiz_rejects_blank_topic(monkeypatch) -> None:
    generator = _Generator(
        result=GenerationResult(questions=(QUESTION,), requested_count=1, attempts_used=1, model="m")
    )
    _patch(monkeypatch, generator)

    client = TestClient(app)
    for payload in (
        {"topic": "   ", "numQuestions": 3, "difficulty": "easy", "language": "English"},
        {"topic": "Planets", "numQuestions": 3, "difficulty": "easy", "language": " \t "},
    ):
        response = client.post("/generate-quiz", json=payload)
        assert response.status_code == 422

    assert generator.requests == []
