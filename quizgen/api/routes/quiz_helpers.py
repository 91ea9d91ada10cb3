from __future__ import annotations

from functools import lru_cache

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from quizgen.core.config import get_settings
from quizgen.game.sessions.service import QuizSessionService
from quizgen.game.sessions.store import SessionStore
from quizgen.generation.errors import GenerationError
from quizgen.generation.guard import GenerationGuard
from quizgen.generation.orchestrator import QuizGenerator

CLIENT_ID_HEADER = "X-Client-Id"

generation_guard = GenerationGuard()


def build_generator() -> QuizGenerator:
    return QuizGenerator(settings=get_settings())


@lru_cache(maxsize=1)
def get_session_service() -> QuizSessionService:
    return QuizSessionService(SessionStore(max_sessions=get_settings().session_store_max_sessions))


def client_key(request: Request) -> str:
    header_value = (request.headers.get(CLIENT_ID_HEADER) or "").strip()
    if header_value:
        return f"client:{header_value[:128]}"
    host = request.client.host if request.client is not None else "unknown"
    return f"ip:{host}"


def assert_question_count_allowed(num_questions: int) -> None:
    max_questions = get_settings().quiz_max_questions
    if num_questions > max_questions:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"code": "E_TOO_MANY_QUESTIONS", "max_questions": max_questions},
        )


def generation_in_progress_response() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"error": "generation already in progress"},
    )


def generation_failed_response(exc: GenerationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": str(exc),
            "attempts": exc.attempts,
            "preview": exc.preview,
        },
    )
