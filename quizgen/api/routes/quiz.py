from __future__ import annotations

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from quizgen.generation.errors import GenerationError, GenerationInProgressError

from . import quiz_helpers
from .quiz_models import GenerateQuizRequest, GenerateQuizResponse, QuizQuestionPayload

router = APIRouter(tags=["quiz"])
logger = structlog.get_logger(__name__)


@router.post("/generate-quiz", response_model=GenerateQuizResponse)
async def generate_quiz(payload: GenerateQuizRequest, request: Request) -> GenerateQuizResponse | JSONResponse:
    quiz_helpers.assert_question_count_allowed(payload.num_questions)
    quiz_request = payload.to_quiz_request()
    key = quiz_helpers.client_key(request)

    try:
        async with quiz_helpers.generation_guard.hold(key):
            result = await quiz_helpers.build_generator().generate(quiz_request)
    except GenerationInProgressError:
        return quiz_helpers.generation_in_progress_response()
    except GenerationError as exc:
        logger.warning("generate_quiz_failed", attempts=exc.attempts, error_kind=exc.last_error_kind)
        return quiz_helpers.generation_failed_response(exc)

    return GenerateQuizResponse(
        questions=[QuizQuestionPayload.from_question(question) for question in result.questions],
        warnings=list(result.warnings),
    )
