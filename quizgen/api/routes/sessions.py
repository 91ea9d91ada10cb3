from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

import structlog
from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse

from quizgen.core.config import get_settings
from quizgen.game.sessions.errors import (
    HintUnavailableError,
    InvalidAnswerOptionError,
    QuestionAlreadyAnsweredError,
    QuestionNotAnsweredError,
    SessionFinishedError,
    SessionNotFoundError,
)
from quizgen.game.sessions.types import SessionStatus
from quizgen.generation.errors import GenerationError, GenerationInProgressError

from . import quiz_helpers
from .quiz_models import (
    AnswerRequest,
    AnswerResponse,
    HintResponse,
    NextQuestionResponse,
    QuestionViewResponse,
    SessionSummaryResponse,
    StartSessionRequest,
    StartSessionResponse,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])
logger = structlog.get_logger(__name__)

_SESSION_ERRORS: tuple[tuple[type[Exception], int, str], ...] = (
    (SessionNotFoundError, status.HTTP_404_NOT_FOUND, "E_SESSION_NOT_FOUND"),
    (SessionFinishedError, status.HTTP_409_CONFLICT, "E_SESSION_FINISHED"),
    (QuestionAlreadyAnsweredError, status.HTTP_409_CONFLICT, "E_QUESTION_LOCKED"),
    (QuestionNotAnsweredError, status.HTTP_409_CONFLICT, "E_QUESTION_NOT_ANSWERED"),
    (HintUnavailableError, status.HTTP_409_CONFLICT, "E_HINT_UNAVAILABLE"),
    (InvalidAnswerOptionError, status.HTTP_422_UNPROCESSABLE_ENTITY, "E_INVALID_OPTION"),
)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _as_http_error(exc: Exception) -> HTTPException:
    for error_type, status_code, code in _SESSION_ERRORS:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail={"code": code})
    raise exc


@router.post("", response_model=StartSessionResponse, status_code=status.HTTP_201_CREATED)
async def start_session(payload: StartSessionRequest, request: Request) -> StartSessionResponse | JSONResponse:
    quiz_helpers.assert_question_count_allowed(payload.num_questions)
    key = quiz_helpers.client_key(request)
    timer_seconds = payload.timer_seconds or get_settings().session_default_timer_seconds

    try:
        async with quiz_helpers.generation_guard.hold(key):
            result = await quiz_helpers.build_generator().generate(payload.to_quiz_request())
    except GenerationInProgressError:
        return quiz_helpers.generation_in_progress_response()
    except GenerationError as exc:
        logger.warning("quiz_session_generation_failed", attempts=exc.attempts, error_kind=exc.last_error_kind)
        return quiz_helpers.generation_failed_response(exc)

    view = quiz_helpers.get_session_service().start(
        result.questions,
        timer_seconds=timer_seconds,
        hints_enabled=payload.hints_enabled,
        now_utc=_now_utc(),
    )
    return StartSessionResponse(
        session=QuestionViewResponse.from_view(view),
        warnings=list(result.warnings),
    )


@router.get("/{session_id}", response_model=QuestionViewResponse)
async def get_session(session_id: UUID) -> QuestionViewResponse:
    try:
        view = await quiz_helpers.get_session_service().view(session_id, now_utc=_now_utc())
    except (SessionNotFoundError, SessionFinishedError) as exc:
        raise _as_http_error(exc) from exc
    return QuestionViewResponse.from_view(view)


@router.post("/{session_id}/answer", response_model=AnswerResponse)
async def answer_question(session_id: UUID, payload: AnswerRequest) -> AnswerResponse:
    try:
        result = await quiz_helpers.get_session_service().answer(
            session_id,
            option_index=payload.option_index,
            now_utc=_now_utc(),
        )
    except (
        SessionNotFoundError,
        SessionFinishedError,
        QuestionAlreadyAnsweredError,
        InvalidAnswerOptionError,
    ) as exc:
        raise _as_http_error(exc) from exc
    return AnswerResponse.from_result(result)


@router.post("/{session_id}/timeout", response_model=AnswerResponse)
async def expire_question(session_id: UUID) -> AnswerResponse:
    try:
        result = await quiz_helpers.get_session_service().expire(session_id, now_utc=_now_utc())
    except (SessionNotFoundError, SessionFinishedError, QuestionAlreadyAnsweredError) as exc:
        raise _as_http_error(exc) from exc
    return AnswerResponse.from_result(result)


@router.post("/{session_id}/hint", response_model=HintResponse)
async def use_hint(session_id: UUID) -> HintResponse:
    try:
        result = await quiz_helpers.get_session_service().hint(session_id, now_utc=_now_utc())
    except (
        SessionNotFoundError,
        SessionFinishedError,
        QuestionAlreadyAnsweredError,
        HintUnavailableError,
    ) as exc:
        raise _as_http_error(exc) from exc
    return HintResponse.from_result(result)


@router.post("/{session_id}/next", response_model=NextQuestionResponse)
async def next_question(session_id: UUID) -> NextQuestionResponse:
    service = quiz_helpers.get_session_service()
    now_utc = _now_utc()
    try:
        state = await service.next_question(session_id, now_utc=now_utc)
        if state.status is SessionStatus.FINISHED:
            return NextQuestionResponse(finished=True)
        view = await service.view(session_id, now_utc=now_utc)
    except (SessionNotFoundError, SessionFinishedError, QuestionNotAnsweredError) as exc:
        raise _as_http_error(exc) from exc
    return NextQuestionResponse(finished=False, session=QuestionViewResponse.from_view(view))


@router.get("/{session_id}/summary", response_model=SessionSummaryResponse)
async def get_summary(session_id: UUID) -> SessionSummaryResponse:
    try:
        summary = await quiz_helpers.get_session_service().summary(session_id, now_utc=_now_utc())
    except SessionNotFoundError as exc:
        raise _as_http_error(exc) from exc
    return SessionSummaryResponse.from_summary(summary)
