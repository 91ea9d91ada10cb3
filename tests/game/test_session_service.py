from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from quizgen.game.questions.types import ValidatedQuestion
from quizgen.game.sessions.errors import QuestionAlreadyAnsweredError, SessionNotFoundError
from quizgen.game.sessions.service import QuizSessionService
from quizgen.game.sessions.store import SessionStore

UTC = timezone.utc
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
QUESTIONS = (
    ValidatedQuestion(question="Red planet?", options=("Venus", "Jupiter", "Mars", "Mercury"), correct_answer="Mars"),
    ValidatedQuestion(question="2 + 2?", options=("3", "4", "5", "22"), correct_answer="4"),
)


def _service(max_sessions: int = 10) -> QuizSessionService:
    return QuizSessionService(SessionStore(max_sessions=max_sessions))


@pytest.mark.asyncio
async def test_view_applies_due_timeout() -> None:
    service = _service()
    started = service.start(QUESTIONS, timer_seconds=10, hints_enabled=False, now_utc=NOW)

    view = await service.view(started.session_id, now_utc=NOW + timedelta(seconds=15))

    assert view.locked is True
    assert view.selected_option is None
    assert view.remaining_seconds == 0
    with pytest.raises(QuestionAlreadyAnsweredError):
        await service.answer(started.session_id, option_index=0, now_utc=NOW + timedelta(seconds=16))


@pytest.mark.asyncio
async def test_concurrent_answer_and_timeout_score_once() -> None:
    service = _service()
    started = service.start(QUESTIONS, timer_seconds=30, hints_enabled=False, now_utc=NOW)
    correct = started.options.index("Mars")

    results = await asyncio.gather(
        service.expire(started.session_id, now_utc=NOW + timedelta(seconds=30)),
        service.answer(started.session_id, option_index=correct, now_utc=NOW + timedelta(seconds=29)),
        return_exceptions=True,
    )

    assert sum(1 for result in results if isinstance(result, QuestionAlreadyAnsweredError)) == 1
    summary = await service.summary(started.session_id, now_utc=NOW + timedelta(seconds=31))
    assert len(summary.records) == 1
    assert summary.score in (0, 1)


@pytest.mark.asyncio
async def test_sessions_are_isolated() -> None:
    service = _service()
    first = service.start(QUESTIONS, timer_seconds=30, hints_enabled=False, now_utc=NOW)
    second = service.start(QUESTIONS, timer_seconds=30, hints_enabled=False, now_utc=NOW)

    await service.answer(first.session_id, option_index=first.options.index("Mars"), now_utc=NOW)

    first_summary = await service.summary(first.session_id, now_utc=NOW)
    second_summary = await service.summary(second.session_id, now_utc=NOW)
    assert first_summary.score == 1
    assert second_summary.score == 0
    assert second_summary.records == ()
    assert service.active_sessions == 2


@pytest.mark.asyncio
async def test_next_question_finishes_after_last() -> None:
    service = _service()
    started = service.start(QUESTIONS, timer_seconds=30, hints_enabled=False, now_utc=NOW)

    await service.expire(started.session_id, now_utc=NOW)
    state = await service.next_question(started.session_id, now_utc=NOW)
    assert state.current_index == 1
    await service.expire(started.session_id, now_utc=NOW)
    state = await service.next_question(started.session_id, now_utc=NOW)

    assert state.status.value == "finished"


@pytest.mark.asyncio
async def test_store_evicts_least_recently_used_session() -> None:
    service = _service(max_sessions=1)
    first = service.start(QUESTIONS, timer_seconds=30, hints_enabled=False, now_utc=NOW)
    service.start(QUESTIONS, timer_seconds=30, hints_enabled=False, now_utc=NOW)

    with pytest.raises(SessionNotFoundError):
        await service.view(first.session_id, now_utc=NOW)


@pytest.mark.asyncio
async def test_unknown_session_is_not_found() -> None:
    with pytest.raises(SessionNotFoundError):
        await _service().view(uuid4(), now_utc=NOW)
