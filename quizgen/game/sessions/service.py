from __future__ import annotations

from datetime import datetime
from uuid import UUID

import structlog

from quizgen.game.questions.types import QuestionSet
from quizgen.game.sessions import engine
from quizgen.game.sessions.store import SessionStore
from quizgen.game.sessions.types import (
    AnswerResult,
    HintResult,
    QuestionView,
    QuizSessionState,
    SessionSummary,
)

logger = structlog.get_logger(__name__)


class QuizSessionService:
    def __init__(self, store: SessionStore) -> None:
        self._store = store

    def start(
        self,
        questions: QuestionSet,
        *,
        timer_seconds: int,
        hints_enabled: bool,
        now_utc: datetime,
    ) -> QuestionView:
        state = engine.start_session(
            questions,
            timer_seconds=timer_seconds,
            hints_enabled=hints_enabled,
            now_utc=now_utc,
        )
        self._store.add(state)
        logger.info(
            "quiz_session_started",
            session_id=str(state.session_id),
            questions=state.total_questions,
            timer_seconds=state.timer_seconds,
            hints_enabled=hints_enabled,
        )
        return engine.current_view(state, now_utc=now_utc)

    async def view(self, session_id: UUID, *, now_utc: datetime) -> QuestionView:
        def apply(state: QuizSessionState) -> tuple[QuizSessionState, QuestionView]:
            state = engine.apply_due_timeout(state, now_utc=now_utc)
            return state, engine.current_view(state, now_utc=now_utc)

        return await self._store.transition(session_id, apply)

    async def answer(self, session_id: UUID, *, option_index: int, now_utc: datetime) -> AnswerResult:
        def apply(state: QuizSessionState) -> tuple[QuizSessionState, AnswerResult]:
            return engine.answer_question(state, option_index=option_index, now_utc=now_utc)

        result = await self._store.transition(session_id, apply)
        logger.info(
            "quiz_session_answered",
            session_id=str(session_id),
            is_correct=result.is_correct,
            timed_out=result.timed_out,
            score=result.score,
        )
        return result

    async def expire(self, session_id: UUID, *, now_utc: datetime) -> AnswerResult:
        def apply(state: QuizSessionState) -> tuple[QuizSessionState, AnswerResult]:
            return engine.expire_question(state, now_utc=now_utc)

        result = await self._store.transition(session_id, apply)
        logger.info("quiz_session_question_expired", session_id=str(session_id), score=result.score)
        return result

    async def hint(self, session_id: UUID, *, now_utc: datetime) -> HintResult:
        def apply(state: QuizSessionState) -> tuple[QuizSessionState, HintResult]:
            state = engine.apply_due_timeout(state, now_utc=now_utc)
            return engine.use_hint(state, now_utc=now_utc)

        return await self._store.transition(session_id, apply)

    async def next_question(self, session_id: UUID, *, now_utc: datetime) -> QuizSessionState:
        def apply(state: QuizSessionState) -> tuple[QuizSessionState, QuizSessionState]:
            state = engine.apply_due_timeout(state, now_utc=now_utc)
            updated = engine.advance(state, now_utc=now_utc)
            return updated, updated

        return await self._store.transition(session_id, apply)

    async def summary(self, session_id: UUID, *, now_utc: datetime) -> SessionSummary:
        def apply(state: QuizSessionState) -> tuple[QuizSessionState, SessionSummary]:
            state = engine.apply_due_timeout(state, now_utc=now_utc)
            return state, engine.summarize(state)

        return await self._store.transition(session_id, apply)

    @property
    def active_sessions(self) -> int:
        return len(self._store)
