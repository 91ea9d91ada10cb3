"""Quiz session state machine.

Every transition takes the current ``QuizSessionState`` and returns a new one;
nothing is kept at module level. Time is passed in as ``now_utc`` and the
per-question countdown is a deadline derived from ``question_started_at``.

A question is scored exactly once: the first of answer, explicit expiry or a
due timeout records it and locks it, and every later scoring attempt on the
same question raises ``QuestionAlreadyAnsweredError``.
"""

from __future__ import annotations

import math
import random
import secrets
from dataclasses import replace
from datetime import datetime, timedelta
from uuid import UUID, uuid4

from quizgen.game.questions.types import QuestionSet, ValidatedQuestion
from quizgen.game.sessions.errors import (
    HintUnavailableError,
    InvalidAnswerOptionError,
    QuestionAlreadyAnsweredError,
    QuestionNotAnsweredError,
    SessionFinishedError,
)
from quizgen.game.sessions.types import (
    AnswerResult,
    HintResult,
    QuestionRecord,
    QuestionView,
    QuizSessionState,
    SessionStatus,
    SessionSummary,
)

MIN_TIMER_SECONDS = 5
MAX_TIMER_SECONDS = 300
MIN_INCORRECT_FOR_HINT = 2
FEEDBACK_TIERS: tuple[tuple[int, str], ...] = (
    (100, "Flawless Victory! You're an absolute genius!"),
    (75, "Excellent! You have a deep knowledge of this topic."),
    (50, "Good job! A very respectable score."),
    (0, "Nice try! Every quiz is a learning opportunity."),
)


def _shuffled_orders(questions: QuestionSet, seed: int) -> tuple[tuple[int, ...], ...]:
    rng = random.Random(seed)
    orders: list[tuple[int, ...]] = []
    for question in questions:
        order = list(range(len(question.options)))
        rng.shuffle(order)
        orders.append(tuple(order))
    return tuple(orders)


def start_session(
    questions: QuestionSet,
    *,
    timer_seconds: int,
    hints_enabled: bool,
    now_utc: datetime,
    session_id: UUID | None = None,
    seed: int | None = None,
) -> QuizSessionState:
    if not questions:
        raise ValueError("a session needs at least one question")
    if seed is None:
        seed = secrets.randbits(32)
    return QuizSessionState(
        session_id=session_id or uuid4(),
        questions=tuple(questions),
        display_orders=_shuffled_orders(questions, seed),
        timer_seconds=min(MAX_TIMER_SECONDS, max(MIN_TIMER_SECONDS, int(timer_seconds))),
        hints_enabled=hints_enabled,
        seed=seed,
        current_index=0,
        question_started_at=now_utc,
    )


def _current_question(state: QuizSessionState) -> ValidatedQuestion:
    return state.questions[state.current_index]


def _current_order(state: QuizSessionState) -> tuple[int, ...]:
    return state.display_orders[state.current_index]


def _deadline(state: QuizSessionState) -> datetime:
    return state.question_started_at + timedelta(seconds=state.timer_seconds)


def remaining_seconds(state: QuizSessionState, *, now_utc: datetime) -> int:
    left = (_deadline(state) - now_utc).total_seconds()
    return max(0, math.ceil(left))


def is_expired(state: QuizSessionState, *, now_utc: datetime) -> bool:
    return now_utc >= _deadline(state)


def _option_correctness(state: QuizSessionState) -> tuple[bool, ...]:
    question = _current_question(state)
    return tuple(question.is_correct_option(index) for index in _current_order(state))


def _ensure_in_progress(state: QuizSessionState) -> None:
    if state.status is SessionStatus.FINISHED:
        raise SessionFinishedError


def _ensure_unlocked(state: QuizSessionState) -> None:
    _ensure_in_progress(state)
    if state.is_current_locked:
        raise QuestionAlreadyAnsweredError


def _record_answer(
    state: QuizSessionState,
    *,
    display_index: int | None,
    timed_out: bool,
) -> tuple[QuizSessionState, AnswerResult]:
    question = _current_question(state)
    correctness = _option_correctness(state)

    selected_text: str | None = None
    is_correct = False
    if display_index is not None:
        option_index = _current_order(state)[display_index]
        selected_text = question.options[option_index]
        is_correct = question.is_correct_option(option_index)

    record = QuestionRecord(
        question_index=state.current_index,
        selected_option=selected_text,
        timed_out=timed_out,
        is_correct=is_correct,
    )
    updated = replace(
        state,
        score=state.score + (1 if is_correct else 0),
        records=state.records + (record,),
    )
    return updated, AnswerResult(
        is_correct=is_correct,
        timed_out=timed_out,
        selected_option=display_index,
        correct_option=correctness.index(True),
        option_correctness=correctness,
        score=updated.score,
        is_last_question=updated.is_last_question,
    )


def answer_question(
    state: QuizSessionState,
    *,
    option_index: int,
    now_utc: datetime,
) -> tuple[QuizSessionState, AnswerResult]:
    _ensure_unlocked(state)
    order = _current_order(state)
    if option_index < 0 or option_index >= len(order):
        raise InvalidAnswerOptionError
    if order[option_index] in state.eliminated:
        raise InvalidAnswerOptionError

    # A click that arrives after the deadline loses to the timer.
    if is_expired(state, now_utc=now_utc):
        return _record_answer(state, display_index=None, timed_out=True)
    return _record_answer(state, display_index=option_index, timed_out=False)


def expire_question(state: QuizSessionState, *, now_utc: datetime) -> tuple[QuizSessionState, AnswerResult]:
    del now_utc
    _ensure_unlocked(state)
    return _record_answer(state, display_index=None, timed_out=True)


def apply_due_timeout(state: QuizSessionState, *, now_utc: datetime) -> QuizSessionState:
    if state.status is SessionStatus.FINISHED or state.is_current_locked:
        return state
    if not is_expired(state, now_utc=now_utc):
        return state
    updated, _ = _record_answer(state, display_index=None, timed_out=True)
    return updated


def _hint_candidates(state: QuizSessionState) -> list[int]:
    question = _current_question(state)
    return [
        index
        for index in range(len(question.options))
        if index not in state.eliminated and not question.is_correct_option(index)
    ]


def hint_available(state: QuizSessionState, *, now_utc: datetime) -> bool:
    if state.status is SessionStatus.FINISHED or state.is_current_locked:
        return False
    if not state.hints_enabled or state.hint_used:
        return False
    if is_expired(state, now_utc=now_utc):
        return False
    return len(_hint_candidates(state)) >= MIN_INCORRECT_FOR_HINT


def _display_indexes(state: QuizSessionState, option_indexes: tuple[int, ...]) -> tuple[int, ...]:
    order = _current_order(state)
    return tuple(sorted(order.index(index) for index in option_indexes))


def use_hint(state: QuizSessionState, *, now_utc: datetime) -> tuple[QuizSessionState, HintResult]:
    _ensure_unlocked(state)
    if not hint_available(state, now_utc=now_utc):
        raise HintUnavailableError

    rng = random.Random(f"{state.seed}:{state.current_index}:hint")
    eliminated_index = rng.choice(_hint_candidates(state))
    updated = replace(
        state,
        eliminated=state.eliminated + (eliminated_index,),
        hint_used=True,
    )
    return updated, HintResult(
        eliminated_option=_current_order(state).index(eliminated_index),
        eliminated_options=_display_indexes(updated, updated.eliminated),
    )


def advance(state: QuizSessionState, *, now_utc: datetime) -> QuizSessionState:
    _ensure_in_progress(state)
    if not state.is_current_locked:
        raise QuestionNotAnsweredError
    if state.is_last_question:
        return replace(state, status=SessionStatus.FINISHED)
    return replace(
        state,
        current_index=state.current_index + 1,
        question_started_at=now_utc,
        eliminated=(),
        hint_used=False,
    )


def current_view(state: QuizSessionState, *, now_utc: datetime) -> QuestionView:
    _ensure_in_progress(state)
    question = _current_question(state)
    order = _current_order(state)

    selected_option: int | None = None
    correctness: tuple[bool, ...] | None = None
    if state.is_current_locked:
        record = state.records[state.current_index]
        correctness = _option_correctness(state)
        if record.selected_option is not None:
            selected_option = next(
                position for position, index in enumerate(order) if question.options[index] == record.selected_option
            )

    return QuestionView(
        session_id=state.session_id,
        status=state.status,
        question_number=state.current_index + 1,
        total_questions=state.total_questions,
        text=question.question,
        options=tuple(question.options[index] for index in order),
        eliminated_options=_display_indexes(state, state.eliminated),
        remaining_seconds=0 if state.is_current_locked else remaining_seconds(state, now_utc=now_utc),
        score=state.score,
        locked=state.is_current_locked,
        hint_available=hint_available(state, now_utc=now_utc),
        selected_option=selected_option,
        option_correctness=correctness,
    )


def score_feedback(percent: int) -> str:
    for threshold, message in FEEDBACK_TIERS:
        if percent >= threshold:
            return message
    return FEEDBACK_TIERS[-1][1]


def summarize(state: QuizSessionState) -> SessionSummary:
    percent = math.floor(state.score * 100 / state.total_questions + 0.5)
    return SessionSummary(
        session_id=state.session_id,
        finished=state.status is SessionStatus.FINISHED,
        score=state.score,
        total_questions=state.total_questions,
        percent=percent,
        feedback=score_feedback(percent),
        records=state.records,
    )
