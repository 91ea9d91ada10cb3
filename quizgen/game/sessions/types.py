from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from quizgen.game.questions.types import QuestionSet


class SessionStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


@dataclass(frozen=True, slots=True)
class QuestionRecord:
    question_index: int
    selected_option: str | None
    timed_out: bool
    is_correct: bool


@dataclass(frozen=True, slots=True)
class QuizSessionState:
    session_id: UUID
    questions: QuestionSet
    display_orders: tuple[tuple[int, ...], ...]
    timer_seconds: int
    hints_enabled: bool
    seed: int
    current_index: int
    question_started_at: datetime
    score: int = 0
    records: tuple[QuestionRecord, ...] = ()
    eliminated: tuple[int, ...] = ()
    hint_used: bool = False
    status: SessionStatus = SessionStatus.IN_PROGRESS

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def is_current_locked(self) -> bool:
        return len(self.records) > self.current_index

    @property
    def is_last_question(self) -> bool:
        return self.current_index >= self.total_questions - 1


@dataclass(frozen=True, slots=True)
class QuestionView:
    session_id: UUID
    status: SessionStatus
    question_number: int
    total_questions: int
    text: str
    options: tuple[str, ...]
    eliminated_options: tuple[int, ...]
    remaining_seconds: int
    score: int
    locked: bool
    hint_available: bool
    selected_option: int | None = None
    option_correctness: tuple[bool, ...] | None = None


@dataclass(frozen=True, slots=True)
class AnswerResult:
    is_correct: bool
    timed_out: bool
    selected_option: int | None
    correct_option: int
    option_correctness: tuple[bool, ...]
    score: int
    is_last_question: bool


@dataclass(frozen=True, slots=True)
class HintResult:
    eliminated_option: int
    eliminated_options: tuple[int, ...]


@dataclass(frozen=True, slots=True)
class SessionSummary:
    session_id: UUID
    finished: bool
    score: int
    total_questions: int
    percent: int
    feedback: str
    records: tuple[QuestionRecord, ...]
