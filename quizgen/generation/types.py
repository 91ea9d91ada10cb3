from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from quizgen.game.questions.types import QuestionSet


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class AttemptStatus(str, Enum):
    ACCEPTED = "accepted"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class QuizRequest:
    topic: str
    question_count: int
    difficulty: Difficulty = Difficulty.MEDIUM
    language: str = "English"

    def __post_init__(self) -> None:
        if not self.topic.strip():
            raise ValueError("topic must not be empty")
        if self.question_count < 1:
            raise ValueError("question_count must be positive")


@dataclass(frozen=True, slots=True)
class ExtractedArray:
    text: str
    possibly_truncated: bool = False


@dataclass(frozen=True, slots=True)
class AttemptPlan:
    attempt_number: int
    model: str
    max_tokens: int


@dataclass(frozen=True, slots=True)
class AttemptOutcome:
    plan: AttemptPlan
    status: AttemptStatus
    questions: QuestionSet = ()
    error_kind: str | None = None
    error_message: str | None = None
    raw_preview: str = ""


@dataclass(frozen=True, slots=True)
class GenerationResult:
    questions: QuestionSet
    requested_count: int
    attempts_used: int
    model: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_partial(self) -> bool:
        return len(self.questions) < self.requested_count
