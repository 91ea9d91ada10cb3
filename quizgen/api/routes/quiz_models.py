from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from quizgen.game.questions.types import ValidatedQuestion
from quizgen.game.sessions.types import (
    AnswerResult,
    HintResult,
    QuestionRecord,
    QuestionView,
    SessionSummary,
)
from quizgen.generation.types import Difficulty, QuizRequest


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateQuizRequest(_CamelModel):
    topic: str = Field(min_length=1, max_length=200)
    num_questions: int = Field(gt=0)
    difficulty: Difficulty = Difficulty.MEDIUM
    language: str = Field(default="English", min_length=1, max_length=64)

    @field_validator("topic", "language", mode="before")
    @classmethod
    def strip_text(cls, value: object) -> object:
        # Blank text must fail the length check, not reach QuizRequest.
        return value.strip() if isinstance(value, str) else value

    def to_quiz_request(self) -> QuizRequest:
        return QuizRequest(
            topic=self.topic,
            question_count=self.num_questions,
            difficulty=self.difficulty,
            language=self.language,
        )


class StartSessionRequest(GenerateQuizRequest):
    timer_seconds: int | None = Field(default=None, ge=5, le=300)
    hints_enabled: bool = True


class QuizQuestionPayload(_CamelModel):
    question: str
    options: list[str]
    correct_answer: str

    @classmethod
    def from_question(cls, question: ValidatedQuestion) -> "QuizQuestionPayload":
        return cls(
            question=question.question,
            options=list(question.options),
            correct_answer=question.correct_answer,
        )


class GenerateQuizResponse(_CamelModel):
    questions: list[QuizQuestionPayload]
    warnings: list[str] = Field(default_factory=list)


class QuestionViewResponse(_CamelModel):
    session_id: UUID
    status: str
    question_number: int = Field(ge=1)
    total_questions: int = Field(ge=1)
    question: str
    options: list[str]
    eliminated_options: list[int]
    remaining_seconds: int = Field(ge=0)
    score: int = Field(ge=0)
    locked: bool
    hint_available: bool
    selected_option: int | None = None
    option_correctness: list[bool] | None = None

    @classmethod
    def from_view(cls, view: QuestionView) -> "QuestionViewResponse":
        return cls(
            session_id=view.session_id,
            status=view.status.value,
            question_number=view.question_number,
            total_questions=view.total_questions,
            question=view.text,
            options=list(view.options),
            eliminated_options=list(view.eliminated_options),
            remaining_seconds=view.remaining_seconds,
            score=view.score,
            locked=view.locked,
            hint_available=view.hint_available,
            selected_option=view.selected_option,
            option_correctness=(list(view.option_correctness) if view.option_correctness is not None else None),
        )


class StartSessionResponse(_CamelModel):
    session: QuestionViewResponse
    warnings: list[str] = Field(default_factory=list)


class AnswerRequest(_CamelModel):
    option_index: int = Field(ge=0, le=3)


class AnswerResponse(_CamelModel):
    is_correct: bool
    timed_out: bool
    selected_option: int | None
    correct_option: int
    option_correctness: list[bool]
    score: int
    is_last_question: bool

    @classmethod
    def from_result(cls, result: AnswerResult) -> "AnswerResponse":
        return cls(
            is_correct=result.is_correct,
            timed_out=result.timed_out,
            selected_option=result.selected_option,
            correct_option=result.correct_option,
            option_correctness=list(result.option_correctness),
            score=result.score,
            is_last_question=result.is_last_question,
        )


class HintResponse(_CamelModel):
    eliminated_option: int
    eliminated_options: list[int]

    @classmethod
    def from_result(cls, result: HintResult) -> "HintResponse":
        return cls(
            eliminated_option=result.eliminated_option,
            eliminated_options=list(result.eliminated_options),
        )


class NextQuestionResponse(_CamelModel):
    finished: bool
    session: QuestionViewResponse | None = None


class QuestionRecordResponse(_CamelModel):
    question_number: int
    selected_option: str | None
    timed_out: bool
    is_correct: bool

    @classmethod
    def from_record(cls, record: QuestionRecord) -> "QuestionRecordResponse":
        return cls(
            question_number=record.question_index + 1,
            selected_option=record.selected_option,
            timed_out=record.timed_out,
            is_correct=record.is_correct,
        )


class SessionSummaryResponse(_CamelModel):
    session_id: UUID
    finished: bool
    score: int = Field(ge=0)
    total_questions: int = Field(ge=1)
    percent: int = Field(ge=0, le=100)
    feedback: str
    records: list[QuestionRecordResponse]

    @classmethod
    def from_summary(cls, summary: SessionSummary) -> "SessionSummaryResponse":
        return cls(
            session_id=summary.session_id,
            finished=summary.finished,
            score=summary.score,
            total_questions=summary.total_questions,
            percent=summary.percent,
            feedback=summary.feedback,
            records=[QuestionRecordResponse.from_record(record) for record in summary.records],
        )
