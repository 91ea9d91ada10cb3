from __future__ import annotations

import json
from dataclasses import dataclass

import structlog

from quizgen.game.questions.answers import find_matching_option, normalize_answer
from quizgen.game.questions.types import QuestionSet, ValidatedQuestion
from quizgen.generation.errors import ParseError, ValidationError
from quizgen.generation.extraction import brackets_balanced
from quizgen.generation.types import ExtractedArray

logger = structlog.get_logger(__name__)

OPTIONS_PER_QUESTION = 4
# Canonical field first; the rest are spellings seen in provider output.
QUESTION_FIELDS = ("question", "questionText", "question_text")
OPTIONS_FIELDS = ("options", "answers", "choices")
CORRECT_ANSWER_FIELDS = ("correctAnswer", "correct_answer", "answer")


@dataclass(frozen=True, slots=True)
class CandidateQuestion:
    index: int
    question: object
    options: object
    correct_answer: object


def _first_present(item: dict[str, object], fields: tuple[str, ...]) -> object:
    for field_name in fields:
        if field_name in item:
            return item[field_name]
    return None


def adapt_candidate(index: int, item: dict[str, object]) -> CandidateQuestion:
    return CandidateQuestion(
        index=index,
        question=_first_present(item, QUESTION_FIELDS),
        options=_first_present(item, OPTIONS_FIELDS),
        correct_answer=_first_present(item, CORRECT_ANSWER_FIELDS),
    )


def _looks_truncated(extracted: ExtractedArray) -> bool:
    text = extracted.text.rstrip()
    return extracted.possibly_truncated or not text.endswith("]") or not brackets_balanced(text)


def parse_candidates(extracted: ExtractedArray) -> list[object]:
    try:
        parsed = json.loads(extracted.text)
    except json.JSONDecodeError as exc:
        reason = "truncated" if _looks_truncated(extracted) else "malformed"
        raise ParseError(f"completion JSON is {reason}: {exc.msg}", reason=reason) from exc

    if isinstance(parsed, dict):
        return [parsed]
    if not isinstance(parsed, list):
        raise ParseError("completion JSON is not an array", reason="malformed")
    return parsed


def _shape_problem(candidate: CandidateQuestion) -> str | None:
    if not isinstance(candidate.question, str) or not candidate.question.strip():
        return "question"
    options = candidate.options
    if not isinstance(options, list) or len(options) != OPTIONS_PER_QUESTION:
        return "options"
    if not all(isinstance(option, str) and option.strip() for option in options):
        return "options"
    if len({normalize_answer(option) for option in options}) != OPTIONS_PER_QUESTION:
        return "options"
    if not isinstance(candidate.correct_answer, str) or not candidate.correct_answer.strip():
        return "correctAnswer"
    return None


def _promote(candidate: CandidateQuestion) -> ValidatedQuestion | None:
    # _shape_problem has already confirmed the types.
    options = tuple(option.strip() for option in candidate.options)  # type: ignore[union-attr]
    correct_answer = candidate.correct_answer.strip()  # type: ignore[union-attr]
    if find_matching_option(correct_answer, options) is None:
        return None
    return ValidatedQuestion(
        question=candidate.question.strip(),  # type: ignore[union-attr]
        options=options,  # type: ignore[arg-type]
        correct_answer=correct_answer,
    )


def validate_questions(extracted: ExtractedArray, expected_count: int) -> QuestionSet:
    """Turn an extracted array into validated questions.

    Malformed elements are skipped one by one; only an empty result is an
    error. A shorter-than-requested set is logged and returned as is.
    """
    items = parse_candidates(extracted)

    survivors: list[ValidatedQuestion] = []
    discarded = 0
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            discarded += 1
            logger.warning("quiz_question_discarded", index=index, field="element", reason="not_an_object")
            continue

        candidate = adapt_candidate(index, item)
        problem = _shape_problem(candidate)
        if problem is not None:
            discarded += 1
            logger.warning("quiz_question_discarded", index=index, field=problem, reason="invalid_shape")
            continue

        question = _promote(candidate)
        if question is None:
            discarded += 1
            logger.warning(
                "quiz_question_discarded",
                index=index,
                field="correctAnswer",
                reason="answer_not_in_options",
            )
            continue
        survivors.append(question)

    if not survivors:
        raise ValidationError("no valid questions in completion", discarded=discarded)

    if len(survivors) > expected_count:
        logger.info("quiz_questions_trimmed", received=len(survivors), expected=expected_count)
        survivors = survivors[:expected_count]
    elif len(survivors) < expected_count:
        logger.warning(
            "quiz_questions_partial",
            survived=len(survivors),
            expected=expected_count,
            discarded=discarded,
        )

    return tuple(survivors)
