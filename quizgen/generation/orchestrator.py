from __future__ import annotations

from dataclasses import replace
from typing import Protocol

import structlog

from quizgen.core.config import Settings, get_settings
from quizgen.generation.completion_client import CompletionClient
from quizgen.generation.errors import (
    ExtractionError,
    GenerationError,
    ParseError,
    ProviderError,
    ValidationError,
)
from quizgen.generation.extraction import extract_json_array
from quizgen.generation.prompt import build_quiz_prompt
from quizgen.generation.types import (
    AttemptOutcome,
    AttemptPlan,
    AttemptStatus,
    GenerationResult,
    QuizRequest,
)
from quizgen.generation.validation import validate_questions

logger = structlog.get_logger(__name__)

RAW_PREVIEW_LIMIT = 400
MAX_ATTEMPTS_CAP = 5
GENERATION_FAILED_MESSAGE = "Could not generate a valid quiz. Please try again or change the topic."


class Completer(Protocol):
    async def complete(self, prompt: str, *, model: str, max_tokens: int) -> str: ...


def raw_preview(raw: str | None, limit: int = RAW_PREVIEW_LIMIT) -> str:
    if not raw:
        return ""
    return raw[:limit]


def build_attempt_plans(settings: Settings) -> tuple[AttemptPlan, ...]:
    attempts = min(MAX_ATTEMPTS_CAP, max(1, int(settings.llm_max_attempts)))
    ceiling = max(1, int(settings.llm_max_tokens_ceiling))
    growth = max(1.0, float(settings.llm_token_budget_growth))
    fallback_model = settings.llm_fallback_model.strip()

    plans: list[AttemptPlan] = []
    budget = float(max(1, settings.llm_max_tokens))
    for attempt_number in range(1, attempts + 1):
        model = fallback_model if attempt_number > 1 and fallback_model else settings.llm_model
        plans.append(
            AttemptPlan(
                attempt_number=attempt_number,
                model=model,
                max_tokens=min(ceiling, int(budget)),
            )
        )
        budget *= growth
    return tuple(plans)


class QuizGenerator:
    """Runs the bounded prompt -> completion -> extraction -> validation loop."""

    def __init__(self, client: Completer | None = None, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._client = client or CompletionClient(self._settings)

    async def run_attempt(self, request: QuizRequest, plan: AttemptPlan) -> AttemptOutcome:
        prompt = build_quiz_prompt(request)
        try:
            raw = await self._client.complete(prompt, model=plan.model, max_tokens=plan.max_tokens)
        except ProviderError as exc:
            return AttemptOutcome(
                plan=plan,
                status=AttemptStatus.FAILED,
                error_kind="provider",
                error_message=str(exc),
                raw_preview=raw_preview(exc.snippet),
            )

        preview = raw_preview(raw)
        try:
            extracted = extract_json_array(raw)
            questions = validate_questions(extracted, request.question_count)
        except ExtractionError as exc:
            return AttemptOutcome(
                plan=plan,
                status=AttemptStatus.FAILED,
                error_kind="extraction",
                error_message=str(exc),
                raw_preview=preview,
            )
        except ParseError as exc:
            return AttemptOutcome(
                plan=plan,
                status=AttemptStatus.FAILED,
                error_kind=f"parse_{exc.reason}",
                error_message=str(exc),
                raw_preview=preview,
            )
        except ValidationError as exc:
            return AttemptOutcome(
                plan=plan,
                status=AttemptStatus.EMPTY,
                error_kind="validation",
                error_message=str(exc),
                raw_preview=preview,
            )

        return AttemptOutcome(
            plan=plan,
            status=AttemptStatus.ACCEPTED,
            questions=questions,
            raw_preview=preview,
        )

    async def generate(self, request: QuizRequest) -> GenerationResult:
        plans = build_attempt_plans(self._settings)
        last_outcome: AttemptOutcome | None = None

        for plan in plans:
            outcome = await self.run_attempt(request, plan)
            last_outcome = outcome
            if outcome.status is AttemptStatus.ACCEPTED:
                result = GenerationResult(
                    questions=outcome.questions,
                    requested_count=request.question_count,
                    attempts_used=plan.attempt_number,
                    model=plan.model,
                )
                if result.is_partial:
                    result = replace(
                        result,
                        warnings=(
                            f"Only {len(result.questions)} of {result.requested_count} "
                            "requested questions passed validation.",
                        ),
                    )
                logger.info(
                    "quiz_generation_succeeded",
                    attempt=plan.attempt_number,
                    model=plan.model,
                    questions=len(result.questions),
                    requested=result.requested_count,
                )
                return result

            logger.warning(
                "quiz_generation_attempt_failed",
                attempt=plan.attempt_number,
                attempts_total=len(plans),
                model=plan.model,
                max_tokens=plan.max_tokens,
                status=outcome.status.value,
                error_kind=outcome.error_kind,
                error=outcome.error_message,
            )

        logger.error(
            "quiz_generation_exhausted",
            attempts=len(plans),
            error_kind=last_outcome.error_kind if last_outcome else None,
            raw_preview=last_outcome.raw_preview if last_outcome else "",
        )
        raise GenerationError(
            GENERATION_FAILED_MESSAGE,
            attempts=len(plans),
            last_error_kind=last_outcome.error_kind if last_outcome else None,
            preview=last_outcome.raw_preview if last_outcome else "",
        )
