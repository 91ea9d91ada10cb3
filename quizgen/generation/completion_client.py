from __future__ import annotations

from typing import Any

import httpx
import structlog

from quizgen.core.config import Settings, get_settings
from quizgen.generation.errors import ProviderError

logger = structlog.get_logger(__name__)

SNIPPET_LIMIT = 200


def _snippet(text: str, limit: int = SNIPPET_LIMIT) -> str:
    text = text.strip()
    return text if len(text) <= limit else f"{text[:limit]}..."


def extract_completion_text(body: object) -> str:
    if not isinstance(body, dict):
        raise ProviderError("provider response is not a JSON object", snippet=_snippet(str(body)))
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        error = body.get("error")
        detail = error.get("message") if isinstance(error, dict) else error
        raise ProviderError(
            "provider response has no completion content",
            snippet=_snippet(str(detail or body)),
        ) from exc
    if not isinstance(content, str):
        raise ProviderError("provider completion content is not text", snippet=_snippet(str(content)))
    return content


class CompletionClient:
    """Chat-completions client for the quiz LLM provider.

    Every failure mode (transport, timeout, HTTP status, unexpected body)
    surfaces as a single ``ProviderError``. Retrying is the caller's job.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._settings.llm_api_key}",
            "Content-Type": "application/json",
        }

    def _payload(self, *, prompt: str, model: str, max_tokens: int) -> dict[str, Any]:
        return {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self._settings.llm_temperature,
            "max_tokens": max_tokens,
        }

    async def complete(self, prompt: str, *, model: str, max_tokens: int) -> str:
        if not self._settings.llm_api_key:
            raise ProviderError("LLM API key is not configured")

        try:
            async with httpx.AsyncClient(timeout=self._settings.llm_timeout_seconds) as client:
                response = await client.post(
                    self._settings.llm_api_url,
                    headers=self._headers(),
                    json=self._payload(prompt=prompt, model=model, max_tokens=max_tokens),
                )
        except httpx.TimeoutException as exc:
            logger.warning("llm_completion_timeout", model=model, max_tokens=max_tokens)
            raise ProviderError("LLM provider request timed out") from exc
        except httpx.HTTPError as exc:
            logger.warning("llm_completion_transport_failed", model=model, error_type=type(exc).__name__)
            raise ProviderError(f"LLM provider request failed: {type(exc).__name__}") from exc

        if response.status_code < 200 or response.status_code >= 300:
            logger.warning("llm_completion_http_error", model=model, status_code=response.status_code)
            raise ProviderError(
                f"LLM provider returned HTTP {response.status_code}",
                status_code=response.status_code,
                snippet=_snippet(response.text),
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise ProviderError(
                "LLM provider returned a non-JSON body",
                status_code=response.status_code,
                snippet=_snippet(response.text),
            ) from exc

        try:
            content = extract_completion_text(body)
        except ProviderError as exc:
            exc.status_code = response.status_code
            raise

        logger.info(
            "llm_completion_received",
            model=model,
            max_tokens=max_tokens,
            completion_chars=len(content),
        )
        return content
