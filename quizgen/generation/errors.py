from __future__ import annotations


class QuizGenerationError(Exception):
    pass


class ProviderError(QuizGenerationError):
    def __init__(self, message: str, *, status_code: int | None = None, snippet: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.snippet = snippet


class ExtractionError(QuizGenerationError):
    pass


class ParseError(QuizGenerationError):
    def __init__(self, message: str, *, reason: str) -> None:
        super().__init__(message)
        self.reason = reason


class ValidationError(QuizGenerationError):
    def __init__(self, message: str, *, discarded: int = 0) -> None:
        super().__init__(message)
        self.discarded = discarded


class GenerationError(QuizGenerationError):
    def __init__(
        self,
        message: str,
        *,
        attempts: int,
        last_error_kind: str | None = None,
        preview: str = "",
    ) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.last_error_kind = last_error_kind
        self.preview = preview


class GenerationInProgressError(QuizGenerationError):
    pass
