from __future__ import annotations

import structlog

from quizgen.generation.errors import ExtractionError
from quizgen.generation.types import ExtractedArray

logger = structlog.get_logger(__name__)


def brackets_balanced(text: str) -> bool:
    """True when ``[]`` and ``{}`` pair up outside of JSON string literals."""
    depth_square = 0
    depth_curly = 0
    in_string = False
    escaped = False
    for char in text:
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "[":
            depth_square += 1
        elif char == "]":
            depth_square -= 1
        elif char == "{":
            depth_curly += 1
        elif char == "}":
            depth_curly -= 1
    return depth_square == 0 and depth_curly == 0 and not in_string


def extract_json_array(raw: str) -> ExtractedArray:
    """Cut the plausible JSON array out of a raw completion.

    Prose before the first ``[`` and after the last ``]`` is dropped. When the
    completion was cut off before the outer array was closed (the last ``]``
    is missing, or only closes an inner ``options`` list), the tail is kept and
    a synthetic ``]`` is appended so the parser can decide whether the
    remaining elements are usable.
    """
    start = raw.find("[")
    if start == -1:
        raise ExtractionError("no opening bracket found")

    end = raw.rfind("]")
    if end > start:
        candidate = raw[start : end + 1]
        if brackets_balanced(candidate):
            return ExtractedArray(text=candidate)

    logger.warning(
        "quiz_completion_possibly_truncated",
        tail_chars=len(raw) - start,
    )
    return ExtractedArray(text=raw[start:].rstrip() + "]", possibly_truncated=True)
