"""Answer normalization shared by question validation and session scoring.

Both sides must import these helpers instead of re-implementing them, so a
question accepted at generation time is always scoreable in a session.
"""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")
# "A) ", "(b) ", "c. ", "D: ", "1. ", "2) ", "(3) ", "- ", "* ", "• ".
# A ")" label may also sit directly against a letter, as in "A)Paris".
_ENUMERATION_PREFIX_RE = re.compile(
    r"^(?:\(?(?:[a-z]|\d{1,2})\)(?:\s+|(?=[^\W\d_]))|(?:[a-z][.:]|\(?\d{1,2}[.:]|[-*•])\s+)",
)
_TERMINAL_PUNCTUATION_RE = re.compile(r"[.,!?;:]+$")


def normalize_answer(value: str | None) -> str:
    if value is None:
        return ""
    text = _WHITESPACE_RE.sub(" ", str(value)).strip().lower()
    text = _ENUMERATION_PREFIX_RE.sub("", text, count=1)
    text = _TERMINAL_PUNCTUATION_RE.sub("", text)
    return text.strip()


def answers_match(left: str | None, right: str | None) -> bool:
    normalized_left = normalize_answer(left)
    if not normalized_left:
        return False
    return normalized_left == normalize_answer(right)


def find_matching_option(answer: str | None, options: tuple[str, ...] | list[str]) -> int | None:
    for index, option in enumerate(options):
        if answers_match(answer, option):
            return index
    return None
