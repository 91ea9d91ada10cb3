from __future__ import annotations

import pytest

from quizgen.game.questions.answers import answers_match, find_matching_option, normalize_answer
from quizgen.game.questions.types import ValidatedQuestion


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("  Paris  ", "paris"),
        ("A) Paris", "paris"),
        ("(b) Paris", "paris"),
        ("c. Paris", "paris"),
        ("D: Paris", "paris"),
        ("1. Paris", "paris"),
        ("2) Paris", "paris"),
        ("A)Paris", "paris"),
        ("(c)Madrid", "madrid"),
        ("3)Rome", "rome"),
        ("- Paris", "paris"),
        ("• Paris", "paris"),
        ("Paris.", "paris"),
        ("Paris!?", "paris"),
        ("New   York", "new york"),
        ("3.14", "3.14"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_answer(raw: str | None, expected: str) -> None:
    assert normalize_answer(raw) == expected


def test_normalize_answer_keeps_text_that_only_looks_like_a_prefix() -> None:
    assert normalize_answer("e.g. apples") == "e.g. apples"
    assert normalize_answer("1.5 meters") == "1.5 meters"
    assert normalize_answer("U.S. dollar") == "u.s. dollar"
    assert normalize_answer("a)") == "a)"


def test_answers_match_is_case_and_prefix_insensitive() -> None:
    assert answers_match("B) Mars.", "mars")
    assert not answers_match("Mars", "Venus")


def test_answers_match_never_matches_empty_answer() -> None:
    assert not answers_match("", "")
    assert not answers_match("   ", "")


def test_find_matching_option_returns_first_match_index() -> None:
    assert find_matching_option("c) Mars", ("Venus", "Jupiter", "Mars", "Mercury")) == 2
    assert find_matching_option("Pluto", ("Venus", "Jupiter", "Mars", "Mercury")) is None


def test_validated_question_scores_with_shared_normalizer() -> None:
    question = ValidatedQuestion(
        question="Red planet?",
        options=("Venus", "Jupiter", "Mars.", "Mercury"),
        correct_answer="mars",
    )

    assert question.is_correct_option(2) is True
    assert question.is_correct_option(0) is False
