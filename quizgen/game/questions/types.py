from __future__ import annotations

from dataclasses import dataclass

from quizgen.game.questions.answers import answers_match


@dataclass(frozen=True, slots=True)
class ValidatedQuestion:
    question: str
    options: tuple[str, str, str, str]
    correct_answer: str

    def is_correct_option(self, option_index: int) -> bool:
        return answers_match(self.options[option_index], self.correct_answer)


QuestionSet = tuple[ValidatedQuestion, ...]
