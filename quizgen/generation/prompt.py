from __future__ import annotations

import json

from quizgen.generation.types import QuizRequest

_EXAMPLE_ELEMENT = {
    "question": "Which planet is known as the Red Planet?",
    "options": ["Venus", "Jupiter", "Mars", "Mercury"],
    "correctAnswer": "Mars",
}

QUIZ_GENERATION_PROMPT = """\
Generate a {count}-question multiple-choice quiz about "{topic}".
Difficulty: "{difficulty}".
Language: "{language}". Write every question and every option in {language}.

Output rules (follow all of them exactly):
1. Your ENTIRE response must be a single valid JSON array and nothing else.
   No introduction, no explanation, no markdown, no ```json fences.
2. The array must contain exactly {count} elements.
3. Each element is an object with exactly these fields:
   - "question": the question text as a string.
   - "options": an array of exactly 4 distinct plain strings. Do not prefix
     options with letters or numbers (no "A)", "B.", "1.") and do not end
     them with punctuation.
   - "correctAnswer": a string that is exactly equal, character for
     character, to one of the 4 entries in "options".
4. Shuffle the options so the correct answer is not always first.

Example of one element:
{example}
"""


def build_quiz_prompt(request: QuizRequest) -> str:
    return QUIZ_GENERATION_PROMPT.format(
        count=request.question_count,
        topic=request.topic.strip(),
        difficulty=request.difficulty.value,
        language=request.language.strip() or "English",
        example=json.dumps(_EXAMPLE_ELEMENT, ensure_ascii=False),
    )
