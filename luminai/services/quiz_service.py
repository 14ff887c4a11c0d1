"""Multiple-choice quiz generation from a document summary.

The completion model is asked for a bare JSON array; its output is then
parsed and validated strictly.  Anything other than exactly
``question_count`` questions, each with ``option_count`` options and an
answer equal to one option, is rejected with a :class:`CompletionError`
instead of being passed through to the client.
"""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from luminai.models.quiz import QuizQuestion
from luminai.utils.errors import CompletionError, ValidationError

if TYPE_CHECKING:
    from luminai.interfaces.llm_provider import ILLMProvider

logger = structlog.get_logger(logger_name=__name__)

# LLMs often wrap JSON in ```json ... ``` fences despite being told not to.
_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)


def build_quiz_prompt(summary: str, question_count: int = 3) -> str:
    return (
        "You are a smart quiz generator.\n\n"
        f"Based on the following summary, generate exactly {question_count} "
        "multiple-choice questions in this exact JSON format:\n\n"
        "[\n"
        "  {\n"
        '    "question": "What is ...?",\n'
        '    "options": ["Option A", "Option B", "Option C", "Option D"],\n'
        '    "answer": "should be a complete Option from above"\n'
        "  }\n"
        "]\n\n"
        "Answers should be exact same word as one of the options.\n"
        "Do not include any extra text or markdown. Return only the JSON array.\n\n"
        f"Summary:\n{summary}"
    )


def parse_quiz_response(
    response: str,
    question_count: int = 3,
    option_count: int = 4,
) -> list[QuizQuestion]:
    """Parse and validate a raw completion into quiz questions.

    Raises
    ------
    ValueError
        If the text is not a JSON array of well-formed questions of the
        expected shape.  ``json.JSONDecodeError`` and pydantic's
        ``ValidationError`` are both ``ValueError`` subclasses.
    """
    text = response.strip()

    fence_match = _JSON_FENCE_RE.search(text)
    if fence_match:
        text = fence_match.group(1).strip()

    # Preamble before the array ("Here is your quiz: [ ... ]").
    if not text.startswith("["):
        start = text.find("[")
        end = text.rfind("]")
        if start != -1 and end > start:
            text = text[start : end + 1]

    parsed: Any = json.loads(text)
    if not isinstance(parsed, list):
        raise ValueError("quiz response is not a JSON array")
    if len(parsed) != question_count:
        raise ValueError(f"expected {question_count} questions, got {len(parsed)}")

    questions = [QuizQuestion.model_validate(item) for item in parsed]
    for question in questions:
        if len(question.options) != option_count:
            raise ValueError(
                f"expected {option_count} options, got {len(question.options)}: "
                f"{question.question!r}"
            )
    return questions


class QuizService:
    """Generates a short multiple-choice quiz from a summary."""

    def __init__(
        self,
        llm_provider: ILLMProvider,
        question_count: int = 3,
        option_count: int = 4,
    ) -> None:
        self._llm = llm_provider
        self._question_count = question_count
        self._option_count = option_count

    async def generate(self, summary: str) -> list[QuizQuestion]:
        """Return exactly ``question_count`` validated questions.

        Raises
        ------
        ValidationError
            If *summary* is empty.
        CompletionError
            If the completion call fails or its output is malformed.
        """
        if not summary or not summary.strip():
            raise ValidationError("Summary is missing or empty")

        raw = await self._llm.complete(
            system_prompt="",
            user_prompt=build_quiz_prompt(summary.strip(), self._question_count),
        )

        try:
            questions = parse_quiz_response(raw, self._question_count, self._option_count)
        except (ValueError, PydanticValidationError) as exc:
            logger.warning("quiz_output_malformed", error=str(exc), raw_length=len(raw))
            raise CompletionError(
                message="Quiz generation returned malformed output",
                provider_name=self._llm.get_provider_name(),
                details=str(exc),
            ) from exc

        logger.info("quiz_generated", questions=len(questions))
        return questions
