"""Quiz models derived from a generated summary."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class QuizQuestion(BaseModel):
    """A multiple-choice question whose answer is exactly one of its options."""

    model_config = ConfigDict(frozen=True)

    question: str = Field(min_length=1)
    options: list[str] = Field(min_length=2)
    answer: str

    @model_validator(mode="after")
    def _answer_matches_one_option(self) -> QuizQuestion:
        matches = sum(1 for option in self.options if option == self.answer)
        if matches != 1:
            raise ValueError(
                f"answer must match exactly one option, matched {matches}: {self.answer!r}"
            )
        return self
