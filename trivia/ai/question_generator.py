"""Turn one model call into one validated multiple-choice question."""

from __future__ import annotations

import logging
from typing import Any, Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from trivia.ai.errors import QuestionGenerationError
from trivia.ai.providers.base import AIModel
from trivia.storage.content_store import NewQuestion

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES: tuple[str, ...] = ("general", "science", "physics", "history", "geography", "sports", "technology", "arts", "literature")

QUESTION_SCHEMA: dict[str, Any] = {
  "type": "object",
  "properties": {
    "questionText": {"type": "string"},
    "optionA": {"type": "string"},
    "optionB": {"type": "string"},
    "optionC": {"type": "string"},
    "optionD": {"type": "string"},
    "correctAnswer": {"type": "string", "enum": ["A", "B", "C", "D"]},
    "explanation": {"type": "string"},
    "category": {"type": "string"},
    "difficultyLevel": {"type": "string"},
  },
  "required": ["questionText", "optionA", "optionB", "optionC", "optionD", "correctAnswer", "explanation", "category", "difficultyLevel"],
}


class GeneratedQuestion(BaseModel):
  """Validated model output."""

  question_text: str = Field(alias="questionText", min_length=10)
  option_a: str = Field(alias="optionA", min_length=1)
  option_b: str = Field(alias="optionB", min_length=1)
  option_c: str = Field(alias="optionC", min_length=1)
  option_d: str = Field(alias="optionD", min_length=1)
  correct_answer: Literal["A", "B", "C", "D"] = Field(alias="correctAnswer")
  explanation: str = Field(min_length=1)
  category: str | None = None
  difficulty_level: str | None = Field(default=None, alias="difficultyLevel")
  model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

  @field_validator("correct_answer", mode="before")
  @classmethod
  def normalize_answer(cls, value: Any) -> Any:
    if isinstance(value, str):
      return value.strip().upper()[:1]
    return value


class QuestionSource(Protocol):
  """Anything the queue processor can ask for a new question."""

  async def generate(self, category: str, difficulty: str, recent_texts: list[str]) -> NewQuestion | None:
    """Return a question, None when the output was unusable, or raise QuestionGenerationError."""


def build_prompt(category: str, difficulty: str, recent_texts: list[str]) -> str:
  """Build the generation prompt, listing recent questions to steer away from repeats."""
  avoid = ""
  if recent_texts:
    numbered = "\n".join(f"{index}. {text}" for index, text in enumerate(recent_texts, start=1))
    avoid = f"\nIMPORTANT: Avoid creating questions similar to these existing ones:\n{numbered}\n"

  return f"""Generate a {difficulty} difficulty trivia question for the "{category}" category.

Requirements:
- Create an engaging, educational question
- Provide 4 multiple choice options (A, B, C, D)
- Only one correct answer
- Include a detailed explanation (2-3 sentences)
- Make it challenging but fair
- Ensure factual accuracy
- Keep the question short enough to read in a text message
{avoid}
Return a JSON object with the fields questionText, optionA, optionB, optionC, optionD, correctAnswer (one of "A", "B", "C", "D"), explanation, category ("{category}") and difficultyLevel ("{difficulty}")."""


def _normalize_text(text: str) -> str:
  return " ".join(text.lower().split())


class QuestionGenerator:
  """Generate trivia questions with an AI model."""

  def __init__(self, model: AIModel) -> None:
    self._model = model

  async def generate(self, category: str, difficulty: str, recent_texts: list[str]) -> NewQuestion | None:
    prompt = build_prompt(category, difficulty, recent_texts)
    response = await self._model.generate_structured(prompt, QUESTION_SCHEMA)

    try:
      generated = GeneratedQuestion.model_validate(response.content)
    except ValidationError as e:
      raise QuestionGenerationError(f"Model output failed validation: {e.error_count()} error(s)") from e

    if _normalize_text(generated.question_text) in {_normalize_text(text) for text in recent_texts}:
      logger.info("Discarding repeated %s question: %s", category, generated.question_text)
      return None

    options = {generated.option_a.lower(), generated.option_b.lower(), generated.option_c.lower(), generated.option_d.lower()}
    if len(options) < 4:
      logger.info("Discarding %s question with duplicate options: %s", category, generated.question_text)
      return None

    # The category and difficulty we asked for win over whatever the model echoed back.
    return NewQuestion(
      question_text=generated.question_text,
      option_a=generated.option_a,
      option_b=generated.option_b,
      option_c=generated.option_c,
      option_d=generated.option_d,
      correct_answer=generated.correct_answer,
      explanation=generated.explanation,
      category=category,
      difficulty_level=difficulty,
    )
