from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

from trivia.jobs.models import GenerationJobRecord, JobStatus
from trivia.scoring import PointsBreakdown
from trivia.services.answers import AnswerOutcome, UserStats


class CamelModel(BaseModel):
  """Base model that speaks camelCase on the wire."""

  model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerationJobCreateRequest(CamelModel):
  """Request payload for queueing a generation job."""

  category: StrictStr = Field(min_length=1, max_length=64, description="Question category, e.g. science or history.", examples=["science"])
  question_count: StrictInt = Field(default=20, ge=1, description="Number of questions to generate.")
  model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class GenerationJobResponse(CamelModel):
  """Status payload for a generation job."""

  id: StrictStr
  category: StrictStr
  question_count: StrictInt
  status: JobStatus
  progress: StrictInt
  total: StrictInt
  error_message: StrictStr | None = None
  created_at: datetime
  started_at: datetime | None = None
  completed_at: datetime | None = None

  @classmethod
  def from_record(cls, record: GenerationJobRecord) -> GenerationJobResponse:
    return cls(
      id=record.id,
      category=record.category,
      question_count=record.question_count,
      status=record.status,
      progress=record.progress,
      total=record.effective_total,
      error_message=record.error_message,
      created_at=record.created_at,
      started_at=record.started_at,
      completed_at=record.completed_at,
    )


class AnswerRequest(CamelModel):
  """A player's reply to a delivered question."""

  user_id: StrictInt
  question_id: StrictInt
  answer: StrictStr = Field(min_length=1, max_length=8, examples=["B"])
  model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class PointsBreakdownResponse(CamelModel):
  total_points: StrictInt
  base_points: StrictInt
  streak_bonus: StrictInt
  message: StrictStr

  @classmethod
  def from_breakdown(cls, breakdown: PointsBreakdown) -> PointsBreakdownResponse:
    return cls(total_points=breakdown.total_points, base_points=breakdown.base_points, streak_bonus=breakdown.streak_bonus, message=breakdown.message)


class AnswerResponse(CamelModel):
  """Grading result plus the player's updated counters."""

  is_correct: bool
  correct_answer: StrictStr
  explanation: StrictStr
  points: PointsBreakdownResponse
  winning_streak: StrictInt
  play_streak: StrictInt
  total_score: StrictInt

  @classmethod
  def from_outcome(cls, outcome: AnswerOutcome) -> AnswerResponse:
    return cls(
      is_correct=outcome.is_correct,
      correct_answer=outcome.correct_answer,
      explanation=outcome.explanation,
      points=PointsBreakdownResponse.from_breakdown(outcome.breakdown),
      winning_streak=outcome.user.winning_streak,
      play_streak=outcome.user.play_streak,
      total_score=outcome.user.total_score,
    )


class UserStatsResponse(CamelModel):
  user_id: StrictInt
  winning_streak: StrictInt
  play_streak: StrictInt
  total_score: StrictInt
  questions_answered: StrictInt
  correct_answers: StrictInt
  accuracy_rate: float

  @classmethod
  def from_stats(cls, stats: UserStats) -> UserStatsResponse:
    return cls(
      user_id=stats.user_id,
      winning_streak=stats.winning_streak,
      play_streak=stats.play_streak,
      total_score=stats.total_score,
      questions_answered=stats.questions_answered,
      correct_answers=stats.correct_answers,
      accuracy_rate=stats.accuracy_rate,
    )


class StreakPreviewEntry(CamelModel):
  winning_streak: StrictInt
  points: StrictInt
