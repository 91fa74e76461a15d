"""Storage interfaces and records for questions, users, answers and generation jobs."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol

from trivia.jobs.models import GenerationJobRecord, JobStatus


@dataclass(frozen=True)
class NewQuestion:
  """Question fields produced by the generator, before persistence."""

  question_text: str
  option_a: str
  option_b: str
  option_c: str
  option_d: str
  correct_answer: str
  explanation: str
  category: str
  difficulty_level: str


@dataclass(frozen=True)
class QuestionRecord:
  """Record stored in the questions table."""

  id: int
  question_text: str
  option_a: str
  option_b: str
  option_c: str
  option_d: str
  correct_answer: str
  explanation: str
  category: str
  difficulty_level: str
  usage_count: int
  created_date: datetime


@dataclass(frozen=True)
class UserRecord:
  """Subscriber row including the dual streak counters."""

  id: int
  phone_number: str
  winning_streak: int
  play_streak: int
  total_score: int
  questions_answered: int
  correct_answers: int
  last_quiz_date: date | None = None
  last_answer: str | None = None
  timezone: str = "America/Los_Angeles"
  is_active: bool = True


@dataclass(frozen=True)
class AnswerRecord:
  """A single graded answer."""

  id: int
  user_id: int
  question_id: int
  user_answer: str
  is_correct: bool
  points_earned: int
  answered_at: datetime


@dataclass(frozen=True)
class StreakUpdate:
  """New streak and score values computed from the locked subscriber row."""

  winning_streak: int
  play_streak: int
  total_score: int
  last_quiz_date: date
  points_earned: int


AnswerGrader = Callable[[UserRecord], StreakUpdate]


class ContentStore(Protocol):
  """Repository contract consumed by the queue processor and services."""

  async def create_generation_job(self, *, job_id: str, category: str, question_count: int) -> GenerationJobRecord:
    """Insert a pending generation job."""

  async def get_generation_job(self, job_id: str) -> GenerationJobRecord | None:
    """Fetch a job by identifier."""

  async def list_generation_jobs(self, limit: int = 50) -> list[GenerationJobRecord]:
    """Return jobs newest first."""

  async def get_next_pending_job(self) -> GenerationJobRecord | None:
    """Return the oldest pending job, if any."""

  async def get_active_generation_jobs(self) -> list[GenerationJobRecord]:
    """Return jobs currently marked active."""

  async def update_generation_job(
    self,
    job_id: str,
    *,
    status: JobStatus | None = None,
    progress: int | None = None,
    total: int | None = None,
    error_message: str | None = None,
    started_at: datetime | None = None,
    completed_at: datetime | None = None,
  ) -> GenerationJobRecord | None:
    """Apply partial updates to a job and commit them before returning."""

  async def delete_pending_generation_job(self, job_id: str) -> bool:
    """Delete a job only while it is still pending; return False otherwise."""

  async def create_question(self, question: NewQuestion) -> QuestionRecord:
    """Persist a generated question."""

  async def get_question(self, question_id: int) -> QuestionRecord | None:
    """Fetch a question by identifier."""

  async def get_all_questions(self) -> list[QuestionRecord]:
    """Return every stored question in creation order."""

  async def get_user(self, user_id: int) -> UserRecord | None:
    """Fetch a subscriber by identifier."""

  async def record_graded_answer(self, *, user_id: int, question_id: int, user_answer: str, is_correct: bool, grade: AnswerGrader) -> tuple[UserRecord, AnswerRecord] | None:
    """Lock the subscriber, apply ``grade`` to its current state and store the answer in one transaction.

    Returns None when the subscriber does not exist.
    """
