"""Grade answers, advance streaks and report player stats."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from trivia.scoring import PointsBreakdown, StreakState, apply_answer
from trivia.services.errors import InvalidAnswerError, QuestionNotFoundError, UserNotFoundError
from trivia.storage.content_store import ContentStore, StreakUpdate, UserRecord

logger = logging.getLogger(__name__)

VALID_ANSWERS = frozenset({"A", "B", "C", "D"})


@dataclass(frozen=True)
class AnswerOutcome:
  """Result of grading one answer."""

  is_correct: bool
  correct_answer: str
  explanation: str
  breakdown: PointsBreakdown
  user: UserRecord


@dataclass(frozen=True)
class UserStats:
  """Aggregate numbers shown to a player."""

  user_id: int
  winning_streak: int
  play_streak: int
  total_score: int
  questions_answered: int
  correct_answers: int
  accuracy_rate: float


def local_date(timezone: str, now: datetime | None = None) -> date:
  """Return today's date in the subscriber's timezone."""
  now = now or datetime.now(UTC)
  try:
    zone = ZoneInfo(timezone)
  except (ZoneInfoNotFoundError, ValueError):
    logger.warning("Unknown timezone %r; using UTC", timezone)
    zone = ZoneInfo("UTC")
  return now.astimezone(zone).date()


def normalize_answer(answer: str) -> str:
  value = answer.strip().upper()
  if value not in VALID_ANSWERS:
    raise InvalidAnswerError(f"Answer must be one of A, B, C or D (got {answer!r}).")
  return value


async def record_answer(store: ContentStore, *, user_id: int, question_id: int, answer: str, now: datetime | None = None) -> AnswerOutcome:
  """Grade an answer, persist it and move the user's streaks and score."""
  letter = normalize_answer(answer)

  if await store.get_user(user_id) is None:
    raise UserNotFoundError(f"User {user_id} not found.")

  question = await store.get_question(question_id)
  if question is None:
    raise QuestionNotFoundError(f"Question {question_id} not found.")

  is_correct = letter == question.correct_answer
  breakdowns: list[PointsBreakdown] = []

  def grade(user: UserRecord) -> StreakUpdate:
    state = StreakState(winning_streak=user.winning_streak, play_streak=user.play_streak, total_score=user.total_score, last_play_date=user.last_quiz_date)
    new_state, breakdown = apply_answer(state, is_correct, local_date(user.timezone, now))
    breakdowns.append(breakdown)
    return StreakUpdate(winning_streak=new_state.winning_streak, play_streak=new_state.play_streak, total_score=new_state.total_score, last_quiz_date=new_state.last_play_date, points_earned=breakdown.total_points)

  # Runs inside the store transaction against the locked subscriber row.
  result = await store.record_graded_answer(user_id=user_id, question_id=question_id, user_answer=letter, is_correct=is_correct, grade=grade)
  if result is None:
    raise UserNotFoundError(f"User {user_id} not found.")
  updated, _ = result
  breakdown = breakdowns[-1]

  logger.info("User %s answered question %s %s: +%d points (winning streak %d, play streak %d)", user_id, question_id, "correctly" if is_correct else "incorrectly", breakdown.total_points, updated.winning_streak, updated.play_streak)
  return AnswerOutcome(is_correct=is_correct, correct_answer=question.correct_answer, explanation=question.explanation, breakdown=breakdown, user=updated)


async def get_user_stats(store: ContentStore, user_id: int) -> UserStats:
  user = await store.get_user(user_id)
  if user is None:
    raise UserNotFoundError(f"User {user_id} not found.")

  accuracy = 0.0
  if user.questions_answered > 0:
    accuracy = round(user.correct_answers / user.questions_answered * 100, 1)

  return UserStats(
    user_id=user.id,
    winning_streak=user.winning_streak,
    play_streak=user.play_streak,
    total_score=user.total_score,
    questions_answered=user.questions_answered,
    correct_answers=user.correct_answers,
    accuracy_rate=accuracy,
  )
