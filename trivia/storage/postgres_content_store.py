"""Postgres-backed content store using SQLAlchemy."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select

from trivia.core.database import get_session_factory
from trivia.jobs.models import GenerationJobRecord, JobStatus
from trivia.schema.sql import GenerationJob, Question, User, UserAnswer
from trivia.storage.content_store import AnswerGrader, AnswerRecord, ContentStore, NewQuestion, QuestionRecord, UserRecord


class PostgresContentStore(ContentStore):
  """Persist questions, users, answers and generation jobs to Postgres."""

  def __init__(self) -> None:
    self._session_factory = get_session_factory()
    if self._session_factory is None:
      raise RuntimeError("Database not initialized (TRIVIA_PG_DSN is missing).")

  async def create_generation_job(self, *, job_id: str, category: str, question_count: int) -> GenerationJobRecord:
    async with self._session_factory() as session:
      row = GenerationJob(id=job_id, category=category, question_count=question_count, status="pending", progress=0, total=question_count)
      session.add(row)
      await session.commit()
      await session.refresh(row)
      return self._job_to_record(row)

  async def get_generation_job(self, job_id: str) -> GenerationJobRecord | None:
    async with self._session_factory() as session:
      row = await session.get(GenerationJob, job_id)
      if row is None:
        return None
      return self._job_to_record(row)

  async def list_generation_jobs(self, limit: int = 50) -> list[GenerationJobRecord]:
    async with self._session_factory() as session:
      stmt = select(GenerationJob).order_by(GenerationJob.created_at.desc(), GenerationJob.id.desc()).limit(limit)
      rows = (await session.execute(stmt)).scalars().all()
      return [self._job_to_record(row) for row in rows]

  async def get_next_pending_job(self) -> GenerationJobRecord | None:
    async with self._session_factory() as session:
      # Ties on created_at fall back to id so the dequeue order is total.
      stmt = select(GenerationJob).where(GenerationJob.status == "pending").order_by(GenerationJob.created_at.asc(), GenerationJob.id.asc()).limit(1)
      row = (await session.execute(stmt)).scalar_one_or_none()
      if row is None:
        return None
      return self._job_to_record(row)

  async def get_active_generation_jobs(self) -> list[GenerationJobRecord]:
    async with self._session_factory() as session:
      stmt = select(GenerationJob).where(GenerationJob.status == "active").order_by(GenerationJob.started_at.asc())
      rows = (await session.execute(stmt)).scalars().all()
      return [self._job_to_record(row) for row in rows]

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
    async with self._session_factory() as session:
      row = await session.get(GenerationJob, job_id)
      if row is None:
        return None
      if status is not None:
        row.status = status
      if progress is not None:
        row.progress = progress
      if total is not None:
        row.total = total
      if error_message is not None:
        row.error_message = error_message
      if started_at is not None:
        row.started_at = started_at
      if completed_at is not None:
        row.completed_at = completed_at
      session.add(row)
      await session.commit()
      await session.refresh(row)
      return self._job_to_record(row)

  async def delete_pending_generation_job(self, job_id: str) -> bool:
    async with self._session_factory() as session:
      result = await session.execute(delete(GenerationJob).where(GenerationJob.id == job_id, GenerationJob.status == "pending"))
      await session.commit()
      return bool(result.rowcount)

  async def create_question(self, question: NewQuestion) -> QuestionRecord:
    async with self._session_factory() as session:
      row = Question(
        question_text=question.question_text,
        option_a=question.option_a,
        option_b=question.option_b,
        option_c=question.option_c,
        option_d=question.option_d,
        correct_answer=question.correct_answer,
        explanation=question.explanation,
        category=question.category,
        difficulty_level=question.difficulty_level,
        usage_count=0,
      )
      session.add(row)
      await session.commit()
      await session.refresh(row)
      return self._question_to_record(row)

  async def get_question(self, question_id: int) -> QuestionRecord | None:
    async with self._session_factory() as session:
      row = await session.get(Question, question_id)
      if row is None:
        return None
      return self._question_to_record(row)

  async def get_all_questions(self) -> list[QuestionRecord]:
    async with self._session_factory() as session:
      rows = (await session.execute(select(Question).order_by(Question.created_date.asc(), Question.id.asc()))).scalars().all()
      return [self._question_to_record(row) for row in rows]

  async def get_user(self, user_id: int) -> UserRecord | None:
    async with self._session_factory() as session:
      row = await session.get(User, user_id)
      if row is None:
        return None
      return self._user_to_record(row)

  async def record_graded_answer(self, *, user_id: int, question_id: int, user_answer: str, is_correct: bool, grade: AnswerGrader) -> tuple[UserRecord, AnswerRecord] | None:
    async with self._session_factory() as session:
      # The row lock serialises concurrent answers from the same subscriber until commit.
      user = (await session.execute(select(User).where(User.id == user_id).with_for_update())).scalar_one_or_none()
      if user is None:
        return None

      update = grade(self._user_to_record(user))
      user.winning_streak = update.winning_streak
      user.play_streak = update.play_streak
      user.total_score = update.total_score
      user.last_quiz_date = update.last_quiz_date
      user.questions_answered = int(user.questions_answered or 0) + 1
      user.correct_answers = int(user.correct_answers or 0) + (1 if is_correct else 0)
      user.last_answer = user_answer

      answer = UserAnswer(user_id=user_id, question_id=question_id, user_answer=user_answer, is_correct=is_correct, points_earned=update.points_earned)
      session.add(answer)
      await session.commit()
      await session.refresh(user)
      await session.refresh(answer)
      answer_record = AnswerRecord(id=answer.id, user_id=answer.user_id, question_id=answer.question_id, user_answer=answer.user_answer, is_correct=answer.is_correct, points_earned=answer.points_earned, answered_at=answer.answered_at)
      return self._user_to_record(user), answer_record

  def _job_to_record(self, row: GenerationJob) -> GenerationJobRecord:
    return GenerationJobRecord(
      id=row.id,
      category=row.category,
      question_count=int(row.question_count),
      status=row.status,
      created_at=row.created_at,
      progress=int(row.progress or 0),
      total=int(row.total) if row.total is not None else None,
      error_message=row.error_message,
      started_at=row.started_at,
      completed_at=row.completed_at,
    )

  def _question_to_record(self, row: Question) -> QuestionRecord:
    return QuestionRecord(
      id=row.id,
      question_text=row.question_text,
      option_a=row.option_a,
      option_b=row.option_b,
      option_c=row.option_c,
      option_d=row.option_d,
      correct_answer=row.correct_answer,
      explanation=row.explanation,
      category=row.category,
      difficulty_level=row.difficulty_level,
      usage_count=int(row.usage_count or 0),
      created_date=row.created_date,
    )

  def _user_to_record(self, row: User) -> UserRecord:
    return UserRecord(
      id=row.id,
      phone_number=row.phone_number,
      winning_streak=int(row.winning_streak or 0),
      play_streak=int(row.play_streak or 0),
      total_score=int(row.total_score or 0),
      questions_answered=int(row.questions_answered or 0),
      correct_answers=int(row.correct_answers or 0),
      last_quiz_date=row.last_quiz_date,
      last_answer=row.last_answer,
      timezone=row.timezone,
      is_active=bool(row.is_active),
    )
