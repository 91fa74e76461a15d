from __future__ import annotations

import datetime

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, ForeignKey, Index, Integer, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column

from trivia.core.database import Base


class User(Base):
  __tablename__ = "users"

  id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
  phone_number: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
  timezone: Mapped[str] = mapped_column(String, nullable=False, default="America/Los_Angeles")
  is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
  winning_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
  play_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
  total_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
  questions_answered: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
  correct_answers: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
  last_quiz_date: Mapped[datetime.date | None] = mapped_column(Date, nullable=True)
  last_answer: Mapped[str | None] = mapped_column(String(1), nullable=True)
  subscribed_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class Question(Base):
  __tablename__ = "questions"
  __table_args__ = (CheckConstraint("correct_answer IN ('A', 'B', 'C', 'D')", name="ck_questions_correct_answer"),)

  id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
  question_text: Mapped[str] = mapped_column(Text, nullable=False)
  option_a: Mapped[str] = mapped_column(Text, nullable=False)
  option_b: Mapped[str] = mapped_column(Text, nullable=False)
  option_c: Mapped[str] = mapped_column(Text, nullable=False)
  option_d: Mapped[str] = mapped_column(Text, nullable=False)
  correct_answer: Mapped[str] = mapped_column(String(1), nullable=False)
  explanation: Mapped[str] = mapped_column(Text, nullable=False)
  category: Mapped[str] = mapped_column(String, nullable=False, index=True)
  difficulty_level: Mapped[str] = mapped_column(String, nullable=False, default="medium")
  usage_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
  created_date: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class UserAnswer(Base):
  __tablename__ = "user_answers"

  id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
  user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
  question_id: Mapped[int] = mapped_column(ForeignKey("questions.id"), nullable=False, index=True)
  user_answer: Mapped[str] = mapped_column(String(1), nullable=False)
  is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False)
  points_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
  answered_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class GenerationJob(Base):
  __tablename__ = "generation_jobs"
  __table_args__ = (
    CheckConstraint("status IN ('pending', 'active', 'completed', 'failed')", name="ck_generation_jobs_status"),
    CheckConstraint("progress >= 0 AND progress <= COALESCE(total, question_count)", name="ck_generation_jobs_progress"),
    # Queue polling reads the oldest pending row.
    Index("ix_generation_jobs_pending_created", "created_at", postgresql_where=text("status = 'pending'")),
  )

  id: Mapped[str] = mapped_column(String, primary_key=True)
  category: Mapped[str] = mapped_column(String, nullable=False)
  question_count: Mapped[int] = mapped_column(Integer, nullable=False)
  status: Mapped[str] = mapped_column(String, nullable=False, default="pending", index=True)
  progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
  total: Mapped[int | None] = mapped_column(Integer, nullable=True)
  error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
  created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
  started_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
  completed_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
