"""baseline_schema

Revision ID: 7f3a9c21d4e8
Revises:
Create Date: 2026-10-19 09:12:44.103512

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "7f3a9c21d4e8"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
  """Upgrade schema."""
  op.create_table(
    "users",
    sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
    sa.Column("phone_number", sa.String(), nullable=False),
    sa.Column("timezone", sa.String(), nullable=False),
    sa.Column("is_active", sa.Boolean(), nullable=False),
    sa.Column("winning_streak", sa.Integer(), nullable=False),
    sa.Column("play_streak", sa.Integer(), nullable=False),
    sa.Column("total_score", sa.Integer(), nullable=False),
    sa.Column("questions_answered", sa.Integer(), nullable=False),
    sa.Column("correct_answers", sa.Integer(), nullable=False),
    sa.Column("last_quiz_date", sa.Date(), nullable=True),
    sa.Column("last_answer", sa.String(length=1), nullable=True),
    sa.Column("subscribed_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index(op.f("ix_users_phone_number"), "users", ["phone_number"], unique=True)

  op.create_table(
    "questions",
    sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
    sa.Column("question_text", sa.Text(), nullable=False),
    sa.Column("option_a", sa.Text(), nullable=False),
    sa.Column("option_b", sa.Text(), nullable=False),
    sa.Column("option_c", sa.Text(), nullable=False),
    sa.Column("option_d", sa.Text(), nullable=False),
    sa.Column("correct_answer", sa.String(length=1), nullable=False),
    sa.Column("explanation", sa.Text(), nullable=False),
    sa.Column("category", sa.String(), nullable=False),
    sa.Column("difficulty_level", sa.String(), nullable=False),
    sa.Column("usage_count", sa.Integer(), nullable=False),
    sa.Column("created_date", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.CheckConstraint("correct_answer IN ('A', 'B', 'C', 'D')", name="ck_questions_correct_answer"),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index(op.f("ix_questions_category"), "questions", ["category"], unique=False)

  op.create_table(
    "user_answers",
    sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
    sa.Column("user_id", sa.Integer(), nullable=False),
    sa.Column("question_id", sa.Integer(), nullable=False),
    sa.Column("user_answer", sa.String(length=1), nullable=False),
    sa.Column("is_correct", sa.Boolean(), nullable=False),
    sa.Column("points_earned", sa.Integer(), nullable=False),
    sa.Column("answered_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.ForeignKeyConstraint(["question_id"], ["questions.id"]),
    sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index(op.f("ix_user_answers_question_id"), "user_answers", ["question_id"], unique=False)
  op.create_index(op.f("ix_user_answers_user_id"), "user_answers", ["user_id"], unique=False)

  op.create_table(
    "generation_jobs",
    sa.Column("id", sa.String(), nullable=False),
    sa.Column("category", sa.String(), nullable=False),
    sa.Column("question_count", sa.Integer(), nullable=False),
    sa.Column("status", sa.String(), nullable=False),
    sa.Column("progress", sa.Integer(), nullable=False),
    sa.Column("total", sa.Integer(), nullable=True),
    sa.Column("error_message", sa.Text(), nullable=True),
    sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
    sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    sa.CheckConstraint("status IN ('pending', 'active', 'completed', 'failed')", name="ck_generation_jobs_status"),
    sa.CheckConstraint("progress >= 0 AND progress <= COALESCE(total, question_count)", name="ck_generation_jobs_progress"),
    sa.PrimaryKeyConstraint("id"),
  )
  op.create_index(op.f("ix_generation_jobs_status"), "generation_jobs", ["status"], unique=False)
  op.create_index("ix_generation_jobs_pending_created", "generation_jobs", ["created_at"], unique=False, postgresql_where=sa.text("status = 'pending'"))


def downgrade() -> None:
  """Downgrade schema."""
  op.drop_index("ix_generation_jobs_pending_created", table_name="generation_jobs", postgresql_where=sa.text("status = 'pending'"))
  op.drop_index(op.f("ix_generation_jobs_status"), table_name="generation_jobs")
  op.drop_table("generation_jobs")
  op.drop_index(op.f("ix_user_answers_user_id"), table_name="user_answers")
  op.drop_index(op.f("ix_user_answers_question_id"), table_name="user_answers")
  op.drop_table("user_answers")
  op.drop_index(op.f("ix_questions_category"), table_name="questions")
  op.drop_table("questions")
  op.drop_index(op.f("ix_users_phone_number"), table_name="users")
  op.drop_table("users")
