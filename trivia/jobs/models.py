"""Domain models for background question generation jobs."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

JobStatus = Literal["pending", "active", "completed", "failed"]


@dataclass(frozen=True)
class GenerationJobRecord:
  """Represents a queued request to generate questions for one category."""

  id: str
  category: str
  question_count: int
  status: JobStatus
  created_at: datetime
  progress: int = 0
  total: int | None = None
  error_message: str | None = None
  started_at: datetime | None = None
  completed_at: datetime | None = None

  @property
  def effective_total(self) -> int:
    """Return the target question count, falling back to the requested count."""
    return self.total if self.total is not None else self.question_count

  @property
  def is_partial(self) -> bool:
    """True when a completed job stopped short of its target."""
    return self.status == "completed" and self.progress < self.effective_total
