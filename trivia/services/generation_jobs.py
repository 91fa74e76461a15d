"""Admin operations on the question generation queue."""

from __future__ import annotations

import logging

from trivia.config import Settings
from trivia.jobs.models import GenerationJobRecord
from trivia.services.errors import InvalidJobRequestError, JobNotFoundError, JobNotPendingError
from trivia.storage.content_store import ContentStore
from trivia.utils.ids import generate_job_id

logger = logging.getLogger(__name__)


def _normalize_category(category: str) -> str:
  return category.strip().lower()


async def enqueue_generation_job(store: ContentStore, settings: Settings, *, category: str, question_count: int) -> GenerationJobRecord:
  """Queue a pending job; the processor picks it up on its next poll."""
  normalized = _normalize_category(category)
  if not normalized:
    raise InvalidJobRequestError("Category must not be empty.")

  if question_count < 1 or question_count > settings.max_questions_per_job:
    raise InvalidJobRequestError(f"Question count must be between 1 and {settings.max_questions_per_job}.")

  job = await store.create_generation_job(job_id=generate_job_id(), category=normalized, question_count=question_count)
  logger.info("Queued generation job %s: %s (%d questions)", job.id, job.category, job.question_count)
  return job


async def list_generation_jobs(store: ContentStore, *, limit: int = 50) -> list[GenerationJobRecord]:
  return await store.list_generation_jobs(limit=limit)


async def get_generation_job(store: ContentStore, job_id: str) -> GenerationJobRecord:
  job = await store.get_generation_job(job_id)
  if job is None:
    raise JobNotFoundError(f"Generation job {job_id} not found.")
  return job


async def cancel_generation_job(store: ContentStore, job_id: str) -> None:
  """Remove a job that has not started yet."""
  job = await get_generation_job(store, job_id)
  if job.status != "pending":
    raise JobNotPendingError(f"Generation job {job_id} is {job.status} and can no longer be cancelled.")

  # The processor may claim the job between the read above and this delete.
  if not await store.delete_pending_generation_job(job_id):
    raise JobNotPendingError(f"Generation job {job_id} started before it could be cancelled.")

  logger.info("Cancelled generation job %s (%s)", job_id, job.category)
