"""Polling processor for queued question generation jobs."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from trivia.ai.errors import QuestionGenerationError
from trivia.ai.question_generator import QuestionSource
from trivia.config import Settings
from trivia.jobs.models import GenerationJobRecord
from trivia.storage.content_store import ContentStore

logger = logging.getLogger(__name__)

INTERRUPTED_JOB_MESSAGE = "Interrupted before completion"


def _utcnow() -> datetime:
  return datetime.now(UTC)


def _log_task_failure(task: asyncio.Task[None]) -> None:
  """Log unexpected failures from the polling task."""
  if task.cancelled():
    return
  exc = task.exception()
  if exc is not None:
    logger.error("Queue poll loop exited: %s", exc, exc_info=exc)


class QueueProcessor:
  """Pull one pending generation job at a time and drive the generator until its quota is met.

  A timer spawns a poll cycle every ``queue_poll_seconds``. A cycle that starts while the
  previous one is still working returns immediately, so at most one job is ever active.
  Errors never escape a cycle; the job's status and progress are the only report.
  """

  def __init__(
    self,
    *,
    store: ContentStore,
    generator: QuestionSource,
    settings: Settings,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], datetime] = _utcnow,
  ) -> None:
    self._store = store
    self._generator = generator
    self._settings = settings
    self._sleep = sleep
    self._clock = clock
    self._timer_task: asyncio.Task[None] | None = None
    self._cycle_tasks: set[asyncio.Task[GenerationJobRecord | None]] = set()
    self._is_processing = False
    self._recovery_pending = False
    # Terminal writes that raised, keyed by job id; replayed before the next job is claimed.
    self._unfinished: dict[str, dict[str, Any]] = {}

  @property
  def is_running(self) -> bool:
    return self._timer_task is not None and not self._timer_task.done()

  @property
  def is_processing(self) -> bool:
    return self._is_processing

  def start(self) -> None:
    """Start polling on the running event loop; no-op when already started."""
    if self.is_running:
      logger.info("Queue processor is already running")
      return

    logger.info("Starting queue processor (poll every %.1fs)", self._settings.queue_poll_seconds)
    self._recovery_pending = self._settings.recover_interrupted_jobs
    loop = asyncio.get_running_loop()
    self._timer_task = loop.create_task(self._poll_forever())
    self._timer_task.add_done_callback(_log_task_failure)

  def stop(self) -> None:
    """Stop the poll timer; no-op when not started. An in-flight job runs to completion."""
    if self._timer_task is None:
      return
    self._timer_task.cancel()
    self._timer_task = None
    logger.info("Queue processor stopped")

  async def shutdown(self, grace_seconds: float) -> None:
    """Stop polling, give in-flight cycles ``grace_seconds`` to finish, then cancel them."""
    self.stop()
    if not self._cycle_tasks:
      return

    _, pending = await asyncio.wait(set(self._cycle_tasks), timeout=grace_seconds)
    if not pending:
      return

    logger.warning("Cancelling %d queue cycle(s) still running after %.1fs", len(pending), grace_seconds)
    for task in pending:
      task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)

  async def _poll_forever(self) -> None:
    while True:
      task = asyncio.create_task(self.process_queue())
      self._cycle_tasks.add(task)
      task.add_done_callback(self._cycle_tasks.discard)
      await asyncio.sleep(self._settings.queue_poll_seconds)

  async def process_queue(self) -> GenerationJobRecord | None:
    """Run one poll cycle and return the job it finished, if any."""
    # No await between the check and the set, so this is atomic on the event loop.
    if self._is_processing:
      logger.debug("Previous poll cycle still running; skipping")
      return None

    self._is_processing = True
    try:
      if self._recovery_pending:
        self._recovery_pending = False
        await self.recover_interrupted_jobs()

      if self._unfinished:
        await self._replay_terminal_writes()

      if await self._store.get_active_generation_jobs():
        logger.debug("A generation job is already active; skipping")
        return None

      job = await self._store.get_next_pending_job()
      if job is None:
        return None

      logger.info("Processing generation job %s: %s (%d questions)", job.id, job.category, job.question_count)
      active = await self._store.update_generation_job(job.id, status="active", started_at=self._clock(), total=job.effective_total)
      if active is None:
        # Cancelled between the read and the claim.
        logger.info("Generation job %s disappeared before activation", job.id)
        return None

      return await self.generate_with_progress(active)

    except Exception:  # noqa: BLE001
      logger.error("Queue processing error", exc_info=True)
      return None

    finally:
      self._is_processing = False

  async def recover_interrupted_jobs(self) -> int:
    """Fail jobs left active by a previous process so a new job can be picked up."""
    stale = await self._store.get_active_generation_jobs()
    for job in stale:
      logger.warning("Marking interrupted generation job %s (%s) as failed at %d/%d", job.id, job.category, job.progress, job.effective_total)
      await self._store.update_generation_job(job.id, status="failed", error_message=INTERRUPTED_JOB_MESSAGE, completed_at=self._clock())
    return len(stale)

  async def generate_with_progress(self, job: GenerationJobRecord) -> GenerationJobRecord | None:
    """Generate questions for an active job and record its terminal state."""
    try:
      generated = await self._generate_questions(job)
    except Exception as exc:  # noqa: BLE001
      logger.error("Generation job %s (%s) failed", job.id, job.category, exc_info=True)
      message = str(exc) or type(exc).__name__
      return await self._finish(job.id, status="failed", error_message=message, completed_at=self._clock())

    record = await self._finish(job.id, status="completed", progress=generated, completed_at=self._clock())
    if generated < job.question_count:
      logger.info("Generation job %s completed partially: %s %d/%d questions", job.id, job.category, generated, job.question_count)
    else:
      logger.info("Generation job completed: %s (%d questions)", job.category, generated)
    return record

  async def _finish(self, job_id: str, **fields: Any) -> GenerationJobRecord | None:
    try:
      return await self._store.update_generation_job(job_id, **fields)
    except Exception:
      # Replayed at the start of the next cycle.
      self._unfinished[job_id] = fields
      raise

  async def _replay_terminal_writes(self) -> None:
    for job_id, fields in list(self._unfinished.items()):
      logger.warning("Retrying final %s update for generation job %s", fields["status"], job_id)
      await self._store.update_generation_job(job_id, **fields)
      del self._unfinished[job_id]

  async def _generate_questions(self, job: GenerationJobRecord) -> int:
    """Call the generator until the quota is met or the attempt budget runs out."""
    target = min(job.question_count, job.effective_total)
    max_attempts = job.question_count * 2
    window = self._settings.generation_recent_window
    difficulty = self._settings.generation_difficulty

    known_texts = [question.question_text for question in await self._store.get_all_questions() if question.category == job.category]

    generated = 0
    attempts = 0
    while generated < target and attempts < max_attempts:
      attempts += 1
      logger.debug("Attempt %d: generating question %d/%d for %s", attempts, generated + 1, target, job.category)

      try:
        question = await self._generator.generate(job.category, difficulty, known_texts[-window:])
      except QuestionGenerationError as exc:
        logger.warning("Error generating question for %s (attempt %d/%d): %s", job.category, attempts, max_attempts, exc)
        delay = self._settings.generation_error_delay_seconds
      else:
        if question is None:
          logger.info("No usable question for %s (attempt %d/%d)", job.category, attempts, max_attempts)
        else:
          await self._store.create_question(question)
          known_texts.append(question.question_text)
          generated += 1
          # Progress must be visible to pollers before the next attempt starts.
          await self._store.update_generation_job(job.id, progress=generated)
          logger.info("Question %d/%d saved for %s", generated, target, job.category)
        delay = self._settings.generation_success_delay_seconds

      if generated < target and attempts < max_attempts:
        await self._sleep(delay)

    return generated


def build_queue_processor(settings: Settings) -> QueueProcessor:
  """Wire the processor to Postgres and Gemini."""
  from trivia.ai.providers.gemini import GeminiProvider
  from trivia.ai.question_generator import QuestionGenerator
  from trivia.storage.factory import get_content_store

  model = GeminiProvider(api_key=settings.gemini_api_key).get_model(settings.gemini_model)
  return QueueProcessor(store=get_content_store(), generator=QuestionGenerator(model), settings=settings)
