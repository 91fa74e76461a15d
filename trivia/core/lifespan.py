import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from trivia.ai.errors import ProviderConfigurationError
from trivia.config import Settings
from trivia.core.database import dispose_engine
from trivia.core.logging import _initialize_logging
from trivia.jobs.queue_processor import QueueProcessor, build_queue_processor

# Track the queue processor for lifecycle management.
_QUEUE_PROCESSOR: QueueProcessor | None = None
_SHUTDOWN_GRACE_SECONDS = 10.0


def _start_queue_processor(active_settings: Settings) -> None:
  """Start the generation queue poller unless disabled or already running."""
  global _QUEUE_PROCESSOR
  logger = logging.getLogger("trivia.core.lifespan")

  if not active_settings.queue_autostart:
    logger.info("Queue autostart disabled; generation jobs will wait.")
    return

  # Lifespan can run more than once under some test harnesses.
  if _QUEUE_PROCESSOR is not None:
    _QUEUE_PROCESSOR.start()
    return

  try:
    processor = build_queue_processor(active_settings)
  except (ProviderConfigurationError, RuntimeError) as exc:
    logger.warning("Queue processor not started: %s", exc)
    return

  processor.start()
  _QUEUE_PROCESSOR = processor


async def _stop_queue_processor() -> None:
  """Stop polling and let an in-flight cycle finish before the pool is disposed."""
  global _QUEUE_PROCESSOR
  if _QUEUE_PROCESSOR is None:
    return
  processor = _QUEUE_PROCESSOR
  _QUEUE_PROCESSOR = None
  await processor.shutdown(_SHUTDOWN_GRACE_SECONDS)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
  """Set up logging, start the queue processor and release the database pool on shutdown."""
  from trivia.config import get_settings

  settings = get_settings()
  logger = logging.getLogger("trivia.core.lifespan")

  try:
    _initialize_logging(settings)
    logger.info("Startup complete - logging verified.")

  except Exception:
    logger.warning("Initial logging setup failed; continuing with default handlers.", exc_info=True)

  _start_queue_processor(settings)

  yield

  await _stop_queue_processor()
  await dispose_engine()
  logger.info("Shutdown complete.")
