"""Unit tests for the generation queue processor."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from tests.fakes import InMemoryContentStore, RecordingSleep, ScriptedQuestionSource, build_settings, make_question
from trivia.ai.errors import QuestionGenerationError
from trivia.ai.providers.gemini import GeminiModel
from trivia.ai.question_generator import QuestionGenerator
from trivia.jobs.queue_processor import INTERRUPTED_JOB_MESSAGE, QueueProcessor


class YieldingSleep(RecordingSleep):
  """Records delays and hands control back to the event loop."""

  async def __call__(self, seconds: float) -> None:
    self.delays.append(seconds)
    await asyncio.sleep(0)


class GatedQuestionSource(ScriptedQuestionSource):
  """Blocks inside ``generate`` until the test opens the gate."""

  def __init__(self) -> None:
    super().__init__()
    self.entered = asyncio.Event()
    self.gate = asyncio.Event()

  async def generate(self, category, difficulty, recent_texts):
    self.entered.set()
    await self.gate.wait()
    return await super().generate(category, difficulty, recent_texts)


class FlakyTerminalStore(InMemoryContentStore):
  """Raises once on the first update that moves a job to ``fail_status``."""

  def __init__(self, fail_status: str) -> None:
    super().__init__()
    self._fail_status: str | None = fail_status

  async def update_generation_job(self, job_id, **fields):
    if self._fail_status is not None and fields.get("status") == self._fail_status:
      self._fail_status = None
      raise ConnectionError("connection reset during commit")
    return await super().update_generation_job(job_id, **fields)


def _processor(store, generator, sleep=None, **settings_overrides) -> QueueProcessor:
  return QueueProcessor(store=store, generator=generator, settings=build_settings(**settings_overrides), sleep=sleep or RecordingSleep())


@pytest.mark.anyio
async def test_job_completes_when_every_attempt_succeeds(store: InMemoryContentStore):
  store.add_job("job-1", "science", 5)
  generator = ScriptedQuestionSource()
  sleep = RecordingSleep()

  record = await _processor(store, generator, sleep).process_queue()

  assert record is not None
  assert record.status == "completed"
  assert record.progress == 5
  assert record.started_at is not None and record.completed_at is not None
  assert len(store.questions) == 5
  assert len(generator.calls) == 5
  assert sleep.delays == [1.0, 1.0, 1.0, 1.0]


@pytest.mark.anyio
async def test_failing_generator_exhausts_budget_and_completes_empty(store: InMemoryContentStore):
  store.add_job("job-1", "history", 5)
  generator = ScriptedQuestionSource([QuestionGenerationError("rate limited")] * 20)
  sleep = RecordingSleep()

  record = await _processor(store, generator, sleep).process_queue()

  assert len(generator.calls) == 10
  assert record.status == "completed"
  assert record.progress == 0
  assert record.is_partial
  assert store.questions == []
  assert sleep.delays == [2.0] * 9


@pytest.mark.anyio
async def test_unusable_results_count_against_budget(store: InMemoryContentStore):
  store.add_job("job-1", "arts", 2)
  generator = ScriptedQuestionSource([None, None, None, make_question("Who painted the Mona Lisa in Florence?", category="arts")])

  record = await _processor(store, generator).process_queue()

  assert len(generator.calls) == 4
  assert record.status == "completed"
  assert record.progress == 1


@pytest.mark.anyio
async def test_mixed_outcomes_reach_quota(store: InMemoryContentStore):
  store.add_job("job-1", "science", 3)
  script = [
    make_question("What is the chemical symbol for gold?"),
    QuestionGenerationError("bad json"),
    None,
    make_question("Which planet has the most moons?"),
    make_question("What gas do plants absorb from the air?"),
  ]
  sleep = RecordingSleep()

  record = await _processor(store, ScriptedQuestionSource(script), sleep).process_queue()

  assert record.status == "completed"
  assert record.progress == 3
  assert sleep.delays == [1.0, 2.0, 1.0, 1.0]


@pytest.mark.anyio
async def test_progress_is_persisted_before_each_attempt(store: InMemoryContentStore):
  store.add_job("job-1", "geography", 3)
  seen: list[int] = []
  generator = ScriptedQuestionSource(on_call=lambda: seen.append(store.jobs["job-1"].progress))

  await _processor(store, generator).process_queue()

  assert seen == [0, 1, 2]
  assert store.jobs["job-1"].progress == 3


@pytest.mark.anyio
async def test_unexpected_generator_fault_fails_job_and_keeps_questions(store: InMemoryContentStore):
  store.add_job("job-1", "physics", 5)
  generator = ScriptedQuestionSource([make_question("What is the unit of electrical resistance?", category="physics"), RuntimeError("model exploded")])

  record = await _processor(store, generator).process_queue()

  assert record.status == "failed"
  assert record.error_message == "model exploded"
  assert record.progress == 1
  assert record.completed_at is not None
  assert len(store.questions) == 1


@pytest.mark.anyio
async def test_fault_without_message_records_exception_name(store: InMemoryContentStore):
  store.add_job("job-1", "sports", 2)

  record = await _processor(store, ScriptedQuestionSource([KeyError()])).process_queue()

  assert record.status == "failed"
  assert record.error_message == "KeyError"


@pytest.mark.anyio
async def test_store_failure_while_saving_fails_job(store: InMemoryContentStore):
  store.add_job("job-1", "technology", 2)
  store.fail_create_question = RuntimeError("connection reset by peer")

  record = await _processor(store, ScriptedQuestionSource()).process_queue()

  assert record.status == "failed"
  assert record.error_message == "connection reset by peer"


@pytest.mark.anyio
async def test_oldest_pending_job_runs_first(store: InMemoryContentStore):
  store.add_job("older", "history", 1)
  store.add_job("newer", "science", 1)

  record = await _processor(store, ScriptedQuestionSource()).process_queue()

  assert record.id == "older"
  assert store.jobs["newer"].status == "pending"


@pytest.mark.anyio
async def test_empty_queue_is_a_no_op(store: InMemoryContentStore):
  generator = ScriptedQuestionSource()

  assert await _processor(store, generator).process_queue() is None
  assert generator.calls == []


@pytest.mark.anyio
async def test_recent_window_is_scoped_to_category(store: InMemoryContentStore):
  science_texts = [f"Science question number {index}?" for index in range(12)]
  for text in science_texts:
    store.add_question(make_question(text))
  store.add_question(make_question("A history question about Rome?", category="history"))
  store.add_job("job-1", "science", 2)
  generator = ScriptedQuestionSource()

  await _processor(store, generator).process_queue()

  first_window = generator.calls[0][2]
  second_window = generator.calls[1][2]
  assert first_window == science_texts[-10:]
  assert second_window[:-1] == science_texts[-9:]
  assert second_window[-1] == store.questions[-2].question_text
  assert generator.calls[0][:2] == ("science", "medium")


@pytest.mark.anyio
async def test_overlapping_cycles_never_run_two_jobs(store: InMemoryContentStore):
  store.add_job("first", "science", 3)
  store.add_job("second", "history", 3)
  processor = _processor(store, ScriptedQuestionSource(), YieldingSleep())

  results = await asyncio.gather(processor.process_queue(), processor.process_queue())

  assert [record.id if record else None for record in results] == ["first", None]
  assert store.max_active_seen == 1
  assert store.jobs["second"].status == "pending"
  assert processor.is_processing is False


@pytest.mark.anyio
async def test_cycle_skips_while_another_job_is_active(store: InMemoryContentStore):
  store.add_job("stuck", "science", 3, status="active")
  store.add_job("waiting", "history", 1)

  record = await _processor(store, ScriptedQuestionSource(), recover_interrupted_jobs=False).process_queue()

  assert record is None
  assert store.jobs["waiting"].status == "pending"


@pytest.mark.anyio
async def test_cycle_errors_are_contained(store: InMemoryContentStore):
  store.add_job("job-1", "science", 1)
  processor = _processor(store, ScriptedQuestionSource())

  with patch.object(store, "get_active_generation_jobs", AsyncMock(side_effect=[RuntimeError("database unavailable"), []])):
    assert await processor.process_queue() is None
    assert processor.is_processing is False
    record = await processor.process_queue()

  assert record.status == "completed"


@pytest.mark.anyio
async def test_recover_interrupted_jobs_marks_them_failed(store: InMemoryContentStore):
  store.add_job("stale", "science", 4, status="active", progress=2)

  recovered = await _processor(store, ScriptedQuestionSource()).recover_interrupted_jobs()

  assert recovered == 1
  stale = store.jobs["stale"]
  assert stale.status == "failed"
  assert stale.error_message == INTERRUPTED_JOB_MESSAGE
  assert stale.progress == 2


@pytest.mark.anyio
async def test_first_cycle_after_start_recovers_then_processes(store: InMemoryContentStore):
  store.add_job("stale", "science", 4, status="active", progress=2)
  store.add_job("next", "history", 1)
  processor = _processor(store, ScriptedQuestionSource(), queue_poll_seconds=3600.0)

  processor.start()
  try:
    for _ in range(100):
      if store.jobs["next"].status == "completed":
        break
      await asyncio.sleep(0)
  finally:
    processor.stop()

  assert store.jobs["stale"].status == "failed"
  assert store.jobs["next"].status == "completed"


@pytest.mark.anyio
async def test_start_and_stop_are_idempotent(store: InMemoryContentStore):
  processor = _processor(store, ScriptedQuestionSource(), queue_poll_seconds=3600.0)

  processor.stop()
  assert processor.is_running is False

  processor.start()
  task = processor._timer_task
  processor.start()
  assert processor._timer_task is task
  assert processor.is_running

  processor.stop()
  processor.stop()
  assert processor.is_running is False
  await asyncio.sleep(0)
  assert task.cancelled()


@pytest.mark.anyio
async def test_gemini_transport_failures_count_against_budget(store: InMemoryContentStore):
  store.add_job("job-1", "science", 2)
  model = GeminiModel("gemini-2.5-flash", api_key="test-key")
  sleep = RecordingSleep()

  with patch.object(model._client.aio.models, "generate_content", new=AsyncMock(side_effect=httpx.ConnectError("temporary DNS failure"))) as call:
    record = await _processor(store, QuestionGenerator(model), sleep).process_queue()

  assert record.status == "completed"
  assert record.progress == 0
  assert record.error_message is None
  assert call.await_count == 4
  assert sleep.delays == [2.0, 2.0, 2.0]


@pytest.mark.anyio
async def test_failed_completion_write_is_retried_before_next_job():
  store = FlakyTerminalStore("completed")
  store.add_job("first", "science", 1)
  store.add_job("second", "history", 1)
  processor = _processor(store, ScriptedQuestionSource())

  assert await processor.process_queue() is None
  assert store.jobs["first"].status == "active"

  record = await processor.process_queue()

  assert store.jobs["first"].status == "completed"
  assert store.jobs["first"].progress == 1
  assert record.id == "second"
  assert record.status == "completed"
  assert store.max_active_seen == 1


@pytest.mark.anyio
async def test_failed_failure_write_is_retried_before_next_job():
  store = FlakyTerminalStore("failed")
  store.add_job("first", "science", 1)
  store.add_job("second", "history", 1)
  processor = _processor(store, ScriptedQuestionSource([RuntimeError("model crashed")]), recover_interrupted_jobs=False)

  assert await processor.process_queue() is None
  assert store.jobs["first"].status == "active"

  record = await processor.process_queue()

  assert store.jobs["first"].status == "failed"
  assert store.jobs["first"].error_message == "model crashed"
  assert record.id == "second"
  assert record.status == "completed"


@pytest.mark.anyio
async def test_shutdown_waits_for_in_flight_job(store: InMemoryContentStore):
  store.add_job("job-1", "science", 1)
  generator = GatedQuestionSource()
  processor = _processor(store, generator, queue_poll_seconds=3600.0)

  processor.start()
  await asyncio.wait_for(generator.entered.wait(), timeout=1)
  asyncio.get_running_loop().call_soon(generator.gate.set)
  await processor.shutdown(grace_seconds=5)

  assert processor.is_running is False
  assert store.jobs["job-1"].status == "completed"


@pytest.mark.anyio
async def test_shutdown_cancels_cycles_past_the_grace_period(store: InMemoryContentStore):
  store.add_job("job-1", "science", 1)
  generator = GatedQuestionSource()
  processor = _processor(store, generator, queue_poll_seconds=3600.0)

  processor.start()
  await asyncio.wait_for(generator.entered.wait(), timeout=1)
  await processor.shutdown(grace_seconds=0.01)

  assert processor.is_running is False
  assert processor.is_processing is False
  # Left active for the next start's recovery pass.
  assert store.jobs["job-1"].status == "active"
  assert store.questions == []
