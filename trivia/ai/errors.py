"""Errors raised on the question generation pathway."""

from __future__ import annotations


class QuestionGenerationError(Exception):
  """A single generation attempt failed in a way worth retrying.

  Covers provider API errors, timeouts, rate limiting and malformed model output. The queue
  processor counts these against the job's attempt budget instead of failing the job.
  """


class ProviderConfigurationError(RuntimeError):
  """The AI provider cannot be constructed (missing key, unknown model)."""
