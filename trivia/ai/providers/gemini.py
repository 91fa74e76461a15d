"""Gemini provider implementation using the google-genai SDK."""

from __future__ import annotations

import asyncio
import json
import logging
import random
from typing import Any, Final

import httpx
from google import genai
from google.genai import errors as genai_errors

from trivia.ai.errors import ProviderConfigurationError, QuestionGenerationError
from trivia.ai.providers.base import AIModel, Provider, StructuredModelResponse

logger = logging.getLogger(__name__)


class GeminiModel(AIModel):
  """Gemini model client with JSON-mode structured output."""

  def __init__(self, name: str, api_key: str | None, *, timeout_seconds: float = 60.0) -> None:
    if not api_key:
      raise ProviderConfigurationError("GEMINI_API_KEY environment variable is required")
    self.name: str = name
    self._timeout_seconds = timeout_seconds
    self._client = genai.Client(api_key=api_key)

  async def generate_structured(self, prompt: str, schema: dict[str, Any]) -> StructuredModelResponse:
    """Generate a JSON object matching ``schema``."""
    config = {"response_mime_type": "application/json", "response_schema": schema}
    try:
      # Use the async client to avoid blocking the asyncio event loop.
      response = await asyncio.wait_for(_with_backoff(self._client.aio.models.generate_content, model=self.name, contents=prompt, config=config), timeout=self._timeout_seconds)
    except TimeoutError as e:
      raise QuestionGenerationError(f"Gemini request timed out after {self._timeout_seconds:.0f}s") from e
    except genai_errors.APIError as e:
      raise QuestionGenerationError(f"Gemini API error: {e}") from e
    except httpx.TransportError as e:
      raise QuestionGenerationError(f"Gemini transport error: {e}") from e

    if not response.text:
      raise QuestionGenerationError("Gemini returned an empty response")
    logger.debug("Gemini structured response (raw):\n%s", response.text)

    usage = None
    if response.usage_metadata:
      usage = {"prompt_tokens": response.usage_metadata.prompt_token_count, "completion_tokens": response.usage_metadata.candidates_token_count, "total_tokens": response.usage_metadata.total_token_count}

    try:
      parsed = json.loads(self.strip_json_fences(response.text))
    except json.JSONDecodeError as e:
      raise QuestionGenerationError(f"Gemini returned invalid JSON: {e}") from e
    if not isinstance(parsed, dict):
      raise QuestionGenerationError(f"Gemini returned a {type(parsed).__name__}, expected a JSON object")
    return StructuredModelResponse(content=parsed, usage=usage)


class GeminiProvider(Provider):
  """Gemini provider."""

  _DEFAULT_MODEL: Final[str] = "gemini-2.5-flash"
  _AVAILABLE_MODELS: Final[set[str]] = {"gemini-2.5-pro", "gemini-2.5-flash", "gemini-2.5-flash-lite", "gemini-2.0-flash"}

  def __init__(self, api_key: str | None = None) -> None:
    self.name: str = "gemini"
    self._api_key = api_key

  def get_model(self, model: str | None = None) -> AIModel:
    """Return a Gemini model client."""
    model_name = model or self._DEFAULT_MODEL
    if model_name not in self._AVAILABLE_MODELS:
      raise ProviderConfigurationError(f"Unsupported Gemini model '{model_name}'.")
    return GeminiModel(model_name, api_key=self._api_key)


async def _with_backoff(func, *args, **kwargs):
  """Retry rate-limited calls with exponential backoff and jitter."""
  retries = 3
  base_delay = 1
  for i in range(retries - 1):
    try:
      return await func(*args, **kwargs)
    except genai_errors.APIError as e:
      if e.code != 429:
        raise
      delay = base_delay * (2**i) + random.uniform(0, 1)
      logger.warning("Gemini rate limited (attempt %d/%d); retrying in %.1fs", i + 1, retries, delay)
      await asyncio.sleep(delay)
  # Final attempt
  return await func(*args, **kwargs)
