"""Provider implementations."""

from trivia.ai.providers.base import AIModel, Provider, StructuredModelResponse
from trivia.ai.providers.gemini import GeminiModel, GeminiProvider

__all__ = ["AIModel", "Provider", "StructuredModelResponse", "GeminiModel", "GeminiProvider"]
