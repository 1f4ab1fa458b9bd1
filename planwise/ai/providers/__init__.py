"""Provider implementations."""

from planwise.ai.providers.base import AIModel, GenerationParams, ImageProvider, ModelResponse, Provider, SimpleModelResponse
from planwise.ai.providers.gemini import GeminiModel, GeminiProvider
from planwise.ai.providers.openrouter import OpenRouterModel, OpenRouterProvider
from planwise.ai.providers.runware import RunwareImageProvider

__all__ = [
  "AIModel",
  "GenerationParams",
  "ImageProvider",
  "ModelResponse",
  "SimpleModelResponse",
  "Provider",
  "GeminiModel",
  "GeminiProvider",
  "OpenRouterModel",
  "OpenRouterProvider",
  "RunwareImageProvider",
]
