"""Gemini provider implementation using the google-genai SDK."""

from __future__ import annotations

import asyncio
import logging
import warnings
from typing import Final

from pydantic.warnings import ArbitraryTypeWarning

with warnings.catch_warnings():
  warnings.filterwarnings("ignore", message=r"<built-in function any> is not a Python type.*", category=ArbitraryTypeWarning)
  from google import genai
  from google.genai import errors as genai_errors
  from google.genai import types

from planwise.ai.errors import ProviderTransportError
from planwise.ai.providers.base import AIModel, GenerationParams, ModelResponse, Provider, SimpleModelResponse
from planwise.telemetry.context import describe_llm_call

logger = logging.getLogger(__name__)


class GeminiModel(AIModel):
  """Gemini model client using the async google-genai surface."""

  def __init__(self, name: str, api_key: str | None = None, *, timeout_seconds: float = 60.0) -> None:
    self.name: str = name

    if not api_key:
      raise ValueError("PLANWISE_GEMINI_API_KEY environment variable is required")

    self._client = genai.Client(api_key=api_key)
    self._timeout_seconds = timeout_seconds

  async def generate(self, prompt: str, params: GenerationParams) -> ModelResponse:
    """Generate text response from Gemini."""
    # Allow deterministic local runs without spending credits.
    dummy = AIModel.load_dummy_response("LESSON")
    if dummy is not None:
      logger.info("Gemini LESSON dummy response used (%s).", describe_llm_call())
      return SimpleModelResponse(content=dummy, usage=None)

    config = types.GenerateContentConfig(temperature=params.temperature, top_p=params.top_p, max_output_tokens=params.max_output_tokens)

    try:
      # Use the async client to avoid blocking the asyncio event loop.
      response = await asyncio.wait_for(self._client.aio.models.generate_content(model=self.name, contents=prompt, config=config), timeout=self._timeout_seconds)
    except TimeoutError as exc:
      raise ProviderTransportError(f"Gemini request timed out after {self._timeout_seconds:.0f}s.", provider="gemini") from exc
    except genai_errors.APIError as exc:
      raise ProviderTransportError(f"Gemini request failed: {exc}", provider="gemini") from exc

    feedback = response.prompt_feedback
    if feedback is not None and feedback.block_reason is not None:
      raise ProviderTransportError(f"Gemini prompt was blocked: {feedback.block_reason}", provider="gemini")

    content = response.text or ""
    if not content.strip():
      raise ProviderTransportError("Gemini returned an empty response.", provider="gemini")

    logger.info("Gemini response received (%s, %d chars).", describe_llm_call(), len(content))
    logger.debug("Gemini response:\n%s", content)
    usage = None

    if response.usage_metadata:
      usage = {"prompt_tokens": response.usage_metadata.prompt_token_count, "completion_tokens": response.usage_metadata.candidates_token_count, "total_tokens": response.usage_metadata.total_token_count}
    return SimpleModelResponse(content=content, usage=usage)


class GeminiProvider(Provider):
  """Gemini provider."""

  _DEFAULT_MODEL: Final[str] = "gemini-2.5-flash"
  _AVAILABLE_MODELS: Final[set[str]] = {"gemini-3-pro-preview", "gemini-2.5-pro", "gemini-2.5-flash", "gemini-2.0-flash"}

  def __init__(self, api_key: str | None = None, *, timeout_seconds: float = 60.0) -> None:
    self.name: str = "gemini"
    self._api_key = api_key
    self._timeout_seconds = timeout_seconds

  def get_model(self, model: str | None = None) -> AIModel:
    """Return a Gemini model client."""
    model_name = model or self._DEFAULT_MODEL
    if model_name not in self._AVAILABLE_MODELS:
      raise ValueError(f"Unsupported Gemini model '{model_name}'.")

    return GeminiModel(model_name, api_key=self._api_key, timeout_seconds=self._timeout_seconds)
