"""OpenRouter provider implementation using openai SDK."""

from __future__ import annotations

import logging
from typing import Final

import openai
from openai import AsyncOpenAI

from planwise.ai.errors import ProviderTransportError
from planwise.ai.providers.base import AIModel, GenerationParams, ModelResponse, Provider, SimpleModelResponse
from planwise.telemetry.context import describe_llm_call

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterModel(AIModel):
  """OpenRouter chat-completions client."""

  def __init__(self, name: str, api_key: str | None = None, *, timeout_seconds: float = 60.0, base_url: str | None = None, http_referer: str | None = None, title: str | None = None) -> None:
    self.name: str = name

    if not api_key:
      raise ValueError("PLANWISE_OPENROUTER_API_KEY environment variable is required")

    # OpenRouter uses the OpenAI-compatible API; attribution headers are optional.
    default_headers = {}
    if http_referer:
      default_headers["HTTP-Referer"] = http_referer
    if title:
      default_headers["X-Title"] = title

    # The SDK's own retries are disabled; failed attempts are retried by the orchestrator.
    self._client = AsyncOpenAI(api_key=api_key, base_url=base_url or OPENROUTER_BASE_URL, default_headers=default_headers or None, timeout=timeout_seconds, max_retries=0)

  async def generate(self, prompt: str, params: GenerationParams) -> ModelResponse:
    """Generate text response from OpenRouter."""
    # Allow deterministic local runs without spending credits.
    dummy = AIModel.load_dummy_response("LESSON")
    if dummy is not None:
      logger.info("OpenRouter LESSON dummy response used (%s).", describe_llm_call())
      return SimpleModelResponse(content=dummy, usage=None)

    try:
      response = await self._client.chat.completions.create(
        model=self.name,
        messages=[{"role": "user", "content": prompt}],
        temperature=params.temperature,
        top_p=params.top_p,
        max_tokens=params.max_output_tokens,
      )
    except openai.APIError as exc:
      raise ProviderTransportError(f"OpenRouter request failed: {exc}", provider="openrouter") from exc

    if not response.choices:
      raise ProviderTransportError("OpenRouter returned no choices.", provider="openrouter")

    choice = response.choices[0]
    if choice.finish_reason == "content_filter":
      raise ProviderTransportError("OpenRouter response was blocked by the content policy.", provider="openrouter")

    content = choice.message.content or ""
    logger.info("OpenRouter response received (%s, %d chars, finish_reason=%s).", describe_llm_call(), len(content), choice.finish_reason)
    logger.debug("OpenRouter response:\n%s", content)
    usage = None

    if response.usage:
      usage = {"prompt_tokens": response.usage.prompt_tokens, "completion_tokens": response.usage.completion_tokens, "total_tokens": response.usage.total_tokens}

    return SimpleModelResponse(content=content, usage=usage)


class OpenRouterProvider(Provider):
  """OpenRouter provider."""

  _DEFAULT_MODEL: Final[str] = "google/gemini-3-pro-preview"
  _AVAILABLE_MODELS: Final[set[str]] = {
    "google/gemini-3-pro-preview",
    "google/gemini-2.5-pro",
    "google/gemini-2.5-flash",
    "openai/gpt-4o",
    "anthropic/claude-sonnet-4",
  }

  def __init__(self, api_key: str | None = None, *, timeout_seconds: float = 60.0, base_url: str | None = None, http_referer: str | None = None, title: str | None = None) -> None:
    self.name: str = "openrouter"
    self._api_key = api_key
    self._timeout_seconds = timeout_seconds
    self._base_url = base_url
    self._http_referer = http_referer
    self._title = title

  def get_model(self, model: str | None = None) -> AIModel:
    """Return an OpenRouter model client."""
    model_name = model or self._DEFAULT_MODEL
    if model_name not in self._AVAILABLE_MODELS:
      raise ValueError(f"Unsupported OpenRouter model '{model_name}'.")
    return OpenRouterModel(model_name, api_key=self._api_key, timeout_seconds=self._timeout_seconds, base_url=self._base_url, http_referer=self._http_referer, title=self._title)
