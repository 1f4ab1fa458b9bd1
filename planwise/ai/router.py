"""Routing utilities for provider/model selection."""

from __future__ import annotations

from enum import Enum

from planwise.ai.providers.base import AIModel, ImageProvider, Provider
from planwise.ai.providers.gemini import GeminiProvider
from planwise.ai.providers.openrouter import OpenRouterProvider
from planwise.ai.providers.runware import RunwareImageProvider
from planwise.config import Settings


class ProviderMode(str, Enum):
  """Supported provider modes."""

  GEMINI = "gemini"
  OPENROUTER = "openrouter"


def get_provider_for_mode(mode: str | ProviderMode, settings: Settings) -> Provider:
  """Return a provider instance for the given mode."""
  key = mode.value if isinstance(mode, ProviderMode) else mode
  if key == ProviderMode.GEMINI.value:
    return GeminiProvider(settings.gemini_api_key, timeout_seconds=settings.provider_timeout_seconds)
  if key == ProviderMode.OPENROUTER.value:
    return OpenRouterProvider(
      settings.openrouter_api_key,
      timeout_seconds=settings.provider_timeout_seconds,
      http_referer=settings.openrouter_http_referer,
      title=settings.openrouter_title,
    )
  raise ValueError(f"Unsupported provider mode '{mode}'.")


def get_model_for_mode(mode: str | ProviderMode, settings: Settings, model: str | None = None) -> AIModel:
  """Return a model client for the given mode and model name."""
  provider = get_provider_for_mode(mode, settings)
  return provider.get_model(model)


def get_image_provider(settings: Settings) -> ImageProvider:
  """Return the image provider used for lesson illustrations."""
  return RunwareImageProvider(settings.runware_api_key, timeout_seconds=settings.provider_timeout_seconds)
