"""Base interfaces for text and image providers."""

from __future__ import annotations

import logging
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

_DUMMY_FIXTURES_DIR = Path(__file__).resolve().parents[3] / "fixtures"


class ModelResponse(Protocol):
  """Response contract for model outputs."""

  content: str
  usage: dict[str, int] | None


@dataclass
class SimpleModelResponse:
  """Minimal model response structure."""

  content: str
  usage: dict[str, int] | None = None


@dataclass(frozen=True)
class GenerationParams:
  """Sampling parameters passed with every generation call."""

  temperature: float = 0.3
  top_p: float = 0.9
  max_output_tokens: int = 16384


class AIModel(ABC):
  """Abstract base class for text models.

  Implementations enforce their own request timeout and surface transport
  failures as ProviderTransportError. They never retry; retry policy lives in
  the orchestrator.
  """

  name: str

  @abstractmethod
  async def generate(self, prompt: str, params: GenerationParams) -> ModelResponse:
    """Generate a response for the given prompt."""

  @staticmethod
  def load_dummy_response(purpose: str) -> str | None:
    """Return canned output when PLANWISE_USE_DUMMY_<PURPOSE>_RESPONSE is enabled."""
    key = re.sub(r"[^A-Z0-9]+", "_", purpose.upper()).strip("_")
    if os.getenv(f"PLANWISE_USE_DUMMY_{key}_RESPONSE", "").strip().lower() not in {"1", "true", "yes", "on"}:
      return None
    # An explicit path wins over the repo fixture.
    raw_path = os.getenv(f"PLANWISE_DUMMY_{key}_RESPONSE_PATH")
    path = Path(raw_path) if raw_path else _DUMMY_FIXTURES_DIR / f"dummy_{key.lower()}_response.md"
    try:
      return path.read_text(encoding="utf-8")
    except OSError as exc:
      logging.getLogger(__name__).warning("Dummy response %s could not be read: %s", path, exc)
      return None


class Provider(ABC):
  """Abstract base class for text providers."""

  name: str

  @abstractmethod
  def get_model(self, model: str | None = None) -> AIModel:
    """Return the model client for the provider."""


class ImageProvider(ABC):
  """Abstract base class for image generation services."""

  name: str

  @abstractmethod
  async def generate_image(self, prompt: str, request_id: str) -> bytes | None:
    """Return image bytes for a scene description, or None when generation fails."""
