"""FastAPI dependencies that assemble the generation pipeline from settings."""

from __future__ import annotations

from fastapi import Depends

from planwise.ai.illustrations import IllustrationService
from planwise.ai.orchestrator import LessonOrchestrator
from planwise.ai.providers.base import GenerationParams
from planwise.ai.quality_gate import QualityGate
from planwise.ai.router import get_image_provider, get_model_for_mode
from planwise.config import Settings, get_settings


def get_orchestrator(settings: Settings = Depends(get_settings)) -> LessonOrchestrator:
  model = get_model_for_mode(settings.provider, settings, settings.model)
  params = GenerationParams(temperature=settings.temperature, top_p=settings.top_p, max_output_tokens=settings.max_output_tokens)
  gate = QualityGate(min_paragraphs=settings.min_reading_paragraphs, min_sentences_per_paragraph=settings.min_paragraph_sentences)
  return LessonOrchestrator(model, params=params, max_attempts=settings.max_attempts, quality_gate=gate)


def get_illustration_service(settings: Settings = Depends(get_settings)) -> IllustrationService | None:
  """Return None when illustrations are disabled for this deployment."""
  if not settings.images_enabled:
    return None
  return IllustrationService(get_image_provider(settings), batch_size=settings.image_batch_size, pause_seconds=settings.image_batch_pause_seconds)
