"""Batched illustration generation for vocabulary words and discussion questions."""

from __future__ import annotations

import asyncio
import base64
import io
import logging
from dataclasses import dataclass

from PIL import Image

from planwise.ai.providers.base import ImageProvider
from planwise.schema.lesson_models import DiscussionQuestion, DiscussionSection, LessonDocument, VocabularySection, VocabWord

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10
DEFAULT_BATCH_PAUSE_SECONDS = 0.5
_REQUEST_ID_CHARS = 15
_TOPIC_PROMPT_CHARS = 100


@dataclass(frozen=True)
class _ImageJob:
  request_id: str
  prompt: str
  record: VocabWord | DiscussionQuestion


def vocabulary_image_prompt(term: str) -> str:
  return f'An illustration showing the meaning of "{term}" in a clear, educational way. No text visible in the image.'


def discussion_image_prompt(question: str) -> str:
  topic = question[:_TOPIC_PROMPT_CHARS]
  return f'An illustration representing the discussion topic: "{topic}". The image should be visually engaging and help students think about the topic. No text or words should appear in the image.'


class IllustrationService:
  """Attach base64 WebP images to the records of a lesson document.

  Requests run in fixed-width batches with a pause between batches. Each
  task writes only to its own record, and a failed request leaves that
  record's image empty instead of failing the document.
  """

  def __init__(self, provider: ImageProvider, *, batch_size: int = DEFAULT_BATCH_SIZE, pause_seconds: float = DEFAULT_BATCH_PAUSE_SECONDS) -> None:
    if batch_size <= 0:
      raise ValueError("batch_size must be a positive integer.")
    self._provider = provider
    self._batch_size = batch_size
    self._pause_seconds = pause_seconds

  async def illustrate(self, document: LessonDocument) -> int:
    """Generate images in place and return how many records received one."""
    jobs = collect_image_jobs(document)
    if not jobs:
      return 0

    logger.info("Generating %d illustrations in batches of %d.", len(jobs), self._batch_size)
    generated = 0
    for start in range(0, len(jobs), self._batch_size):
      if start:
        await asyncio.sleep(self._pause_seconds)
      batch = jobs[start : start + self._batch_size]
      results = await asyncio.gather(*(self._run(job) for job in batch))
      generated += sum(results)

    logger.info("Generated %d/%d illustrations.", generated, len(jobs))
    return generated

  async def _run(self, job: _ImageJob) -> bool:
    try:
      raw_image = await self._provider.generate_image(job.prompt, job.request_id)
    except Exception:  # noqa: BLE001
      logger.error("Image request %s raised; continuing without an image.", job.request_id, exc_info=True)
      return False
    if not raw_image:
      return False

    try:
      webp_image = _convert_to_webp(raw_image)
    except (OSError, ValueError) as exc:
      logger.error("Image %s could not be converted to WebP: %s", job.request_id, exc)
      return False

    job.record.image_base64 = base64.b64encode(webp_image).decode("ascii")
    return True


def collect_image_jobs(document: LessonDocument) -> list[_ImageJob]:
  """Build one job per vocabulary word and discussion question, deriving missing prompts."""
  jobs: list[_ImageJob] = []
  for section in document.sections:
    if isinstance(section, VocabularySection) and not section.not_provided:
      for word in section.words:
        if not word.image_prompt:
          word.image_prompt = vocabulary_image_prompt(word.term)
        jobs.append(_ImageJob(request_id=f"vocab_{word.term[:_REQUEST_ID_CHARS]}", prompt=word.image_prompt, record=word))
    elif isinstance(section, DiscussionSection) and not section.not_provided:
      for question in section.questions:
        if not question.image_prompt:
          question.image_prompt = discussion_image_prompt(question.question)
        jobs.append(_ImageJob(request_id=f"disc_{question.question[:_REQUEST_ID_CHARS]}", prompt=question.image_prompt, record=question))
  return jobs


def _convert_to_webp(image_bytes: bytes) -> bytes:
  """Convert provider image bytes into a WebP payload."""
  image = Image.open(io.BytesIO(image_bytes))
  # Convert alpha-free and alpha images consistently to avoid mode-related encoder errors.
  converted = image.convert("RGBA") if image.mode not in {"RGB", "RGBA"} else image
  output = io.BytesIO()
  converted.save(output, format="WEBP", quality=88, method=6)
  return output.getvalue()
