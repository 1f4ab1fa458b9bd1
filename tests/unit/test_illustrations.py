"""Tests for batched illustration generation."""

from __future__ import annotations

import asyncio
import base64
import io

import pytest
from PIL import Image

from planwise.ai.illustrations import IllustrationService, collect_image_jobs, discussion_image_prompt, vocabulary_image_prompt
from planwise.ai.providers.base import ImageProvider
from planwise.schema.lesson_models import DiscussionQuestion, DiscussionSection, LessonDocument, VocabularySection, VocabWord
from planwise.schema.section_normalizer import normalize_lesson


def _png_bytes() -> bytes:
  buffer = io.BytesIO()
  Image.new("RGB", (4, 4), color=(200, 30, 30)).save(buffer, format="PNG")
  return buffer.getvalue()


class _ScriptedProvider(ImageProvider):
  """Returns PNG bytes unless a request id is scripted to fail."""

  def __init__(self, failures: dict[str, object] | None = None) -> None:
    self.name = "scripted"
    self.failures = failures or {}
    self.calls: list[tuple[str, str]] = []
    self.in_flight = 0
    self.peak = 0

  async def generate_image(self, prompt: str, request_id: str) -> bytes | None:
    self.calls.append((request_id, prompt))
    self.in_flight += 1
    self.peak = max(self.peak, self.in_flight)
    await asyncio.sleep(0)
    self.in_flight -= 1
    failure = self.failures.get(request_id)
    if isinstance(failure, BaseException):
      raise failure
    if failure is not None:
      return failure  # type: ignore[return-value]
    return _png_bytes()


@pytest.mark.anyio
async def test_every_word_and_discussion_question_gets_a_webp_image(valid_lesson_payload) -> None:
  document = normalize_lesson(valid_lesson_payload)
  provider = _ScriptedProvider()

  generated = await IllustrationService(provider, pause_seconds=0).illustrate(document)

  assert generated == 7
  vocabulary = document.section("vocabulary")
  discussion = document.section("discussion")
  records = [*vocabulary.words, *discussion.questions]
  for record in records:
    image = base64.b64decode(record.image_base64)
    assert image[:4] == b"RIFF" and image[8:12] == b"WEBP"
  request_ids = [request_id for request_id, _ in provider.calls]
  assert request_ids[0] == "vocab_commute"
  assert "disc_How do you usua" in request_ids


@pytest.mark.anyio
async def test_failed_requests_leave_only_their_own_record_empty() -> None:
  words = [VocabWord(term="platform"), VocabWord(term="delay"), VocabWord(term="queue")]
  document = LessonDocument(sections=[VocabularySection(type="vocabulary", title="Words", words=words)])
  provider = _ScriptedProvider({"vocab_platform": RuntimeError("boom"), "vocab_delay": b"not an image"})

  generated = await IllustrationService(provider, pause_seconds=0).illustrate(document)

  assert generated == 1
  assert words[0].image_base64 is None
  assert words[1].image_base64 is None
  assert words[2].image_base64 is not None


@pytest.mark.anyio
async def test_provider_returning_none_degrades_to_no_image() -> None:
  class _NoImages(ImageProvider):
    name = "none"

    async def generate_image(self, prompt: str, request_id: str) -> bytes | None:
      return None

  question = DiscussionQuestion(question="Do you like trains?")
  document = LessonDocument(sections=[DiscussionSection(type="discussion", title="Talk", questions=[question])])

  assert await IllustrationService(_NoImages()).illustrate(document) == 0
  assert question.image_base64 is None


@pytest.mark.anyio
async def test_requests_run_in_batches_of_fixed_width() -> None:
  words = [VocabWord(term=f"word{index}") for index in range(5)]
  document = LessonDocument(sections=[VocabularySection(type="vocabulary", title="Words", words=words)])
  provider = _ScriptedProvider()

  await IllustrationService(provider, batch_size=2, pause_seconds=0).illustrate(document)

  assert provider.peak == 2
  assert [request_id for request_id, _ in provider.calls] == [f"vocab_word{index}" for index in range(5)]


def test_missing_prompts_are_derived_and_placeholders_skipped() -> None:
  word = VocabWord(term="commute")
  question = DiscussionQuestion(question="How do you get to work?", image_prompt="A busy train platform.")
  document = LessonDocument(
    sections=[
      VocabularySection(type="vocabulary", title="Words", words=[word]),
      DiscussionSection(type="discussion", title="Talk", questions=[question]),
      VocabularySection(type="vocabulary", title="Empty", not_provided=True, words=[VocabWord(term="ignored")]),
    ]
  )

  jobs = collect_image_jobs(document)

  assert [job.request_id for job in jobs] == ["vocab_commute", "disc_How do you get "]
  assert word.image_prompt == vocabulary_image_prompt("commute")
  assert jobs[1].prompt == "A busy train platform."


def test_derived_prompts_forbid_text_in_images() -> None:
  assert vocabulary_image_prompt("delay") == 'An illustration showing the meaning of "delay" in a clear, educational way. No text visible in the image.'
  assert discussion_image_prompt("x" * 150).count("x") == 100
  assert discussion_image_prompt("Why?").endswith("No text or words should appear in the image.")


def test_batch_size_must_be_positive() -> None:
  with pytest.raises(ValueError):
    IllustrationService(_ScriptedProvider(), batch_size=0)
