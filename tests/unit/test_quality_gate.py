"""Tests for the structural quality gate."""

from __future__ import annotations

from planwise.ai.quality_gate import QualityGate, is_acceptable
from planwise.schema.lesson_models import LessonDocument, ReadingSection, WarmupSection

THREE_SENTENCES = "Maria takes the train. It is often late. She reads while she waits."


def _document(paragraphs: list[str], *, not_provided: bool = False) -> LessonDocument:
  reading = ReadingSection(type="reading", title="Reading", paragraphs=paragraphs, not_provided=not_provided)
  return LessonDocument(sections=[WarmupSection(type="warmup", title="Warm-up"), reading])


def test_five_paragraphs_of_three_sentences_pass() -> None:
  assert is_acceptable(_document([THREE_SENTENCES] * 5))


def test_paragraph_with_fewer_than_three_sentences_fails() -> None:
  paragraphs = [THREE_SENTENCES] * 4 + ["Only one sentence here. And a second."]
  report = QualityGate().evaluate(_document(paragraphs))
  assert not report.passed
  assert report.violations == ["Reading paragraph 5 has 2 sentences; expected at least 3."]


def test_too_few_paragraphs_fails() -> None:
  assert not is_acceptable(_document([THREE_SENTENCES] * 4))


def test_missing_or_placeholder_reading_fails() -> None:
  assert QualityGate().evaluate(LessonDocument(sections=[])).violations == ["Reading section is missing."]
  assert not is_acceptable(_document([THREE_SENTENCES] * 5, not_provided=True))


def test_thresholds_are_tunable() -> None:
  gate = QualityGate(min_paragraphs=2, min_sentences_per_paragraph=1)
  assert gate.is_acceptable(_document(["One sentence.", "Another sentence."]))
