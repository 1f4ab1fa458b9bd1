"""Structural acceptance checks for normalized lessons."""

from __future__ import annotations

from dataclasses import dataclass, field

from planwise.schema.lesson_models import LessonDocument, ReadingSection
from planwise.schema.section_types import SectionType
from planwise.schema.text_coercion import count_sentences


@dataclass(frozen=True)
class QualityReport:
  """Outcome of a quality evaluation; passed is True only without violations."""

  violations: list[str] = field(default_factory=list)

  @property
  def passed(self) -> bool:
    return not self.violations


@dataclass(frozen=True)
class QualityGate:
  """Reading-structure gate with tunable thresholds.

  Only the reading section is checked. Comprehension, discussion and quiz
  sections have no structural minimums here.
  """

  min_paragraphs: int = 5
  min_sentences_per_paragraph: int = 3

  def evaluate(self, document: LessonDocument) -> QualityReport:
    reading = document.section(SectionType.READING)
    if not isinstance(reading, ReadingSection):
      return QualityReport(violations=["Reading section is missing."])
    if reading.not_provided:
      return QualityReport(violations=["Reading section was not provided by generation."])

    violations: list[str] = []
    if len(reading.paragraphs) < self.min_paragraphs:
      violations.append(f"Reading has {len(reading.paragraphs)} paragraphs; expected at least {self.min_paragraphs}.")
    for index, paragraph in enumerate(reading.paragraphs, start=1):
      sentences = count_sentences(paragraph)
      if sentences < self.min_sentences_per_paragraph:
        violations.append(f"Reading paragraph {index} has {sentences} sentences; expected at least {self.min_sentences_per_paragraph}.")
    return QualityReport(violations=violations)

  def is_acceptable(self, document: LessonDocument) -> bool:
    return self.evaluate(document).passed


def is_acceptable(document: LessonDocument) -> bool:
  """Evaluate a document against the default thresholds."""
  return QualityGate().is_acceptable(document)
