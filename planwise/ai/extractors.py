"""Question extractors for comprehension, discussion and quiz content.

The presentation layer calls these even on normalized lessons because a
single normalization pass cannot anticipate every shape a provider returns.
Each strategy is a named function; `extract` runs them in order and stops at
the first one that yields at least one record. Extractors never raise.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from planwise.schema.lesson_models import DiscussionQuestion, LessonDocument, Question
from planwise.schema.section_normalizer import coerce_discussion_question, coerce_question
from planwise.schema.section_types import ALIASES, canonical_of
from planwise.schema.text_coercion import coerce_text, looks_like_question, split_sentences

logger = logging.getLogger(__name__)

# Root strings shorter than this are not scanned for embedded question/answer pairs.
EMBEDDED_TEXT_MIN_CHARS = 50
EMBEDDED_QUESTION_MIN_CHARS = 15

_RESERVED_KEYS = frozenset({"questions", "type", "title", "introduction", "notice", "notProvided"})
_QUESTION_SPLIT_RE = re.compile(r"(?<=\?)\s*")


class SectionKind(str, Enum):
  COMPREHENSION = "comprehension"
  DISCUSSION = "discussion"
  QUIZ = "quiz"


ExtractedQuestion = Question | DiscussionQuestion


@dataclass(frozen=True)
class ExtractionStrategy:
  name: str
  run: Callable[[SectionKind, dict[str, Any]], list[ExtractedQuestion]]
  kinds: frozenset[SectionKind] = frozenset(SectionKind)


def extract(kind: SectionKind | str, document: LessonDocument | Mapping[str, Any] | None) -> list[ExtractedQuestion]:
  """Return the first non-empty question list found for kind, or an empty list."""
  resolved = _resolve_kind(kind)
  if resolved is None:
    logger.warning("Extraction requested for unsupported kind %r.", kind)
    return []
  root = _as_root(document)
  if root is None:
    return []

  for strategy in STRATEGIES:
    if resolved not in strategy.kinds:
      continue
    questions = strategy.run(resolved, root)
    if questions:
      logger.debug("Extracted %d %s questions via %s.", len(questions), resolved.value, strategy.name)
      return questions
  logger.info("No %s questions found in document.", resolved.value)
  return []


def extract_with_strategy(kind: SectionKind | str, document: LessonDocument | Mapping[str, Any] | None) -> tuple[str | None, list[ExtractedQuestion]]:
  """Like extract, but also report which strategy matched."""
  resolved = _resolve_kind(kind)
  root = _as_root(document)
  if resolved is None or root is None:
    return None, []
  for strategy in STRATEGIES:
    if resolved in strategy.kinds:
      questions = strategy.run(resolved, root)
      if questions:
        return strategy.name, questions
  return None, []


def _resolve_kind(kind: SectionKind | str) -> SectionKind | None:
  if isinstance(kind, SectionKind):
    return kind
  canonical = canonical_of(kind)
  try:
    return SectionKind(canonical.value) if canonical else None
  except ValueError:
    return None


def _as_root(document: LessonDocument | Mapping[str, Any] | None) -> dict[str, Any] | None:
  if isinstance(document, LessonDocument):
    return document.to_dict()
  if isinstance(document, Mapping):
    return dict(document)
  return None


def _aliases_for(kind: SectionKind) -> tuple[str, ...]:
  return (kind.value,) + tuple(alias for alias, target in ALIASES.items() if target.value == kind.value)


def _section_kind(section: Mapping[str, Any]) -> str | None:
  canonical = canonical_of(section.get("type"))
  return canonical.value if canonical else None


def _matching_sections(kind: SectionKind, root: Mapping[str, Any]) -> Iterator[Mapping[str, Any]]:
  sections = root.get("sections")
  if not isinstance(sections, list):
    return
  candidates = [section for section in sections if isinstance(section, Mapping)]
  typed = [section for section in candidates if _section_kind(section) == kind.value]
  yield from typed
  if typed:
    return
  # Untyped or mistyped sections are still found by title ("Quick Quiz", "Assessment").
  words = _aliases_for(kind)
  for section in candidates:
    title = coerce_text(section.get("title")).lower()
    if title and any(word in title for word in words):
      yield section


def _to_record(kind: SectionKind, item: Any) -> ExtractedQuestion | None:
  if kind is SectionKind.DISCUSSION:
    return coerce_discussion_question(item)
  return coerce_question(item)


def _records(kind: SectionKind, items: list[Any]) -> list[ExtractedQuestion]:
  return [record for record in (_to_record(kind, item) for item in items) if record is not None]


def _pair_record(kind: SectionKind, question: str, value: Any) -> ExtractedQuestion | None:
  if isinstance(value, Mapping):
    return _to_record(kind, {**value, "question": question})
  if kind is SectionKind.DISCUSSION:
    return coerce_discussion_question({"question": question, "context": coerce_text(value)})
  return coerce_question({"question": question, "answer": coerce_text(value)})


# Sub-strategies over one section-like object.


def _questions_list(kind: SectionKind, container: Mapping[str, Any]) -> list[ExtractedQuestion]:
  questions = container.get("questions")
  if not isinstance(questions, list):
    return []
  return _records(kind, questions)


def _questions_mapping(kind: SectionKind, container: Mapping[str, Any]) -> list[ExtractedQuestion]:
  questions = container.get("questions")
  if not isinstance(questions, Mapping):
    return []
  records = (_pair_record(kind, str(key), value) for key, value in questions.items() if looks_like_question(str(key)))
  return [record for record in records if record is not None]


def _question_keys(kind: SectionKind, container: Mapping[str, Any]) -> list[ExtractedQuestion]:
  records = (_pair_record(kind, str(key), value) for key, value in container.items() if str(key) not in _RESERVED_KEYS and looks_like_question(str(key)))
  return [record for record in records if record is not None]


_SUB_STRATEGIES = (_questions_list, _questions_mapping, _question_keys)


# Strategies.


def _in_sections(sub_strategy: Callable[[SectionKind, Mapping[str, Any]], list[ExtractedQuestion]]) -> Callable[[SectionKind, dict[str, Any]], list[ExtractedQuestion]]:
  def run(kind: SectionKind, root: dict[str, Any]) -> list[ExtractedQuestion]:
    for section in _matching_sections(kind, root):
      records = sub_strategy(kind, section)
      if records:
        return records
    return []

  return run


def _root_containers(kind: SectionKind, root: Mapping[str, Any]) -> Iterator[Mapping[str, Any]]:
  for key in _aliases_for(kind):
    value = root.get(key)
    if isinstance(value, Mapping):
      yield value
    elif isinstance(value, list):
      yield {"questions": value}
  yield root


def _root_level(kind: SectionKind, root: dict[str, Any]) -> list[ExtractedQuestion]:
  for sub_strategy in _SUB_STRATEGIES:
    for container in _root_containers(kind, root):
      records = sub_strategy(kind, container)
      if records:
        return records
  return []


def _embedded_pairs(kind: SectionKind, root: dict[str, Any]) -> list[ExtractedQuestion]:
  records: list[ExtractedQuestion] = []
  for value in root.values():
    if not isinstance(value, str) or len(value) <= EMBEDDED_TEXT_MIN_CHARS:
      continue
    records.extend(_scan_text(kind, value))
  return records


def _scan_text(kind: SectionKind, text: str) -> list[ExtractedQuestion]:
  """Find 'Question? Answer sentence.' pairs inside free text."""
  records: list[ExtractedQuestion] = []
  pieces = [piece for piece in _QUESTION_SPLIT_RE.split(text) if piece]
  for index, piece in enumerate(pieces):
    if not piece.endswith("?"):
      continue
    # The question is the last sentence of the piece, not everything before it.
    question = split_sentences(piece)[-1]
    if len(question) < EMBEDDED_QUESTION_MIN_CHARS or not question[:1].isupper():
      continue
    following = pieces[index + 1] if index + 1 < len(pieces) else ""
    answer_sentences = split_sentences(following)
    answer = answer_sentences[0] if answer_sentences and not answer_sentences[0].endswith("?") else ""
    record = _pair_record(kind, question, answer)
    if record is not None:
      records.append(record)
  return records


STRATEGIES: tuple[ExtractionStrategy, ...] = (
  ExtractionStrategy("section_questions_list", _in_sections(_questions_list)),
  ExtractionStrategy("section_questions_mapping", _in_sections(_questions_mapping)),
  ExtractionStrategy("section_question_keys", _in_sections(_question_keys)),
  ExtractionStrategy("root_level", _root_level),
  ExtractionStrategy("embedded_text_pairs", _embedded_pairs, frozenset({SectionKind.COMPREHENSION, SectionKind.DISCUSSION})),
)
