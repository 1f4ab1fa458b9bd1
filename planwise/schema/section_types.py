"""Closed set of lesson section tags, their aliases and default titles."""

from __future__ import annotations

import re
from enum import Enum
from typing import Final


class SectionType(str, Enum):
  """Canonical section discriminants."""

  WARMUP = "warmup"
  READING = "reading"
  VOCABULARY = "vocabulary"
  COMPREHENSION = "comprehension"
  SENTENCE_FRAMES = "sentenceFrames"
  DISCUSSION = "discussion"
  QUIZ = "quiz"
  CLOZE = "cloze"
  SENTENCE_UNSCRAMBLE = "sentenceUnscramble"


# Alias tags are kept verbatim on the section and only folded when a canonical type is needed.
ALIASES: Final[dict[str, SectionType]] = {
  "warm-up": SectionType.WARMUP,
  "grammar": SectionType.SENTENCE_FRAMES,
  "speaking": SectionType.DISCUSSION,
  "assessment": SectionType.QUIZ,
}

REQUIRED_TYPES: Final[tuple[SectionType, ...]] = (SectionType.WARMUP, SectionType.READING, SectionType.VOCABULARY, SectionType.COMPREHENSION)

DEFAULT_TITLES: Final[dict[str, str]] = {
  "warmup": "Warm-up Activity",
  "warm-up": "Warm-up Activity",
  "reading": "Reading Text",
  "vocabulary": "Key Vocabulary",
  "comprehension": "Reading Comprehension",
  "sentenceFrames": "Sentence Practice",
  "grammar": "Grammar Focus",
  "discussion": "Discussion Questions",
  "speaking": "Speaking Activity",
  "quiz": "Knowledge Check",
  "assessment": "Assessment",
  "cloze": "Fill in the Blanks",
  "sentenceUnscramble": "Sentence Unscramble",
}

ALL_TAGS: Final[tuple[str, ...]] = tuple(member.value for member in SectionType) + tuple(ALIASES)

_TAGS_BY_LOWER: Final[dict[str, str]] = {tag.lower(): tag for tag in ALL_TAGS}
_SEPARATORS_RE = re.compile(r"[\s_\-]+")
# Separator-insensitive matches fold onto the canonical spelling ("warm up" -> "warmup").
_TAGS_BY_FOLDED: Final[dict[str, str]] = {_SEPARATORS_RE.sub("", member.value.lower()): member.value for member in SectionType}


def resolve_tag(value: object) -> str | None:
  """Return the recognized tag for a raw discriminant, or None when unrecognized."""
  if not isinstance(value, str):
    return None
  candidate = value.strip()
  if not candidate:
    return None
  if candidate in ALL_TAGS:
    return candidate
  lowered = candidate.lower()
  if lowered in _TAGS_BY_LOWER:
    return _TAGS_BY_LOWER[lowered]
  return _TAGS_BY_FOLDED.get(_SEPARATORS_RE.sub("", lowered))


def canonical_type(tag: str) -> SectionType:
  """Fold a recognized tag (canonical or alias) onto its canonical type."""
  if tag in ALIASES:
    return ALIASES[tag]
  return SectionType(tag)


def canonical_of(value: object) -> SectionType | None:
  """Resolve and fold a raw discriminant in one step."""
  tag = resolve_tag(value)
  return canonical_type(tag) if tag else None


def default_title(tag: str) -> str:
  """Return the fixed default label for a tag."""
  if tag in DEFAULT_TITLES:
    return DEFAULT_TITLES[tag]
  return f"{tag[:1].upper()}{tag[1:]} Section"
