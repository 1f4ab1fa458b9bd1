"""Total shape-coercion helpers shared by the normalizer and the extractors.

Provider payloads put a string, a mapping, a scalar or a list wherever the
schema expects a sequence. Each helper here maps every observed shape onto
the canonical one so call sites never branch on shape themselves.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any

# Strings longer than this that do not split on blank lines are regrouped by sentence.
LONG_TEXT_CHARS = 300
SENTENCES_PER_BLOCK = 3

SENTENCE_BOUNDARY_RE = re.compile(r"(?<=[.!?])\s+")
_BLANK_LINE_RE = re.compile(r"\n[ \t]*\n")
_TERM_SEPARATORS_RE = re.compile(r"[,;\n]+")
_PROSE_TERMINATOR_RE = re.compile(r"[.!](?:\s|$|[\"')\]])")
_TEXT_KEYS = ("text", "content", "value", "paragraph", "question")

MappingItem = Callable[[str, Any], Any]


def split_sentences(text: str) -> list[str]:
  """Split on terminal punctuation followed by whitespace."""
  return [piece.strip() for piece in SENTENCE_BOUNDARY_RE.split(text.strip()) if piece.strip()]


def count_sentences(text: str) -> int:
  return len(split_sentences(text))


def group_sentences(sentences: list[str], size: int = SENTENCES_PER_BLOCK) -> list[str]:
  return [" ".join(sentences[start : start + size]) for start in range(0, len(sentences), size)]


def split_text_blocks(text: str) -> list[str]:
  """Split a string standing in for a sequence into its blocks."""
  stripped = text.strip()
  if not stripped:
    return []

  blocks = [block.strip() for block in _BLANK_LINE_RE.split(stripped) if block.strip()]
  if len(blocks) <= 1 and len(stripped) > LONG_TEXT_CHARS:
    return group_sentences(split_sentences(stripped))
  return blocks


def coerce_text(value: Any) -> str:
  """Flatten any payload into a single trimmed string."""
  if value is None or isinstance(value, bool):
    return ""
  if isinstance(value, str):
    return value.strip()
  if isinstance(value, int | float):
    return str(value)
  if isinstance(value, Mapping):
    for key in _TEXT_KEYS:
      if key in value:
        return coerce_text(value[key])
    return " ".join(part for part in (coerce_text(item) for item in value.values()) if part)
  if isinstance(value, Iterable):
    return "\n\n".join(part for part in (coerce_text(item) for item in value) if part)
  return str(value).strip()


def coerce_sequence(value: Any, *, from_mapping: MappingItem | None = None, record_keys: Iterable[str] = ()) -> list[Any]:
  """Coerce a payload expected to be a sequence.

  Lists pass through and strings are split into blocks. A mapping that
  already looks like one record (carries one of `record_keys`) is wrapped,
  otherwise each key/value pair becomes an item through `from_mapping`.
  Bare scalars cannot stand in for a sequence and become empty.
  """
  if value is None:
    return []
  if isinstance(value, list | tuple):
    return list(value)
  if isinstance(value, str):
    return split_text_blocks(value)
  if isinstance(value, Mapping):
    if any(key in value for key in record_keys):
      return [dict(value)]
    if from_mapping is None:
      return list(value.values())
    return [from_mapping(str(key), item) for key, item in value.items()]
  return []


def coerce_string_list(value: Any) -> list[str]:
  """Coerce to a list of non-empty strings, one per block or item."""
  items = coerce_sequence(value, from_mapping=lambda key, item: coerce_text(item) or key)
  return [text for text in (coerce_text(item) for item in items) if text]


def split_terms(value: Any) -> list[str]:
  """Coerce a term list that may arrive as 'a, b; c' or a mapping of terms."""
  if isinstance(value, str):
    return [term.strip() for term in _TERM_SEPARATORS_RE.split(value) if term.strip()]
  if isinstance(value, Mapping):
    return [str(key).strip() for key in value if str(key).strip()]
  if isinstance(value, list | tuple):
    return [text for text in (coerce_text(item) for item in value) if text]
  return []


def looks_like_question(text: str) -> bool:
  """A key or value reads as question text."""
  return "?" in text or "question" in text.lower()


def looks_like_prose(text: str) -> bool:
  """Background prose: carries a sentence terminator and is not itself a question."""
  return bool(text) and "?" not in text and bool(_PROSE_TERMINATOR_RE.search(text))
