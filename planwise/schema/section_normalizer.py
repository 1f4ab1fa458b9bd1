"""Normalize parsed provider output into a canonical LessonDocument.

Normalization never raises. Anything it cannot resolve is reported through
the optional `notes` list (and the module logger) and the affected section
falls back to a neutral default or an explicit "not provided" placeholder.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Mapping
from typing import Any

from planwise.schema.grammar_support import coerce_grammar_spotlight, coerce_lower_level_scaffolding
from planwise.schema.lesson_models import (
  READING_PARAGRAPHS,
  VOCABULARY_TARGET_WORDS,
  ClozeSection,
  DiscussionQuestion,
  DiscussionSection,
  FrameTier,
  LessonDocument,
  PedagogicalFrame,
  Pronunciation,
  Question,
  QuestionSection,
  ReadingSection,
  SectionBase,
  SemanticMap,
  SentenceFramesSection,
  SentenceUnscrambleSection,
  TieredFrames,
  UnscrambleSentence,
  VocabularySection,
  VocabWord,
  WarmupSection,
)
from planwise.schema.section_types import REQUIRED_TYPES, SectionType, canonical_type, default_title, resolve_tag
from planwise.schema.text_coercion import coerce_sequence, coerce_string_list, coerce_text, looks_like_prose, looks_like_question, split_sentences, split_terms

logger = logging.getLogger(__name__)

DEFAULT_LESSON_TITLE = "ESL Lesson"
DEFAULT_LEVEL = "B1"
DEFAULT_FOCUS = "general"
DEFAULT_MINUTES = 60
MAX_MINUTES = 24 * 60
DEFAULT_READING_INTRO = "Let's read the following text:"
DEFAULT_DEFINITION = "No definition provided."
PADDING_SENTENCE = "Additional reading content was not provided."
NOT_PROVIDED_NOTICE = "This {type} section was not provided by generation."

_LEVEL_RE = re.compile(r"\b([ABC][12])\b", re.IGNORECASE)
_MINUTES_RE = re.compile(r"\d+")
_OPTION_SEPARATORS_RE = re.compile(r"\s*(?:\n|;|\|)\s*")
_SYLLABLE_SEPARATORS_RE = re.compile(r"[-·.\s]+")
_TIERS = ("emerging", "developing", "expanding")

# Field that receives a non-mapping payload stored under a tag key, e.g. {"vocabulary": [...]}.
_PRIMARY_FIELD: dict[SectionType, str] = {
  SectionType.WARMUP: "content",
  SectionType.READING: "paragraphs",
  SectionType.VOCABULARY: "words",
  SectionType.COMPREHENSION: "questions",
  SectionType.QUIZ: "questions",
  SectionType.DISCUSSION: "questions",
  SectionType.SENTENCE_FRAMES: "pedagogicalFrames",
  SectionType.CLOZE: "text",
  SectionType.SENTENCE_UNSCRAMBLE: "sentences",
}

# Payload-shape hints, checked in order after the tag scan.
_SHAPE_HINTS: tuple[tuple[tuple[str, ...], str], ...] = (
  (("paragraphs", "passage"), SectionType.READING.value),
  (("words", "terms", "vocabularyWords"), SectionType.VOCABULARY.value),
  (("pedagogicalFrames", "frames"), SectionType.SENTENCE_FRAMES.value),
  (("wordBank",), SectionType.CLOZE.value),
  (("questions",), SectionType.COMPREHENSION.value),
)

_QUESTION_RECORD_KEYS = ("question", "text", "prompt")


class _Diagnostics:
  """Collect normalization notes for the caller and mirror them to the log."""

  def __init__(self, sink: list[str] | None) -> None:
    self._sink = sink

  def note(self, message: str, *args: Any, level: int = logging.INFO) -> None:
    logger.log(level, message, *args)
    if self._sink is not None:
      self._sink.append(message % args if args else message)


def normalize_lesson(payload: Any, *, notes: list[str] | None = None) -> LessonDocument:
  """Build a canonical LessonDocument from any parsed provider payload."""
  diagnostics = _Diagnostics(notes)
  if isinstance(payload, LessonDocument):
    payload = payload.to_dict()
  root = _unwrap_root(payload, diagnostics)

  sections: list[SectionBase] = []
  for index, raw in enumerate(_collect_raw_sections(root, diagnostics)):
    section = normalize_section(raw, notes=notes, position=index)
    if section is not None:
      sections.append(section)

  sections = _deduplicate(sections, diagnostics)
  sections.extend(_backfill_required(sections, diagnostics))

  return LessonDocument(
    title=coerce_text(root.get("title")) or DEFAULT_LESSON_TITLE,
    level=_coerce_level(root.get("level") or root.get("cefrLevel"), diagnostics),
    focus=coerce_text(root.get("focus")) or DEFAULT_FOCUS,
    estimated_time=_coerce_minutes(root.get("estimatedTime") or root.get("duration")),
    sections=sections,
    grammar_spotlight=coerce_grammar_spotlight(root.get("grammarSpotlight")),
  )


def normalize_section(raw: Any, *, notes: list[str] | None = None, position: int = 0) -> SectionBase | None:
  """Normalize one raw section record; returns None only for empty entries."""
  diagnostics = _Diagnostics(notes)
  if raw is None:
    diagnostics.note("Dropped empty section at position %d.", position, level=logging.WARNING)
    return None
  if isinstance(raw, str):
    raw = {"content": raw}
  if not isinstance(raw, Mapping):
    diagnostics.note("Dropped non-object section at position %d (%s).", position, type(raw).__name__, level=logging.WARNING)
    return None

  data = dict(raw)
  tag = _infer_tag(data, position, diagnostics)
  builder = _BUILDERS[canonical_type(tag)]
  return builder(data, tag, diagnostics)


def enforce_paragraph_count(paragraphs: list[str], count: int = READING_PARAGRAPHS) -> list[str]:
  """Return exactly `count` paragraphs, consolidating long passages and padding short ones."""
  paragraphs = [paragraph for paragraph in paragraphs if paragraph]
  if len(paragraphs) > count:
    sentences = [sentence for paragraph in paragraphs for sentence in split_sentences(paragraph)]
    base, extra = divmod(len(sentences), count)
    buckets: list[str] = []
    start = 0
    for bucket in range(count):
      size = base + (1 if bucket < extra else 0)
      buckets.append(" ".join(sentences[start : start + size]))
      start += size
    return buckets
  return paragraphs + [PADDING_SENTENCE] * (count - len(paragraphs))


def _unwrap_root(payload: Any, diagnostics: _Diagnostics) -> dict[str, Any]:
  if isinstance(payload, list):
    return {"sections": payload}
  if not isinstance(payload, Mapping):
    diagnostics.note("Provider payload was %s, not an object; building an empty lesson.", type(payload).__name__, level=logging.WARNING)
    return {}
  root = dict(payload)
  # Some responses nest the whole document one level down.
  for wrapper in ("lesson", "lessonPlan"):
    inner = root.get(wrapper)
    if "sections" not in root and isinstance(inner, Mapping):
      return dict(inner)
  return root


def _collect_raw_sections(root: dict[str, Any], diagnostics: _Diagnostics) -> list[Any]:
  raw_sections = root.get("sections")
  if isinstance(raw_sections, list):
    return raw_sections
  if isinstance(raw_sections, Mapping):
    diagnostics.note("Sections arrived as a mapping; converting %d entries to a list.", len(raw_sections))
    return [_keyed_section(str(key), value) for key, value in raw_sections.items()]
  if raw_sections is not None:
    diagnostics.note("Ignored sections field of type %s.", type(raw_sections).__name__, level=logging.WARNING)

  # Documents that never produced a sections array keep sections under tag keys on the root.
  lifted = [_keyed_section(key, value) for key, value in root.items() if resolve_tag(key) and isinstance(value, Mapping | list)]
  if lifted:
    diagnostics.note("Lifted %d root-level sections into the sections list.", len(lifted))
  return lifted


def _keyed_section(key: str, value: Any) -> Any:
  tag = resolve_tag(key)
  if isinstance(value, Mapping):
    section = dict(value)
    if tag and not resolve_tag(section.get("type")):
      section["type"] = tag
    return section
  if tag:
    return {"type": tag, _PRIMARY_FIELD[canonical_type(tag)]: value}
  return value


def _infer_tag(data: dict[str, Any], position: int, diagnostics: _Diagnostics) -> str:
  raw_type = data.get("type")
  tag = resolve_tag(raw_type)
  if tag:
    return tag
  if raw_type is not None:
    diagnostics.note("Section %d has unrecognized type %r; inferring.", position, raw_type)

  # The section stores its type as a key wrapping the payload.
  for key in list(data):
    key_tag = resolve_tag(key)
    if not key_tag:
      continue
    nested = data.pop(key)
    if isinstance(nested, Mapping):
      for nested_key, nested_value in nested.items():
        data.setdefault(nested_key, nested_value)
    else:
      data.setdefault(_PRIMARY_FIELD[canonical_type(key_tag)], nested)
    diagnostics.note("Section %d typed as %s from its %r key.", position, key_tag, key)
    return key_tag

  for fields, shape_tag in _SHAPE_HINTS:
    if any(field in data for field in fields):
      if shape_tag == SectionType.COMPREHENSION.value and _has_discussion_items(data.get("questions")):
        shape_tag = SectionType.DISCUSSION.value
      diagnostics.note("Section %d typed as %s from its payload shape.", position, shape_tag)
      return shape_tag

  diagnostics.note("Section %d has no recognizable type or payload; defaulting to warmup.", position, level=logging.WARNING)
  return SectionType.WARMUP.value


def _has_discussion_items(questions: Any) -> bool:
  if not isinstance(questions, list):
    return False
  return any(isinstance(item, Mapping) and ("paragraphContext" in item or "context" in item) for item in questions)


def _common_fields(data: dict[str, Any], tag: str) -> dict[str, Any]:
  return {
    "type": tag,
    "title": coerce_text(data.get("title")) or default_title(tag),
    "not_provided": data.get("notProvided") is True,
    "notice": coerce_text(data.get("notice")) or None,
  }


def _first_present(data: Mapping[str, Any], *keys: str) -> Any:
  for key in keys:
    value = data.get(key)
    if value is not None and value != "" and value != [] and value != {}:
      return value
  return None


# Sections


def _build_warmup(data: dict[str, Any], tag: str, diagnostics: _Diagnostics) -> WarmupSection:
  return WarmupSection(
    **_common_fields(data, tag),
    content=coerce_text(_first_present(data, "content", "description", "activity")),
    questions=[question for question in (coerce_text(item) for item in coerce_sequence(data.get("questions"), from_mapping=lambda key, _: key)) if question],
    target_vocabulary=split_terms(data.get("targetVocabulary")),
    procedure=coerce_text(data.get("procedure")),
    teacher_notes=coerce_text(data.get("teacherNotes")),
  )


def _build_reading(data: dict[str, Any], tag: str, diagnostics: _Diagnostics) -> ReadingSection:
  source = _first_present(data, "paragraphs", "passage", "content", "text")
  paragraphs = [coerce_text(item) for item in coerce_sequence(source)]
  paragraphs = [paragraph for paragraph in paragraphs if paragraph]
  if len(paragraphs) != READING_PARAGRAPHS:
    diagnostics.note("Reading had %d paragraphs; enforcing %d.", len(paragraphs), READING_PARAGRAPHS)
  return ReadingSection(
    **_common_fields(data, tag),
    introduction=coerce_text(data.get("introduction")) or DEFAULT_READING_INTRO,
    paragraphs=enforce_paragraph_count(paragraphs),
    teacher_notes=coerce_text(data.get("teacherNotes")),
  )


def _build_vocabulary(data: dict[str, Any], tag: str, diagnostics: _Diagnostics) -> VocabularySection:
  source = _first_present(data, "words", "vocabulary", "terms", "vocabularyWords")
  items = split_terms(source) if isinstance(source, str) else coerce_sequence(source, from_mapping=_word_from_pair, record_keys=("term", "word"))
  words = [coerce_word(item) for item in items if item is not None]
  if len(words) < len(items):
    diagnostics.note("Dropped %d empty vocabulary entries.", len(items) - len(words), level=logging.WARNING)
  blank = sum(1 for word in words if not word.term)
  if blank:
    diagnostics.note("Vocabulary has %d entries without a term.", blank, level=logging.WARNING)
  if words and len(words) != VOCABULARY_TARGET_WORDS:
    diagnostics.note("Vocabulary has %d words (target %d).", len(words), VOCABULARY_TARGET_WORDS)
  return VocabularySection(**_common_fields(data, tag), words=words)


def _build_questions(data: dict[str, Any], tag: str, diagnostics: _Diagnostics) -> QuestionSection:
  items = coerce_sequence(_first_present(data, "questions", "items"), from_mapping=_question_from_pair, record_keys=_QUESTION_RECORD_KEYS)
  questions = [question for question in (coerce_question(item) for item in items) if question is not None]
  if len(questions) < len(items):
    diagnostics.note("Dropped %d %s entries without question text.", len(items) - len(questions), tag, level=logging.WARNING)
  return QuestionSection(**_common_fields(data, tag), introduction=coerce_text(data.get("introduction")), questions=questions)


def _build_discussion(data: dict[str, Any], tag: str, diagnostics: _Diagnostics) -> DiscussionSection:
  section_context = coerce_text(data.get("paragraphContext"))
  items = coerce_sequence(data.get("questions"), from_mapping=_discussion_from_pair, record_keys=_QUESTION_RECORD_KEYS)
  questions = [question for question in (coerce_discussion_question(item, section_context) for item in items) if question is not None]
  if len(questions) < len(items):
    diagnostics.note("Dropped %d discussion entries without question text.", len(items) - len(questions), level=logging.WARNING)
  missing = sum(1 for question in questions if not question.paragraph_context)
  if missing:
    diagnostics.note("%d discussion questions have no paragraph context.", missing)
  return DiscussionSection(**_common_fields(data, tag), introduction=coerce_text(data.get("introduction")), questions=questions)


def _build_sentence_frames(data: dict[str, Any], tag: str, diagnostics: _Diagnostics) -> SentenceFramesSection:
  source = _first_present(data, "pedagogicalFrames", "frames", "sentenceFrames")
  items = coerce_sequence(source, from_mapping=_frame_from_pair, record_keys=("languageFunction", "tieredFrames", "patternTemplate", "frame", "pattern"))
  frames = [coerce_frame(item) for item in items if item is not None]
  if len(frames) < len(items):
    diagnostics.note("Dropped %d empty sentence frames.", len(items) - len(frames), level=logging.WARNING)
  return SentenceFramesSection(**_common_fields(data, tag), introduction=coerce_text(data.get("introduction")), pedagogical_frames=frames)


def _build_cloze(data: dict[str, Any], tag: str, diagnostics: _Diagnostics) -> ClozeSection:
  return ClozeSection(
    **_common_fields(data, tag),
    introduction=coerce_text(data.get("introduction")),
    text=coerce_text(_first_present(data, "text", "passage", "content")),
    word_bank=split_terms(data.get("wordBank")),
    teacher_notes=coerce_text(data.get("teacherNotes")),
  )


def _build_unscramble(data: dict[str, Any], tag: str, diagnostics: _Diagnostics) -> SentenceUnscrambleSection:
  items = coerce_sequence(data.get("sentences"), record_keys=("words", "correctSentence"))
  sentences = [sentence for sentence in (coerce_unscramble(item) for item in items) if sentence is not None]
  return SentenceUnscrambleSection(
    **_common_fields(data, tag),
    introduction=coerce_text(data.get("introduction")),
    sentences=sentences,
    teacher_notes=coerce_text(data.get("teacherNotes")),
  )


_BUILDERS: dict[SectionType, Callable[[dict[str, Any], str, _Diagnostics], SectionBase]] = {
  SectionType.WARMUP: _build_warmup,
  SectionType.READING: _build_reading,
  SectionType.VOCABULARY: _build_vocabulary,
  SectionType.COMPREHENSION: _build_questions,
  SectionType.QUIZ: _build_questions,
  SectionType.DISCUSSION: _build_discussion,
  SectionType.SENTENCE_FRAMES: _build_sentence_frames,
  SectionType.CLOZE: _build_cloze,
  SectionType.SENTENCE_UNSCRAMBLE: _build_unscramble,
}


def _deduplicate(sections: list[SectionBase], diagnostics: _Diagnostics) -> list[SectionBase]:
  seen: set[SectionType] = set()
  kept: list[SectionBase] = []
  for section in sections:
    kind = section.canonical_type
    if kind in seen:
      diagnostics.note("Dropped duplicate %s section titled %r.", section.type, section.title, level=logging.WARNING)
      continue
    seen.add(kind)
    kept.append(section)
  return kept


def _backfill_required(sections: list[SectionBase], diagnostics: _Diagnostics) -> list[SectionBase]:
  present = {section.canonical_type for section in sections}
  placeholders: list[SectionBase] = []
  for required in REQUIRED_TYPES:
    if required in present:
      continue
    diagnostics.note("Required %s section missing; adding a not-provided placeholder.", required.value, level=logging.WARNING)
    data = {"notProvided": True, "notice": NOT_PROVIDED_NOTICE.format(type=required.value)}
    placeholders.append(_BUILDERS[required](data, required.value, _Diagnostics(None)))
  return placeholders


# Records


def _word_from_pair(key: str, value: Any) -> dict[str, Any]:
  if isinstance(value, Mapping):
    return {**value, "term": key}
  if isinstance(value, str):
    return {"term": key, "definition": value}
  return {"term": key}


def coerce_word(item: Any) -> VocabWord:
  """Promote any word entry to a VocabWord, defaulting what is missing."""
  if not isinstance(item, Mapping):
    term = coerce_text(item)
    return VocabWord(term=term, example=_default_example(term))

  term = coerce_text(_first_present(item, "term", "word", "name"))
  examples = item.get("examples")
  example = coerce_text(item.get("example")) or (coerce_text(examples[0]) if isinstance(examples, list) and examples else "")
  image_base64 = item.get("imageBase64")
  return VocabWord(
    term=term,
    part_of_speech=coerce_text(_first_present(item, "partOfSpeech", "part_of_speech", "pos")) or "noun",
    definition=coerce_text(_first_present(item, "definition", "meaning")) or DEFAULT_DEFINITION,
    example=example or _default_example(term),
    pronunciation=coerce_pronunciation(item.get("pronunciation")),
    semantic_map=coerce_semantic_map(item.get("semanticMap"), item.get("collocations")),
    usage_notes=coerce_text(item.get("usageNotes")) or None,
    additional_examples=coerce_string_list(item.get("additionalExamples")),
    image_prompt=coerce_text(item.get("imagePrompt")) or None,
    image_base64=image_base64 if isinstance(image_base64, str) and image_base64 else None,
  )


def _default_example(term: str) -> str:
  return f'Example using "{term}".' if term else ""


def coerce_pronunciation(value: Any) -> Pronunciation:
  if isinstance(value, str):
    guide = value.strip()
    syllables = [syllable for syllable in _SYLLABLE_SEPARATORS_RE.split(guide) if syllable]
    return Pronunciation(syllables=syllables, stress_index=_stressed_syllable(syllables), phonetic_guide=guide)
  if not isinstance(value, Mapping):
    return Pronunciation()

  raw_syllables = value.get("syllables")
  if isinstance(raw_syllables, str):
    syllables = [syllable for syllable in _SYLLABLE_SEPARATORS_RE.split(raw_syllables.strip()) if syllable]
  else:
    syllables = coerce_string_list(raw_syllables)
  stress = value.get("stressIndex", value.get("stress"))
  if not isinstance(stress, int) or isinstance(stress, bool):
    stress = _stressed_syllable(syllables)
  stress = min(max(stress, 0), max(len(syllables) - 1, 0))
  guide = coerce_text(_first_present(value, "phoneticGuide", "phonetic", "ipa"))
  return Pronunciation(syllables=syllables, stress_index=stress, phonetic_guide=guide)


def _stressed_syllable(syllables: list[str]) -> int:
  for index, syllable in enumerate(syllables):
    letters = [char for char in syllable if char.isalpha()]
    if letters and all(char.isupper() for char in letters) and len(syllables) > 1:
      return index
  return 0


def coerce_semantic_map(value: Any, collocations: Any = None) -> SemanticMap | None:
  source = value if isinstance(value, Mapping) else {}
  semantic_map = SemanticMap(
    synonyms=split_terms(source.get("synonyms")),
    antonyms=split_terms(source.get("antonyms")),
    related_concepts=split_terms(source.get("relatedConcepts")),
    contexts=split_terms(source.get("contexts")),
    associated_words=split_terms(source.get("associatedWords")),
    collocations=split_terms(source.get("collocations")) + split_terms(collocations),
  )
  if not any((semantic_map.synonyms, semantic_map.antonyms, semantic_map.related_concepts, semantic_map.contexts, semantic_map.associated_words, semantic_map.collocations)):
    return None
  return semantic_map


def _question_from_pair(key: str, value: Any) -> dict[str, Any]:
  if isinstance(value, Mapping):
    record = dict(value)
    if looks_like_question(key) or not coerce_text(_first_present(record, *_QUESTION_RECORD_KEYS)):
      record["question"] = key
    return record
  return {"question": key, "answer": coerce_text(value)}


def coerce_question(item: Any) -> Question | None:
  """Coerce a comprehension/quiz entry; entries without question text yield None."""
  if not isinstance(item, Mapping):
    text = coerce_text(item)
    return Question(question=text) if text else None

  text = coerce_text(_first_present(item, *_QUESTION_RECORD_KEYS))
  if not text:
    return None
  raw_options = _first_present(item, "options", "choices")
  options = _coerce_options(raw_options)
  answer = _resolve_answer(_first_present(item, "answer", "correctAnswer", "correct_answer", "correct"), options, raw_options)
  return Question(question=text, options=options, answer=answer, explanation=coerce_text(item.get("explanation")) or None)


def _coerce_options(value: Any) -> list[str]:
  if isinstance(value, str):
    return [option for option in _OPTION_SEPARATORS_RE.split(value.strip()) if option]
  if isinstance(value, Mapping):
    return [text for text in (coerce_text(option) for option in value.values()) if text]
  return coerce_string_list(value) if isinstance(value, list) else []


def _resolve_answer(value: Any, options: list[str], raw_options: Any) -> str:
  if isinstance(value, int) and not isinstance(value, bool):
    if 0 <= value < len(options):
      return options[value]
    return str(value)
  answer = coerce_text(value)
  if not options or answer in options:
    return answer
  # Lettered answers point into the options ("B" or a key of an options mapping).
  if isinstance(raw_options, Mapping) and answer in raw_options:
    return coerce_text(raw_options[answer])
  letter = answer.rstrip(").").upper()
  if len(letter) == 1 and "A" <= letter <= "Z" and ord(letter) - ord("A") < len(options):
    return options[ord(letter) - ord("A")]
  return answer


def _discussion_from_pair(key: str, value: Any) -> dict[str, Any]:
  if isinstance(value, Mapping):
    return _question_from_pair(key, value)
  return {"question": key, "context": coerce_text(value)}


def _first_prose(record: Mapping[str, Any]) -> str:
  for key in ("context", "paragraph", "introduction"):
    candidate = coerce_text(record.get(key))
    if looks_like_prose(candidate):
      return candidate
  return ""


def coerce_discussion_question(item: Any, section_context: str = "") -> DiscussionQuestion | None:
  """Coerce a discussion entry and recover its paragraph context."""
  if not isinstance(item, Mapping):
    text = coerce_text(item)
    return DiscussionQuestion(question=text, paragraph_context=section_context) if text else None

  text = coerce_text(_first_present(item, *_QUESTION_RECORD_KEYS))
  if not text:
    return None
  context = coerce_text(item.get("paragraphContext")) or section_context or _first_prose(item)
  image_base64 = item.get("imageBase64")
  return DiscussionQuestion(
    question=text,
    paragraph_context=context,
    image_prompt=coerce_text(item.get("imagePrompt")) or None,
    image_base64=image_base64 if isinstance(image_base64, str) and image_base64 else None,
  )


def _frame_from_pair(key: str, value: Any) -> dict[str, Any]:
  if isinstance(value, Mapping):
    return {**value, "languageFunction": coerce_text(value.get("languageFunction")) or key}
  return {"languageFunction": key, "frame": coerce_text(value)}


def coerce_frame(item: Any) -> PedagogicalFrame:
  """Coerce tiered frames, legacy single-pattern frames and bare strings."""
  if not isinstance(item, Mapping):
    return PedagogicalFrame(language_function="", tiered_frames=TieredFrames(developing=FrameTier(frame=coerce_text(item))))

  tiers_raw = _first_present(item, "tieredFrames", "tiers")
  responses_raw = item.get("modelResponses")
  responses = responses_raw if isinstance(responses_raw, Mapping) else {}
  if isinstance(tiers_raw, Mapping):
    tiers = TieredFrames(**{tier: _coerce_tier(tiers_raw.get(tier), responses.get(tier)) for tier in _TIERS})
  else:
    examples = [coerce_text(example.get("completeSentence") if isinstance(example, Mapping) else example) for example in coerce_sequence(item.get("examples"))]
    legacy = FrameTier(
      frame=coerce_text(_first_present(item, "patternTemplate", "frame", "pattern")),
      description=coerce_text(_first_present(item, "description", "usage")),
      model_responses=[example for example in examples if example],
    )
    tiers = TieredFrames(developing=legacy)

  return PedagogicalFrame(
    language_function=coerce_text(_first_present(item, "languageFunction", "function", "title")),
    grammar_focus=split_terms(item.get("grammarFocus")),
    tiered_frames=tiers,
    teaching_notes=_coerce_teaching_notes(item.get("teachingNotes")),
    lower_level_scaffolding=coerce_lower_level_scaffolding(item.get("lowerLevelScaffolding")),
  )


def _coerce_tier(value: Any, extra_responses: Any) -> FrameTier:
  if isinstance(value, Mapping):
    return FrameTier(
      frame=coerce_text(_first_present(value, "frame", "pattern", "patternTemplate")),
      description=coerce_text(value.get("description")),
      model_responses=coerce_string_list(_first_present(value, "modelResponses", "examples")) + coerce_string_list(extra_responses),
    )
  return FrameTier(frame=coerce_text(value), model_responses=coerce_string_list(extra_responses))


def _coerce_teaching_notes(value: Any) -> list[str]:
  if isinstance(value, Mapping):
    return [f"{key}: {text}" for key, text in ((key, coerce_text(item)) for key, item in value.items()) if text]
  return coerce_string_list(value)


def coerce_unscramble(item: Any) -> UnscrambleSentence | None:
  if not isinstance(item, Mapping):
    sentence = coerce_text(item)
    return UnscrambleSentence(words=sentence.split(), correct_sentence=sentence) if sentence else None

  sentence = coerce_text(_first_present(item, "correctSentence", "sentence", "answer"))
  raw_words = item.get("words")
  if isinstance(raw_words, str):
    words = [word.strip() for word in raw_words.split("/")] if "/" in raw_words else raw_words.split()
  else:
    words = coerce_string_list(raw_words)
  words = [word for word in words if word] or sentence.split()
  if not sentence and not words:
    return None
  return UnscrambleSentence(words=words, correct_sentence=sentence or " ".join(words))


# Metadata


def _coerce_level(value: Any, diagnostics: _Diagnostics) -> str:
  match = _LEVEL_RE.search(coerce_text(value))
  if match:
    return match.group(1).upper()
  if value is not None:
    diagnostics.note("Unrecognized lesson level %r; defaulting to %s.", value, DEFAULT_LEVEL)
  return DEFAULT_LEVEL


def _coerce_minutes(value: Any) -> int:
  if isinstance(value, int | float) and not isinstance(value, bool):
    # json.loads accepts NaN and Infinity.
    minutes = int(value) if math.isfinite(value) else 0
  else:
    match = _MINUTES_RE.search(coerce_text(value))
    minutes = int(match.group(0)) if match else 0
  return minutes if 0 < minutes <= MAX_MINUTES else DEFAULT_MINUTES
