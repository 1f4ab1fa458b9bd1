"""Prompt rendering for lesson generation."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from planwise.ai.pipeline.contracts import LessonRequest, ProficiencyLevel


@dataclass(frozen=True)
class LevelGuidance:
  """Level-specific writing guidance injected into the lesson prompt."""

  description: str
  vocabulary: str
  definitions: str
  reading_length: str
  reading: str
  sentence_frames: str
  discussion: str
  needs_lower_level_scaffolding: bool


LEVEL_GUIDANCE: dict[ProficiencyLevel, LevelGuidance] = {
  ProficiencyLevel.A1: LevelGuidance(
    description="Beginner",
    vocabulary="Select only basic, high-frequency words for daily survival and immediate personal needs. Avoid abstract or complex words.",
    definitions="use only the 500 most common words, under 8 words, present tense only",
    reading_length="80-120 words",
    reading="Use very simple sentences of 6-8 words. Stick to present tense and simple past. Focus on concrete, observable things. Avoid idioms and abstract concepts.",
    sentence_frames='Use simple present patterns like "I like ___" or "___ is ___". Focus on basic descriptions and preferences.',
    discussion="Ask about immediate personal experiences and basic preferences. Provide lots of concrete context. Keep questions answerable with simple sentences.",
    needs_lower_level_scaffolding=True,
  ),
  ProficiencyLevel.A2: LevelGuidance(
    description="Elementary",
    vocabulary="Choose words relating to personal experiences and simple social situations that students can connect to daily life.",
    definitions="use the top 1,000 words, under 10 words, present and simple past tense",
    reading_length="100-150 words",
    reading="Use simple sentences of 8-10 words with basic connectors (and, but, because). Include simple past for experiences. Focus on relatable situations.",
    sentence_frames='Use simple comparisons like "___ is more ___ than ___" and basic opinions like "I think ___ is ___".',
    discussion="Ask about personal experiences, simple comparisons, and basic opinions. Provide clear context.",
    needs_lower_level_scaffolding=True,
  ),
  ProficiencyLevel.B1: LevelGuidance(
    description="Intermediate",
    vocabulary="Select words for discussing practical problems, expressing opinions with reasons, and talking about lifestyle choices. Avoid highly academic vocabulary.",
    definitions="use A2 vocabulary plus common B1 words, under 12 words",
    reading_length="120-180 words",
    reading="Use sentences of 10-12 words with connectors like because, so, although, however. Include opinions and reasons. Discuss practical topics.",
    sentence_frames='Include opinion expressions with reasons like "I believe that ___ because ___" and cause-effect structures.',
    discussion="Ask questions requiring opinions with reasons. Students should discuss practical problems with some detail.",
    needs_lower_level_scaffolding=True,
  ),
  ProficiencyLevel.B2: LevelGuidance(
    description="Upper Intermediate",
    vocabulary="Choose vocabulary for academic discussions and professional contexts. Students should express complex ideas and evaluate perspectives.",
    definitions="use B1 vocabulary, focus on precision, under 15 words",
    reading_length="150-220 words",
    reading="Use varied sentences of 12-15 words with sophisticated connectors. Include analytical content with multiple perspectives.",
    sentence_frames='Include analytical structures, contrasting viewpoints like "While some argue ___, others believe ___", and hypothetical reasoning.',
    discussion="Ask analytical questions requiring evaluation and multiple perspectives. Minimal scaffolding needed.",
    needs_lower_level_scaffolding=False,
  ),
  ProficiencyLevel.C1: LevelGuidance(
    description="Advanced",
    vocabulary="Select sophisticated vocabulary for nuanced expression and complex argumentation with near-native precision.",
    definitions="use sophisticated vocabulary appropriately while maintaining clarity",
    reading_length="180-250 words",
    reading="Use flexible sentence structures with sophisticated vocabulary. Include complex analysis and synthesis of ideas.",
    sentence_frames="Use sophisticated analytical structures and nuanced argumentation. Focus on synthesizing ideas and building complex arguments.",
    discussion="Ask questions requiring sophisticated analysis and well-structured arguments on complex issues.",
    needs_lower_level_scaffolding=False,
  ),
  ProficiencyLevel.C2: LevelGuidance(
    description="Proficiency",
    vocabulary="Use the full range of advanced and specialized vocabulary. Students are developing mastery-level precision.",
    definitions="use precise academic vocabulary, prioritize nuance and accuracy",
    reading_length="180-250 words",
    reading="Use expert-level language with subtle distinctions and nuanced expression reflecting native-speaker sophistication.",
    sentence_frames="Use expert discourse patterns with critical evaluation and sophisticated synthesis structures.",
    discussion="Ask questions for expert-level discussion with nuanced argumentation demonstrating mastery-level abilities.",
    needs_lower_level_scaffolding=False,
  ),
}

_LOWER_LEVEL_SCAFFOLDING = (
  'For this level, give each sentence frame a "lowerLevelScaffolding" object with: "sentenceWorkshop" (activities with a name, '
  'teachingNotes and steps building word, then phrase, then sentence, each step holding level, example and explanation); '
  '"patternTrainer" (pattern, title, a "scaffolding" word bank keyed by pattern component, examples and instructions); '
  'and "visualMaps" (pattern, "colorCoding" mapping each component to a color, and an example).'
)


def level_guidance(level: ProficiencyLevel | str) -> LevelGuidance:
  """Return guidance for a level, falling back to B1 for unknown values."""
  try:
    return LEVEL_GUIDANCE[ProficiencyLevel(level)]
  except ValueError:
    return LEVEL_GUIDANCE[ProficiencyLevel.B1]


def _replace_placeholders(template: str, values: dict[str, str]) -> str:
  """Substitute {{PLACEHOLDER}} markers with request values."""
  rendered = template
  for key, value in values.items():
    rendered = rendered.replace(f"{{{{{key}}}}}", value)

  return rendered


def _vocabulary_history_note(known_words: frozenset[str]) -> str:
  if not known_words:
    return ""
  words = ", ".join(sorted(known_words))
  return f"\nSTUDENT'S PREVIOUS VOCABULARY:\nThis student has already learned these words: {words}\nYou may use them naturally, but choose 5 NEW words as the focus vocabulary for this lesson.\n"


def _required_vocabulary_note(target_words: tuple[str, ...]) -> str:
  if not target_words:
    return ""
  return f"\nREQUIRED VOCABULARY: Include these specific words: {', '.join(target_words)}\n"


def render_lesson_prompt(request: LessonRequest) -> str:
  """Render the one-shot lesson prompt, embedding the full schema example."""
  guidance = level_guidance(request.level)
  shared = {"TOPIC": request.topic, "LEVEL": request.level.value, "FOCUS": request.focus, "DURATION": str(request.duration_minutes)}
  schema_example = _replace_placeholders(_load_prompt("lesson_schema_example.json"), shared)

  frames = guidance.sentence_frames
  if guidance.needs_lower_level_scaffolding:
    frames = f"{frames}\n{_LOWER_LEVEL_SCAFFOLDING}"

  replacements = {
    **shared,
    "LEVEL_DESCRIPTION": guidance.description,
    "VOCABULARY_HISTORY": _vocabulary_history_note(request.student_vocabulary),
    "REQUIRED_VOCABULARY": _required_vocabulary_note(request.target_vocabulary),
    "VOCABULARY_GUIDANCE": guidance.vocabulary,
    "DEFINITION_GUIDANCE": guidance.definitions,
    "READING_LENGTH": guidance.reading_length,
    "READING_GUIDANCE": guidance.reading,
    "SENTENCE_FRAME_GUIDANCE": frames,
    "DISCUSSION_GUIDANCE": guidance.discussion,
    "SCHEMA_EXAMPLE": schema_example,
  }
  return _replace_placeholders(_load_prompt("lesson.md"), replacements)


@lru_cache(maxsize=8)
def _load_prompt(name: str) -> str:
  try:
    path = Path(__file__).parent / "prompts" / name
    return path.read_text(encoding="utf-8").strip()
  except (FileNotFoundError, PermissionError, UnicodeDecodeError) as exc:
    raise RuntimeError(f"Failed to load prompt '{name}': {exc}") from exc
