"""Canonical lesson document models produced by the section normalizer."""

from __future__ import annotations

from typing import Annotated, Any

import msgspec

from planwise.schema.section_types import SectionType, canonical_of

READING_PARAGRAPHS = 5
VOCABULARY_TARGET_WORDS = 5


class Pronunciation(msgspec.Struct, kw_only=True, rename="camel"):
  syllables: list[str] = msgspec.field(default_factory=list)
  stress_index: Annotated[int, msgspec.Meta(ge=0, description="Index of the stressed syllable")] = 0
  phonetic_guide: str = ""


class SemanticMap(msgspec.Struct, kw_only=True, rename="camel"):
  synonyms: list[str] = msgspec.field(default_factory=list)
  antonyms: list[str] = msgspec.field(default_factory=list)
  related_concepts: list[str] = msgspec.field(default_factory=list)
  contexts: list[str] = msgspec.field(default_factory=list)
  associated_words: list[str] = msgspec.field(default_factory=list)
  collocations: list[str] = msgspec.field(default_factory=list)


class VocabWord(msgspec.Struct, kw_only=True, rename="camel"):
  """One vocabulary entry; images are filled in after generation."""

  term: Annotated[str, msgspec.Meta(description="Headword as it appears in the reading")]
  part_of_speech: str = "noun"
  definition: str = "No definition provided."
  example: str = ""
  pronunciation: Pronunciation = msgspec.field(default_factory=Pronunciation)
  semantic_map: SemanticMap | None = None
  usage_notes: str | None = None
  additional_examples: list[str] = msgspec.field(default_factory=list)
  image_prompt: str | None = None
  image_base64: str | None = None


class Question(msgspec.Struct, kw_only=True, rename="camel"):
  question: str
  options: list[str] = msgspec.field(default_factory=list)
  answer: Annotated[str, msgspec.Meta(description="Correct answer text")] = ""
  explanation: str | None = None


class DiscussionQuestion(msgspec.Struct, kw_only=True, rename="camel"):
  question: str
  paragraph_context: Annotated[str, msgspec.Meta(description="Background prose shown above the question")] = ""
  image_prompt: str | None = None
  image_base64: str | None = None


class FrameTier(msgspec.Struct, kw_only=True, rename="camel"):
  frame: Annotated[str, msgspec.Meta(description="Pattern template with ___ blanks")] = ""
  description: str = ""
  model_responses: list[str] = msgspec.field(default_factory=list)


class TieredFrames(msgspec.Struct, kw_only=True, rename="camel"):
  emerging: FrameTier = msgspec.field(default_factory=FrameTier)
  developing: FrameTier = msgspec.field(default_factory=FrameTier)
  expanding: FrameTier = msgspec.field(default_factory=FrameTier)


class WorkshopStep(msgspec.Struct, kw_only=True, rename="camel"):
  level: Annotated[str, msgspec.Meta(description="word, phrase or sentence")] = ""
  example: str = ""
  explanation: str = ""


class WorkshopActivity(msgspec.Struct, kw_only=True, rename="camel"):
  name: str = ""
  steps: list[WorkshopStep] = msgspec.field(default_factory=list)
  teaching_notes: str = ""


class PatternTrainer(msgspec.Struct, kw_only=True, rename="camel"):
  pattern: str = ""
  title: str = ""
  scaffolding: Annotated[dict[str, list[str]], msgspec.Meta(description="Word bank per pattern component")] = msgspec.field(default_factory=dict)
  examples: list[str] = msgspec.field(default_factory=list)
  instructions: list[str] = msgspec.field(default_factory=list)


class VisualMap(msgspec.Struct, kw_only=True, rename="camel"):
  pattern: str = ""
  color_coding: dict[str, str] = msgspec.field(default_factory=dict)
  example: str = ""


class LowerLevelScaffolding(msgspec.Struct, kw_only=True, rename="camel"):
  """Extra support attached to sentence frames for A1 to B1 lessons."""

  sentence_workshop: list[WorkshopActivity] = msgspec.field(default_factory=list)
  pattern_trainer: PatternTrainer | None = None
  visual_maps: list[VisualMap] = msgspec.field(default_factory=list)


class PedagogicalFrame(msgspec.Struct, kw_only=True, rename="camel"):
  language_function: str
  grammar_focus: list[str] = msgspec.field(default_factory=list)
  tiered_frames: TieredFrames = msgspec.field(default_factory=TieredFrames)
  teaching_notes: list[str] = msgspec.field(default_factory=list)
  lower_level_scaffolding: LowerLevelScaffolding | None = None


class UnscrambleSentence(msgspec.Struct, kw_only=True, rename="camel"):
  words: list[str]
  correct_sentence: str


class SectionBase(msgspec.Struct, kw_only=True, rename="camel"):
  """Fields shared by every section variant."""

  type: Annotated[str, msgspec.Meta(description="Recognized tag; aliases are kept verbatim")]
  title: str
  not_provided: bool = False
  notice: str | None = None

  @property
  def canonical_type(self) -> SectionType:
    # Sections are only built from resolved tags; warmup mirrors the inference fallback.
    return canonical_of(self.type) or SectionType.WARMUP


class WarmupSection(SectionBase):
  content: str = ""
  questions: list[str] = msgspec.field(default_factory=list)
  target_vocabulary: list[str] = msgspec.field(default_factory=list)
  procedure: str = ""
  teacher_notes: str = ""


class ReadingSection(SectionBase):
  introduction: str = ""
  paragraphs: Annotated[list[str], msgspec.Meta(min_length=READING_PARAGRAPHS, max_length=READING_PARAGRAPHS)] = msgspec.field(default_factory=list)
  teacher_notes: str = ""


class VocabularySection(SectionBase):
  words: list[VocabWord] = msgspec.field(default_factory=list)


class QuestionSection(SectionBase):
  """Comprehension and quiz sections."""

  introduction: str = ""
  questions: list[Question] = msgspec.field(default_factory=list)


class DiscussionSection(SectionBase):
  introduction: str = ""
  questions: list[DiscussionQuestion] = msgspec.field(default_factory=list)


class SentenceFramesSection(SectionBase):
  introduction: str = ""
  pedagogical_frames: list[PedagogicalFrame] = msgspec.field(default_factory=list)


class ClozeSection(SectionBase):
  introduction: str = ""
  text: str = ""
  word_bank: list[str] = msgspec.field(default_factory=list)
  teacher_notes: str = ""


class SentenceUnscrambleSection(SectionBase):
  introduction: str = ""
  sentences: list[UnscrambleSentence] = msgspec.field(default_factory=list)
  teacher_notes: str = ""


class LogicExplanation(msgspec.Struct, kw_only=True, rename="camel"):
  communication_need: str = ""
  logical_solution: str = ""
  usage_pattern: str = ""
  communication_impact: str = ""


class GrammarExample(msgspec.Struct, kw_only=True, rename="camel"):
  sentence: str
  highlighted: Annotated[str, msgspec.Meta(description="Sentence with **marked** grammar elements")] = ""
  explanation: str = ""


class VisualStep(msgspec.Struct, kw_only=True, rename="camel"):
  step_number: int
  instruction: str = ""
  visual_elements: dict[str, str] = msgspec.field(default_factory=dict)


class VisualLayout(msgspec.Struct, kw_only=True, rename="camel"):
  recommended_type: str = ""
  primary_color: str = ""
  learning_objective: str = ""
  practice_activities: list[str] = msgspec.field(default_factory=list)
  real_world_application: str = ""


class GrammarSpotlight(msgspec.Struct, kw_only=True, rename="camel"):
  """Generated explanation of one grammar pattern that serves the lesson topic."""

  grammar_type: str = ""
  title: str = ""
  description: str = ""
  logic_explanation: LogicExplanation = msgspec.field(default_factory=LogicExplanation)
  teaching_tips: list[str] = msgspec.field(default_factory=list)
  examples: list[GrammarExample] = msgspec.field(default_factory=list)
  visual_steps: list[VisualStep] = msgspec.field(default_factory=list)
  visual_layout: VisualLayout | None = None


class LessonDocument(msgspec.Struct, kw_only=True, rename="camel"):
  """Normalized lesson handed to the presentation layer."""

  title: str = "ESL Lesson"
  level: str = "B1"
  focus: str = "general"
  estimated_time: Annotated[int, msgspec.Meta(gt=0, description="Minutes")] = 60
  sections: list[SectionBase] = msgspec.field(default_factory=list)
  grammar_spotlight: GrammarSpotlight | None = None

  def section(self, kind: SectionType | str) -> SectionBase | None:
    """Return the first section whose canonical type matches kind (aliases fold)."""
    wanted = canonical_of(kind.value if isinstance(kind, SectionType) else kind)
    if wanted is None:
      return None
    return next((section for section in self.sections if section.canonical_type is wanted), None)

  def to_dict(self) -> dict[str, Any]:
    """Return the camelCase builtin form used for persistence and re-normalization."""
    return msgspec.to_builtins(self)
