"""Coercions for grammar teaching aids: the root grammar spotlight and lower-level frame scaffolding.

Both blocks are optional. A block with no usable content coerces to None so
the presentation layer can skip it instead of rendering empty shells.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import msgspec

from planwise.schema.lesson_models import (
  GrammarExample,
  GrammarSpotlight,
  LogicExplanation,
  LowerLevelScaffolding,
  PatternTrainer,
  VisualLayout,
  VisualMap,
  VisualStep,
  WorkshopActivity,
  WorkshopStep,
)
from planwise.schema.text_coercion import coerce_sequence, coerce_string_list, coerce_text, split_terms

_LOGIC_FIELDS = ("communicationNeed", "logicalSolution", "usagePattern", "communicationImpact")


def _text_mapping(value: Any) -> dict[str, str]:
  if not isinstance(value, Mapping):
    return {}
  return {str(key): text for key, text in ((key, coerce_text(item)) for key, item in value.items()) if text}


# Lower-level scaffolding


def coerce_lower_level_scaffolding(value: Any) -> LowerLevelScaffolding | None:
  if not isinstance(value, Mapping):
    return None

  workshop = [activity for activity in (_coerce_activity(item) for item in coerce_sequence(value.get("sentenceWorkshop"), record_keys=("steps", "name"))) if activity is not None]
  trainer = _coerce_pattern_trainer(value.get("patternTrainer"))
  visual_maps = [visual_map for visual_map in (_coerce_visual_map(item) for item in coerce_sequence(value.get("visualMaps"), record_keys=("pattern", "colorCoding"))) if visual_map is not None]
  if not (workshop or trainer or visual_maps):
    return None
  return LowerLevelScaffolding(sentence_workshop=workshop, pattern_trainer=trainer, visual_maps=visual_maps)


def _coerce_activity(item: Any) -> WorkshopActivity | None:
  if not isinstance(item, Mapping):
    name = coerce_text(item)
    return WorkshopActivity(name=name) if name else None

  steps = [step for step in (_coerce_step(raw) for raw in coerce_sequence(item.get("steps"))) if step is not None]
  name = coerce_text(item.get("name") or item.get("title"))
  if not name and not steps:
    return None
  return WorkshopActivity(name=name, steps=steps, teaching_notes=coerce_text(item.get("teachingNotes")))


def _coerce_step(item: Any) -> WorkshopStep | None:
  if not isinstance(item, Mapping):
    example = coerce_text(item)
    return WorkshopStep(example=example) if example else None
  step = WorkshopStep(level=coerce_text(item.get("level")), example=coerce_text(item.get("example")), explanation=coerce_text(item.get("explanation")))
  return step if step.example or step.explanation else None


def _coerce_pattern_trainer(value: Any) -> PatternTrainer | None:
  if not isinstance(value, Mapping):
    pattern = coerce_text(value)
    return PatternTrainer(pattern=pattern) if pattern else None

  raw_banks = value.get("scaffolding")
  banks = {str(key): words for key, words in ((key, split_terms(item)) for key, item in raw_banks.items()) if words} if isinstance(raw_banks, Mapping) else {}
  trainer = PatternTrainer(
    pattern=coerce_text(value.get("pattern")),
    title=coerce_text(value.get("title")),
    scaffolding=banks,
    examples=coerce_string_list(value.get("examples")),
    instructions=coerce_string_list(value.get("instructions")),
  )
  return trainer if trainer.pattern or trainer.scaffolding else None


def _coerce_visual_map(item: Any) -> VisualMap | None:
  if not isinstance(item, Mapping):
    pattern = coerce_text(item)
    return VisualMap(pattern=pattern) if pattern else None
  visual_map = VisualMap(pattern=coerce_text(item.get("pattern")), color_coding=_text_mapping(item.get("colorCoding")), example=coerce_text(item.get("example")))
  return visual_map if visual_map.pattern or visual_map.color_coding else None


# Grammar spotlight


def coerce_grammar_spotlight(value: Any) -> GrammarSpotlight | None:
  """Coerce the root grammarSpotlight block; returns None when it carries nothing to teach."""
  if not isinstance(value, Mapping):
    return None

  logic_raw = value.get("logicExplanation")
  if isinstance(logic_raw, Mapping):
    logic = LogicExplanation(**{_snake(key): coerce_text(logic_raw.get(key)) for key in _LOGIC_FIELDS})
  else:
    logic = LogicExplanation(communication_need=coerce_text(logic_raw))

  examples = [example for example in (_coerce_grammar_example(item) for item in coerce_sequence(value.get("examples"), record_keys=("sentence",))) if example is not None]
  steps = [step for step in (_coerce_visual_step(item, index) for index, item in enumerate(coerce_sequence(value.get("visualSteps"), record_keys=("instruction",)), start=1)) if step is not None]
  spotlight = GrammarSpotlight(
    grammar_type=coerce_text(value.get("grammarType")),
    title=coerce_text(value.get("title")),
    description=coerce_text(value.get("description")),
    logic_explanation=logic,
    teaching_tips=coerce_string_list(value.get("teachingTips")),
    examples=examples,
    visual_steps=steps,
    visual_layout=_coerce_visual_layout(value.get("visualLayout")),
  )
  has_logic = any(msgspec.structs.asdict(logic).values())
  if not (spotlight.grammar_type or spotlight.title or spotlight.examples or has_logic):
    return None
  return spotlight


def _snake(key: str) -> str:
  return "".join(f"_{char.lower()}" if char.isupper() else char for char in key)


def _coerce_grammar_example(item: Any) -> GrammarExample | None:
  if not isinstance(item, Mapping):
    sentence = coerce_text(item)
    return GrammarExample(sentence=sentence, highlighted=sentence) if sentence else None
  sentence = coerce_text(item.get("sentence"))
  highlighted = coerce_text(item.get("highlighted"))
  if not sentence and not highlighted:
    return None
  return GrammarExample(sentence=sentence or highlighted.replace("**", ""), highlighted=highlighted or sentence, explanation=coerce_text(item.get("explanation")))


def _coerce_visual_step(item: Any, position: int) -> VisualStep | None:
  if not isinstance(item, Mapping):
    instruction = coerce_text(item)
    return VisualStep(step_number=position, instruction=instruction) if instruction else None
  instruction = coerce_text(item.get("instruction"))
  elements = _text_mapping(item.get("visualElements"))
  if not instruction and not elements:
    return None
  number = item.get("stepNumber")
  if not isinstance(number, int) or isinstance(number, bool) or number <= 0:
    number = position
  return VisualStep(step_number=number, instruction=instruction, visual_elements=elements)


def _coerce_visual_layout(value: Any) -> VisualLayout | None:
  if not isinstance(value, Mapping):
    return None
  # The pedagogical approach arrives nested; it is flattened onto the layout.
  approach = value.get("pedagogicalApproach")
  source = {**approach, **value} if isinstance(approach, Mapping) else value
  layout = VisualLayout(
    recommended_type=coerce_text(source.get("recommendedType")),
    primary_color=coerce_text(source.get("primaryColor")),
    learning_objective=coerce_text(source.get("learningObjective")),
    practice_activities=coerce_string_list(source.get("practiceActivities")),
    real_world_application=coerce_text(source.get("realWorldApplication")),
  )
  if not (layout.recommended_type or layout.learning_objective or layout.practice_activities):
    return None
  return layout
