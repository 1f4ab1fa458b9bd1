"""Tests for grammar spotlight and lower-level scaffolding coercion."""

from __future__ import annotations

from typing import Any

import pytest

from planwise.schema.grammar_support import coerce_grammar_spotlight, coerce_lower_level_scaffolding
from planwise.schema.lesson_models import SentenceFramesSection
from planwise.schema.section_normalizer import normalize_lesson, normalize_section

_SCAFFOLDING = {
  "sentenceWorkshop": [
    {
      "name": "Building a commute sentence",
      "steps": [
        {"level": "word", "example": "train", "explanation": "Start with the key noun"},
        {"level": "phrase", "example": "take the train", "explanation": "Add the verb"},
        {"level": "sentence", "example": "I take the train to work.", "explanation": "Complete the idea"},
      ],
      "teachingNotes": "Model each step aloud.",
    }
  ],
  "patternTrainer": {
    "pattern": "Subject + verb + transport",
    "title": "How I travel",
    "scaffolding": {"subject": ["I", "She"], "verb": "take, ride", "transport": None},
    "examples": ["I take the bus."],
    "instructions": "Pick one word from each bank.",
  },
  "visualMaps": [{"pattern": "I + take + the train", "colorCoding": {"subject": "blue", "verb": "green"}, "example": "I take the train."}],
}

_SPOTLIGHT = {
  "grammarType": "modal_verbs",
  "title": "Should for Travel Advice",
  "description": "Use should to give advice.",
  "logicExplanation": {"communicationNeed": "Give advice", "logicalSolution": "Should softens a suggestion", "usagePattern": "Subject + should + base verb"},
  "teachingTips": ["Contrast should with must."],
  "examples": [{"sentence": "You should book early.", "highlighted": "You **should** book early.", "explanation": "Advice"}, "You should check the timetable."],
  "visualSteps": [{"stepNumber": "one", "instruction": "Circle the modal", "visualElements": {"type": "circle", "count": 1}}, "Draw an arrow to the verb"],
  "visualLayout": {"recommendedType": "flow", "primaryColor": "teal", "pedagogicalApproach": {"learningObjective": "Give travel advice", "practiceActivities": ["Role play a ticket office"], "realWorldApplication": "Helping a visitor"}},
}


def test_scaffolding_mapping_is_coerced_into_all_three_parts() -> None:
  scaffolding = coerce_lower_level_scaffolding(_SCAFFOLDING)

  assert scaffolding is not None
  workshop = scaffolding.sentence_workshop[0]
  assert workshop.name == "Building a commute sentence"
  assert [step.level for step in workshop.steps] == ["word", "phrase", "sentence"]
  assert workshop.teaching_notes == "Model each step aloud."
  trainer = scaffolding.pattern_trainer
  assert trainer is not None
  assert trainer.scaffolding == {"subject": ["I", "She"], "verb": ["take", "ride"]}
  assert trainer.instructions == ["Pick one word from each bank."]
  assert scaffolding.visual_maps[0].color_coding == {"subject": "blue", "verb": "green"}


def test_scaffolding_given_as_strings_keeps_the_text() -> None:
  scaffolding = coerce_lower_level_scaffolding({"sentenceWorkshop": "Word to phrase to sentence", "patternTrainer": "I like + noun", "visualMaps": ["Subject verb object"]})

  assert scaffolding is not None
  assert [activity.name for activity in scaffolding.sentence_workshop] == ["Word to phrase to sentence"]
  assert scaffolding.pattern_trainer is not None and scaffolding.pattern_trainer.pattern == "I like + noun"
  assert [visual_map.pattern for visual_map in scaffolding.visual_maps] == ["Subject verb object"]


@pytest.mark.parametrize("value", [None, "scaffold", 3, [], {}, {"sentenceWorkshop": [None, {}], "patternTrainer": {"title": ""}, "visualMaps": 7}])
def test_empty_or_malformed_scaffolding_is_none(value: Any) -> None:
  assert coerce_lower_level_scaffolding(value) is None


def test_frames_carry_scaffolding_through_normalization() -> None:
  section = normalize_section({"type": "sentenceFrames", "pedagogicalFrames": [{"languageFunction": "Describing routines", "patternTemplate": "I ___ every day.", "lowerLevelScaffolding": _SCAFFOLDING}]})

  assert isinstance(section, SentenceFramesSection)
  scaffolding = section.pedagogical_frames[0].lower_level_scaffolding
  assert scaffolding is not None
  assert scaffolding.pattern_trainer is not None and scaffolding.pattern_trainer.title == "How I travel"


def test_spotlight_reads_nested_layout_and_mixed_entries() -> None:
  spotlight = coerce_grammar_spotlight(_SPOTLIGHT)

  assert spotlight is not None
  assert spotlight.logic_explanation.logical_solution == "Should softens a suggestion"
  assert spotlight.logic_explanation.communication_impact == ""
  assert [example.highlighted for example in spotlight.examples] == ["You **should** book early.", "You should check the timetable."]
  assert [(step.step_number, step.instruction) for step in spotlight.visual_steps] == [(1, "Circle the modal"), (2, "Draw an arrow to the verb")]
  assert spotlight.visual_steps[0].visual_elements == {"type": "circle", "count": "1"}
  assert spotlight.visual_layout is not None
  assert spotlight.visual_layout.learning_objective == "Give travel advice"
  assert spotlight.visual_layout.practice_activities == ["Role play a ticket office"]


def test_highlighted_only_example_recovers_the_plain_sentence() -> None:
  spotlight = coerce_grammar_spotlight({"title": "Past simple", "examples": [{"highlighted": "She **walked** home."}]})

  assert spotlight is not None
  assert spotlight.examples[0].sentence == "She walked home."


@pytest.mark.parametrize("value", [None, "grammar", ["a"], {}, {"teachingTips": [], "visualLayout": "grid"}])
def test_empty_spotlight_is_none(value: Any) -> None:
  assert coerce_grammar_spotlight(value) is None


def test_lesson_keeps_root_spotlight_and_renormalizes_it_unchanged() -> None:
  document = normalize_lesson({"title": "Trains", "sections": [], "grammarSpotlight": _SPOTLIGHT})

  assert document.grammar_spotlight is not None
  assert document.grammar_spotlight.grammar_type == "modal_verbs"
  assert all(section.type != "grammarSpotlight" for section in document.sections)
  assert normalize_lesson(document.to_dict()).grammar_spotlight == document.grammar_spotlight


def test_garbage_spotlight_never_breaks_the_lesson() -> None:
  document = normalize_lesson({"sections": [], "grammarSpotlight": [1, None, {"x": 2}]})

  assert document.grammar_spotlight is None
