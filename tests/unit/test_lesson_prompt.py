from planwise.ai.lesson_prompt import LEVEL_GUIDANCE, level_guidance, render_lesson_prompt
from planwise.ai.pipeline.contracts import LessonRequest, ProficiencyLevel


def test_prompt_embeds_request_values_and_schema_example() -> None:
  request = LessonRequest(topic="Travelling by train", level="B2", focus="conversation", duration_minutes=45)

  prompt = render_lesson_prompt(request)

  assert '"Travelling by train"' in prompt
  assert "B2 (Upper Intermediate)" in prompt
  assert "45-minute lesson" in prompt
  assert '"estimatedTime": 45' in prompt
  assert "{{" not in prompt


def test_vocabulary_notes_only_appear_when_requested() -> None:
  plain = render_lesson_prompt(LessonRequest(topic="Food"))
  personalised = render_lesson_prompt(LessonRequest(topic="Food", student_vocabulary=["Apple", "bread"], target_vocabulary=["spice", "recipe"]))

  assert "PREVIOUS VOCABULARY" not in plain
  assert "REQUIRED VOCABULARY" not in plain
  assert "already learned these words: apple, bread" in personalised
  assert "Include these specific words: spice, recipe" in personalised


def test_lower_levels_ask_for_scaffolding() -> None:
  beginner = render_lesson_prompt(LessonRequest(topic="Family", level="A1"))
  advanced = render_lesson_prompt(LessonRequest(topic="Family", level="C1"))

  assert "lowerLevelScaffolding" in beginner
  assert "lowerLevelScaffolding" not in advanced


def test_every_level_has_guidance_and_unknown_levels_fall_back() -> None:
  assert set(LEVEL_GUIDANCE) == set(ProficiencyLevel)
  assert level_guidance("Z9") is LEVEL_GUIDANCE[ProficiencyLevel.B1]
  assert level_guidance("C2").description == "Proficiency"


def test_every_level_asks_for_a_grammar_spotlight() -> None:
  for level in ProficiencyLevel:
    prompt = render_lesson_prompt(LessonRequest(topic="Shopping", level=level))

    assert '"grammarSpotlight"' in prompt
    assert "pedagogicalApproach" in prompt
