"""Shared data contracts for the lesson generation pipeline."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator
from pydantic.alias_generators import to_camel


class ProficiencyLevel(str, Enum):
  """CEFR levels, ordered from beginner to proficient."""

  A1 = "A1"
  A2 = "A2"
  B1 = "B1"
  B2 = "B2"
  C1 = "C1"
  C2 = "C2"

  @property
  def rank(self) -> int:
    return list(ProficiencyLevel).index(self)

  def __lt__(self, other: object) -> bool:
    if not isinstance(other, ProficiencyLevel):
      return NotImplemented
    return self.rank < other.rank


class LessonRequest(BaseModel):
  """Inputs for one lesson generation call."""

  topic: StrictStr = Field(min_length=1, max_length=200, description="Lesson topic.", examples=["Travelling by train"])
  level: ProficiencyLevel = Field(default=ProficiencyLevel.B1, validation_alias="cefrLevel", description="Target CEFR level.")
  focus: StrictStr = Field(default="general", min_length=1, max_length=120, description="Pedagogical focus, e.g. conversation or business English.")
  duration_minutes: int = Field(default=60, gt=0, le=240, description="Target lesson length in minutes.")
  student_vocabulary: frozenset[str] = Field(default_factory=frozenset, description="Words the student already knows; kept out of the vocabulary section.")
  target_vocabulary: tuple[str, ...] = Field(default=(), max_length=20, description="Words the lesson must teach, in order.")
  generate_images: bool = Field(default=True, description="Generate illustrations for vocabulary and discussion questions.")
  model_config = ConfigDict(frozen=True, extra="forbid", alias_generator=to_camel, populate_by_name=True)

  @field_validator("topic", "focus")
  @classmethod
  def _strip_text(cls, value: str) -> str:
    stripped = value.strip()
    if not stripped:
      raise ValueError("must not be blank")
    return stripped

  @field_validator("level", mode="before")
  @classmethod
  def _upper_level(cls, value: object) -> object:
    return value.strip().upper() if isinstance(value, str) else value

  @field_validator("student_vocabulary", mode="before")
  @classmethod
  def _clean_known_words(cls, value: object) -> object:
    if isinstance(value, list | tuple | set | frozenset):
      return frozenset(word.strip().lower() for word in value if isinstance(word, str) and word.strip())
    return value

  @field_validator("target_vocabulary", mode="before")
  @classmethod
  def _clean_target_words(cls, value: object) -> object:
    if isinstance(value, list | tuple):
      seen: dict[str, None] = {}
      for word in value:
        if isinstance(word, str) and word.strip():
          seen.setdefault(word.strip(), None)
      return tuple(seen)
    return value
