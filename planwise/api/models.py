from __future__ import annotations

from typing import Any

import msgspec
from pydantic import BaseModel, ConfigDict

from planwise.schema.lesson_models import DiscussionQuestion, LessonDocument, Question


class ExtractRequest(BaseModel):
  """Raw or normalized lesson document to search for questions."""

  model_config = ConfigDict(extra="forbid")

  document: dict[str, Any]


class GenerateLessonResponse(msgspec.Struct, kw_only=True, rename="camel"):
  lesson: LessonDocument
  attempts: int


class ExtractQuestionsResponse(msgspec.Struct, kw_only=True, rename="camel"):
  strategy: str | None
  questions: list[Question | DiscussionQuestion]
