"""Pipeline contracts."""

from planwise.ai.pipeline.contracts import LessonRequest, ProficiencyLevel

__all__ = ["LessonRequest", "ProficiencyLevel"]
