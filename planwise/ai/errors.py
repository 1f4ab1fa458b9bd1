"""Error taxonomy and refusal classification for the lesson generation pipeline."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
  from planwise.ai.orchestrator import AttemptRecord

_POLICY_HINTS: tuple[str, ...] = ("content policy", "safety", "blocked", "not appropriate")


class LessonPipelineError(RuntimeError):
  """Base class for failures raised by the ingestion pipeline."""


class ProviderTransportError(LessonPipelineError):
  """Raised by provider clients when the network, auth or timeout layer fails."""

  def __init__(self, message: str, *, provider: str | None = None) -> None:
    super().__init__(message)
    self.provider = provider


class UnparsableResponse(LessonPipelineError):
  """Raised when the repair cascade cannot recover a structured value."""

  def __init__(self, message: str, *, offset: int, context: str) -> None:
    super().__init__(f"{message} (offset {offset}): ...{context}...")
    self.reason = message
    # Offset points into the repaired text, which is what the strict parser last saw.
    self.offset = offset
    self.context = context


class QualityRejected(LessonPipelineError):
  """Raised when a normalized document fails the structural quality gate."""

  def __init__(self, violations: Sequence[str]) -> None:
    super().__init__("; ".join(violations) or "Quality gate rejected the document.")
    self.violations = list(violations)


class PolicyRestricted(LessonPipelineError):
  """Raised when the provider refuses the requested topic."""

  def __init__(self, message: str, *, attempts: list[AttemptRecord] | None = None) -> None:
    super().__init__(message)
    self.attempts = list(attempts or [])


class GenerationExhausted(LessonPipelineError):
  """Raised when every generation attempt failed."""

  def __init__(self, message: str, *, attempts: list[AttemptRecord]) -> None:
    """Store the failure message and the attempt records for upstream handlers."""
    super().__init__(message)
    self.attempts = attempts

  @property
  def logs(self) -> list[str]:
    return [record.summary() for record in self.attempts]


def _match_hint(message: str, hints: Iterable[str]) -> bool:
  """Return True when any hint appears in the message."""
  return any(hint in message for hint in hints)


def is_policy_refusal(exc: BaseException | str) -> bool:
  """Return True when a provider error carries refusal phrasing."""
  message = str(exc).lower()
  return _match_hint(message, _POLICY_HINTS)
