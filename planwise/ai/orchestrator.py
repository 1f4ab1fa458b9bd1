"""Retry loop that turns a lesson request into an accepted lesson document."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum

from planwise.ai.errors import GenerationExhausted, PolicyRestricted, QualityRejected, UnparsableResponse, is_policy_refusal
from planwise.ai.json_parser import parse_response
from planwise.ai.lesson_prompt import render_lesson_prompt
from planwise.ai.pipeline.contracts import LessonRequest
from planwise.ai.providers.base import AIModel, GenerationParams
from planwise.ai.quality_gate import QualityGate
from planwise.schema.lesson_models import LessonDocument
from planwise.schema.section_normalizer import normalize_lesson
from planwise.telemetry.context import llm_call_context

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


class AttemptStage(str, Enum):
  """Last pipeline stage an attempt reached."""

  PROVIDER = "provider"
  PARSE = "parse"
  QUALITY = "quality"


class AttemptOutcome(str, Enum):
  ACCEPTED = "accepted"
  FAILED = "failed"
  REFUSED = "refused"


@dataclass(frozen=True)
class AttemptRecord:
  """Diagnostics for one provider round trip."""

  number: int
  stage: AttemptStage
  outcome: AttemptOutcome
  duration_ms: int
  error_type: str | None = None
  message: str | None = None
  notes: list[str] = field(default_factory=list)
  violations: list[str] = field(default_factory=list)

  def summary(self) -> str:
    text = f"Attempt {self.number} {self.outcome.value} at {self.stage.value} ({self.duration_ms} ms)"
    if self.error_type:
      text = f"{text}: {self.error_type}: {self.message}"
    return text


@dataclass(frozen=True)
class GenerationResult:
  """Accepted document plus the records of every attempt that led to it."""

  document: LessonDocument
  attempts: list[AttemptRecord]

  @property
  def attempt_count(self) -> int:
    return len(self.attempts)

  @property
  def logs(self) -> list[str]:
    return [record.summary() for record in self.attempts]


class LessonOrchestrator:
  """Sequential generate, parse, normalize and gate loop.

  Attempts never run in parallel and the request is sent unchanged on every
  attempt. Transport, parse and quality failures are recorded and retried.
  A provider refusal stops the loop immediately because retrying the same
  topic cannot succeed.
  """

  def __init__(self, model: AIModel, *, params: GenerationParams | None = None, max_attempts: int = DEFAULT_MAX_ATTEMPTS, quality_gate: QualityGate | None = None) -> None:
    if max_attempts <= 0:
      raise ValueError("max_attempts must be a positive integer.")
    self._model = model
    self._params = params or GenerationParams()
    self._max_attempts = max_attempts
    self._quality_gate = quality_gate or QualityGate()

  @property
  def max_attempts(self) -> int:
    return self._max_attempts

  async def generate(self, request: LessonRequest) -> GenerationResult:
    """Run attempts until one passes the quality gate or the limit is reached."""
    prompt = render_lesson_prompt(request)
    attempts: list[AttemptRecord] = []
    logger.info("Generating lesson topic=%r level=%s model=%s max_attempts=%d", request.topic, request.level.value, _model_name(self._model), self._max_attempts)

    for number in range(1, self._max_attempts + 1):
      started = time.monotonic()

      with llm_call_context(purpose="lesson", lesson_topic=request.topic, attempt=number):
        try:
          response = await self._model.generate(prompt, self._params)
        except Exception as exc:  # noqa: BLE001
          if is_policy_refusal(exc):
            attempts.append(_record(number, AttemptStage.PROVIDER, started, exc, outcome=AttemptOutcome.REFUSED))
            logger.warning("Provider refused topic %r on attempt %d: %s", request.topic, number, exc)
            raise PolicyRestricted(f"The provider declined to generate a lesson about '{request.topic}': {exc}", attempts=attempts) from exc
          attempts.append(_record(number, AttemptStage.PROVIDER, started, exc))
          logger.warning("Attempt %d/%d provider call failed: %s", number, self._max_attempts, exc)
          continue

      try:
        parsed = parse_response(response.content)
      except UnparsableResponse as exc:
        attempts.append(_record(number, AttemptStage.PARSE, started, exc))
        logger.warning("Attempt %d/%d returned unparsable output: %s", number, self._max_attempts, exc)
        continue

      notes: list[str] = []
      document = normalize_lesson(parsed, notes=notes)
      report = self._quality_gate.evaluate(document)
      if not report.passed:
        rejection = QualityRejected(report.violations)
        attempts.append(_record(number, AttemptStage.QUALITY, started, rejection, notes=notes, violations=report.violations))
        logger.warning("Attempt %d/%d rejected by quality gate: %s", number, self._max_attempts, rejection)
        continue

      attempts.append(_record(number, AttemptStage.QUALITY, started, None, outcome=AttemptOutcome.ACCEPTED, notes=notes))
      logger.info("Attempt %d/%d accepted (%d sections, %d normalization notes).", number, self._max_attempts, len(document.sections), len(notes))
      return GenerationResult(document=document, attempts=attempts)

    last = attempts[-1]
    logger.error("Lesson generation exhausted after %d attempts; last failure: %s", len(attempts), last.summary())
    raise GenerationExhausted(f"Lesson generation failed after {len(attempts)} attempts. Last error: {last.message}", attempts=attempts)


def _record(
  number: int,
  stage: AttemptStage,
  started: float,
  error: BaseException | None,
  *,
  outcome: AttemptOutcome = AttemptOutcome.FAILED,
  notes: list[str] | None = None,
  violations: list[str] | None = None,
) -> AttemptRecord:
  duration_ms = int((time.monotonic() - started) * 1000)
  return AttemptRecord(
    number=number,
    stage=stage,
    outcome=outcome,
    duration_ms=duration_ms,
    error_type=type(error).__name__ if error is not None else None,
    message=str(error) if error is not None else None,
    notes=list(notes or []),
    violations=list(violations or []),
  )


def _model_name(model: AIModel) -> str:
  return getattr(model, "name", "unknown")
