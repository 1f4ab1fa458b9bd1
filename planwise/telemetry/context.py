"""Context helpers for correlating provider calls with generation attempts."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass


@dataclass(frozen=True)
class LlmCallContext:
  """Metadata providers attach to their log lines."""

  purpose: str
  lesson_topic: str | None
  attempt: int | None


_CURRENT_LLM_CONTEXT: ContextVar[LlmCallContext | None] = ContextVar("llm_call_context", default=None)


def get_llm_call_context() -> LlmCallContext | None:
  """Return the active call context, if any."""
  return _CURRENT_LLM_CONTEXT.get()


def describe_llm_call() -> str:
  """Render the active context for log lines."""
  context = _CURRENT_LLM_CONTEXT.get()
  if context is None:
    return "purpose=unknown"
  return f"purpose={context.purpose} topic={context.lesson_topic!r} attempt={context.attempt}"


@contextmanager
def llm_call_context(*, purpose: str, lesson_topic: str | None = None, attempt: int | None = None) -> Iterator[LlmCallContext]:
  """Set call metadata for downstream provider calls and reset it afterward."""
  context = LlmCallContext(purpose=purpose, lesson_topic=lesson_topic, attempt=attempt)
  token = _CURRENT_LLM_CONTEXT.set(context)

  try:
    yield context

  finally:
    _CURRENT_LLM_CONTEXT.reset(token)
