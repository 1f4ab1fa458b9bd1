"""Tests for logging helpers and provider call context."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from planwise.config import get_settings
from planwise.core.logging import TruncatedFormatter, _build_handlers, _rotated_name
from planwise.telemetry.context import describe_llm_call, get_llm_call_context, llm_call_context


def _deep_exception_info():
  def _level(depth: int) -> None:
    if depth == 0:
      raise ValueError("deep failure")
    _level(depth - 1)

  try:
    _level(8)
  except ValueError:
    return sys.exc_info()
  raise AssertionError("unreachable")


def test_truncated_formatter_keeps_header_and_tail() -> None:
  text = TruncatedFormatter().formatException(_deep_exception_info())

  assert text.startswith("Traceback (most recent call last):")
  assert "    ...\n" in text
  assert text.rstrip().endswith("ValueError: deep failure")


def test_rotated_backups_use_dash_suffix() -> None:
  assert _rotated_name("logs/planwise.log.2") == "logs/planwise.log-2"
  assert _rotated_name("logs/planwise.log") == "logs/planwise.log"


def test_handlers_create_log_file(tmp_path: Path) -> None:
  stream, file_handler, log_path = _build_handlers(get_settings(), tmp_path)
  try:
    assert log_path.parent == tmp_path
    assert log_path.exists()
    assert isinstance(file_handler, logging.handlers.RotatingFileHandler)
  finally:
    file_handler.close()


def test_call_context_is_scoped() -> None:
  assert get_llm_call_context() is None
  assert describe_llm_call() == "purpose=unknown"

  with llm_call_context(purpose="lesson", lesson_topic="Trains", attempt=2) as context:
    assert get_llm_call_context() is context
    assert describe_llm_call() == "purpose=lesson topic='Trains' attempt=2"

  assert get_llm_call_context() is None
