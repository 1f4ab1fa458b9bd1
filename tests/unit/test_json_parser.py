"""Tests for the response repair and parse cascade."""

from __future__ import annotations

import pytest

from planwise.ai.errors import UnparsableResponse
from planwise.ai.json_parser import context_window, parse_response, repair_json_text, strip_wrapping

BODIES = ['{"title": "Trains", "sections": []}', '[{"type": "reading"}]', '{"nested": {"list": [1, 2, 3], "flag": true}}']


@pytest.mark.parametrize("body", BODIES)
@pytest.mark.parametrize("language", ["json", "JSON", "javascript", ""])
def test_fenced_response_parses_like_unwrapped_body(body: str, language: str) -> None:
  fenced = f"```{language}\n{body}\n```"
  assert parse_response(fenced) == parse_response(body)


def test_strips_known_preamble_and_label_line() -> None:
  assert parse_response('Here is the lesson plan you requested:\n{"title": "Trains"}') == {"title": "Trains"}
  assert parse_response('json\n{"title": "Trains"}') == {"title": "Trains"}
  assert parse_response('Here\'s the JSON:\n```json\n{"title": "Trains"}\n```') == {"title": "Trains"}


def test_strips_single_layer_of_wrapping_quotes() -> None:
  assert parse_response('"{\\"title\\": \\"Trains\\"}"') == {"title": "Trains"}


def test_repair_removes_trailing_commas() -> None:
  assert parse_response('{"words": ["platform", "delay",], "count": 2,}') == {"words": ["platform", "delay"], "count": 2}


def test_repair_collapses_literal_newlines_inside_strings() -> None:
  assert parse_response('{"content": "Line one\nline two\n\nline three"}') == {"content": "Line one line two line three"}


def test_repair_normalizes_stray_backslashes_and_escaped_apostrophes() -> None:
  assert parse_response('{"path": "C:\\data", "text": "It\\\'s late"}') == {"path": "C:\\data", "text": "It's late"}


def test_repair_drops_surrounding_prose() -> None:
  assert parse_response('Sure! {"title": "Trains"} Let me know if you need changes.') == {"title": "Trains"}


def test_valid_json_is_not_mutated_by_repair() -> None:
  # Trailing-comma-looking text inside a valid string survives because strict parsing runs first.
  assert parse_response('{"text": "a, ]"}') == {"text": "a, ]"}


def test_unparsable_response_reports_offset_and_context() -> None:
  with pytest.raises(UnparsableResponse) as exc_info:
    parse_response('{"a": 1 "b": 2}')

  error = exc_info.value
  assert error.offset == 8
  assert '"b"' in error.context
  assert "offset 8" in str(error)


def test_prose_refusal_is_unparsable() -> None:
  with pytest.raises(UnparsableResponse) as exc_info:
    parse_response("I'm sorry, but I can't create that lesson.")
  assert exc_info.value.offset == 0
  assert exc_info.value.context.startswith("I'm sorry")


def test_context_window_is_bounded() -> None:
  text = "x" * 500
  assert len(context_window(text, 250)) == 100
  assert context_window("short", 2) == "short"


def test_strip_wrapping_peels_stacked_wrappers() -> None:
  assert strip_wrapping('```json\njson:\n{"a": 1}\n```') == '{"a": 1}'


def test_repair_json_text_drops_doubled_commas() -> None:
  assert repair_json_text('{"a": 1,, "b": 2}') == '{"a": 1, "b": 2}'
