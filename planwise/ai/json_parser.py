"""Repair-and-parse helpers for near-JSON provider output."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from planwise.ai.errors import UnparsableResponse

logger = logging.getLogger(__name__)

CONTEXT_RADIUS = 50

_FENCE_OPEN_RE = re.compile(r"^\s*```[ \t]*([A-Za-z0-9_+-]*)[ \t]*\r?\n?")
_FENCE_CLOSE_RE = re.compile(r"\r?\n?[ \t]*```\s*$")
_PREAMBLE_RE = re.compile(r"^(?:here'?s the|here is the|here is your|the following is the)\b[^\n{\[]*?:?[ \t]*(?:\r?\n)+", re.IGNORECASE)
_LABEL_LINE_RE = re.compile(r"^json[ \t]*:?[ \t]*(?:\r?\n)+", re.IGNORECASE)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")
_VALID_ESCAPES = frozenset('"\\/bfnrtu')


def parse_response(raw: str) -> Any:
  """Turn raw provider text into a structured value or raise UnparsableResponse."""
  body = strip_wrapping(raw)

  # Prefer strict parsing so valid JSON is preserved without mutation.
  try:
    return json.loads(body)
  except json.JSONDecodeError as exc:
    logger.debug("Strict parse failed at offset %d: %s", exc.pos, exc.msg)

  repaired = repair_json_text(body)
  try:
    value = json.loads(repaired)
  except json.JSONDecodeError as exc:
    raise UnparsableResponse(exc.msg, offset=exc.pos, context=context_window(repaired, exc.pos)) from exc

  logger.info("Recovered provider output through the repair pass (%d chars).", len(repaired))
  return value


def strip_wrapping(raw: str) -> str:
  """Remove fences, preambles, label lines and a quoted wrapper until the text stops changing."""
  text = raw.strip()
  previous = None

  # Providers stack wrappers in either order, so peel until stable.
  while text != previous:
    previous = text
    text = _strip_fence(text)
    text = _PREAMBLE_RE.sub("", text, count=1).strip()
    text = _LABEL_LINE_RE.sub("", text, count=1).strip()

  return _strip_wrapping_quotes(text)


def _strip_fence(text: str) -> str:
  if not text.startswith("```"):
    return text
  text = _FENCE_OPEN_RE.sub("", text, count=1)
  return _FENCE_CLOSE_RE.sub("", text, count=1).strip()


def _strip_wrapping_quotes(text: str) -> str:
  if len(text) < 2 or not (text.startswith('"') and text.endswith('"')):
    return text

  # A JSON string literal holding the document decodes to the escaped body.
  try:
    decoded = json.loads(text)
  except json.JSONDecodeError:
    return text[1:-1].strip()

  if isinstance(decoded, str):
    return decoded.strip()
  return text


def repair_json_text(text: str) -> str:
  """Apply the character-level repair pass to near-JSON text."""
  candidate = _extract_json_block(text) or text
  candidate = _TRAILING_COMMA_RE.sub(r"\1", candidate)
  return _repair_string_runs(candidate)


def context_window(text: str, offset: int, radius: int = CONTEXT_RADIUS) -> str:
  """Return a bounded slice of text around an error offset."""
  start = max(0, offset - radius)
  end = min(len(text), offset + radius)
  return text[start:end]


def _extract_json_block(raw: str) -> str | None:
  """Locate the first balanced JSON object/array to drop leading or trailing prose."""
  start_index: int | None = None
  depth = 0
  in_string = False
  escape = False

  for index, char in enumerate(raw):
    if start_index is None:
      if char in "{[":
        start_index = index
        depth = 1
      continue

    if in_string:
      if escape:
        escape = False
      elif char == "\\":
        escape = True
      elif char == '"':
        in_string = False
      continue

    if char == '"':
      in_string = True
    elif char in "{[":
      depth += 1
    elif char in "}]":
      depth -= 1
      if depth == 0:
        return raw[start_index : index + 1]

  return None


def _repair_string_runs(raw: str) -> str:
  """Collapse raw newlines inside strings, fix stray backslashes and doubled commas."""
  output: list[str] = []
  in_string = False
  index = 0
  length = len(raw)

  while index < length:
    char = raw[index]

    if in_string:
      if char == "\\":
        following = raw[index + 1] if index + 1 < length else ""
        # A JS-style escaped apostrophe is just an apostrophe in JSON.
        if following == "'":
          output.append("'")
          index += 2
          continue
        if following in _VALID_ESCAPES and following:
          output.append(char + following)
          index += 2
          continue
        output.append("\\\\")
        index += 1
        continue

      if char in "\r\n":
        # Collapse a run of line breaks into one space.
        while index < length and raw[index] in "\r\n":
          index += 1
        if output and output[-1] != " ":
          output.append(" ")
        continue

      if char == "\t":
        output.append(" ")
        index += 1
        continue

      if char == '"':
        in_string = False
      output.append(char)
      index += 1
      continue

    if char == '"':
      in_string = True
    elif char == "," and _last_significant(output) == ",":
      index += 1
      continue

    output.append(char)
    index += 1

  return "".join(output)


def _last_significant(output: list[str]) -> str:
  for chunk in reversed(output):
    stripped = chunk.strip()
    if stripped:
      return stripped[-1]
  return ""
