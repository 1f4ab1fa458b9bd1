"""Test configuration for importing the application package."""

from __future__ import annotations

import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
  sys.path.insert(0, str(ROOT))

from typing import Any  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from planwise.main import app  # noqa: E402

DUMMY_LESSON_PATH = ROOT / "fixtures" / "dummy_lesson_response.md"


@pytest.fixture
def anyio_backend() -> str:
  return "asyncio"


@pytest.fixture
def valid_lesson_text() -> str:
  """Raw provider output for a lesson that passes the quality gate (fenced JSON)."""
  return DUMMY_LESSON_PATH.read_text(encoding="utf-8")


@pytest.fixture
def valid_lesson_payload(valid_lesson_text: str) -> dict[str, Any]:
  body = valid_lesson_text.strip().removeprefix("```json").removesuffix("```")
  return json.loads(body)


@pytest.fixture
def short_reading_text(valid_lesson_payload: dict[str, Any]) -> str:
  """Raw provider output whose reading paragraphs are one sentence each."""
  payload = json.loads(json.dumps(valid_lesson_payload))
  for section in payload["sections"]:
    if section["type"] == "reading":
      section["paragraphs"] = ["Trains are fast.", "Stations are busy.", "Tickets cost money.", "Delays happen.", "Maria is late."]
  return json.dumps(payload)


@pytest.fixture
async def async_client():
  async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
    yield client
  app.dependency_overrides.clear()
