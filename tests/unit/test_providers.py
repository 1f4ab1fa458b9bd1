"""Tests for provider clients and provider routing."""

from __future__ import annotations

import asyncio
import base64
import json
from dataclasses import replace
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from planwise.ai.errors import ProviderTransportError, is_policy_refusal
from planwise.ai.providers.base import GenerationParams
from planwise.ai.providers.gemini import GeminiModel, GeminiProvider
from planwise.ai.providers.openrouter import OpenRouterModel, OpenRouterProvider
from planwise.ai.providers.runware import RUNWARE_MODEL, RunwareImageProvider
from planwise.ai.router import ProviderMode, get_image_provider, get_model_for_mode, get_provider_for_mode
from planwise.config import get_settings


@pytest.fixture(autouse=True)
def _no_dummy_responses(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.delenv("PLANWISE_USE_DUMMY_LESSON_RESPONSE", raising=False)


def _completion(content: str | None, *, finish_reason: str = "stop", usage: object | None = None) -> SimpleNamespace:
  choice = SimpleNamespace(message=SimpleNamespace(content=content), finish_reason=finish_reason)
  return SimpleNamespace(choices=[choice], usage=usage)


def _openrouter_with(create: AsyncMock) -> OpenRouterModel:
  model = OpenRouterModel("google/gemini-2.5-flash", api_key="test-key")
  model._client = MagicMock()
  model._client.chat.completions.create = create
  return model


def test_openrouter_requires_api_key() -> None:
  with pytest.raises(ValueError):
    OpenRouterModel("google/gemini-2.5-flash", api_key=None)


@pytest.mark.anyio
async def test_openrouter_passes_sampling_params_and_reports_usage() -> None:
  usage = SimpleNamespace(prompt_tokens=10, completion_tokens=20, total_tokens=30)
  create = AsyncMock(return_value=_completion('{"title": "x"}', usage=usage))
  model = _openrouter_with(create)

  response = await model.generate("prompt", GenerationParams(temperature=0.5, top_p=0.8, max_output_tokens=1000))

  assert response.content == '{"title": "x"}'
  assert response.usage == {"prompt_tokens": 10, "completion_tokens": 20, "total_tokens": 30}
  kwargs = create.await_args.kwargs
  assert kwargs["model"] == "google/gemini-2.5-flash"
  assert kwargs["temperature"] == 0.5
  assert kwargs["top_p"] == 0.8
  assert kwargs["max_tokens"] == 1000


@pytest.mark.anyio
async def test_openrouter_content_filter_reads_as_refusal() -> None:
  model = _openrouter_with(AsyncMock(return_value=_completion(None, finish_reason="content_filter")))

  with pytest.raises(ProviderTransportError) as exc_info:
    await model.generate("prompt", GenerationParams())

  assert is_policy_refusal(exc_info.value)


@pytest.mark.anyio
async def test_openrouter_wraps_sdk_errors() -> None:
  error = openai.APIConnectionError(request=httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions"))
  model = _openrouter_with(AsyncMock(side_effect=error))

  with pytest.raises(ProviderTransportError) as exc_info:
    await model.generate("prompt", GenerationParams())

  assert exc_info.value.provider == "openrouter"
  assert not is_policy_refusal(exc_info.value)


@pytest.mark.anyio
async def test_openrouter_uses_dummy_response_without_network(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.setenv("PLANWISE_USE_DUMMY_LESSON_RESPONSE", "1")
  monkeypatch.delenv("PLANWISE_DUMMY_LESSON_RESPONSE_PATH", raising=False)
  create = AsyncMock()
  model = _openrouter_with(create)

  response = await model.generate("prompt", GenerationParams())

  assert "Travelling by Train" in response.content
  create.assert_not_awaited()


def test_openrouter_rejects_unknown_models() -> None:
  with pytest.raises(ValueError):
    OpenRouterProvider("test-key").get_model("made-up/model")


def _gemini_with(generate_content) -> GeminiModel:
  model = GeminiModel("gemini-2.5-flash", api_key="test-key", timeout_seconds=0.05)
  model._client = MagicMock()
  model._client.aio.models.generate_content = generate_content
  return model


def test_gemini_requires_api_key() -> None:
  with pytest.raises(ValueError):
    GeminiModel("gemini-2.5-flash", api_key="")


@pytest.mark.anyio
async def test_gemini_returns_text_and_usage() -> None:
  usage = SimpleNamespace(prompt_token_count=5, candidates_token_count=7, total_token_count=12)
  response = SimpleNamespace(prompt_feedback=None, text="{}", usage_metadata=usage)
  generate_content = AsyncMock(return_value=response)
  model = _gemini_with(generate_content)

  result = await model.generate("prompt", GenerationParams(temperature=0.1))

  assert result.content == "{}"
  assert result.usage == {"prompt_tokens": 5, "completion_tokens": 7, "total_tokens": 12}
  assert generate_content.await_args.kwargs["config"].temperature == 0.1


@pytest.mark.anyio
async def test_gemini_timeout_is_a_transport_error() -> None:
  async def _slow(**_kwargs):
    await asyncio.sleep(1)

  model = _gemini_with(_slow)

  with pytest.raises(ProviderTransportError, match="timed out"):
    await model.generate("prompt", GenerationParams())


@pytest.mark.anyio
async def test_gemini_blocked_prompt_reads_as_refusal() -> None:
  response = SimpleNamespace(prompt_feedback=SimpleNamespace(block_reason="SAFETY"), text=None, usage_metadata=None)
  model = _gemini_with(AsyncMock(return_value=response))

  with pytest.raises(ProviderTransportError) as exc_info:
    await model.generate("prompt", GenerationParams())

  assert is_policy_refusal(exc_info.value)


@pytest.mark.anyio
async def test_gemini_empty_text_is_an_error() -> None:
  response = SimpleNamespace(prompt_feedback=None, text="  ", usage_metadata=None)
  model = _gemini_with(AsyncMock(return_value=response))

  with pytest.raises(ProviderTransportError, match="empty"):
    await model.generate("prompt", GenerationParams())


def _png_b64() -> str:
  return base64.b64encode(b"\x89PNG fake bytes").decode("ascii")


@pytest.mark.anyio
async def test_runware_posts_one_flux_task_and_decodes_base64() -> None:
  seen: list[httpx.Request] = []

  def handler(request: httpx.Request) -> httpx.Response:
    seen.append(request)
    return httpx.Response(200, json={"data": [{"imageBase64Data": _png_b64()}]})

  provider = RunwareImageProvider("rw-key", transport=httpx.MockTransport(handler))

  image = await provider.generate_image("A red train", "vocab_train")

  assert image == b"\x89PNG fake bytes"
  assert seen[0].headers["authorization"] == "Bearer rw-key"
  [task] = json.loads(seen[0].content)
  assert task["positivePrompt"] == "A red train"
  assert task["model"] == RUNWARE_MODEL
  assert (task["width"], task["height"]) == (256, 256)


@pytest.mark.anyio
async def test_runware_downloads_hosted_url_when_base64_is_missing() -> None:
  def handler(request: httpx.Request) -> httpx.Response:
    if request.method == "GET":
      return httpx.Response(200, content=b"downloaded")
    return httpx.Response(200, json={"data": [{"imageURL": "https://im.runware.ai/image.png"}]})

  provider = RunwareImageProvider("rw-key", transport=httpx.MockTransport(handler))

  assert await provider.generate_image("A red train", "vocab_train") == b"downloaded"


@pytest.mark.anyio
@pytest.mark.parametrize(
  "response",
  [
    httpx.Response(500, text="boom"),
    httpx.Response(200, json={"errors": [{"code": "invalidPrompt", "message": "bad"}]}),
    httpx.Response(200, json={"data": []}),
    httpx.Response(200, json={"data": [{"imageBase64Data": "%%%not-base64"}]}),
    httpx.Response(200, text="not json"),
  ],
)
async def test_runware_failures_return_none(response: httpx.Response) -> None:
  provider = RunwareImageProvider("rw-key", transport=httpx.MockTransport(lambda request: response))

  assert await provider.generate_image("A red train", "vocab_train") is None


@pytest.mark.anyio
async def test_runware_without_key_or_prompt_skips_the_request() -> None:
  handler = MagicMock()
  transport = httpx.MockTransport(handler)

  assert await RunwareImageProvider(None, transport=transport).generate_image("A red train", "x") is None
  assert await RunwareImageProvider("rw-key", transport=transport).generate_image("   ", "x") is None
  handler.assert_not_called()


def test_router_builds_configured_provider() -> None:
  settings = replace(get_settings(), openrouter_api_key="or-key", gemini_api_key="gm-key", runware_api_key=None)

  assert isinstance(get_provider_for_mode(ProviderMode.GEMINI, settings), GeminiProvider)
  assert isinstance(get_provider_for_mode("openrouter", settings), OpenRouterProvider)
  assert get_model_for_mode("gemini", settings, "gemini-2.5-pro").name == "gemini-2.5-pro"
  assert get_model_for_mode("openrouter", settings).name == "google/gemini-3-pro-preview"
  assert isinstance(get_image_provider(settings), RunwareImageProvider)
  with pytest.raises(ValueError):
    get_provider_for_mode("anthropic", settings)
