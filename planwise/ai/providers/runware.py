"""Runware image inference client."""

from __future__ import annotations

import base64
import binascii
import logging
import uuid
from typing import Any

import httpx

from planwise.ai.providers.base import ImageProvider

logger = logging.getLogger(__name__)

RUNWARE_API_URL = "https://api.runware.ai/v1"
# Flux Schnell.
RUNWARE_MODEL = "runware:100@1"
IMAGE_SIZE = 256


class RunwareImageProvider(ImageProvider):
  """Generate small lesson illustrations through the Runware REST API.

  Every failure is logged and reported as None so a single bad image never
  fails the whole lesson.
  """

  def __init__(self, api_key: str | None, *, timeout_seconds: float = 60.0, api_url: str = RUNWARE_API_URL, transport: httpx.AsyncBaseTransport | None = None) -> None:
    self.name: str = "runware"
    self._api_key = api_key
    self._timeout_seconds = timeout_seconds
    self._api_url = api_url
    self._transport = transport

  async def generate_image(self, prompt: str, request_id: str) -> bytes | None:
    if not self._api_key:
      logger.info("Runware API key not configured, skipping image %s.", request_id)
      return None
    if not prompt.strip():
      logger.warning("Empty image prompt for %s, skipping generation.", request_id)
      return None

    task = {
      "taskType": "imageInference",
      "taskUUID": str(uuid.uuid4()),
      "positivePrompt": prompt,
      "model": RUNWARE_MODEL,
      "width": IMAGE_SIZE,
      "height": IMAGE_SIZE,
      "numberResults": 1,
      "outputType": "base64Data",
      "outputFormat": "PNG",
    }
    headers = {"Authorization": f"Bearer {self._api_key}"}

    try:
      async with httpx.AsyncClient(timeout=self._timeout_seconds, transport=self._transport) as client:
        response = await client.post(self._api_url, json=[task], headers=headers)
        response.raise_for_status()
        payload = response.json()
        return await _image_bytes(client, payload, request_id)
    except (httpx.HTTPError, ValueError) as exc:
      logger.error("Runware image %s failed: %s", request_id, exc)
      return None


async def _image_bytes(client: httpx.AsyncClient, payload: Any, request_id: str) -> bytes | None:
  if not isinstance(payload, dict):
    logger.error("Runware returned a non-object payload for %s.", request_id)
    return None
  if payload.get("errors"):
    logger.error("Runware returned errors for %s: %s", request_id, payload["errors"])
    return None

  results = payload.get("data") or []
  if not results or not isinstance(results[0], dict):
    logger.error("No image data in Runware response for %s.", request_id)
    return None

  result = results[0]
  encoded = result.get("imageBase64Data")
  if encoded:
    try:
      return base64.b64decode(encoded, validate=True)
    except binascii.Error as exc:
      logger.error("Runware image %s carried invalid base64: %s", request_id, exc)
      return None

  # Some responses only carry a hosted URL.
  image_url = result.get("imageURL")
  if image_url:
    download = await client.get(image_url)
    download.raise_for_status()
    return download.content

  logger.error("No image data in Runware response for %s.", request_id)
  return None
