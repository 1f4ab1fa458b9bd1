"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from planwise.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

_DEFAULT_ORIGINS = "http://localhost:5000"


@dataclass(frozen=True)
class Settings:
  """Typed settings for the Planwise lesson service."""

  environment: str
  debug: bool
  allowed_origins: tuple[str, ...]
  log_max_bytes: int
  log_backup_count: int
  provider: str
  model: str | None
  openrouter_api_key: str | None
  openrouter_http_referer: str | None
  openrouter_title: str | None
  gemini_api_key: str | None
  runware_api_key: str | None
  provider_timeout_seconds: float
  temperature: float
  top_p: float
  max_output_tokens: int
  max_attempts: int
  min_reading_paragraphs: int
  min_paragraph_sentences: int
  images_enabled: bool
  image_batch_size: int
  image_batch_pause_seconds: float


def _parse_origins(raw: str | None) -> tuple[str, ...]:
  origins = [origin.strip() for origin in (raw or _DEFAULT_ORIGINS).split(",") if origin.strip()]

  if not origins:
    raise ValueError("PLANWISE_ALLOWED_ORIGINS must include at least one origin.")

  if "*" in origins:
    raise ValueError("PLANWISE_ALLOWED_ORIGINS must not include wildcard origins.")

  return tuple(origins)


def _parse_bool(raw: str | None, *, default: bool = False) -> bool:
  """Parse a boolean-ish string from environment variables."""

  if raw is None:
    return default

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _optional_str(raw: str | None) -> str | None:
  if raw is None:
    return None
  value = raw.strip()
  return value or None


def _positive_int(name: str, default: str) -> int:
  value = int(os.getenv(name, default))
  if value <= 0:
    raise ValueError(f"{name} must be a positive integer.")
  return value


def _non_negative_float(name: str, default: str) -> float:
  value = float(os.getenv(name, default))
  if value < 0:
    raise ValueError(f"{name} must be zero or a positive number.")
  return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""

  environment = os.getenv("PLANWISE_ENV", "development").lower()
  debug = _parse_bool(os.getenv("PLANWISE_DEBUG"))

  log_max_bytes = _positive_int("PLANWISE_LOG_MAX_BYTES", "5242880")  # 5MB default
  log_backup_count = int(os.getenv("PLANWISE_LOG_BACKUP_COUNT", "10"))
  if log_backup_count < 0:
    raise ValueError("PLANWISE_LOG_BACKUP_COUNT must be zero or a positive integer.")

  provider = (os.getenv("PLANWISE_PROVIDER") or "openrouter").strip().lower()
  if provider not in {"openrouter", "gemini"}:
    raise ValueError("PLANWISE_PROVIDER must be 'openrouter' or 'gemini'.")

  temperature = _non_negative_float("PLANWISE_TEMPERATURE", "0.3")
  if temperature > 2:
    raise ValueError("PLANWISE_TEMPERATURE must be between 0 and 2.")

  top_p = _non_negative_float("PLANWISE_TOP_P", "0.9")
  if top_p > 1:
    raise ValueError("PLANWISE_TOP_P must be between 0 and 1.")

  provider_timeout_seconds = _non_negative_float("PLANWISE_PROVIDER_TIMEOUT_SECONDS", "60")
  if provider_timeout_seconds == 0:
    raise ValueError("PLANWISE_PROVIDER_TIMEOUT_SECONDS must be a positive number.")

  return Settings(
    environment=environment,
    debug=debug,
    allowed_origins=_parse_origins(os.getenv("PLANWISE_ALLOWED_ORIGINS")),
    log_max_bytes=log_max_bytes,
    log_backup_count=log_backup_count,
    provider=provider,
    model=_optional_str(os.getenv("PLANWISE_MODEL")),
    openrouter_api_key=_optional_str(os.getenv("PLANWISE_OPENROUTER_API_KEY")),
    openrouter_http_referer=_optional_str(os.getenv("PLANWISE_OPENROUTER_HTTP_REFERER")),
    openrouter_title=_optional_str(os.getenv("PLANWISE_OPENROUTER_TITLE")),
    gemini_api_key=_optional_str(os.getenv("PLANWISE_GEMINI_API_KEY")),
    runware_api_key=_optional_str(os.getenv("PLANWISE_RUNWARE_API_KEY")),
    provider_timeout_seconds=provider_timeout_seconds,
    temperature=temperature,
    top_p=top_p,
    max_output_tokens=_positive_int("PLANWISE_MAX_OUTPUT_TOKENS", "16384"),
    max_attempts=_positive_int("PLANWISE_MAX_ATTEMPTS", "3"),
    min_reading_paragraphs=_positive_int("PLANWISE_MIN_READING_PARAGRAPHS", "5"),
    min_paragraph_sentences=_positive_int("PLANWISE_MIN_PARAGRAPH_SENTENCES", "3"),
    # Image generation is opt-out so local runs without a key degrade to text-only lessons.
    images_enabled=_parse_bool(os.getenv("PLANWISE_IMAGES_ENABLED"), default=True),
    image_batch_size=_positive_int("PLANWISE_IMAGE_BATCH_SIZE", "10"),
    image_batch_pause_seconds=_non_negative_float("PLANWISE_IMAGE_BATCH_PAUSE_SECONDS", "0.5"),
  )
