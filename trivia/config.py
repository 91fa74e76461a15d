"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from trivia.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)


@dataclass(frozen=True)
class Settings:
  """Typed settings for the trivia service."""

  environment: str
  debug: bool
  allowed_origins: tuple[str, ...]
  log_max_bytes: int
  log_backup_count: int
  pg_dsn: str | None
  pg_connect_timeout: int
  gemini_api_key: str | None
  gemini_model: str
  queue_autostart: bool
  queue_poll_seconds: float
  generation_success_delay_seconds: float
  generation_error_delay_seconds: float
  generation_recent_window: int
  generation_difficulty: str
  max_questions_per_job: int
  recover_interrupted_jobs: bool


@dataclass(frozen=True)
class DatabaseSettings:
  """Typed settings for database connectivity."""

  debug: bool
  pg_dsn: str | None
  pg_connect_timeout: int


def _parse_bool(raw: str | None, default: bool = False) -> bool:
  """Parse a boolean-ish string from environment variables."""
  if raw is None or raw.strip() == "":
    return default
  return raw.strip().lower() in {"1", "true", "yes", "on"}


def _parse_origins(raw: str | None) -> tuple[str, ...]:
  if not raw:
    return ("http://localhost:5173",)

  origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
  if "*" in origins:
    raise ValueError("TRIVIA_ALLOWED_ORIGINS must not include wildcard origins.")
  return tuple(origins)


def _optional_str(raw: str | None) -> str | None:
  if raw is None:
    return None
  value = raw.strip()
  if value == "":
    return None
  return value


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
  environment = os.getenv("TRIVIA_ENV", "development").lower()
  debug = _parse_bool(os.getenv("TRIVIA_DEBUG"))

  log_max_bytes = _positive_int("TRIVIA_LOG_MAX_BYTES", "5242880")  # 5MB default
  log_backup_count = int(os.getenv("TRIVIA_LOG_BACKUP_COUNT", "10"))
  if log_backup_count < 0:
    raise ValueError("TRIVIA_LOG_BACKUP_COUNT must be zero or a positive integer.")

  queue_poll_seconds = float(os.getenv("TRIVIA_QUEUE_POLL_SECONDS", "5"))
  if queue_poll_seconds <= 0:
    raise ValueError("TRIVIA_QUEUE_POLL_SECONDS must be a positive number.")

  generation_difficulty = (os.getenv("TRIVIA_GENERATION_DIFFICULTY") or "medium").strip().lower()
  if generation_difficulty not in {"easy", "medium", "hard"}:
    raise ValueError("TRIVIA_GENERATION_DIFFICULTY must be one of easy, medium, hard.")

  return Settings(
    environment=environment,
    debug=debug,
    allowed_origins=_parse_origins(os.getenv("TRIVIA_ALLOWED_ORIGINS")),
    log_max_bytes=log_max_bytes,
    log_backup_count=log_backup_count,
    pg_dsn=os.getenv("TRIVIA_PG_DSN") or os.getenv("DATABASE_URL"),
    pg_connect_timeout=_positive_int("TRIVIA_PG_CONNECT_TIMEOUT", "5"),
    gemini_api_key=_optional_str(os.getenv("GEMINI_API_KEY")),
    gemini_model=(os.getenv("TRIVIA_GEMINI_MODEL") or "gemini-2.5-flash").strip(),
    queue_autostart=_parse_bool(os.getenv("TRIVIA_QUEUE_AUTOSTART"), default=True),
    queue_poll_seconds=queue_poll_seconds,
    generation_success_delay_seconds=_non_negative_float("TRIVIA_GENERATION_SUCCESS_DELAY_SECONDS", "1"),
    generation_error_delay_seconds=_non_negative_float("TRIVIA_GENERATION_ERROR_DELAY_SECONDS", "2"),
    generation_recent_window=_positive_int("TRIVIA_GENERATION_RECENT_WINDOW", "10"),
    generation_difficulty=generation_difficulty,
    max_questions_per_job=_positive_int("TRIVIA_MAX_QUESTIONS_PER_JOB", "100"),
    recover_interrupted_jobs=_parse_bool(os.getenv("TRIVIA_RECOVER_INTERRUPTED_JOBS"), default=True),
  )


@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
  """Load database settings without requiring web-runtime configuration."""
  # Migrations and offline scripts only need the DSN.
  return DatabaseSettings(debug=_parse_bool(os.getenv("TRIVIA_DEBUG")), pg_dsn=os.getenv("TRIVIA_PG_DSN") or os.getenv("DATABASE_URL"), pg_connect_timeout=_positive_int("TRIVIA_PG_CONNECT_TIMEOUT", "5"))
