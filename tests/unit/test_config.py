"""Unit tests for environment-driven settings."""

from __future__ import annotations

import os

import pytest

from trivia.config import get_settings
from trivia.utils.env import load_env_file


@pytest.fixture(autouse=True)
def _fresh_settings():
  get_settings.cache_clear()
  yield
  get_settings.cache_clear()


def test_defaults(monkeypatch):
  for key in ("TRIVIA_QUEUE_POLL_SECONDS", "TRIVIA_GENERATION_DIFFICULTY", "TRIVIA_MAX_QUESTIONS_PER_JOB", "TRIVIA_QUEUE_AUTOSTART"):
    monkeypatch.delenv(key, raising=False)

  settings = get_settings()

  assert settings.queue_poll_seconds == 5.0
  assert settings.generation_success_delay_seconds == 1.0
  assert settings.generation_error_delay_seconds == 2.0
  assert settings.generation_recent_window == 10
  assert settings.generation_difficulty == "medium"
  assert settings.max_questions_per_job == 100
  assert settings.queue_autostart is True


def test_overrides(monkeypatch):
  monkeypatch.setenv("TRIVIA_QUEUE_POLL_SECONDS", "0.5")
  monkeypatch.setenv("TRIVIA_GENERATION_DIFFICULTY", "HARD")
  monkeypatch.setenv("TRIVIA_QUEUE_AUTOSTART", "off")
  monkeypatch.setenv("TRIVIA_ALLOWED_ORIGINS", "https://admin.example.com, https://ops.example.com")

  settings = get_settings()

  assert settings.queue_poll_seconds == 0.5
  assert settings.generation_difficulty == "hard"
  assert settings.queue_autostart is False
  assert settings.allowed_origins == ("https://admin.example.com", "https://ops.example.com")


@pytest.mark.parametrize(
  ("key", "value", "message"),
  [
    ("TRIVIA_QUEUE_POLL_SECONDS", "0", "TRIVIA_QUEUE_POLL_SECONDS"),
    ("TRIVIA_GENERATION_DIFFICULTY", "impossible", "TRIVIA_GENERATION_DIFFICULTY"),
    ("TRIVIA_MAX_QUESTIONS_PER_JOB", "-5", "TRIVIA_MAX_QUESTIONS_PER_JOB"),
    ("TRIVIA_GENERATION_ERROR_DELAY_SECONDS", "-1", "TRIVIA_GENERATION_ERROR_DELAY_SECONDS"),
    ("TRIVIA_ALLOWED_ORIGINS", "*", "wildcard"),
  ],
)
def test_invalid_values_are_rejected(monkeypatch, key, value, message):
  monkeypatch.setenv(key, value)

  with pytest.raises(ValueError, match=message):
    get_settings()


def test_env_file_does_not_override_existing_values(tmp_path, monkeypatch):
  env_file = tmp_path / ".env"
  env_file.write_text('# local settings\nTRIVIA_TEST_ALPHA="quoted value"\nexport TRIVIA_TEST_BETA=plain # trailing\nTRIVIA_TEST_GAMMA=from-file\nnot a pair\n', encoding="utf-8")
  monkeypatch.delenv("TRIVIA_TEST_ALPHA", raising=False)
  monkeypatch.delenv("TRIVIA_TEST_BETA", raising=False)
  monkeypatch.setenv("TRIVIA_TEST_GAMMA", "from-env")

  applied = load_env_file(env_file)

  assert applied == ["TRIVIA_TEST_ALPHA", "TRIVIA_TEST_BETA"]
  assert os.environ["TRIVIA_TEST_ALPHA"] == "quoted value"
  assert os.environ["TRIVIA_TEST_BETA"] == "plain"
  assert os.environ["TRIVIA_TEST_GAMMA"] == "from-env"
  monkeypatch.delenv("TRIVIA_TEST_ALPHA")
  monkeypatch.delenv("TRIVIA_TEST_BETA")
