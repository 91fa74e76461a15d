"""Load a local .env file into the process environment."""

from __future__ import annotations

import os
from pathlib import Path


def default_env_path() -> Path:
  """Return the .env path next to the project root."""
  return Path(__file__).resolve().parents[2] / ".env"


def _strip_quotes(value: str) -> str:
  if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
    return value[1:-1]
  # Unquoted values may carry a trailing comment.
  if " #" in value:
    value = value.split(" #", 1)[0].rstrip()
  return value


def load_env_file(path: Path, *, override: bool = False) -> list[str]:
  """Copy KEY=value pairs into os.environ and return the keys that were set."""
  if not path.is_file():
    return []

  applied: list[str] = []
  for raw_line in path.read_text(encoding="utf-8").splitlines():
    line = raw_line.strip()
    if not line or line.startswith("#"):
      continue
    line = line.removeprefix("export ").lstrip()
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key:
      continue
    if key in os.environ and not override:
      continue
    os.environ[key] = _strip_quotes(value.strip())
    applied.append(key)

  return applied
