from __future__ import annotations

from functools import lru_cache

from trivia.storage.content_store import ContentStore


@lru_cache(maxsize=1)
def get_content_store() -> ContentStore:
  """Return the process-wide content store."""
  from trivia.storage.postgres_content_store import PostgresContentStore

  return PostgresContentStore()
