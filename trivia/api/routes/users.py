from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from trivia.api.models import UserStatsResponse
from trivia.services import answers
from trivia.services.errors import UserNotFoundError
from trivia.storage.content_store import ContentStore
from trivia.storage.factory import get_content_store

router = APIRouter()


@router.get("/{user_id}/stats", response_model=UserStatsResponse)
async def get_user_stats(user_id: int, store: ContentStore = Depends(get_content_store)) -> UserStatsResponse:  # noqa: B008
  try:
    stats = await answers.get_user_stats(store, user_id)
  except UserNotFoundError as exc:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
  return UserStatsResponse.from_stats(stats)
