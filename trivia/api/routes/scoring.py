from __future__ import annotations

from fastapi import APIRouter

from trivia.api.models import StreakPreviewEntry
from trivia.scoring import get_winning_streak_preview

router = APIRouter()


@router.get("/preview", response_model=list[StreakPreviewEntry])
async def winning_streak_preview() -> list[StreakPreviewEntry]:
  """Points a correct answer earns at each winning streak milestone."""
  return [StreakPreviewEntry(winning_streak=streak, points=points) for streak, points in get_winning_streak_preview()]
