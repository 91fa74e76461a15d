from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from trivia.api.models import AnswerRequest, AnswerResponse
from trivia.services import answers
from trivia.services.errors import InvalidAnswerError, QuestionNotFoundError, UserNotFoundError
from trivia.storage.content_store import ContentStore
from trivia.storage.factory import get_content_store

router = APIRouter()


@router.post("", response_model=AnswerResponse)
async def submit_answer(request: AnswerRequest, store: ContentStore = Depends(get_content_store)) -> AnswerResponse:  # noqa: B008
  """Grade a reply and return the points earned with the updated streaks."""
  try:
    outcome = await answers.record_answer(store, user_id=request.user_id, question_id=request.question_id, answer=request.answer)
  except InvalidAnswerError as exc:
    raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
  except (UserNotFoundError, QuestionNotFoundError) as exc:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
  return AnswerResponse.from_outcome(outcome)
