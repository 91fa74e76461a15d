from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from trivia.ai.question_generator import DEFAULT_CATEGORIES
from trivia.api.models import GenerationJobCreateRequest, GenerationJobResponse
from trivia.config import Settings, get_settings
from trivia.services import generation_jobs
from trivia.services.errors import InvalidJobRequestError, JobNotFoundError, JobNotPendingError
from trivia.storage.content_store import ContentStore
from trivia.storage.factory import get_content_store

router = APIRouter()


@router.post("", response_model=GenerationJobResponse, status_code=status.HTTP_201_CREATED)
async def create_generation_job(request: GenerationJobCreateRequest, store: ContentStore = Depends(get_content_store), settings: Settings = Depends(get_settings)) -> GenerationJobResponse:  # noqa: B008
  """Queue a batch of questions for background generation."""
  try:
    job = await generation_jobs.enqueue_generation_job(store, settings, category=request.category, question_count=request.question_count)
  except InvalidJobRequestError as exc:
    raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
  return GenerationJobResponse.from_record(job)


@router.get("", response_model=list[GenerationJobResponse])
async def list_generation_jobs(limit: int = Query(default=50, ge=1, le=200), store: ContentStore = Depends(get_content_store)) -> list[GenerationJobResponse]:  # noqa: B008
  """List generation jobs, newest first."""
  jobs = await generation_jobs.list_generation_jobs(store, limit=limit)
  return [GenerationJobResponse.from_record(job) for job in jobs]


@router.get("/categories", response_model=list[str])
async def list_suggested_categories() -> list[str]:
  """Categories offered in the admin form; any non-empty category is accepted."""
  return list(DEFAULT_CATEGORIES)


@router.get("/{job_id}", response_model=GenerationJobResponse)
async def get_generation_job(job_id: str, store: ContentStore = Depends(get_content_store)) -> GenerationJobResponse:  # noqa: B008
  try:
    job = await generation_jobs.get_generation_job(store, job_id)
  except JobNotFoundError as exc:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
  return GenerationJobResponse.from_record(job)


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_generation_job(job_id: str, store: ContentStore = Depends(get_content_store)) -> Response:  # noqa: B008
  """Cancel a job that is still pending."""
  try:
    await generation_jobs.cancel_generation_job(store, job_id)
  except JobNotFoundError as exc:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
  except JobNotPendingError as exc:
    raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
  return Response(status_code=status.HTTP_204_NO_CONTENT)
