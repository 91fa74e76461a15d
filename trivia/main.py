from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from trivia.api.routes import answers, generation, scoring, users
from trivia.config import get_settings
from trivia.core.exceptions import global_exception_handler, http_exception_handler, request_validation_exception_handler
from trivia.core.lifespan import lifespan
from trivia.core.middleware import RequestLoggingMiddleware

settings = get_settings()

app = FastAPI(title="Daily Trivia", lifespan=lifespan)

app.add_middleware(CORSMiddleware, allow_origins=list(settings.allowed_origins), allow_credentials=True, allow_methods=["GET", "POST", "DELETE", "OPTIONS"], allow_headers=["content-type", "authorization"], expose_headers=["content-length", "x-request-id"])

# Add exception handlers
app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

app.add_middleware(RequestLoggingMiddleware)


@app.get("/health", include_in_schema=False)
async def health_check() -> dict[str, str]:
  """Return a simple health status."""
  return {"status": "ok", "version": "0.1.0"}


app.include_router(generation.router, prefix="/admin/generation-jobs", tags=["generation"])
app.include_router(answers.router, prefix="/v1/answers", tags=["answers"])
app.include_router(users.router, prefix="/v1/users", tags=["users"])
app.include_router(scoring.router, prefix="/v1/scoring", tags=["scoring"])


if __name__ == "__main__":
  import uvicorn

  uvicorn.run("trivia.main:app", host="0.0.0.0", port=8080, reload=True)
