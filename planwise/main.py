from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from planwise.ai.errors import GenerationExhausted, PolicyRestricted
from planwise.api.routes import lessons
from planwise.config import get_settings
from planwise.core.exceptions import generation_exhausted_handler, global_exception_handler, http_exception_handler, policy_restricted_handler, request_validation_exception_handler
from planwise.core.lifespan import lifespan
from planwise.core.middleware import RequestLoggingMiddleware

settings = get_settings()

app = FastAPI(lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)

app.add_middleware(CORSMiddleware, allow_origins=list(settings.allowed_origins), allow_credentials=True, allow_methods=["GET", "POST", "OPTIONS"], allow_headers=["content-type", "authorization"], expose_headers=["content-length", "x-request-id"])


# Add exception handlers
app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(GenerationExhausted, generation_exhausted_handler)
app.add_exception_handler(PolicyRestricted, policy_restricted_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

# Add middleware
app.add_middleware(RequestLoggingMiddleware)


@app.get("/health", include_in_schema=False)
async def health_check() -> dict[str, str]:
  """Return a simple health status."""
  return {"status": "ok", "version": "0.1.0"}


app.include_router(lessons.router, prefix="/v1/lessons", tags=["lessons"])
