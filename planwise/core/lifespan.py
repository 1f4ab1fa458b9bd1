import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from planwise.core.logging import _initialize_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
  """Ensure logging is correctly set up after uvicorn starts."""
  from planwise.config import get_settings

  settings = get_settings()
  logger = logging.getLogger("planwise.core.lifespan")

  try:
    _initialize_logging(settings)
    logger.info("Startup complete - logging verified.")
  except (OSError, RuntimeError):
    # The service still runs with default logging when the log directory is unavailable.
    logger.warning("Initial logging setup failed.", exc_info=True)

  yield
