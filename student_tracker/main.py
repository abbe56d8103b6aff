"""
Student Tracker FastAPI Application Entry Point.

Run with: uvicorn student_tracker.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from student_tracker.config import get_settings, sanitize_error
from student_tracker.api.routes import (
    assignments,
    auth,
    dashboard,
    files,
    notes,
    past_papers,
    search,
    units,
)
from student_tracker.db.session import init_models
from student_tracker.services.exceptions import DataIntegrityError, TrackerError

settings = get_settings()
logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Leveled logging for the app's own loggers."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown."""
    # Startup
    configure_logging()
    if settings.environment == "development":
        await init_models()
    yield
    # Shutdown


app = FastAPI(
    title=settings.app_name,
    description="Course notes, assignments, past papers and completion leaderboards",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TrackerError)
async def tracker_error_handler(request: Request, exc: TrackerError) -> JSONResponse:
    """Translate domain errors into HTTP responses."""
    if isinstance(exc, DataIntegrityError):
        logger.error("Data integrity error on %s: %s", request.url.path, exc.message)
        detail = sanitize_error(exc, generic_message="Stored records are inconsistent.")
    else:
        detail = exc.message
    return JSONResponse(status_code=exc.status_code, content={"detail": detail})


# Include routers
app.include_router(auth.router)
app.include_router(units.router)
app.include_router(notes.router)
app.include_router(assignments.router)
app.include_router(past_papers.router)
app.include_router(dashboard.router)
app.include_router(files.router)
app.include_router(search.router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
