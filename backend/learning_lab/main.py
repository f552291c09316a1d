"""
Liquid Learning Lab FastAPI Application Entry Point.

Run with: uvicorn learning_lab.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from learning_lab.api.routes import conversations, generation, learning
from learning_lab.config import configure_logging, get_settings, sanitize_error
from learning_lab.errors import LearningLabError, PersistenceError
from learning_lab.repositories import MemoryRepository
from learning_lab.services import build_capabilities

settings = get_settings()
configure_logging(settings)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown."""
    # Startup
    app.state.capabilities = build_capabilities(settings)
    if settings.storage_backend == "memory":
        app.state.memory_repository = MemoryRepository()
    logger.info(
        "Started %s (storage=%s, environment=%s)",
        settings.app_name, settings.storage_backend, settings.environment,
    )
    yield
    # Shutdown
    if settings.storage_backend == "sql":
        from learning_lab.db.session import engine

        await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="AI tutoring chat API with automatic subject detection and visuals",
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

# Include routers
app.include_router(conversations.router, prefix=settings.api_prefix)
app.include_router(learning.router, prefix=settings.api_prefix)
app.include_router(generation.router, prefix=settings.api_prefix)


# =============================================================================
# ERROR HANDLERS
# =============================================================================


def _jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Field errors reduced to loc/msg/type (the raw input is not echoed back)."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]


@app.exception_handler(LearningLabError)
async def learning_lab_error_handler(request: Request, exc: LearningLabError) -> JSONResponse:
    """Map application errors to their status code with a user-safe message."""
    if isinstance(exc, PersistenceError):
        detail = sanitize_error(exc.__cause__ or exc, generic_message=exc.public_message)
    else:
        detail = exc.message
    return JSONResponse(status_code=exc.status_code, content={"detail": detail})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or missing request fields are a 400, not FastAPI's default 422."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request data", "errors": _jsonable_errors(exc)},
    )


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
