"""FastAPI application entry point.

This module creates and configures the FastAPI application instance and
exposes the pipeline ``run`` and queue ``status`` operations plus the
reviewer endpoints.
"""

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from curator.config import PipelineConfig
from curator.core.config import get_config
from curator.core.container import get_container
from curator.core.database import check_db_connection, close_db, init_db
from curator.core.exceptions import (
    ContentValidationError,
    CuratorError,
    InvalidActionError,
    PipelineError,
    RecordNotFoundError,
    ReviewError,
    StorageUnavailableError,
)
from curator.core.logging import get_logger, setup_logging
from curator.core.state_machine import InvalidTransitionError
from curator.models.content import ContentType, ReviewStatus
from curator.services.collector.pipeline import ContentPipeline, RunResult
from curator.services.collector.queue_manager import ContentQueueManager, QueueItem, QueueStatus
from curator.services.review.approval import ApprovalResult, ApprovalService

# Setup logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events.

    Handles startup and shutdown events for the FastAPI application.

    Args:
        app: FastAPI application instance

    Yields:
        None
    """
    config = get_config()
    # Startup
    logger.info("Starting Curator application", env=config.app_env)

    # Create tables only in development with an available DB
    if config.is_development:
        if await check_db_connection():
            await init_db()
        else:
            logger.warning("Database connection not available, skipping initialization")

    yield

    # Shutdown
    logger.info("Shutting down Curator application")
    await get_container().http_client().close()
    await close_db()
    logger.info("Cleanup complete")


# Create FastAPI application
_config = get_config()
app = FastAPI(
    title=_config.app_name,
    description="Content curation pipeline for projects, funding programs and resources",
    version="0.1.0",
    docs_url="/docs" if _config.is_development else None,
    redoc_url="/redoc" if _config.is_development else None,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=_config.cors_origins,
    allow_credentials=_config.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================
# Request models
# ============================================


class RunRequest(BaseModel):
    """Optional overrides for one pipeline run."""

    sources: list[str] | None = None
    score_threshold: int | None = Field(default=None, ge=0, le=100)
    batch_size: int | None = Field(default=None, ge=1, le=100)
    use_ai: bool | None = None


class ReviewBody(BaseModel):
    """Reviewer action on one queue record."""

    action: str
    reviewed_by: str = Field(..., min_length=1)
    notes: str | None = None
    rejection_reason: str | None = None


# ============================================
# Dependencies
# ============================================


def get_pipeline() -> ContentPipeline:
    """Pipeline from the DI container."""
    return get_container().pipeline()


def get_queue_manager() -> ContentQueueManager:
    """Queue manager from the DI container."""
    return get_container().queue_manager()


def get_approval_service() -> ApprovalService:
    """Approval service from the DI container."""
    return get_container().approval_service()


# ============================================
# Error mapping
# ============================================

_STATUS_CODES: list[tuple[type[CuratorError], int]] = [
    (RecordNotFoundError, 404),
    (InvalidActionError, 400),
    (ContentValidationError, 422),
    (InvalidTransitionError, 409),
    (ReviewError, 409),
    (StorageUnavailableError, 503),
    (PipelineError, 503),
]


@app.exception_handler(CuratorError)
async def curator_error_handler(request: Request, exc: CuratorError) -> JSONResponse:
    """Map domain errors to HTTP responses."""
    status_code = next((code for cls, code in _STATUS_CODES if isinstance(exc, cls)), 500)
    if status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# ============================================
# Endpoints
# ============================================


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint.

    Returns:
        Health status
    """
    cfg = get_config()
    return {
        "status": "healthy",
        "app": cfg.app_name,
        "env": cfg.app_env,
    }


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint.

    Returns:
        Welcome message
    """
    return {
        "message": "Curator API",
        "version": "0.1.0",
        "docs": "/docs" if get_config().is_development else "disabled",
    }


@app.post("/pipeline/run", response_model=RunResult)
async def run_pipeline(
    body: RunRequest | None = None,
    pipeline: ContentPipeline = Depends(get_pipeline),
) -> RunResult:
    """Execute one full pipeline pass."""
    overrides = body.model_dump() if body else {}
    config = PipelineConfig.from_config(get_config(), **overrides)
    return await pipeline.run(config)


@app.get("/queue/status", response_model=QueueStatus)
async def queue_status(
    queue_manager: ContentQueueManager = Depends(get_queue_manager),
) -> QueueStatus:
    """Queue counts per content type and status."""
    return await queue_manager.status()


@app.get("/queue/{content_type}", response_model=list[QueueItem])
async def list_queue(
    content_type: ContentType,
    limit: int = Query(default=50, ge=1, le=500),
    status: list[ReviewStatus] | None = Query(default=None),
    queue_manager: ContentQueueManager = Depends(get_queue_manager),
) -> list[QueueItem]:
    """Queue records of one type, highest score first."""
    return await queue_manager.get_pending(content_type, limit=limit, statuses=status)


@app.post("/queue/{content_type}/{item_id}/review", response_model=ApprovalResult)
async def review_item(
    content_type: ContentType,
    item_id: uuid.UUID,
    body: ReviewBody,
    approval_service: ApprovalService = Depends(get_approval_service),
) -> ApprovalResult:
    """Apply a reviewer action (approve, reject, start_review, request_info)."""
    return await approval_service.review(
        item_id,
        body.action,
        body.reviewed_by,
        notes=body.notes,
        rejection_reason=body.rejection_reason,
        content_type=content_type,
    )


def serve() -> None:
    """Run the API with uvicorn on the configured host and port."""
    cfg = get_config()
    uvicorn.run("curator.main:app", host=cfg.api_host, port=cfg.api_port, reload=cfg.debug)


__all__ = ["app", "serve"]
