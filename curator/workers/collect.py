"""Pipeline Celery tasks.

Tasks:
- run_pipeline: One full pipeline pass (scheduled by beat)
- cleanup_rejected: Delete old rejected queue records (scheduled daily)

Every task builds its own engine and HTTP client inside ``asyncio.run``
and disposes them before returning.
"""

import asyncio
from typing import Any

from celery import shared_task
from celery.utils.log import get_task_logger

from curator.config import PipelineConfig
from curator.core.config import get_config
from curator.core.container import TaskScope
from curator.core.database import close_db, create_engine
from curator.infrastructure.datastore import DataStore
from curator.infrastructure.http_client import HTTPClient
from curator.services.collector.pipeline import RunResult

logger = get_task_logger(__name__)


async def _run_pipeline_async(overrides: dict[str, Any]) -> RunResult:
    """Run the pipeline with task-scoped resources."""
    config = get_config()
    engine = create_engine(config)
    http_client = HTTPClient(
        user_agent=config.http_user_agent,
        max_retries=config.http_max_retries,
        retry_backoff=config.http_retry_backoff,
    )
    try:
        with TaskScope(store=DataStore(engine), http_client=http_client) as scope:
            pipeline = scope.pipeline()
            return await pipeline.run(PipelineConfig.from_config(config, **overrides))
    finally:
        await http_client.close()
        await close_db(engine)


async def _cleanup_rejected_async(older_than_days: int) -> dict[str, int]:
    engine = create_engine()
    try:
        with TaskScope(store=DataStore(engine)) as scope:
            return await scope.queue_manager().cleanup_rejected(older_than_days)
    finally:
        await close_db(engine)


# =============================================================================
# Celery Tasks
# =============================================================================


@shared_task(
    bind=True,
    name="curator.workers.collect.run_pipeline",
    max_retries=3,
    default_retry_delay=300,
)
def run_pipeline(
    self,
    sources: list[str] | None = None,
    score_threshold: int | None = None,
    batch_size: int | None = None,
    use_ai: bool | None = None,
) -> dict[str, Any]:
    """Run one pipeline pass.

    Source failures are part of the result; only a PipelineError
    (storage unavailable, bad configuration) triggers a retry.

    Args:
        self: Celery task instance
        sources: Source names (default: every enabled source)
        score_threshold: Override the configured threshold
        batch_size: Override the configured batch size
        use_ai: Override AI blending

    Returns:
        RunResult as dict
    """
    logger.info("Starting pipeline run")
    overrides = {
        "sources": sources,
        "score_threshold": score_threshold,
        "batch_size": batch_size,
        "use_ai": use_ai,
    }

    try:
        result = asyncio.run(_run_pipeline_async(overrides))

        logger.info(
            f"Pipeline run complete: fetched={result.fetched}, stored={result.stored}, "
            f"rejected={result.rejected}, errors={len(result.errors)}"
        )

        return result.model_dump(mode="json")

    except Exception as exc:
        logger.error(f"Pipeline run failed: {exc}", exc_info=True)
        raise self.retry(exc=exc) from exc


@shared_task(
    bind=True,
    name="curator.workers.collect.cleanup_rejected",
    max_retries=1,
    default_retry_delay=600,
)
def cleanup_rejected(self, older_than_days: int = 30) -> dict[str, int]:
    """Delete rejected queue records older than the cutoff.

    Args:
        self: Celery task instance
        older_than_days: Age threshold in days

    Returns:
        Deleted count per content type
    """
    try:
        deleted = asyncio.run(_cleanup_rejected_async(older_than_days))
        logger.info(f"Rejected cleanup complete: {deleted}")
        return deleted
    except Exception as exc:
        logger.error(f"Rejected cleanup failed: {exc}", exc_info=True)
        raise self.retry(exc=exc) from exc


__all__ = [
    "run_pipeline",
    "cleanup_rejected",
]
