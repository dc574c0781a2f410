"""Celery application configuration.

This module configures the Celery application for scheduled pipeline runs.
Uses Redis as both broker and result backend.
"""

from celery import Celery

from curator.core.config import get_config

settings = get_config()

# Create Celery app
celery_app = Celery(
    "curator",
    broker=str(settings.celery_broker_url),
    backend=str(settings.celery_result_backend),
    include=["curator.workers.collect"],
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=1800,  # 30 minutes hard limit
    task_soft_time_limit=1740,
    # Worker settings
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=100,
    # Result settings
    result_expires=86400,  # 24 hours
    result_extended=True,
    # Beat scheduler settings
    beat_scheduler="celery.beat:PersistentScheduler",
    beat_schedule_filename="celerybeat-schedule",
    beat_schedule={
        "run-pipeline": {
            "task": "curator.workers.collect.run_pipeline",
            "schedule": settings.pipeline_schedule_minutes * 60.0,
        },
        "cleanup-rejected": {
            "task": "curator.workers.collect.cleanup_rejected",
            "schedule": 86400.0,
        },
    },
    # Task routes
    task_routes={
        "curator.workers.collect.*": {"queue": "collect"},
    },
    # Default queue
    task_default_queue="default",
)

__all__ = ["celery_app"]
