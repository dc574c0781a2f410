"""Celery workers for Curator.

Modules:
- celery_app: Celery application configuration and beat schedule
- collect: Pipeline and queue maintenance tasks
"""

from curator.workers.celery_app import celery_app

__all__ = ["celery_app"]
