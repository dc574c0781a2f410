"""Dependency Injection Container.

This module provides a centralized DI container using dependency-injector.
Lifecycles:
- Singleton: One instance for the entire application (engine, clients, configs)
- Factory: New instance every time (services)

Usage:
    # In FastAPI
    from curator.core.container import get_container

    pipeline = get_container().pipeline()
    result = await pipeline.run(PipelineConfig())

    # In tests
    with container.infrastructure.llm_client.override(mock_llm):
        ...
"""

from typing import Any

from dependency_injector import containers, providers

from curator.core.config import Config, get_config
from curator.core.config_loader import load_dedup_config, load_scoring_config
from curator.core.database import get_engine
from curator.infrastructure.llm import LLMClient, LLMConfig
from curator.services.collector.ai_scorer import AIScorer


def build_ai_scorer(config: Config, llm_client: LLMClient) -> AIScorer | None:
    """AI scorer when a provider key is configured, else None."""
    if not config.ai_enabled:
        return None
    llm_config = LLMConfig(
        model=config.llm_model_light,
        max_tokens=config.llm_model_light_max_tokens,
        temperature=0.2,
        timeout=config.llm_timeout_seconds,
    )
    return AIScorer(
        llm_client=llm_client,
        llm_config=llm_config,
        timeout_seconds=config.llm_timeout_seconds,
    )


class InfrastructureContainer(containers.DeclarativeContainer):
    """Infrastructure layer dependencies (database, external clients)."""

    global_config = providers.Dependency(instance_of=Config)

    # ============================================
    # Database
    # ============================================

    db_engine = providers.Singleton(get_engine)

    data_store = providers.Singleton(
        "curator.infrastructure.datastore.DataStore",
        engine=db_engine,
    )

    # ============================================
    # LLM Client
    # ============================================

    # Unified LLM client (LiteLLM-based, provider-agnostic)
    llm_client = providers.Singleton(
        "curator.infrastructure.llm.LLMClient",
    )

    # ============================================
    # HTTP Client
    # ============================================

    http_client = providers.Singleton(
        "curator.infrastructure.http_client.HTTPClient",
        user_agent=global_config.provided.http_user_agent,
        max_retries=global_config.provided.http_max_retries,
        retry_backoff=global_config.provided.http_retry_backoff,
    )


class ConfigContainer(containers.DeclarativeContainer):
    """Configuration models container.

    Provides typed Pydantic config models loaded from config/defaults.yaml.
    """

    scoring_config = providers.Singleton(load_scoring_config)

    dedup_config = providers.Singleton(load_dedup_config)


class ServiceContainer(containers.DeclarativeContainer):
    """Service layer dependencies.

    Services are Factory providers receiving infrastructure via injection.
    """

    global_config = providers.Dependency(instance_of=Config)
    infrastructure = providers.DependenciesContainer()
    configs = providers.DependenciesContainer()

    # ============================================
    # Collector Services
    # ============================================

    ai_scorer = providers.Singleton(
        build_ai_scorer,
        config=global_config,
        llm_client=infrastructure.llm_client,
    )

    content_deduplicator = providers.Factory(
        "curator.services.collector.deduplicator.ContentDeduplicator",
        store=infrastructure.data_store,
        config=configs.dedup_config,
    )

    content_scorer = providers.Factory(
        "curator.services.collector.scorer.ContentScorer",
        config=configs.scoring_config,
        ai_scorer=ai_scorer,
    )

    content_queue_manager = providers.Factory(
        "curator.services.collector.queue_manager.ContentQueueManager",
        store=infrastructure.data_store,
        dedup_config=configs.dedup_config,
    )

    content_pipeline = providers.Factory(
        "curator.services.collector.pipeline.ContentPipeline",
        deduplicator=content_deduplicator,
        scorer=content_scorer,
        queue_manager=content_queue_manager,
        http_client=infrastructure.http_client,
    )

    # ============================================
    # Review Services
    # ============================================

    approval_service = providers.Factory(
        "curator.services.review.approval.ApprovalService",
        store=infrastructure.data_store,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Root application container.

    Composes all sub-containers and provides the main entry point.
    """

    # Uses get_config() to ensure same instance across the app
    config = providers.Singleton(get_config)

    # Sub-containers
    infrastructure = providers.Container(
        InfrastructureContainer,
        global_config=config,
    )

    configs = providers.Container(
        ConfigContainer,
    )

    services = providers.Container(
        ServiceContainer,
        global_config=config,
        infrastructure=infrastructure,
        configs=configs,
    )

    # ============================================
    # Convenience accessors (shortcuts)
    # ============================================

    http_client = providers.Singleton(
        lambda client: client,
        client=infrastructure.http_client,
    )

    queue_manager = providers.Factory(
        lambda svc: svc,
        svc=services.content_queue_manager,
    )

    pipeline = providers.Factory(
        lambda svc: svc,
        svc=services.content_pipeline,
    )

    approval_service = providers.Factory(
        lambda svc: svc,
        svc=services.approval_service,
    )


def create_container() -> ApplicationContainer:
    """Create and configure the application container.

    Returns:
        Configured ApplicationContainer instance
    """
    return ApplicationContainer()


# Global container instance
container = create_container()


def get_container() -> ApplicationContainer:
    """Get the global container (for FastAPI Depends)."""
    return container


# ============================================
# Celery Integration
# ============================================


class TaskScope:
    """Context manager for Celery task scope.

    Each task gets its own engine and HTTP client (Celery runs every
    coroutine in a fresh event loop); they are installed as provider
    overrides for the duration of the scope.

    Usage:
        @celery_app.task
        def my_task():
            with TaskScope(store=store, http_client=client) as scope:
                pipeline = scope.pipeline()
                ...
    """

    def __init__(self, store: Any = None, http_client: Any = None) -> None:
        self._store = store
        self._http_client = http_client
        self._container: ApplicationContainer | None = None

    def __enter__(self) -> ApplicationContainer:
        self._container = container
        if self._store is not None:
            container.infrastructure.data_store.override(self._store)
        if self._http_client is not None:
            container.infrastructure.http_client.override(self._http_client)
        return self._container

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._store is not None:
            container.infrastructure.data_store.reset_last_overriding()
        if self._http_client is not None:
            container.infrastructure.http_client.reset_last_overriding()
        self._container = None
        return None


__all__ = [
    "ApplicationContainer",
    "ConfigContainer",
    "InfrastructureContainer",
    "ServiceContainer",
    "build_ai_scorer",
    "container",
    "create_container",
    "get_config",
    "get_container",
    "TaskScope",
]
