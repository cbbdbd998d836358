"""
Dependency wiring for the FastAPI app.

Connectors are built once per process by ``create_app`` (or by the entry
point) and kept on ``app.state``; request handlers reach the status
reporter through ``get_status_reporter``.
"""

from __future__ import annotations

from fastapi import Request

from files_manager.cache import CacheClient, InMemoryCacheClient, RedisCacheClient
from files_manager.config import Settings, get_settings
from files_manager.db import DbClient, InMemoryDbClient, SqlDbClient
from files_manager.readiness import ReadinessPoller
from files_manager.status import StatusReporter


def build_db_client(settings: Settings | None = None) -> DbClient:
    settings = settings or get_settings()
    if settings.use_in_memory_backends:
        return InMemoryDbClient()
    return SqlDbClient(settings.store_url())


def build_cache_client(settings: Settings | None = None) -> CacheClient:
    settings = settings or get_settings()
    if settings.use_in_memory_backends:
        return InMemoryCacheClient()
    return RedisCacheClient(url=settings.redis_url)


def build_readiness_poller(settings: Settings | None = None) -> ReadinessPoller:
    settings = settings or get_settings()
    return ReadinessPoller(
        max_attempts=settings.readiness_max_attempts,
        poll_interval_ms=settings.readiness_poll_interval_ms,
    )


def get_status_reporter(request: Request) -> StatusReporter:
    return request.app.state.status_reporter
