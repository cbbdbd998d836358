"""
FastAPI application entry point for the files manager backend.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from files_manager.cache import CacheClient
from files_manager.config import get_settings
from files_manager.db import DbClient
from files_manager.dependencies import build_cache_client, build_db_client
from files_manager.routes import router
from files_manager.status import StatusReporter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    db_client: DbClient = app.state.db_client
    cache_client: CacheClient = app.state.cache_client
    # connect() never raises; a down dependency reads as false in /status.
    await asyncio.gather(
        asyncio.to_thread(db_client.connect),
        asyncio.to_thread(cache_client.connect),
    )
    logger.info(
        "Startup liveness: db=%s redis=%s",
        db_client.is_alive(),
        cache_client.is_alive(),
    )
    try:
        yield
    finally:
        db_client.close()
        cache_client.close()


def create_app(
    db_client: DbClient | None = None,
    cache_client: CacheClient | None = None,
) -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Files Manager Backend", version="0.1.0", lifespan=lifespan)
    app.state.db_client = db_client or build_db_client(settings)
    app.state.cache_client = cache_client or build_cache_client(settings)
    app.state.status_reporter = StatusReporter(
        app.state.db_client, app.state.cache_client
    )
    app.include_router(router, prefix=settings.api_prefix)
    return app
