"""
Status reporting over the store and cache connectors.
"""

from __future__ import annotations

import logging

from files_manager.cache import CacheClient
from files_manager.db import DbClient, StoreConnectionError
from files_manager.schemas import StatsResponse, StatusResponse

logger = logging.getLogger(__name__)


class StatusReporter:
    """Reads liveness flags and aggregate counts straight from the connectors."""

    def __init__(self, db: DbClient, cache: CacheClient):
        self.db = db
        self.cache = cache
        self._last_stats = StatsResponse(users=0, files=0)

    def get_status(self) -> StatusResponse:
        return StatusResponse(redis=self.cache.is_alive(), db=self.db.is_alive())

    def get_stats(self) -> StatsResponse:
        """
        Count users and files. When the store cannot answer, the last
        counts that were read successfully are returned instead.
        """
        try:
            stats = StatsResponse(
                users=self.db.count_users(),
                files=self.db.count_files(),
            )
        except StoreConnectionError as exc:
            logger.warning("Serving last known stats, store unavailable: %s", exc)
            return self._last_stats
        self._last_stats = stats
        return stats
