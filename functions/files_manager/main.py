"""
Process entry: wait for the document store, then report what it holds.

Exits with status 1 when the store does not become ready within the
readiness budget.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from files_manager.config import get_settings
from files_manager.db import DbClient, StoreConnectionError
from files_manager.dependencies import build_db_client, build_readiness_poller
from files_manager.readiness import ReadinessPoller, ReadinessTimeout

logger = logging.getLogger(__name__)


async def run(db_client: DbClient, poller: ReadinessPoller) -> int:
    logger.info("Store alive: %s", db_client.is_alive())
    # connect() never raises and cannot be interrupted once in its thread.
    connecting = asyncio.create_task(asyncio.to_thread(db_client.connect))
    try:
        await poller.wait_until_ready(db_client.is_alive)
        logger.info("Store alive: %s", db_client.is_alive())
        logger.info("Users: %d", db_client.count_users())
        logger.info("Files: %d", db_client.count_files())
    except (ReadinessTimeout, StoreConnectionError) as exc:
        logger.error("Error connecting to DB: %s", exc)
        return 1
    finally:
        await connecting
    return 0


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Wait for the document store and print its counts"
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=settings.readiness_max_attempts,
        help="Give up after this many polls",
    )
    parser.add_argument(
        "--poll-interval-ms",
        type=int,
        default=settings.readiness_poll_interval_ms,
        help="Milliseconds between polls",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    settings = settings.model_copy(
        update={
            "readiness_max_attempts": args.max_attempts,
            "readiness_poll_interval_ms": args.poll_interval_ms,
        }
    )
    db_client = build_db_client(settings)
    poller = build_readiness_poller(settings)
    try:
        return asyncio.run(run(db_client, poller))
    finally:
        db_client.close()


if __name__ == "__main__":
    sys.exit(main())
