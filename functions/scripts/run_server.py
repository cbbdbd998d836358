"""
Start the files manager HTTP API with uvicorn.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import uvicorn

from files_manager.config import get_settings

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Files manager API server")
    parser.add_argument("--host", type=str, default=settings.server_host)
    parser.add_argument("--port", type=int, default=settings.server_port)
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart on code changes (development only)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )
    logger.info("Serving on %s:%d", args.host, args.port)
    uvicorn.run(
        "files_manager.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
