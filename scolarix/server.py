"""
Process entry point: ``scolarix-api``.

With WEB_CONCURRENCY > 1 uvicorn supervises that many worker processes and
replaces any that die. A fatal startup error in single-worker mode exits
with a non-zero status.
"""
import sys

import uvicorn

from scolarix.core.config import settings
from scolarix.core.logging import setup_logging


def run() -> None:
    logger = setup_logging(settings.log_level)
    workers = max(settings.web_concurrency, 1)
    logger.info("serving on %s:%s with %d worker(s)", settings.app_host, settings.app_port, workers)
    try:
        uvicorn.run(
            "scolarix.main:app",
            host=settings.app_host,
            port=settings.app_port,
            workers=workers,
            log_level=settings.log_level.lower(),
        )
    except Exception:
        logger.critical("server failed to start", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    run()
