"""
Run the URL shortener with uvicorn.

Usage:
    python -m shortener

Configuration comes from environment variables (see shortener.core.setting):
PORT, HOST, PREFIX, SAVE_INTERVAL_MS, SNAPSHOT_PATH, LOG_LEVEL, ...

uvicorn turns SIGINT/SIGTERM into an application shutdown, which writes the
final snapshot before the process exits.
"""

import uvicorn

from shortener.core.logging_config import setup_logging
from shortener.core.setting import settings
from shortener.main import create_app


def main() -> None:
    logger = setup_logging(settings.LOG_LEVEL)
    logger.info(f"Listen on {settings.HOST}:{settings.PORT}")
    uvicorn.run(
        create_app(settings),
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
