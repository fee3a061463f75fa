"""Run the API with Uvicorn: ``python -m app``."""

from __future__ import annotations

import logging
import platform
from datetime import datetime

import uvicorn

from app.core.config import settings
from app.core.logging import configure_logging

logger = logging.getLogger("app")


def main() -> None:
    configure_logging(settings.log)
    logger.info(
        "app.startup",
        extra={
            "host": settings.app.host,
            "port": settings.app.port,
            "platform": platform.system().lower(),
            "started_at": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            "app_env": settings.app_env,
        },
    )
    uvicorn.run(
        "app.main:app",
        host=settings.app.host,
        port=settings.app.port,
        log_level=settings.log.level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
