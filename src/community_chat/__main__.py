"""Entrypoint: python -m community_chat"""
from __future__ import annotations

import logging

import uvicorn

from community_chat.api.middleware.correlation_id import LOG_FORMAT, CorrelationIdFilter
from community_chat.config import settings


def configure_logging() -> None:
    handler = logging.StreamHandler()
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(settings.LOG_LEVEL.upper())


def main() -> None:
    configure_logging()
    uvicorn.run(
        "community_chat.app:create_app",
        factory=True,
        host=settings.API_HOST,
        port=settings.API_PORT,
        log_level=settings.LOG_LEVEL.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
