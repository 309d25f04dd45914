from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from uuid import UUID

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from community_chat.api.deps import get_directory, get_manager
from community_chat.api.middleware.correlation_id import CorrelationIdMiddleware
from community_chat.api.middleware.metrics import RequestTimingMiddleware
from community_chat.api.v1.routers import (
    admin_chats,
    chats,
    health,
    members,
    notifications,
    ws,
)
from community_chat.application.exceptions import AppError
from community_chat.application.ports.bus import ChannelPublisher
from community_chat.application.ports.push import PushProvider
from community_chat.config import settings
from community_chat.infrastructure.bus.local import LocalChannelPublisher
from community_chat.infrastructure.bus.redis_pubsub import (
    RedisChannelPublisher,
    RedisPubSubSubscriber,
)
from community_chat.infrastructure.db.session import dispose_engine
from community_chat.infrastructure.db.uow import uow_scope
from community_chat.infrastructure.push.factory import build_push_provider
from community_chat.services.delivery_service import ChatDelivery
from community_chat.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


async def _on_pubsub_event(event_type: str, data: dict[str, Any]) -> None:
    """Dispatch a Redis Pub/Sub event to local WS connections."""
    chat_id_raw = data.get("chat_id")
    if not chat_id_raw:
        return

    try:
        chat_id = UUID(chat_id_raw)
    except ValueError:
        return

    await get_manager().broadcast_to_chat(chat_id, event_type, data)


def build_delivery(publisher: ChannelPublisher, push: PushProvider) -> ChatDelivery:
    dispatcher = NotificationDispatcher(push, get_directory(), uow_scope)
    return ChatDelivery(
        publisher,
        dispatcher,
        notify_workers=settings.NOTIFY_WORKERS,
        dead_letter_limit=settings.DEAD_LETTER_LIMIT,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    subscriber: RedisPubSubSubscriber | None = None
    app.state.redis = None

    if settings.FANOUT_BACKEND == "redis":
        app.state.redis = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
        )
        logger.info("Redis connection pool created")
        publisher: ChannelPublisher = RedisChannelPublisher(
            app.state.redis, settings.REDIS_PUBSUB_CHANNEL,
        )
        subscriber = RedisPubSubSubscriber(
            app.state.redis,
            settings.REDIS_PUBSUB_CHANNEL,
            _on_pubsub_event,
        )
        await subscriber.start()
    else:
        publisher = LocalChannelPublisher(get_manager())

    app.state.delivery = build_delivery(publisher, build_push_provider())
    await app.state.delivery.start()

    yield

    await app.state.delivery.stop()
    if subscriber is not None:
        await subscriber.stop()
    if app.state.redis is not None:
        await app.state.redis.aclose()
        logger.info("Redis connection pool closed")
    await dispose_engine()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Community Chat Service",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(admin_chats.router)
    app.include_router(chats.router)
    app.include_router(notifications.router)
    app.include_router(members.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(req: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning("%s %s failed upstream: %s", req.method, req.url.path, exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(SQLAlchemyError)
    async def _store(req: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("Store failure on %s %s: %s", req.method, req.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": "Store unavailable"})
