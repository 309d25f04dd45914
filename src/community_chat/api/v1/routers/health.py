from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from community_chat.infrastructure.db.session import AsyncSessionLocal

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


async def _check_postgres() -> str | None:
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except Exception as exc:  # noqa: BLE001
        return f"postgres: {exc}"
    return None


async def _check_redis(request: Request) -> str | None:
    # Only wired when fan-out goes through Pub/Sub.
    redis = getattr(request.app.state, "redis", None)
    if redis is None:
        return None
    try:
        await redis.ping()
    except Exception as exc:  # noqa: BLE001
        return f"redis: {exc}"
    return None


@router.get("/readyz")
async def readyz(request: Request) -> JSONResponse:
    errors = [e for e in (await _check_postgres(), await _check_redis(request)) if e]

    content: dict[str, Any] = {"status": "unavailable" if errors else "ready"}
    if errors:
        content["errors"] = errors
    delivery = getattr(request.app.state, "delivery", None)
    if delivery is not None:
        content["delivery"] = delivery.stats()
    return JSONResponse(status_code=503 if errors else 200, content=content)
