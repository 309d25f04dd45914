from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect

from community_chat.api.deps import get_delivery, get_manager, get_verifier
from community_chat.application.dto.principal import Principal
from community_chat.application.exceptions import AppError
from community_chat.config import settings
from community_chat.infrastructure.db.uow import uow_scope
from community_chat.infrastructure.ws.manager import ConnectionManager
from community_chat.infrastructure.ws.protocol import WsInbound, WsOutbound
from community_chat.services import conversation_service, message_service
from community_chat.services.delivery_service import ChatDelivery

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])


async def _authenticate(token: str) -> Principal | None:
    try:
        verifier = get_verifier()
        return await verifier.verify(token)
    except Exception:
        logger.debug("WS auth failed", exc_info=True)
        return None


def _frame(type: str, data: dict[str, Any] | None = None) -> str:
    return WsOutbound(type=type, data=data or {}).model_dump_json()


@router.websocket("/ws/chat")
async def ws_chat(
    websocket: WebSocket,
    token: str = Query(...),
    manager: ConnectionManager = Depends(get_manager),
    delivery: ChatDelivery = Depends(get_delivery),
) -> None:
    principal = await _authenticate(token)
    if principal is None:
        await websocket.close(code=4001, reason="Authentication failed")
        return

    pkey = principal.connection_key
    await manager.connect(websocket, pkey)

    heartbeat_task = asyncio.create_task(
        _heartbeat(websocket), name=f"ws-heartbeat-{pkey}",
    )
    try:
        await _read_loop(websocket, principal, manager, delivery)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", pkey)
    finally:
        heartbeat_task.cancel()
        manager.disconnect(websocket, pkey)


async def _heartbeat(ws: WebSocket) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await ws.send_text(_frame("pong"))
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.debug("WS heartbeat stopped", exc_info=True)


async def _read_loop(
    ws: WebSocket,
    principal: Principal,
    manager: ConnectionManager,
    delivery: ChatDelivery,
) -> None:
    while True:
        raw = await ws.receive_text()
        try:
            msg = WsInbound.model_validate_json(raw)
        except Exception:
            await ws.send_text(_frame("error", {"code": "invalid_payload"}))
            continue

        if msg.type == "ping":
            await ws.send_text(_frame("pong"))

        elif msg.type == "join":
            await _handle_join(ws, principal, manager, msg)

        elif msg.type == "leave":
            if msg.chat_id is not None:
                manager.leave(ws, msg.chat_id)

        elif msg.type == "message.send":
            await _handle_send(ws, principal, delivery, msg)

        else:
            await ws.send_text(_frame("error", {"code": "unknown_type", "type": msg.type}))


async def _handle_join(
    ws: WebSocket,
    principal: Principal,
    manager: ConnectionManager,
    msg: WsInbound,
) -> None:
    chat_id = msg.chat_id
    if chat_id is None:
        await ws.send_text(_frame("error", {"code": "invalid_data"}))
        return
    try:
        async with uow_scope() as uow:
            await conversation_service.get_chat(chat_id, principal, uow)
    except AppError as exc:
        await ws.send_text(_frame("error", {"code": "join_failed", "detail": exc.detail}))
        return
    manager.join(ws, chat_id)


async def _handle_send(
    ws: WebSocket,
    principal: Principal,
    delivery: ChatDelivery,
    msg: WsInbound,
) -> None:
    chat_id = msg.chat_id
    if chat_id is None:
        await ws.send_text(_frame("error", {"code": "invalid_data"}))
        return

    try:
        async with uow_scope() as uow:
            message, chat = await message_service.append_message(
                chat_id, principal, msg.data.get("text"), uow,
            )
    except AppError as exc:
        await ws.send_text(_frame("error", {"code": "send_failed", "detail": exc.detail}))
        return

    delivery.message_appended(chat, message, principal.subject_id, principal.display_name)
