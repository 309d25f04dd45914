from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from community_chat.api.deps import CurrentPrincipal, DispatcherDep, UoWDep
from community_chat.api.v1.schemas.notification import (
    BulkResultResponse,
    NotificationResponse,
    TestNotificationResponse,
    UnreadCountResponse,
)
from community_chat.services import member_service, notification_service

router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    principal: CurrentPrincipal,
    uow: UoWDep,
    limit: int | None = Query(None, ge=1),
) -> list[NotificationResponse]:
    items = await notification_service.list_notifications(principal, uow, limit=limit)
    return [NotificationResponse.model_validate(n, from_attributes=True) for n in items]


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(principal: CurrentPrincipal, uow: UoWDep) -> UnreadCountResponse:
    return UnreadCountResponse(count=await notification_service.unread_count(principal, uow))


@router.put("/read-all", response_model=BulkResultResponse)
async def mark_all_read(principal: CurrentPrincipal, uow: UoWDep) -> BulkResultResponse:
    return BulkResultResponse(count=await notification_service.mark_all_read(principal, uow))


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> NotificationResponse:
    notification = await notification_service.mark_read(notification_id, principal, uow)
    return NotificationResponse.model_validate(notification, from_attributes=True)


@router.delete("", response_model=BulkResultResponse)
async def delete_all(principal: CurrentPrincipal, uow: UoWDep) -> BulkResultResponse:
    return BulkResultResponse(count=await notification_service.delete_all(principal, uow))


@router.delete("/{notification_id}", status_code=204)
async def delete_notification(
    notification_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> None:
    await notification_service.delete_notification(notification_id, principal, uow)


@router.post("/test", response_model=TestNotificationResponse)
async def send_test(
    principal: CurrentPrincipal,
    dispatcher: DispatcherDep,
) -> TestNotificationResponse:
    outcome = await member_service.send_test_notification(principal, dispatcher)
    return TestNotificationResponse(recipient_id=outcome.recipient_id, pushed=outcome.pushed)
