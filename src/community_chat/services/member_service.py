"""Member profile upkeep and member-lifecycle notifications."""
from __future__ import annotations

import dataclasses
import logging
from typing import Any

from community_chat.application.dto.dispatch import RecipientOutcome
from community_chat.application.dto.principal import Principal
from community_chat.application.ports.identity import IdentityDirectory
from community_chat.domain.entities.member import Member
from community_chat.domain.value_objects.enums import NotificationType
from community_chat.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)

_STATUS_MESSAGES: dict[str, tuple[str, str]] = {
    "approved": (
        "Account Approved",
        "Your account has been approved! You can now access all features.",
    ),
    "rejected": (
        "Account Rejected",
        "Your account has been rejected. Please contact admin for more information.",
    ),
    "pending": (
        "Status Changed",
        "Your account status has been changed to pending.",
    ),
}


def status_message(status: str) -> tuple[str, str]:
    return _STATUS_MESSAGES.get(
        status,
        ("Status Update", f"Your account status has been changed to {status}."),
    )


async def register_device_token(
    principal: Principal,
    token: str | None,
    directory: IdentityDirectory,
) -> Member:
    """Store (or clear, with ``None``) the caller's push token.

    The caller's profile is refreshed from the token claims first so that a
    member unknown to the directory can still receive pushes.
    """
    member = await directory.upsert(
        Member(
            id=principal.subject_id,
            display_name=principal.label,
            referral_id=None,
        )
    )
    token = token.strip() if token else None
    await directory.set_device_token(principal.subject_id, token or None)
    logger.info(
        "Device token %s for member %d", "registered" if token else "cleared", principal.subject_id,
    )
    return dataclasses.replace(member, device_token=token or None)


async def send_test_notification(
    principal: Principal,
    dispatcher: NotificationDispatcher,
) -> RecipientOutcome:
    return await dispatcher.notify_member(
        principal.subject_id,
        "Test Notification",
        "This is a test notification.",
        NotificationType.TEST,
    )


async def handle_member_updated(
    fields: dict[str, Any],
    directory: IdentityDirectory,
) -> Member:
    member_id = int(fields["user_id"])
    return await directory.upsert(
        Member(
            id=member_id,
            display_name=fields.get("display_name") or f"Member {member_id}",
            referral_id=fields.get("referral_id") or None,
        )
    )


async def handle_status_changed(
    fields: dict[str, Any],
    dispatcher: NotificationDispatcher,
) -> RecipientOutcome:
    member_id = int(fields["user_id"])
    status = fields["status"]
    title, body = status_message(status)
    return await dispatcher.notify_member(
        member_id, title, body, NotificationType.STATUS_CHANGE, {"status": status},
    )


async def handle_member_registered(
    fields: dict[str, Any],
    directory: IdentityDirectory,
    dispatcher: NotificationDispatcher,
) -> list[RecipientOutcome]:
    """Tell the tenant's admins that a new member awaits approval.

    Admins come from the comma-separated ``admin_ids`` field plus the owner
    of the referral id the member registered under.
    """
    member = await handle_member_updated(fields, directory)

    admin_ids = {
        int(raw) for raw in str(fields.get("admin_ids", "")).split(",") if raw.strip()
    }
    referral = fields.get("sponsor_referral_id")
    if referral:
        owner = await directory.get_by_referral(referral)
        if owner is not None:
            admin_ids.add(owner.id)
    admin_ids.discard(member.id)

    if not admin_ids:
        logger.info("No admins to notify about registration of member %d", member.id)
        return []

    title = "New User Registration"
    body = f"{member.display_name} has registered and is waiting for approval."
    outcomes = [
        await dispatcher.notify_member(
            admin_id, title, body, NotificationType.NEW_REGISTRATION,
            {"user_id": member.id},
        )
        for admin_id in sorted(admin_ids)
    ]
    logger.info("Notified %d admins about registration of member %d", len(outcomes), member.id)
    return outcomes
