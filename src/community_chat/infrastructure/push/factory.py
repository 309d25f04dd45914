from __future__ import annotations

import logging

from community_chat.application.ports.push import PushProvider
from community_chat.config import settings
from community_chat.infrastructure.push.fcm import DisabledPushProvider, FirebasePushProvider

logger = logging.getLogger(__name__)


def build_push_provider() -> PushProvider:
    if not settings.FCM_CREDENTIALS_FILE:
        logger.warning("FCM_CREDENTIALS_FILE not set, push notifications are disabled")
        return DisabledPushProvider()
    return FirebasePushProvider(
        settings.FCM_CREDENTIALS_FILE,
        timeout=settings.PUSH_TIMEOUT_SECONDS,
        batch_size=settings.PUSH_MULTICAST_BATCH,
    )
