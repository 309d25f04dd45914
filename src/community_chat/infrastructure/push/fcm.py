"""Firebase Cloud Messaging push provider."""
from __future__ import annotations

import asyncio
import logging

import firebase_admin
from firebase_admin import credentials, exceptions, messaging

from community_chat.application.dto.push import MulticastResult

logger = logging.getLogger(__name__)

_APP_NAME = "community-chat"
_CLICK_ACTION = "FLUTTER_NOTIFICATION_CLICK"


def _chunks(items: list[str], size: int) -> list[list[str]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


def _android_config() -> messaging.AndroidConfig:
    return messaging.AndroidConfig(
        priority="high",
        notification=messaging.AndroidNotification(sound="default", channel_id="default"),
    )


def _apns_config() -> messaging.APNSConfig:
    return messaging.APNSConfig(
        payload=messaging.APNSPayload(aps=messaging.Aps(sound="default")),
    )


class FirebasePushProvider:
    """Implements application.ports.push.PushProvider over firebase-admin.

    The SDK is blocking, so each call runs in a worker thread and is bounded
    by ``timeout``. Every failure is logged and reported as ``False`` for the
    affected tokens; nothing is raised to the caller.
    """

    def __init__(
        self,
        credentials_file: str,
        *,
        timeout: float = 10.0,
        batch_size: int = 500,
    ) -> None:
        self._credentials_file = credentials_file
        self._timeout = timeout
        self._batch_size = batch_size
        self._app: firebase_admin.App | None = None

    def _get_app(self) -> firebase_admin.App:
        if self._app is None:
            try:
                self._app = firebase_admin.get_app(_APP_NAME)
            except ValueError:
                self._app = firebase_admin.initialize_app(
                    credentials.Certificate(self._credentials_file),
                    options={"httpTimeout": self._timeout},
                    name=_APP_NAME,
                )
                logger.info("Firebase app initialised from %s", self._credentials_file)
        return self._app

    async def send_one(
        self,
        token: str,
        title: str,
        body: str,
        data: dict[str, str],
    ) -> bool:
        if not token:
            logger.debug("No device token provided")
            return False

        message = messaging.Message(
            notification=messaging.Notification(title=title, body=body),
            data={**data, "click_action": _CLICK_ACTION},
            token=token,
            android=_android_config(),
            apns=_apns_config(),
        )
        try:
            app = self._get_app()
            message_id = await asyncio.wait_for(
                asyncio.to_thread(messaging.send, message, app=app),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Push to %s... timed out after %.1fs", token[:12], self._timeout)
            return False
        except (messaging.UnregisteredError, messaging.SenderIdMismatchError):
            logger.info("Device token %s... is no longer registered", token[:12])
            return False
        except (exceptions.FirebaseError, ValueError, OSError) as exc:
            logger.error("Push to %s... failed: %s", token[:12], exc)
            return False

        logger.debug("Push sent: %s", message_id)
        return True

    async def send_many(
        self,
        tokens: list[str],
        title: str,
        body: str,
        data: dict[str, str],
    ) -> MulticastResult:
        valid = [t for t in tokens if t and t.strip()]
        if not valid:
            logger.debug("No valid device tokens for multicast")
            return MulticastResult.from_results([False] * len(tokens))

        batches = _chunks(valid, self._batch_size)
        batch_results = await asyncio.gather(
            *(self._send_batch(batch, title, body, data) for batch in batches)
        )
        by_token: dict[str, bool] = {}
        for batch, results in zip(batches, batch_results):
            by_token.update(zip(batch, results))

        result = MulticastResult.from_results([by_token.get(t, False) for t in tokens])
        logger.info(
            "Multicast push: %d success, %d failure",
            result.success_count, result.failure_count,
        )
        return result

    async def _send_batch(
        self,
        tokens: list[str],
        title: str,
        body: str,
        data: dict[str, str],
    ) -> list[bool]:
        message = messaging.MulticastMessage(
            tokens=tokens,
            notification=messaging.Notification(title=title, body=body),
            data={**data, "click_action": _CLICK_ACTION},
            android=_android_config(),
            apns=_apns_config(),
        )
        try:
            app = self._get_app()
            response = await asyncio.wait_for(
                asyncio.to_thread(messaging.send_each_for_multicast, message, app=app),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Multicast batch of %d timed out after %.1fs", len(tokens), self._timeout,
            )
            return [False] * len(tokens)
        except (exceptions.FirebaseError, ValueError, OSError) as exc:
            logger.error("Multicast batch of %d failed: %s", len(tokens), exc)
            return [False] * len(tokens)

        return [r.success for r in response.responses]


class DisabledPushProvider:
    """Stand-in used when no Firebase credentials are configured."""

    async def send_one(
        self,
        token: str,
        title: str,
        body: str,
        data: dict[str, str],
    ) -> bool:
        logger.debug("Push disabled, dropping notification %r", title)
        return False

    async def send_many(
        self,
        tokens: list[str],
        title: str,
        body: str,
        data: dict[str, str],
    ) -> MulticastResult:
        logger.debug("Push disabled, dropping multicast %r to %d tokens", title, len(tokens))
        return MulticastResult.from_results([False] * len(tokens))
