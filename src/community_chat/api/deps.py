"""FastAPI dependency injection helpers."""
from __future__ import annotations

from typing import Annotated, AsyncIterator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.requests import HTTPConnection

from community_chat.application.dto.principal import Principal
from community_chat.application.exceptions import UpstreamUnavailableError
from community_chat.application.ports.identity import IdentityDirectory, TokenVerifier
from community_chat.config import settings
from community_chat.infrastructure.auth.hs256_verifier import HS256Verifier
from community_chat.infrastructure.auth.jwks_verifier import JWKSVerifier
from community_chat.infrastructure.db.repositories.member import MemberDirectory
from community_chat.infrastructure.db.session import AsyncSessionLocal
from community_chat.infrastructure.db.uow import SqlAlchemyUoW
from community_chat.infrastructure.ws.manager import ConnectionManager
from community_chat.services.delivery_service import ChatDelivery
from community_chat.services.notification_dispatcher import NotificationDispatcher

_bearer_scheme = HTTPBearer()

manager = ConnectionManager()


def get_manager() -> ConnectionManager:
    return manager


async def get_uow() -> AsyncIterator[SqlAlchemyUoW]:
    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        try:
            yield uow
        finally:
            await session.close()


UoWDep = Annotated[SqlAlchemyUoW, Depends(get_uow)]


_directory: MemberDirectory | None = None


def get_directory() -> IdentityDirectory:
    global _directory  # noqa: PLW0603
    if _directory is None:
        _directory = MemberDirectory(AsyncSessionLocal)
    return _directory


DirectoryDep = Annotated[IdentityDirectory, Depends(get_directory)]


def get_delivery(conn: HTTPConnection) -> ChatDelivery:
    """Delivery pipeline created by the app lifespan."""
    return conn.app.state.delivery


DeliveryDep = Annotated[ChatDelivery, Depends(get_delivery)]


def get_dispatcher(delivery: DeliveryDep) -> NotificationDispatcher:
    return delivery.dispatcher


DispatcherDep = Annotated[NotificationDispatcher, Depends(get_dispatcher)]


def _get_verifier() -> TokenVerifier:
    if settings.JWT_VERIFY_MODE == "jwks":
        assert settings.JWKS_URL, "JWKS_URL must be set when JWT_VERIFY_MODE=jwks"
        return JWKSVerifier(settings.JWKS_URL)
    return HS256Verifier(settings.JWT_SECRET, settings.JWT_ALGORITHM)


_verifier: TokenVerifier | None = None


def get_verifier() -> TokenVerifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = _get_verifier()
    return _verifier


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
) -> Principal:
    verifier = get_verifier()
    try:
        return await verifier.verify(credentials.credentials)
    except UpstreamUnavailableError:
        raise
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


async def get_current_admin(principal: CurrentPrincipal) -> Principal:
    if not principal.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return principal


CurrentAdmin = Annotated[Principal, Depends(get_current_admin)]
