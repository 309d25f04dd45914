from __future__ import annotations

import asyncio
import logging

import jwt
from jwt import PyJWKClient
from jwt.exceptions import PyJWKClientConnectionError

from community_chat.application.dto.principal import Principal
from community_chat.application.exceptions import UpstreamUnavailableError
from community_chat.infrastructure.auth.claims import principal_from_claims

logger = logging.getLogger(__name__)


class JWKSVerifier:
    """Verify JWTs using a remote JWKS endpoint."""

    def __init__(self, jwks_url: str) -> None:
        self._jwks_url = jwks_url
        self._jwk_client = PyJWKClient(jwks_url)

    async def verify(self, token: str) -> Principal:
        # Key fetch is a blocking HTTP call on cache miss.
        try:
            signing_key = await asyncio.to_thread(
                self._jwk_client.get_signing_key_from_jwt, token,
            )
        except PyJWKClientConnectionError as exc:
            logger.warning("JWKS endpoint %s unreachable: %s", self._jwks_url, exc)
            raise UpstreamUnavailableError("Key server unavailable") from exc
        payload = jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256", "ES256"],
        )
        logger.debug("JWKS token verified for sub=%s", payload.get("sub"))
        return principal_from_claims(payload)
