"""
Auth Gate

Per-request decision combining the stateless access token with the
server-side session record.
"""

import logging
from typing import Optional

from src.app.services.access_token_codec import AccessTokenClaims, AccessTokenCodec
from src.app.services.session_store import SessionStore
from src.domain.entities import AuthErrorCode
from src.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)


class AuthGate:
    """
    Two gates in series:

    1. The access token must verify (signature, expiry, claims)
    2. Its owner must hold a live session

    A cryptographically valid, unexpired token is still rejected with
    SESSION_REVOKED once the owner's sessions are gone (logout, new login
    elsewhere, deactivation).
    """

    def __init__(self, codec: AccessTokenCodec, session_store: SessionStore):
        self.codec = codec
        self.session_store = session_store

    async def check_token(self, token: Optional[str]) -> Result[AccessTokenClaims]:
        """
        Decide whether a bearer token authorizes the request.

        Returns:
            Result with the token claims as the authenticated identity, or Error

        Errors:
            - MISSING_TOKEN: No bearer token presented
            - TOKEN_INVALID: Bad signature or malformed token
            - TOKEN_EXPIRED: Token past its exp
            - SESSION_REVOKED: Token valid but owner has no live session
        """
        if not token:
            return Return.err(
                Error(AuthErrorCode.MISSING_TOKEN.value, "Access token required")
            )

        verified = self.codec.verify(token)
        if verified.is_err():
            error = verified.error
            logger.warning(f"Access token rejected: {error.code}")
            if error.code == AuthErrorCode.TOKEN_EXPIRED.value:
                return Return.err(error)
            return Return.err(
                Error(AuthErrorCode.TOKEN_INVALID.value, "Access token is invalid")
            )

        claims = verified.value
        sessions = await self.session_store.list_active_for_user(claims.id)
        if not sessions:
            logger.warning(f"No live session for user {claims.id}")
            return Return.err(
                Error(
                    AuthErrorCode.SESSION_REVOKED.value,
                    "Session expired. Please log in again.",
                )
            )

        return Return.ok(claims)
