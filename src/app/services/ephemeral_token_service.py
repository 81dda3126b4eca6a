"""
Ephemeral Token Service

Single-use, time-boxed tokens for email verification and password reset.
"""

import hashlib
import secrets
from datetime import timedelta
from typing import Dict, Optional

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import EPHEMERAL_SLOTS, AuthErrorCode, EphemeralPurpose, User
from src.libs.result import Error, Result, Return

DEFAULT_TTLS: Dict[EphemeralPurpose, timedelta] = {
    EphemeralPurpose.email_verification: timedelta(hours=24),
    EphemeralPurpose.password_reset: timedelta(hours=1),
}


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


class EphemeralTokenService:
    """
    Issues and consumes ephemeral tokens stored on the User record.

    Business Rules:
    - Token is 32 bytes from the OS CSPRNG, hex-encoded; only its SHA-256
      digest is stored
    - Generating a token overwrites the slot, so any earlier token for the
      same purpose can never match again
    - Consuming clears token and expiry with a compare-and-clear update in the
      caller's transaction; a token is accepted at most once
    - An expired token is rejected and its purpose is not performed

    Both operations run inside a unit of work opened by the caller, who
    applies the purpose-specific effect and commits.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        ttls: Optional[Dict[EphemeralPurpose, timedelta]] = None,
    ):
        self.uow = uow
        self.ttls = {**DEFAULT_TTLS, **(ttls or {})}

    async def generate(
        self, user: User, purpose: EphemeralPurpose, ttl: Optional[timedelta] = None
    ) -> str:
        """
        Store a fresh token for purpose on user.

        Returns:
            The plain token (to be delivered out of band)
        """
        token = secrets.token_hex(32)
        token_column, expiry_column = EPHEMERAL_SLOTS[purpose]

        setattr(user, token_column, hash_token(token))
        setattr(user, expiry_column, utcnow() + (ttl or self.ttls[purpose]))
        await self.uow.users.update(user)

        return token

    async def consume(self, token: str, purpose: EphemeralPurpose) -> Result[User]:
        """
        Claim a token for purpose.

        Returns:
            Result with the owning User (slot already cleared), or Error

        Errors:
            - EPHEMERAL_TOKEN_NOT_FOUND: No user holds this token (never issued,
              superseded, or already consumed)
            - EPHEMERAL_TOKEN_EXPIRED: Token found but past its expiry
        """
        token_hash = hash_token(token)
        token_column, expiry_column = EPHEMERAL_SLOTS[purpose]

        user = await self.uow.users.get_by_ephemeral_token(purpose, token_hash)
        if user is None:
            return Return.err(
                Error(
                    AuthErrorCode.EPHEMERAL_TOKEN_NOT_FOUND.value,
                    "Invalid or already used token",
                )
            )

        expiry = getattr(user, expiry_column)
        if expiry is None or expiry <= utcnow():
            return Return.err(
                Error(AuthErrorCode.EPHEMERAL_TOKEN_EXPIRED.value, "Token has expired")
            )

        # Lost a race against a concurrent consumer
        cleared = await self.uow.users.clear_ephemeral_token(user.id, purpose, token_hash)
        if not cleared:
            return Return.err(
                Error(
                    AuthErrorCode.EPHEMERAL_TOKEN_NOT_FOUND.value,
                    "Invalid or already used token",
                )
            )

        setattr(user, token_column, None)
        setattr(user, expiry_column, None)
        return Return.ok(user)
