"""
Confirm Password Reset Use Case

Consumes a reset token and sets the new password.
"""

import logging
from typing import Optional

from src.app.services.credential_service import CredentialService
from src.app.services.ephemeral_token_service import EphemeralTokenService
from src.app.services.mailer import IMailer
from src.app.services.session_store import SessionStore
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import EphemeralPurpose
from src.libs.result import Result, Return
from .dtos import ConfirmPasswordResetResponse

logger = logging.getLogger(__name__)


class ConfirmPasswordResetUseCase:
    """
    Use case for confirming a password reset.

    Business Rules:
    - New password must satisfy the central password policy; a rejected
      password leaves the token usable
    - Token is consumed in the same transaction that changes the password,
      so it works at most once
    - An expired token is rejected and the password is unchanged
    - All sessions of the user are revoked
    - The user is notified after the change is committed
    """

    def __init__(
        self,
        uow: UnitOfWork,
        credentials: CredentialService,
        mailer: Optional[IMailer] = None,
    ):
        self.uow = uow
        self.credentials = credentials
        self.mailer = mailer

    async def execute(self, token: str, new_password: str) -> Result[ConfirmPasswordResetResponse]:
        """
        Execute confirm password reset use case.

        Errors:
            - POLICY_VIOLATION: Password too weak (details.violations)
            - EPHEMERAL_TOKEN_NOT_FOUND: Unknown, superseded or used token
            - EPHEMERAL_TOKEN_EXPIRED: Token past its expiry
        """
        policy = self.credentials.check_policy(new_password)
        if policy.is_err():
            return Return.err(policy.error)

        async with self.uow:
            consumed = await EphemeralTokenService(self.uow).consume(
                token, EphemeralPurpose.password_reset
            )
            if consumed.is_err():
                return Return.err(consumed.error)

            user = consumed.value
            user.password_hash = await self.credentials.hash_password(new_password)
            user.updated_at = utcnow()
            await self.uow.users.update(user)

            revoked = await SessionStore(self.uow).invalidate_all(user.id)
            user_id, email, username = user.id, user.email, user.username
            await self.uow.commit()

        logger.info(f"Password reset for user {user_id}, revoked {revoked} session(s)")

        if self.mailer:
            try:
                await self.mailer.send_security_notification(email, username, "password_reset")
            except Exception as exc:
                logger.error(f"Password reset notice for user {user_id} failed: {exc}")

        return Return.ok(
            ConfirmPasswordResetResponse(
                status="success",
                message="Password has been reset successfully",
                sessions_revoked=revoked,
            )
        )
