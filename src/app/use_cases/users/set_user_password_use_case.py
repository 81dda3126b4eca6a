"""
Set User Password Use Case

Administrative replacement of a user's password.
"""

import logging
from typing import Optional

from pydantic import BaseModel

from src.app.services.credential_service import CredentialService
from src.app.services.mailer import IMailer
from src.app.services.session_store import SessionStore
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuthErrorCode
from src.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)


class SetUserPasswordResponse(BaseModel):
    user_id: int
    sessions_revoked: int


class SetUserPasswordUseCase:
    """
    Use case for an administrator setting a user's password.

    Business Rules:
    - The new password must satisfy the central password policy
    - Every session of the user is revoked in the same transaction
    - Any outstanding reset token stays valid until it expires or is used
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

    async def execute(
        self, target_user_id: int, new_password: str, requesting_user_id: int
    ) -> Result[SetUserPasswordResponse]:
        """
        Errors:
            - POLICY_VIOLATION: Password too weak (details.violations)
            - USER_NOT_FOUND: Target does not exist
        """
        policy = self.credentials.check_policy(new_password)
        if policy.is_err():
            return Return.err(policy.error)

        password_hash = await self.credentials.hash_password(new_password)

        async with self.uow:
            user = await self.uow.users.lock(target_user_id)
            if user is None:
                return Return.err(Error(AuthErrorCode.USER_NOT_FOUND.value, "User not found"))

            user.password_hash = password_hash
            user.updated_at = utcnow()
            await self.uow.users.update(user)

            revoked = await SessionStore(self.uow).invalidate_all(user.id)
            email, username = user.email, user.username
            await self.uow.commit()

        logger.info(
            f"Password of user {target_user_id} set by admin {requesting_user_id}, "
            f"revoked {revoked} session(s)"
        )

        if self.mailer:
            try:
                await self.mailer.send_security_notification(
                    email, username, "password_set_by_admin"
                )
            except Exception as exc:
                logger.error(f"Password notice for user {target_user_id} failed: {exc}")

        return Return.ok(
            SetUserPasswordResponse(user_id=target_user_id, sessions_revoked=revoked)
        )
