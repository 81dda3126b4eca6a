"""
Change Password Use Case

Lets an authenticated user replace their password.
"""

import logging
from typing import Optional

from src.app.services.credential_service import CredentialService
from src.app.services.mailer import IMailer
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuthErrorCode
from src.libs.result import Error, Result, Return
from .dtos import ChangePasswordResponse

logger = logging.getLogger(__name__)


class ChangePasswordUseCase:
    """
    Use case for changing a password.

    Business Rules:
    - The current password must verify
    - The new password must satisfy the central password policy
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
        self, user_id: int, current_password: str, new_password: str
    ) -> Result[ChangePasswordResponse]:
        """
        Errors:
            - POLICY_VIOLATION: New password too weak (details.violations)
            - USER_NOT_FOUND: User no longer exists
            - INVALID_CREDENTIALS: Current password is wrong
        """
        policy = self.credentials.check_policy(new_password)
        if policy.is_err():
            return Return.err(policy.error)

        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error(AuthErrorCode.USER_NOT_FOUND.value, "User not found"))

            if not await self.credentials.verify_password(current_password, user.password_hash):
                return Return.err(
                    Error(
                        AuthErrorCode.INVALID_CREDENTIALS.value,
                        "Current password is incorrect",
                    )
                )

            user.password_hash = await self.credentials.hash_password(new_password)
            user.updated_at = utcnow()
            await self.uow.users.update(user)

            email, username = user.email, user.username
            await self.uow.commit()

        logger.info(f"User {user_id} changed password")

        if self.mailer:
            try:
                await self.mailer.send_security_notification(email, username, "password_changed")
            except Exception as exc:
                logger.error(f"Password change notice for user {user_id} failed: {exc}")

        return Return.ok(
            ChangePasswordResponse(status="success", message="Password changed successfully")
        )
