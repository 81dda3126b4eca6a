"""
Request Email Verification Use Case

Issues a fresh verification token for a signed-in user or, publicly, for an
email address.
"""

import logging
from datetime import timedelta
from typing import Optional

from src.app.services.ephemeral_token_service import EphemeralTokenService
from src.app.services.mailer import IMailer
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuthErrorCode, EphemeralPurpose, User
from src.libs.result import Error, Result, Return
from .dtos import RequestEmailVerificationResponse

logger = logging.getLogger(__name__)

PUBLIC_MESSAGE = "If the account exists and is unverified, a verification email has been sent"


class RequestEmailVerificationUseCase:
    """
    Use case for (re)sending the verification email.

    Business Rules:
    - A new token supersedes any earlier verification token of the user
    - Already verified users get no token
    - The public form answers the same way whether or not the email exists
    """

    def __init__(
        self,
        uow: UnitOfWork,
        mailer: Optional[IMailer] = None,
        ttl: Optional[timedelta] = None,
    ):
        self.uow = uow
        self.mailer = mailer
        self.ttl = ttl

    async def _issue(self, user: User) -> str:
        token = await EphemeralTokenService(self.uow).generate(
            user, EphemeralPurpose.email_verification, self.ttl
        )
        await self.uow.commit()
        return token

    async def _send(self, user_id: int, email: str, username: str, token: str) -> None:
        logger.info(f"Verification token issued for user {user_id}")
        if not self.mailer:
            return
        try:
            await self.mailer.send_verification_email(email, username, token)
        except Exception as exc:
            logger.error(f"Verification email for user {user_id} failed: {exc}")

    async def execute(self, user_id: int) -> Result[RequestEmailVerificationResponse]:
        """
        Issue a verification token for a signed-in user.

        Errors:
            - USER_NOT_FOUND: User no longer exists
        """
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error(AuthErrorCode.USER_NOT_FOUND.value, "User not found"))

            if user.email_verified:
                return Return.ok(
                    RequestEmailVerificationResponse(
                        status="already_verified", message="Email is already verified"
                    )
                )

            email, username = user.email, user.username
            token = await self._issue(user)

        await self._send(user_id, email, username, token)
        return Return.ok(
            RequestEmailVerificationResponse(
                status="sent", message="Verification email sent", token=token
            )
        )

    async def execute_for_email(self, email: str) -> Result[RequestEmailVerificationResponse]:
        """Public resend: never reveals whether the email is registered."""
        async with self.uow:
            user = await self.uow.users.get_by_email(email.lower())
            if user is None or user.email_verified or not user.is_active:
                return Return.ok(
                    RequestEmailVerificationResponse(status="sent", message=PUBLIC_MESSAGE)
                )

            user_id, address, username = user.id, user.email, user.username
            token = await self._issue(user)

        await self._send(user_id, address, username, token)
        return Return.ok(
            RequestEmailVerificationResponse(status="sent", message=PUBLIC_MESSAGE, token=token)
        )
