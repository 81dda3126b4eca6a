"""
Request Password Reset Use Case

Generates a reset token and hands it to the mailer.
"""

import logging
from datetime import timedelta
from typing import Optional

from src.app.services.ephemeral_token_service import EphemeralTokenService
from src.app.services.mailer import IMailer
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import EphemeralPurpose
from src.libs.result import Result, Return
from .dtos import RequestPasswordResetResponse

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "If an account with that email exists, a password reset link has been sent"


class RequestPasswordResetUseCase:
    """
    Use case for requesting a password reset.

    Business Rules:
    - Same response whether or not the email is registered (no enumeration)
    - Token expires in 1 hour by default
    - A new request supersedes any earlier reset token of the user
    - Disabled accounts do not get a token
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

    async def execute(self, email: str) -> Result[RequestPasswordResetResponse]:
        """
        Execute request password reset use case.

        Returns:
            Result with a generic response; response.token carries the plain
            token when one was issued and is excluded from serialization
        """
        async with self.uow:
            user = await self.uow.users.get_by_email(email.lower())

            if user is None or not user.is_active:
                return Return.ok(
                    RequestPasswordResetResponse(status="sent", message=GENERIC_MESSAGE)
                )

            token = await EphemeralTokenService(self.uow).generate(
                user, EphemeralPurpose.password_reset, self.ttl
            )
            user_id, address, username = user.id, user.email, user.username
            await self.uow.commit()

        logger.info(f"Password reset requested for user {user_id}")

        if self.mailer:
            try:
                await self.mailer.send_password_reset_email(address, username, token)
            except Exception as exc:
                logger.error(f"Password reset email for user {user_id} failed: {exc}")

        return Return.ok(
            RequestPasswordResetResponse(status="sent", message=GENERIC_MESSAGE, token=token)
        )
