"""
Verify Email Use Case

Consumes a verification token and marks the email verified.
"""

import logging

from src.app.services.ephemeral_token_service import EphemeralTokenService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import EphemeralPurpose
from src.libs.result import Result, Return
from .dtos import VerifyEmailResponse

logger = logging.getLogger(__name__)


class VerifyEmailUseCase:
    """
    Use case for email verification.

    Business Rules:
    - Token is consumed in the same transaction that sets email_verified
    - A token works once; expired tokens leave the email unverified
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, token: str) -> Result[VerifyEmailResponse]:
        """
        Errors:
            - EPHEMERAL_TOKEN_NOT_FOUND: Unknown, superseded or used token
            - EPHEMERAL_TOKEN_EXPIRED: Token past its expiry
        """
        async with self.uow:
            consumed = await EphemeralTokenService(self.uow).consume(
                token, EphemeralPurpose.email_verification
            )
            if consumed.is_err():
                return Return.err(consumed.error)

            user = consumed.value
            user.email_verified = True
            user.updated_at = utcnow()
            await self.uow.users.update(user)

            user_id = user.id
            await self.uow.commit()

        logger.info(f"Email verified for user {user_id}")
        return Return.ok(
            VerifyEmailResponse(status="verified", message="Email verified successfully")
        )
