"""
Register Use Case

Creates an account and sends the first email verification token.
"""

import logging
from datetime import timedelta
from typing import Optional

from src.app.services.credential_service import CredentialService
from src.app.services.ephemeral_token_service import EphemeralTokenService
from src.app.services.mailer import IMailer
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuthErrorCode, EphemeralPurpose, User
from src.libs.result import Error, Result, Return
from .dtos import RegisterCommand, RegisterResponse, UserInfo

logger = logging.getLogger(__name__)


class RegisterUseCase:
    """
    Use case for user registration.

    Business Rules:
    - Password must satisfy the central password policy
    - Email and username must be unused; the error does not say which one,
      and a registration that loses a race for them gets the same error
    - New users are active, not admin, and have an unverified email
    - The verification token is stored in the same transaction as the user
    - The verification email is sent after commit; a delivery failure is
      logged and does not undo the registration
    """

    def __init__(
        self,
        uow: UnitOfWork,
        credentials: CredentialService,
        mailer: Optional[IMailer] = None,
        verification_ttl: Optional[timedelta] = None,
    ):
        self.uow = uow
        self.credentials = credentials
        self.mailer = mailer
        self.verification_ttl = verification_ttl

    async def execute(self, command: RegisterCommand) -> Result[RegisterResponse]:
        """
        Execute register use case.

        Returns:
            Result with RegisterResponse, or Error

        Errors:
            - POLICY_VIOLATION: Password too weak (details.violations)
            - USER_EXISTS: Email or username already registered
        """
        policy = self.credentials.check_policy(command.password)
        if policy.is_err():
            return Return.err(policy.error)

        email = command.email.lower()
        password_hash = await self.credentials.hash_password(command.password)

        user_exists = Error(
            AuthErrorCode.USER_EXISTS.value,
            "User with this email or username already exists",
        )

        async with self.uow:
            if await self.uow.users.get_by_email(email) or await self.uow.users.get_by_username(
                command.username
            ):
                return Return.err(user_exists)

            try:
                user = await self.uow.users.create(
                    User(
                        username=command.username,
                        email=email,
                        password_hash=password_hash,
                        is_admin=False,
                        is_active=True,
                        email_verified=False,
                    )
                )
            except ValueError:
                # A concurrent registration took the email or username
                logger.warning(f"Registration for {command.username} lost a uniqueness race")
                return Return.err(user_exists)

            token = await EphemeralTokenService(self.uow).generate(
                user, EphemeralPurpose.email_verification, self.verification_ttl
            )
            response = RegisterResponse(
                user=UserInfo.from_user(user),
                message="Registration successful. Please check your email to verify your account.",
            )

            await self.uow.commit()

        logger.info(f"User {response.user.id} registered")

        if self.mailer:
            try:
                await self.mailer.send_verification_email(
                    response.user.email, response.user.username, token
                )
            except Exception as exc:
                logger.error(f"Verification email for user {response.user.id} failed: {exc}")

        return Return.ok(response)
