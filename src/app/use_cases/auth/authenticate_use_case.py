"""
Authenticate Use Case

Verifies credentials, replaces the user's session and issues an access token.
"""

import logging
from datetime import timedelta
from typing import Optional

from src.app.services.access_token_codec import AccessTokenCodec
from src.app.services.credential_service import CredentialService
from src.app.services.session_store import (
    DEFAULT_SESSION_TTL,
    EXTENDED_SESSION_TTL,
    SessionMetadata,
    SessionStore,
)
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuthErrorCode
from src.libs.result import Error, Result, Return
from .dtos import LoginResponse, SessionGrant, UserInfo

logger = logging.getLogger(__name__)


class AuthenticateUseCase:
    """
    Use case for login.

    Business Rules:
    - Unknown email and wrong password both return INVALID_CREDENTIALS with
      the same message; an unknown email still costs one bcrypt verification
    - A deactivated account gets ACCOUNT_DISABLED whatever the password
    - All earlier sessions of the user are revoked and the new one created in
      a single transaction (single active session per user)
    - remember=True gives the session the extended TTL; the access token TTL
      is unaffected
    """

    def __init__(
        self,
        uow: UnitOfWork,
        credentials: CredentialService,
        codec: AccessTokenCodec,
        session_ttl: timedelta = DEFAULT_SESSION_TTL,
        extended_session_ttl: timedelta = EXTENDED_SESSION_TTL,
    ):
        self.uow = uow
        self.credentials = credentials
        self.codec = codec
        self.session_ttl = session_ttl
        self.extended_session_ttl = extended_session_ttl

    async def execute(
        self,
        email: str,
        password: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
        remember: bool = False,
    ) -> Result[LoginResponse]:
        """
        Execute authenticate use case.

        Returns:
            Result with LoginResponse (user, access token, session), or Error

        Errors:
            - INVALID_CREDENTIALS: Unknown email or wrong password
            - ACCOUNT_DISABLED: User is deactivated
        """
        async with self.uow:
            user = await self.uow.users.get_by_email(email.lower())

            if user is None:
                await self.credentials.verify_dummy(password)
                return Return.err(
                    Error(AuthErrorCode.INVALID_CREDENTIALS.value, "Invalid email or password")
                )

            if not user.is_active:
                logger.warning(f"Login attempt for disabled user {user.id}")
                return Return.err(
                    Error(AuthErrorCode.ACCOUNT_DISABLED.value, "Account is disabled")
                )

            if not await self.credentials.verify_password(password, user.password_hash):
                return Return.err(
                    Error(AuthErrorCode.INVALID_CREDENTIALS.value, "Invalid email or password")
                )

            store = SessionStore(self.uow, self.session_ttl, self.extended_session_ttl)
            created = await store.create(
                user.id,
                SessionMetadata(user_agent=user_agent, ip_address=ip_address),
                extended=remember,
            )
            if created.is_err():
                return Return.err(created.error)

            session = created.value

            response = LoginResponse(
                user=UserInfo.from_user(user),
                access_token=self.codec.issue(user),
                session=SessionGrant(
                    session_id=session.id,
                    session_token=session.session_token,
                    expires_at=session.expires_at,
                ),
            )

            await self.uow.commit()

        logger.info(f"User {response.user.id} logged in")
        return Return.ok(response)
