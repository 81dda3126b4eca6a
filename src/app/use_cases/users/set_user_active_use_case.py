"""
Set User Active Use Case

Administrative activation and deactivation of accounts.
"""

import logging

from pydantic import BaseModel

from src.app.services.session_store import SessionStore
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth.dtos import UserInfo
from src.domain.base import utcnow
from src.domain.entities import AuthErrorCode
from src.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)


class UserStatusResponse(BaseModel):
    user: UserInfo
    sessions_revoked: int


class SetUserActiveUseCase:
    """
    Use case for changing a user's is_active flag.

    Business Rules:
    - Administrators cannot change their own status
    - Deactivation revokes every session of the user in the same
      transaction, so no live session survives a successful call
    - Activation does not restore revoked sessions
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, target_user_id: int, is_active: bool, requesting_user_id: int
    ) -> Result[UserStatusResponse]:
        """
        Errors:
            - CANNOT_MODIFY_SELF: Target is the requesting administrator
            - USER_NOT_FOUND: Target does not exist
        """
        if target_user_id == requesting_user_id:
            return Return.err(
                Error(
                    AuthErrorCode.CANNOT_MODIFY_SELF.value,
                    "Administrators cannot change their own status",
                )
            )

        async with self.uow:
            user = await self.uow.users.lock(target_user_id)
            if user is None:
                return Return.err(Error(AuthErrorCode.USER_NOT_FOUND.value, "User not found"))

            user.is_active = is_active
            user.updated_at = utcnow()
            await self.uow.users.update(user)

            revoked = 0
            if not is_active:
                revoked = await SessionStore(self.uow).invalidate_all(user.id)

            response = UserStatusResponse(user=UserInfo.from_user(user), sessions_revoked=revoked)
            await self.uow.commit()

        logger.info(
            f"User {target_user_id} set is_active={is_active} by admin {requesting_user_id}, "
            f"revoked {revoked} session(s)"
        )
        return Return.ok(response)
