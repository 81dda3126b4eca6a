"""
Set User Role Use Case

Promotes a user to administrator or demotes an administrator.
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


class UserRoleResponse(BaseModel):
    user: UserInfo
    sessions_revoked: int


class SetUserRoleUseCase:
    """
    Use case for changing a user's is_admin flag.

    Business Rules:
    - Administrators cannot change their own role
    - Access tokens carry isAdmin, so a role change revokes every session of
      the user; the next login issues a token with the new claim
    - Setting the role the user already has changes nothing
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, target_user_id: int, is_admin: bool, requesting_user_id: int
    ) -> Result[UserRoleResponse]:
        """
        Errors:
            - CANNOT_MODIFY_SELF: Target is the requesting administrator
            - USER_NOT_FOUND: Target does not exist
        """
        if target_user_id == requesting_user_id:
            return Return.err(
                Error(
                    AuthErrorCode.CANNOT_MODIFY_SELF.value,
                    "Administrators cannot change their own role",
                )
            )

        async with self.uow:
            user = await self.uow.users.lock(target_user_id)
            if user is None:
                return Return.err(Error(AuthErrorCode.USER_NOT_FOUND.value, "User not found"))

            revoked = 0
            if user.is_admin != is_admin:
                user.is_admin = is_admin
                user.updated_at = utcnow()
                await self.uow.users.update(user)
                revoked = await SessionStore(self.uow).invalidate_all(user.id)

            response = UserRoleResponse(user=UserInfo.from_user(user), sessions_revoked=revoked)
            await self.uow.commit()

        action = "promoted" if is_admin else "demoted"
        logger.info(
            f"User {target_user_id} {action} by admin {requesting_user_id}, "
            f"revoked {revoked} session(s)"
        )
        return Return.ok(response)
