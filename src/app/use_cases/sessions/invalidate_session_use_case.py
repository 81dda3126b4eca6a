"""
Invalidate Session Use Case

Administrative revocation of a single session.
"""

import logging

from pydantic import BaseModel

from src.app.services.session_store import SessionStore
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuthErrorCode
from src.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)


class InvalidateSessionResponse(BaseModel):
    session_id: int
    user_id: int
    invalidated: bool


class InvalidateSessionUseCase:
    """
    Use case for invalidating a session by id.

    Business Rules:
    - Only sessions that are still active can be invalidated
    - The owner's access tokens fail the auth gate afterwards
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, session_id: int) -> Result[InvalidateSessionResponse]:
        """
        Errors:
            - SESSION_NOT_FOUND: No such session, or already inactive
        """
        async with self.uow:
            session = await self.uow.sessions.get_by_id(session_id)
            if session is None or not session.is_active:
                return Return.err(
                    Error(AuthErrorCode.SESSION_NOT_FOUND.value, "Session not found or already inactive")
                )

            user_id = session.user_id
            changed = await SessionStore(self.uow).invalidate_by_id(session_id)
            await self.uow.commit()

        logger.info(f"Session {session_id} of user {user_id} invalidated by admin")
        return Return.ok(
            InvalidateSessionResponse(session_id=session_id, user_id=user_id, invalidated=changed)
        )
