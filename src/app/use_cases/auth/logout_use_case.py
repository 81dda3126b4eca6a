"""
Logout Use Case

Ends one session of the caller, or all of them.
"""

import logging
from typing import Optional

from src.app.services.session_store import SessionStore
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuthErrorCode
from src.libs.result import Error, Result, Return
from .dtos import LogoutResponse

logger = logging.getLogger(__name__)


class LogoutUseCase:
    """
    Use case for ending sessions.

    Business Rules:
    - A session token can only end a session owned by the caller
    - Without a session token every session of the caller is ended
    - Ending sessions makes the caller's access tokens fail the auth gate
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def end_session(
        self, user_id: int, session_token: Optional[str] = None
    ) -> Result[LogoutResponse]:
        """
        Errors:
            - SESSION_NOT_FOUND: Token unknown or owned by someone else
        """
        if not session_token:
            return await self.end_all_sessions(user_id)

        async with self.uow:
            session = await self.uow.sessions.get_by_token(session_token)
            if session is None or session.user_id != user_id:
                return Return.err(
                    Error(AuthErrorCode.SESSION_NOT_FOUND.value, "Session not found")
                )

            ended = await SessionStore(self.uow).invalidate(session_token)
            await self.uow.commit()

        logger.info(f"User {user_id} logged out of one session")
        return Return.ok(LogoutResponse(status="logged_out", sessions_ended=int(ended)))

    async def end_all_sessions(self, user_id: int) -> Result[LogoutResponse]:
        async with self.uow:
            count = await SessionStore(self.uow).invalidate_all(user_id)
            await self.uow.commit()

        logger.info(f"User {user_id} logged out of {count} session(s)")
        return Return.ok(LogoutResponse(status="logged_out", sessions_ended=count))
