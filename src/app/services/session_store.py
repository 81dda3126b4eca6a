"""
Session Store

Creates, validates, invalidates and garbage-collects server-side sessions,
and enforces the single-active-session-per-user policy.
"""

import logging
import secrets
from datetime import datetime, timedelta
from typing import List, Optional

from pydantic import BaseModel

from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuthErrorCode, Session
from src.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(hours=24)
EXTENDED_SESSION_TTL = timedelta(days=30)


def generate_session_token() -> str:
    """256 bits from the OS CSPRNG, hex-encoded"""
    return secrets.token_hex(32)


class SessionMetadata(BaseModel):
    """Client context recorded with a session"""

    user_agent: Optional[str] = None
    ip_address: Optional[str] = None


class SessionView(BaseModel):
    """A validated session joined with its owner"""

    session_id: int
    user_id: int
    username: str
    email: str
    is_admin: bool
    email_verified: bool
    created_at: datetime
    last_accessed: datetime
    expires_at: datetime


class SessionInfo(BaseModel):
    """Owner-facing projection of a live session"""

    session_id: int
    created_at: datetime
    last_accessed: datetime
    expires_at: datetime
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None


class ActiveSessionInfo(BaseModel):
    """Administrative projection of a live session"""

    session_id: int
    user_id: int
    username: str
    email: str
    created_at: datetime
    last_accessed: datetime
    expires_at: datetime
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None


class SessionStore:
    """
    Server-side session lifecycle.

    Business Rules:
    - A session is usable only while is_active and expires_at > now
    - Creating a session first deactivates every session of the user, in the
      same transaction, with the owner's row locked
    - TTL is 24h, or 30 days for an extended ("remember me") session
    - Sweep deletes only rows that are already unusable

    create and the invalidate methods run inside a unit of work opened by the
    caller, who commits them together with its own changes. validate, sweep
    and the listings open their own unit of work.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        ttl: timedelta = DEFAULT_SESSION_TTL,
        extended_ttl: timedelta = EXTENDED_SESSION_TTL,
    ):
        self.uow = uow
        self.ttl = ttl
        self.extended_ttl = extended_ttl

    async def create(
        self,
        user_id: int,
        metadata: Optional[SessionMetadata] = None,
        extended: bool = False,
    ) -> Result[Session]:
        """
        Revoke every session of user_id and insert the new single active one.

        Locking the user row serializes concurrent logins for the same account.

        Returns:
            Result with the new Session, or Error(USER_NOT_FOUND)
        """
        metadata = metadata or SessionMetadata()
        now = utcnow()

        user = await self.uow.users.lock(user_id)
        if user is None:
            return Return.err(Error(AuthErrorCode.USER_NOT_FOUND.value, "User not found"))

        revoked = await self.invalidate_all(user_id)

        session = Session(
            user_id=user_id,
            session_token=generate_session_token(),
            is_active=True,
            user_agent=metadata.user_agent,
            ip_address=metadata.ip_address,
            created_at=now,
            last_accessed=now,
            expires_at=now + (self.extended_ttl if extended else self.ttl),
        )
        session = await self.uow.sessions.create(session)

        logger.info(
            f"Session {session.id} created for user {user_id} "
            f"(extended={extended}, revoked {revoked} prior)"
        )
        return Return.ok(session)

    async def validate(self, session_token: str) -> Optional[SessionView]:
        """
        Return the session and its owner if the session is usable.

        Bumps last_accessed on success; a failure to record the access is
        logged and does not fail the validation.
        """
        now = utcnow()
        async with self.uow:
            row = await self.uow.sessions.get_active_by_token(session_token, now)
            if row is None:
                return None

            session, user = row
            view = SessionView(
                session_id=session.id,
                user_id=user.id,
                username=user.username,
                email=user.email,
                is_admin=user.is_admin,
                email_verified=user.email_verified,
                created_at=session.created_at,
                last_accessed=now,
                expires_at=session.expires_at,
            )

            try:
                await self.uow.sessions.touch(session.id, now)
                await self.uow.commit()
            except Exception as exc:
                logger.warning(f"Could not record access for session {session.id}: {exc}")
                await self.uow.rollback()

            return view

    async def invalidate(self, session_token: str) -> bool:
        """Deactivate the session holding session_token. Returns whether it was live."""
        return await self.uow.sessions.deactivate_by_token(session_token)

    async def invalidate_by_id(self, session_id: int) -> bool:
        return await self.uow.sessions.deactivate_by_id(session_id)

    async def invalidate_all(self, user_id: int) -> int:
        """Deactivate every active session of user_id. Returns count."""
        return await self.uow.sessions.deactivate_all_for_user(user_id)

    async def sweep(self) -> int:
        """Delete sessions that are expired or inactive. Returns count."""
        async with self.uow:
            count = await self.uow.sessions.delete_unusable(utcnow())
            await self.uow.commit()

        if count:
            logger.info(f"Swept {count} expired/inactive session(s)")
        return count

    async def list_active(self) -> List[ActiveSessionInfo]:
        async with self.uow:
            rows = await self.uow.sessions.list_active(utcnow())
            return [
                ActiveSessionInfo(
                    session_id=session.id,
                    user_id=user.id,
                    username=user.username,
                    email=user.email,
                    created_at=session.created_at,
                    last_accessed=session.last_accessed,
                    expires_at=session.expires_at,
                    user_agent=session.user_agent,
                    ip_address=session.ip_address,
                )
                for session, user in rows
            ]

    async def list_active_for_user(self, user_id: int) -> List[SessionInfo]:
        async with self.uow:
            sessions = await self.uow.sessions.list_active_for_user(user_id, utcnow())
            return [
                SessionInfo(
                    session_id=session.id,
                    created_at=session.created_at,
                    last_accessed=session.last_accessed,
                    expires_at=session.expires_at,
                    user_agent=session.user_agent,
                    ip_address=session.ip_address,
                )
                for session in sessions
            ]
