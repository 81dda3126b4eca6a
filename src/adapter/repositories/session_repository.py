from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import delete, or_, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository
from src.domain.entities import Session, User


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def get_by_id(self, session_id: int) -> Optional[Session]:
        """Get session by ID"""
        stmt = select(Session).where(Session.id == session_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_token(self, session_token: str) -> Optional[Session]:
        """Get session by token, regardless of state"""
        stmt = select(Session).where(Session.session_token == session_token)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_active_by_token(
        self, session_token: str, now: datetime
    ) -> Optional[Tuple[Session, User]]:
        """Get usable session joined with its owner"""
        stmt = (
            select(Session, User)
            .join(User, Session.user_id == User.id)
            .where(
                Session.session_token == session_token,
                Session.is_active == True,  # noqa: E712
                Session.expires_at > now,
            )
        )
        result = await self.session.exec(stmt)
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]

    async def touch(self, session_id: int, now: datetime) -> None:
        """Record an access"""
        stmt = update(Session).where(Session.id == session_id).values(last_accessed=now)
        await self.session.execute(stmt)
        await self.session.flush()

    async def deactivate_by_token(self, session_token: str) -> bool:
        """Deactivate the session with this token"""
        stmt = (
            update(Session)
            .where(Session.session_token == session_token, Session.is_active == True)  # noqa: E712
            .values(is_active=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def deactivate_by_id(self, session_id: int) -> bool:
        """Deactivate a session by ID"""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.is_active == True)  # noqa: E712
            .values(is_active=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def deactivate_all_for_user(self, user_id: int) -> int:
        """Deactivate all active sessions for a user"""
        stmt = (
            update(Session)
            .where(Session.user_id == user_id, Session.is_active == True)  # noqa: E712
            .values(is_active=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def delete_unusable(self, now: datetime) -> int:
        """Delete sessions past expiry or deactivated"""
        stmt = delete(Session).where(
            or_(Session.expires_at < now, Session.is_active == False)  # noqa: E712
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def list_active(self, now: datetime) -> List[Tuple[Session, User]]:
        """All usable sessions with their owners"""
        stmt = (
            select(Session, User)
            .join(User, Session.user_id == User.id)
            .where(Session.is_active == True, Session.expires_at > now)  # noqa: E712
            .order_by(Session.last_accessed.desc())
        )
        result = await self.session.exec(stmt)
        return [(row[0], row[1]) for row in result.all()]

    async def list_active_for_user(self, user_id: int, now: datetime) -> List[Session]:
        """Usable sessions of one user"""
        stmt = (
            select(Session)
            .where(
                Session.user_id == user_id,
                Session.is_active == True,  # noqa: E712
                Session.expires_at > now,
            )
            .order_by(Session.last_accessed.desc())
        )
        result = await self.session.exec(stmt)
        return list(result.all())
