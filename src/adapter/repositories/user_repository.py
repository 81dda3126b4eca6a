from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.user_repository import IUserRepository
from src.domain.entities import EPHEMERAL_SLOTS, EphemeralPurpose, User


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        stmt = select(User).where(User.email == email)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username"""
        stmt = select(User).where(User.username == username)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def lock(self, user_id: int) -> Optional[User]:
        """
        SELECT ... FOR UPDATE on the user row.

        SQLite ignores FOR UPDATE; it serializes writers at the database level.
        """
        stmt = select(User).where(User.id == user_id).with_for_update()
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, user: User) -> User:
        """Create a new user. Raises ValueError if the email or username is taken."""
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise ValueError("Duplicate email or username") from exc
        await self.session.refresh(user)
        return user

    async def update(self, user: User) -> User:
        """Update existing user"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def get_by_ephemeral_token(
        self, purpose: EphemeralPurpose, token_hash: str
    ) -> Optional[User]:
        """Get user by verification or reset token digest"""
        token_column, _ = EPHEMERAL_SLOTS[purpose]
        stmt = select(User).where(getattr(User, token_column) == token_hash)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def clear_ephemeral_token(
        self, user_id: int, purpose: EphemeralPurpose, token_hash: str
    ) -> bool:
        """Compare-and-clear: only the first caller holding token_hash wins"""
        token_column, expiry_column = EPHEMERAL_SLOTS[purpose]
        stmt = (
            update(User)
            .where(User.id == user_id, getattr(User, token_column) == token_hash)
            .values({token_column: None, expiry_column: None})
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1
