from abc import ABC, abstractmethod
from typing import Optional

from src.domain.entities import EphemeralPurpose, User


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address"""
        pass

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[User]:
        """Get user by username"""
        pass

    @abstractmethod
    async def lock(self, user_id: int) -> Optional[User]:
        """Get user by ID, holding a row lock until the transaction ends"""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """Create a new user. Raises ValueError if the email or username is taken."""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update existing user"""
        pass

    @abstractmethod
    async def get_by_ephemeral_token(
        self, purpose: EphemeralPurpose, token_hash: str
    ) -> Optional[User]:
        """Get the user whose token slot for purpose holds token_hash"""
        pass

    @abstractmethod
    async def clear_ephemeral_token(
        self, user_id: int, purpose: EphemeralPurpose, token_hash: str
    ) -> bool:
        """
        Clear token and expiry for purpose, only if the slot still holds token_hash.

        Returns True if this call performed the clear.
        """
        pass
