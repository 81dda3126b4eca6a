from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

from src.domain.entities import Session, User


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def get_by_id(self, session_id: int) -> Optional[Session]:
        """Get session by ID"""
        pass

    @abstractmethod
    async def get_by_token(self, session_token: str) -> Optional[Session]:
        """Get session by its opaque token, regardless of state"""
        pass

    @abstractmethod
    async def get_active_by_token(
        self, session_token: str, now: datetime
    ) -> Optional[Tuple[Session, User]]:
        """Get an active, unexpired session with its owning user"""
        pass

    @abstractmethod
    async def touch(self, session_id: int, now: datetime) -> None:
        """Set last_accessed for a session"""
        pass

    @abstractmethod
    async def deactivate_by_token(self, session_token: str) -> bool:
        """Deactivate the session with this token. Returns True if it was active."""
        pass

    @abstractmethod
    async def deactivate_by_id(self, session_id: int) -> bool:
        """Deactivate a session by ID. Returns True if it was active."""
        pass

    @abstractmethod
    async def deactivate_all_for_user(self, user_id: int) -> int:
        """Deactivate every active session of a user. Returns count."""
        pass

    @abstractmethod
    async def delete_unusable(self, now: datetime) -> int:
        """Delete sessions that are expired or inactive. Returns count."""
        pass

    @abstractmethod
    async def list_active(self, now: datetime) -> List[Tuple[Session, User]]:
        """All usable sessions with their owners, most recently accessed first"""
        pass

    @abstractmethod
    async def list_active_for_user(self, user_id: int, now: datetime) -> List[Session]:
        """Usable sessions of one user, most recently accessed first"""
        pass
