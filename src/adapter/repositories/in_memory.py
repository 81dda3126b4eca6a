"""
In-memory repositories.

Rows are kept as plain dicts and turned into entities on read, so callers
never hold a reference into the table and nothing changes until update().
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from src.app.repositories.session_repository import ISessionRepository
from src.app.repositories.user_repository import IUserRepository
from src.domain.entities import EPHEMERAL_SLOTS, EphemeralPurpose, Session, User


class InMemoryTables:
    """One consistent copy of all rows"""

    def __init__(self):
        self.users: Dict[int, Dict[str, Any]] = {}
        self.sessions: Dict[int, Dict[str, Any]] = {}
        self.user_seq = 0
        self.session_seq = 0

    def copy_from(self, other: "InMemoryTables") -> None:
        self.users = {key: dict(row) for key, row in other.users.items()}
        self.sessions = {key: dict(row) for key, row in other.sessions.items()}
        self.user_seq = other.user_seq
        self.session_seq = other.session_seq


def _is_usable(row: Dict[str, Any], now: datetime) -> bool:
    return row["is_active"] and row["expires_at"] > now


class InMemoryUserRepository(IUserRepository):
    def __init__(self, tables: InMemoryTables):
        self.tables = tables

    def _find(self, **criteria) -> Optional[User]:
        for row in self.tables.users.values():
            if all(row.get(key) == value for key, value in criteria.items()):
                return User(**row)
        return None

    def _check_unique(self, user: User) -> None:
        for row in self.tables.users.values():
            if row["id"] == user.id:
                continue
            if row["email"] == user.email or row["username"] == user.username:
                raise ValueError("Duplicate email or username")

    async def get_by_id(self, user_id: int) -> Optional[User]:
        row = self.tables.users.get(user_id)
        return User(**row) if row else None

    async def get_by_email(self, email: str) -> Optional[User]:
        return self._find(email=email)

    async def get_by_username(self, username: str) -> Optional[User]:
        return self._find(username=username)

    async def lock(self, user_id: int) -> Optional[User]:
        # The unit of work already holds the store lock
        return await self.get_by_id(user_id)

    async def create(self, user: User) -> User:
        self._check_unique(user)
        self.tables.user_seq += 1
        user.id = self.tables.user_seq
        self.tables.users[user.id] = user.model_dump()
        return user

    async def update(self, user: User) -> User:
        if user.id not in self.tables.users:
            raise KeyError(f"User {user.id} does not exist")
        self._check_unique(user)
        self.tables.users[user.id] = user.model_dump()
        return user

    async def get_by_ephemeral_token(
        self, purpose: EphemeralPurpose, token_hash: str
    ) -> Optional[User]:
        token_column, _ = EPHEMERAL_SLOTS[purpose]
        return self._find(**{token_column: token_hash})

    async def clear_ephemeral_token(
        self, user_id: int, purpose: EphemeralPurpose, token_hash: str
    ) -> bool:
        token_column, expiry_column = EPHEMERAL_SLOTS[purpose]
        row = self.tables.users.get(user_id)
        if row is None or row[token_column] != token_hash:
            return False
        row[token_column] = None
        row[expiry_column] = None
        return True


class InMemorySessionRepository(ISessionRepository):
    def __init__(self, tables: InMemoryTables):
        self.tables = tables

    def _sorted(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return sorted(rows, key=lambda row: row["last_accessed"], reverse=True)

    def _deactivate(self, rows) -> int:
        count = 0
        for row in rows:
            if row["is_active"]:
                row["is_active"] = False
                count += 1
        return count

    async def create(self, session: Session) -> Session:
        if session.user_id not in self.tables.users:
            raise ValueError(f"User {session.user_id} does not exist")
        if any(
            row["session_token"] == session.session_token
            for row in self.tables.sessions.values()
        ):
            raise ValueError("Duplicate session token")

        self.tables.session_seq += 1
        session.id = self.tables.session_seq
        self.tables.sessions[session.id] = session.model_dump()
        return session

    async def get_by_id(self, session_id: int) -> Optional[Session]:
        row = self.tables.sessions.get(session_id)
        return Session(**row) if row else None

    async def get_by_token(self, session_token: str) -> Optional[Session]:
        for row in self.tables.sessions.values():
            if row["session_token"] == session_token:
                return Session(**row)
        return None

    async def get_active_by_token(
        self, session_token: str, now: datetime
    ) -> Optional[Tuple[Session, User]]:
        for row in self.tables.sessions.values():
            if row["session_token"] == session_token and _is_usable(row, now):
                return Session(**row), User(**self.tables.users[row["user_id"]])
        return None

    async def touch(self, session_id: int, now: datetime) -> None:
        row = self.tables.sessions.get(session_id)
        if row is not None:
            row["last_accessed"] = now

    async def deactivate_by_token(self, session_token: str) -> bool:
        rows = [
            row
            for row in self.tables.sessions.values()
            if row["session_token"] == session_token
        ]
        return self._deactivate(rows) > 0

    async def deactivate_by_id(self, session_id: int) -> bool:
        row = self.tables.sessions.get(session_id)
        return self._deactivate([row] if row else []) > 0

    async def deactivate_all_for_user(self, user_id: int) -> int:
        rows = [row for row in self.tables.sessions.values() if row["user_id"] == user_id]
        return self._deactivate(rows)

    async def delete_unusable(self, now: datetime) -> int:
        doomed = [
            key
            for key, row in self.tables.sessions.items()
            if row["expires_at"] < now or not row["is_active"]
        ]
        for key in doomed:
            del self.tables.sessions[key]
        return len(doomed)

    async def list_active(self, now: datetime) -> List[Tuple[Session, User]]:
        rows = [row for row in self.tables.sessions.values() if _is_usable(row, now)]
        return [
            (Session(**row), User(**self.tables.users[row["user_id"]]))
            for row in self._sorted(rows)
        ]

    async def list_active_for_user(self, user_id: int, now: datetime) -> List[Session]:
        rows = [
            row
            for row in self.tables.sessions.values()
            if row["user_id"] == user_id and _is_usable(row, now)
        ]
        return [Session(**row) for row in self._sorted(rows)]
