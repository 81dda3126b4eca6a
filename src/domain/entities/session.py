"""
Session Entity

Server-held, revocable grant of access for one user on one device.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from ..base import utcnow


class Session(SQLModel, table=True):
    """
    Session entity - the stateful half of authentication.

    Business Rules:
    - session_token is 32 random bytes, hex-encoded
    - A session is usable only while is_active and expires_at > now
    - Login deactivates every prior session of the user before inserting
    - Rows that are expired or inactive are deleted by the sweep
    """

    __tablename__ = "user_sessions"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", nullable=False, index=True)

    session_token: str = Field(unique=True, index=True, max_length=64)
    is_active: bool = Field(default=True)

    user_agent: Optional[str] = Field(default=None, max_length=512)
    ip_address: Optional[str] = Field(default=None, max_length=64)

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    last_accessed: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    __table_args__ = (
        Index("idx_session_expires_at", "expires_at"),
        Index("idx_session_user_active", "user_id", "is_active"),
    )
