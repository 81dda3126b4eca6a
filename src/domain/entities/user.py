"""
User Entity

Identity and credential record.
"""

from datetime import datetime
from typing import Dict, Optional, Tuple

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from ..base import utcnow
from .enums import EphemeralPurpose


class User(SQLModel, table=True):
    """
    User entity - identity, password hash and single-use token slots.

    Business Rules:
    - Email and username are unique
    - Password stored as bcrypt hash (cost self-described in the hash)
    - Each token slot (verification, reset) holds a SHA-256 digest and its
      expiry; both are set together and cleared together
    - Deactivation (is_active=False) revokes every session of the user
    """

    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    username: str = Field(unique=True, index=True, max_length=30)
    password_hash: str = Field(max_length=60)

    is_admin: bool = Field(default=False)
    is_active: bool = Field(default=True)
    email_verified: bool = Field(default=False)

    verification_token: Optional[str] = Field(
        default=None, unique=True, index=True, max_length=64
    )
    verification_expiry: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )
    reset_token: Optional[str] = Field(
        default=None, unique=True, index=True, max_length=64
    )
    reset_expiry: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_user_is_active", "is_active"),)


# (token column, expiry column) per purpose
EPHEMERAL_SLOTS: Dict[EphemeralPurpose, Tuple[str, str]] = {
    EphemeralPurpose.email_verification: ("verification_token", "verification_expiry"),
    EphemeralPurpose.password_reset: ("reset_token", "reset_expiry"),
}
