"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from src.domain.entities import User


# ============================================================================
# Command DTOs
# ============================================================================


class RegisterCommand(BaseModel):
    """Input for user registration"""

    username: str = Field(min_length=3, max_length=30, pattern=r"^[A-Za-z0-9._@-]+$")
    email: EmailStr
    password: str


# ============================================================================
# Response DTOs
# ============================================================================


class UserInfo(BaseModel):
    """User information in authentication responses"""

    id: int
    username: str
    email: str
    is_admin: bool
    is_active: bool
    email_verified: bool

    @classmethod
    def from_user(cls, user: User) -> "UserInfo":
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            is_admin=user.is_admin,
            is_active=user.is_active,
            email_verified=user.email_verified,
        )


class SessionGrant(BaseModel):
    """The session handed to the client at login"""

    session_id: int
    session_token: str
    expires_at: datetime


class LoginResponse(BaseModel):
    """Response for authenticate use case"""

    user: UserInfo
    access_token: str
    token_type: str = "bearer"
    session: SessionGrant


class RegisterResponse(BaseModel):
    """Response for register use case"""

    user: UserInfo
    message: str


class LogoutResponse(BaseModel):
    """Response for logout use case"""

    status: str
    sessions_ended: int


class ChangePasswordResponse(BaseModel):
    """Response for change password use case"""

    status: str
    message: str


class RequestPasswordResetResponse(BaseModel):
    """
    Response for request password reset use case.

    token is the plain reset token for the mailer; it is never serialized.
    """

    status: str
    message: str
    token: Optional[str] = Field(default=None, exclude=True)


class ConfirmPasswordResetResponse(BaseModel):
    """Response for confirm password reset use case"""

    status: str
    message: str
    sessions_revoked: int


class RequestEmailVerificationResponse(BaseModel):
    """Response for (re)sending the verification email; token is never serialized"""

    status: str
    message: str
    token: Optional[str] = Field(default=None, exclude=True)


class VerifyEmailResponse(BaseModel):
    """Response for email verification use case"""

    status: str
    message: str
