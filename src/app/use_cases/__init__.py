"""
Use Cases

Organized by domain folder:
- auth/: Registration, login, logout, password and email flows
- sessions/: Session listing and revocation
- users/: User administration
"""

from .auth import (
    RegisterUseCase,
    AuthenticateUseCase,
    LogoutUseCase,
    ChangePasswordUseCase,
    RequestPasswordResetUseCase,
    ConfirmPasswordResetUseCase,
    RequestEmailVerificationUseCase,
    VerifyEmailUseCase,
)
from .sessions import (
    ListSessionsUseCase,
    InvalidateSessionUseCase,
)
from .users import (
    SetUserActiveUseCase,
    SetUserPasswordUseCase,
    SetUserRoleUseCase,
)

__all__ = [
    # Auth
    "RegisterUseCase",
    "AuthenticateUseCase",
    "LogoutUseCase",
    "ChangePasswordUseCase",
    "RequestPasswordResetUseCase",
    "ConfirmPasswordResetUseCase",
    "RequestEmailVerificationUseCase",
    "VerifyEmailUseCase",
    # Sessions
    "ListSessionsUseCase",
    "InvalidateSessionUseCase",
    # Users
    "SetUserActiveUseCase",
    "SetUserPasswordUseCase",
    "SetUserRoleUseCase",
]
