"""
Authentication Use Cases

All authentication-related business logic.
"""

from .register_use_case import RegisterUseCase
from .authenticate_use_case import AuthenticateUseCase
from .logout_use_case import LogoutUseCase
from .change_password_use_case import ChangePasswordUseCase
from .request_password_reset_use_case import RequestPasswordResetUseCase
from .confirm_password_reset_use_case import ConfirmPasswordResetUseCase
from .request_email_verification_use_case import RequestEmailVerificationUseCase
from .verify_email_use_case import VerifyEmailUseCase
from .dtos import (
    RegisterCommand,
    RegisterResponse,
    UserInfo,
    SessionGrant,
    LoginResponse,
    LogoutResponse,
    ChangePasswordResponse,
    RequestPasswordResetResponse,
    ConfirmPasswordResetResponse,
    RequestEmailVerificationResponse,
    VerifyEmailResponse,
)

__all__ = [
    # Use Cases
    "RegisterUseCase",
    "AuthenticateUseCase",
    "LogoutUseCase",
    "ChangePasswordUseCase",
    "RequestPasswordResetUseCase",
    "ConfirmPasswordResetUseCase",
    "RequestEmailVerificationUseCase",
    "VerifyEmailUseCase",
    # DTOs - Commands
    "RegisterCommand",
    # DTOs - Responses
    "RegisterResponse",
    "LoginResponse",
    "LogoutResponse",
    "ChangePasswordResponse",
    "RequestPasswordResetResponse",
    "ConfirmPasswordResetResponse",
    "RequestEmailVerificationResponse",
    "VerifyEmailResponse",
    # DTOs - Nested Models
    "UserInfo",
    "SessionGrant",
]
