"""
User Management Use Cases

All user-related business logic.
"""

from .set_user_active_use_case import SetUserActiveUseCase, UserStatusResponse
from .set_user_password_use_case import SetUserPasswordResponse, SetUserPasswordUseCase
from .set_user_role_use_case import SetUserRoleUseCase, UserRoleResponse

__all__ = [
    "SetUserActiveUseCase",
    "UserStatusResponse",
    "SetUserPasswordUseCase",
    "SetUserPasswordResponse",
    "SetUserRoleUseCase",
    "UserRoleResponse",
]
