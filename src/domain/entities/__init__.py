"""
Domain Entities

Each entity in its own file.
"""

from .enums import AuthErrorCode, EphemeralPurpose
from .user import EPHEMERAL_SLOTS, User
from .session import Session

__all__ = [
    # Enums
    "AuthErrorCode",
    "EphemeralPurpose",
    # Entities
    "User",
    "Session",
    "EPHEMERAL_SLOTS",
]
