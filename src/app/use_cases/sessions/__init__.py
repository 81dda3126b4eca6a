"""
Session Use Cases

Listing and administrative revocation of sessions.
"""

from .list_sessions_use_case import ListSessionsUseCase
from .invalidate_session_use_case import InvalidateSessionResponse, InvalidateSessionUseCase

__all__ = [
    "ListSessionsUseCase",
    "InvalidateSessionUseCase",
    "InvalidateSessionResponse",
]
