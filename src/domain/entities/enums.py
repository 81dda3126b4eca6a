"""
Domain Enums

Enumeration types shared by entities, services and the API layer.
"""

from enum import Enum


class EphemeralPurpose(str, Enum):
    """What a single-use emailed token authorizes"""

    email_verification = "email_verification"
    password_reset = "password_reset"


class AuthErrorCode(str, Enum):
    """Error codes returned by the credential and session core"""

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ACCOUNT_DISABLED = "ACCOUNT_DISABLED"
    MISSING_TOKEN = "MISSING_TOKEN"
    TOKEN_INVALID = "TOKEN_INVALID"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_MALFORMED = "TOKEN_MALFORMED"
    SESSION_REVOKED = "SESSION_REVOKED"
    EPHEMERAL_TOKEN_NOT_FOUND = "EPHEMERAL_TOKEN_NOT_FOUND"
    EPHEMERAL_TOKEN_EXPIRED = "EPHEMERAL_TOKEN_EXPIRED"
    POLICY_VIOLATION = "POLICY_VIOLATION"
    USER_EXISTS = "USER_EXISTS"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    CANNOT_MODIFY_SELF = "CANNOT_MODIFY_SELF"
