"""
Credential Service

Password hashing, verification and the password-strength policy.
The policy lives here only; registration, reset and change-password all call it.
"""

import asyncio
import re
from typing import List, Optional

import bcrypt
from pydantic import BaseModel

from src.domain.entities import AuthErrorCode
from src.libs.result import Error, Result, Return

MIN_PASSWORD_LENGTH = 8
SPECIAL_CHARACTERS = '!@#$%^&*(),.?":{}|<>'

# bcrypt only uses the first 72 bytes of its input
_BCRYPT_MAX_BYTES = 72

_SPECIAL_RE = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")


class PolicyResult(BaseModel):
    """Outcome of a password policy check"""

    ok: bool
    violations: List[str]


class CredentialService:
    """
    Hashes and verifies passwords with bcrypt.

    Business Rules:
    - Cost factor is a constant (default 12); the bcrypt hash embeds its own
      cost so changing the constant never invalidates stored hashes
    - Hashing runs in a worker thread so the event loop is never blocked
    - Unknown-user logins burn one verification against a dummy hash
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._dummy_hash: Optional[str] = None

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]

    def _hash_sync(self, password: str) -> str:
        return bcrypt.hashpw(self._encode(password), bcrypt.gensalt(self.rounds)).decode("utf-8")

    def _verify_sync(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(self._encode(password), password_hash.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash
            return False

    async def hash_password(self, password: str) -> str:
        return await asyncio.to_thread(self._hash_sync, password)

    async def verify_password(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self._verify_sync, password, password_hash)

    async def verify_dummy(self, password: str) -> None:
        """Spend the same time as a real verification when there is no user."""
        if self._dummy_hash is None:
            self._dummy_hash = await asyncio.to_thread(self._hash_sync, "dummy_password")
        await asyncio.to_thread(self._verify_sync, password, self._dummy_hash)

    def validate_policy(self, password: str) -> PolicyResult:
        violations = []
        if len(password) < MIN_PASSWORD_LENGTH:
            violations.append(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        if not re.search(r"[A-Z]", password):
            violations.append("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", password):
            violations.append("Password must contain at least one lowercase letter")
        if not re.search(r"\d", password):
            violations.append("Password must contain at least one number")
        if not _SPECIAL_RE.search(password):
            violations.append("Password must contain at least one special character")

        return PolicyResult(ok=not violations, violations=violations)

    def check_policy(self, password: str) -> Result[None]:
        """validate_policy as a Result carrying POLICY_VIOLATION"""
        policy = self.validate_policy(password)
        if policy.ok:
            return Return.ok(None)

        return Return.err(
            Error(
                AuthErrorCode.POLICY_VIOLATION.value,
                "Password does not meet the security requirements",
                {"violations": policy.violations},
            )
        )
