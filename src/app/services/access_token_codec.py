"""
Access Token Codec

Signs and verifies the stateless access token (HS256 JWT).
Pure: no I/O and no shared state, so it composes freely with SessionStore.
"""

from datetime import UTC, datetime, timedelta
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.domain.entities import AuthErrorCode, User
from src.libs.result import Error, Result, Return


class AccessTokenClaims(BaseModel):
    """Claim set carried by an access token"""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    username: str
    email: str
    is_admin: bool = Field(alias="isAdmin")
    email_verified: bool = Field(alias="emailVerified")
    exp: int
    iat: Optional[int] = None


class AccessTokenCodec:
    """
    Issues and verifies access tokens.

    Business Rules:
    - exp always reflects the access-token TTL (default 24h), independent of
      how long the backing session lives
    - Signature comparison is constant-time (python-jose uses hmac.compare_digest)
    - Failures are reported as TOKEN_MALFORMED, TOKEN_INVALID or TOKEN_EXPIRED
    """

    def __init__(
        self,
        secret: str,
        ttl: timedelta = timedelta(hours=24),
        algorithm: str = "HS256",
    ):
        self.secret = secret
        self.ttl = ttl
        self.algorithm = algorithm

    def issue(self, user: User, now: Optional[datetime] = None) -> str:
        """
        Generate a signed access token for user.

        Args:
            user: User the token identifies
            now: Issue time (aware UTC); defaults to the current time

        Returns:
            JWT string
        """
        now = now or datetime.now(UTC)
        payload = {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "isAdmin": bool(user.is_admin),
            "emailVerified": bool(user.email_verified),
            "exp": now + self.ttl,
            "iat": now,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Result[AccessTokenClaims]:
        """
        Verify signature and expiry, then decode the claim set.

        Returns:
            Result with AccessTokenClaims, or Error

        Errors:
            - TOKEN_MALFORMED: Not a JWT, or claims missing/ill-typed
            - TOKEN_INVALID: Signature (or algorithm) does not verify
            - TOKEN_EXPIRED: Signature valid but exp has passed
        """
        try:
            jwt.get_unverified_header(token)
        except JWTError:
            return Return.err(
                Error(AuthErrorCode.TOKEN_MALFORMED.value, "Access token is malformed")
            )

        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            return Return.err(
                Error(AuthErrorCode.TOKEN_EXPIRED.value, "Access token has expired")
            )
        except JWTError:
            return Return.err(
                Error(AuthErrorCode.TOKEN_INVALID.value, "Access token is invalid")
            )

        try:
            claims = AccessTokenClaims.model_validate(payload)
        except ValidationError:
            return Return.err(
                Error(AuthErrorCode.TOKEN_MALFORMED.value, "Access token is malformed")
            )

        return Return.ok(claims)
