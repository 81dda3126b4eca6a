from contextlib import asynccontextmanager
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.logging_mailer import LoggingMailer
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.app.services.access_token_codec import AccessTokenClaims, AccessTokenCodec
from src.app.services.auth_gate import AuthGate
from src.app.services.credential_service import CredentialService
from src.app.services.mailer import IMailer
from src.app.services.session_store import SessionStore
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    AuthenticateUseCase,
    RegisterUseCase,
    RequestEmailVerificationUseCase,
    RequestPasswordResetUseCase,
)
from src.domain.entities import AuthErrorCode
from src.libs.result import Error

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)


@asynccontextmanager
async def unit_of_work_scope():
    """Unit of work outside a request (background tasks)"""
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


async def get_unit_of_work():
    async with unit_of_work_scope() as uow:
        yield uow


@lru_cache(maxsize=None)
def get_credential_service() -> CredentialService:
    return CredentialService(rounds=ApplicationConfig.BCRYPT_ROUNDS)


@lru_cache(maxsize=None)
def get_access_token_codec() -> AccessTokenCodec:
    return AccessTokenCodec(
        secret=ApplicationConfig.JWT_SECRET,
        ttl=timedelta(hours=ApplicationConfig.ACCESS_TOKEN_TTL_HOURS),
        algorithm=ApplicationConfig.JWT_ALGORITHM,
    )


@lru_cache(maxsize=None)
def get_mailer() -> IMailer:
    return LoggingMailer(ApplicationConfig.APP_BASE_URL)


def get_authenticate_use_case(
    uow: UnitOfWork = Depends(get_unit_of_work),
    credentials: CredentialService = Depends(get_credential_service),
    codec: AccessTokenCodec = Depends(get_access_token_codec),
) -> AuthenticateUseCase:
    return AuthenticateUseCase(
        uow,
        credentials,
        codec,
        session_ttl=timedelta(hours=ApplicationConfig.SESSION_TTL_HOURS),
        extended_session_ttl=timedelta(days=ApplicationConfig.SESSION_EXTENDED_TTL_DAYS),
    )


def get_register_use_case(
    uow: UnitOfWork = Depends(get_unit_of_work),
    credentials: CredentialService = Depends(get_credential_service),
    mailer: IMailer = Depends(get_mailer),
) -> RegisterUseCase:
    return RegisterUseCase(
        uow,
        credentials,
        mailer,
        verification_ttl=timedelta(hours=ApplicationConfig.VERIFICATION_TOKEN_TTL_HOURS),
    )


def get_request_password_reset_use_case(
    uow: UnitOfWork = Depends(get_unit_of_work),
    mailer: IMailer = Depends(get_mailer),
) -> RequestPasswordResetUseCase:
    return RequestPasswordResetUseCase(
        uow, mailer, ttl=timedelta(minutes=ApplicationConfig.RESET_TOKEN_TTL_MINUTES)
    )


def get_request_email_verification_use_case(
    uow: UnitOfWork = Depends(get_unit_of_work),
    mailer: IMailer = Depends(get_mailer),
) -> RequestEmailVerificationUseCase:
    return RequestEmailVerificationUseCase(
        uow, mailer, ttl=timedelta(hours=ApplicationConfig.VERIFICATION_TOKEN_TTL_HOURS)
    )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: AccessTokenCodec = Depends(get_access_token_codec),
) -> AccessTokenClaims:
    """
    Dependency to authorize a request from its Bearer token.

    A missing header or a non-Bearer scheme reaches the gate as no token.

    Returns:
        Claims of a verified access token whose owner holds a live session

    Raises:
        ClientError: 401 with MISSING_TOKEN, TOKEN_INVALID, TOKEN_EXPIRED
        or SESSION_REVOKED
    """
    token = credentials.credentials if credentials else None
    result = await AuthGate(codec, SessionStore(uow)).check_token(token)
    if result.is_err():
        raise ClientError(result.error, status_code=status.HTTP_401_UNAUTHORIZED)

    return result.value


async def require_admin(
    current_user: AccessTokenClaims = Depends(get_current_user),
) -> AccessTokenClaims:
    if not current_user.is_admin:
        raise ClientError(
            Error(AuthErrorCode.FORBIDDEN.value, "Admin privileges required"),
            status_code=status.HTTP_403_FORBIDDEN,
        )
    return current_user
