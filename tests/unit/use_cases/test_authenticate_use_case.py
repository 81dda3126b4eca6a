"""
Unit tests for AuthenticateUseCase

Tests business logic with a mocked unit of work.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from src.app.use_cases.auth.authenticate_use_case import AuthenticateUseCase
from src.domain.entities import User


@pytest.fixture
def auth_uow(mock_uow):
    """Mock UnitOfWork with the repositories login touches"""

    async def create_session(session):
        session.id = 42
        return session

    mock_uow.users = MagicMock()
    mock_uow.users.get_by_email = AsyncMock()
    mock_uow.users.lock = AsyncMock()

    mock_uow.sessions = MagicMock()
    mock_uow.sessions.deactivate_all_for_user = AsyncMock(return_value=1)
    mock_uow.sessions.create = AsyncMock(side_effect=create_session)

    return mock_uow


@pytest_asyncio.fixture
async def active_user(password_hash):
    return User(
        id=1,
        username="alice",
        email="alice@example.com",
        password_hash=password_hash,
        is_active=True,
        email_verified=True,
    )


@pytest.mark.asyncio
async def test_successful_login(auth_uow, credentials, codec, active_user):
    auth_uow.users.get_by_email.return_value = active_user
    use_case = AuthenticateUseCase(auth_uow, credentials, codec)

    result = await use_case.execute(
        "alice@example.com", "SecurePass123!", user_agent="pytest", ip_address="10.0.0.1"
    )

    assert result.is_ok()
    data = result.value
    assert data.user.id == 1
    assert data.user.username == "alice"
    assert data.session.session_id == 42
    assert len(data.session.session_token) == 64
    assert codec.verify(data.access_token).value.id == 1

    created = auth_uow.sessions.create.call_args.args[0]
    assert created.user_agent == "pytest"
    assert created.ip_address == "10.0.0.1"
    assert abs((created.expires_at - created.created_at) - timedelta(hours=24)) < timedelta(seconds=1)
    auth_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_prior_sessions_revoked_before_new_one(auth_uow, credentials, codec, active_user):
    auth_uow.users.get_by_email.return_value = active_user

    await AuthenticateUseCase(auth_uow, credentials, codec).execute(
        "alice@example.com", "SecurePass123!"
    )

    names = [call[0] for call in auth_uow.mock_calls]
    assert names.index("users.lock") < names.index("sessions.deactivate_all_for_user")
    assert names.index("sessions.deactivate_all_for_user") < names.index("sessions.create")
    auth_uow.sessions.deactivate_all_for_user.assert_awaited_once_with(1)


@pytest.mark.asyncio
async def test_remember_me_uses_extended_ttl(auth_uow, credentials, codec, active_user):
    auth_uow.users.get_by_email.return_value = active_user

    result = await AuthenticateUseCase(auth_uow, credentials, codec).execute(
        "alice@example.com", "SecurePass123!", remember=True
    )

    created = auth_uow.sessions.create.call_args.args[0]
    assert abs((created.expires_at - created.created_at) - timedelta(days=30)) < timedelta(seconds=1)
    # Access token lifetime does not follow the session
    claims = codec.verify(result.value.access_token).value
    assert claims.exp - claims.iat == int(timedelta(hours=24).total_seconds())


@pytest.mark.asyncio
async def test_email_is_matched_case_insensitively(auth_uow, credentials, codec, active_user):
    auth_uow.users.get_by_email.return_value = active_user

    await AuthenticateUseCase(auth_uow, credentials, codec).execute(
        "Alice@Example.COM", "SecurePass123!"
    )

    auth_uow.users.get_by_email.assert_awaited_once_with("alice@example.com")


@pytest.mark.asyncio
async def test_wrong_password(auth_uow, credentials, codec, active_user):
    auth_uow.users.get_by_email.return_value = active_user

    result = await AuthenticateUseCase(auth_uow, credentials, codec).execute(
        "alice@example.com", "WrongPass123!"
    )

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"
    auth_uow.sessions.create.assert_not_called()
    auth_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_unknown_email_looks_like_wrong_password(auth_uow, credentials, codec, active_user):
    auth_uow.users.get_by_email.return_value = active_user
    wrong_password = await AuthenticateUseCase(auth_uow, credentials, codec).execute(
        "alice@example.com", "WrongPass123!"
    )

    auth_uow.users.get_by_email.return_value = None
    unknown = await AuthenticateUseCase(auth_uow, credentials, codec).execute(
        "nobody@example.com", "SecurePass123!"
    )

    assert unknown.error == wrong_password.error
    auth_uow.sessions.create.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("password", ["SecurePass123!", "WrongPass123!"])
async def test_disabled_account(auth_uow, credentials, codec, active_user, password):
    active_user.is_active = False
    auth_uow.users.get_by_email.return_value = active_user

    result = await AuthenticateUseCase(auth_uow, credentials, codec).execute(
        "alice@example.com", password
    )

    assert result.is_err()
    assert result.error.code == "ACCOUNT_DISABLED"
    auth_uow.sessions.create.assert_not_called()
