"""
Integration tests for concurrent writers against the SQLAlchemy unit of work
"""

import asyncio

import pytest
from sqlmodel import select

from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.access_token_codec import AccessTokenCodec
from src.app.services.credential_service import CredentialService
from src.app.use_cases.auth import AuthenticateUseCase, RegisterCommand, RegisterUseCase
from src.domain.entities import User


@pytest.fixture
def credentials():
    return CredentialService(rounds=4)


@pytest.mark.asyncio
async def test_concurrent_registrations_for_same_account(session_factory, credentials):
    command = RegisterCommand(
        username="alice", email="alice@example.com", password="SecurePass123!"
    )

    async def register():
        async with session_factory() as session:
            return await RegisterUseCase(SqlAlchemyUnitOfWork(session), credentials).execute(
                command
            )

    results = await asyncio.gather(*[register() for _ in range(4)])

    assert sum(result.is_ok() for result in results) == 1
    assert [result.error.code for result in results if result.is_err()] == ["USER_EXISTS"] * 3

    async with session_factory() as session:
        users = (await session.exec(select(User))).all()
    assert [user.username for user in users] == ["alice"]


@pytest.mark.asyncio
async def test_concurrent_logins_leave_exactly_one_live_session(
    session_factory, credentials, count_live_sessions
):
    async with session_factory() as session:
        registered = await RegisterUseCase(SqlAlchemyUnitOfWork(session), credentials).execute(
            RegisterCommand(username="alice", email="alice@example.com", password="SecurePass123!")
        )
    user_id = registered.value.user.id
    codec = AccessTokenCodec(secret="integration-secret")

    async def login():
        async with session_factory() as session:
            use_case = AuthenticateUseCase(SqlAlchemyUnitOfWork(session), credentials, codec)
            return await use_case.execute("alice@example.com", "SecurePass123!")

    results = await asyncio.gather(*[login() for _ in range(5)])

    assert all(result.is_ok() for result in results)
    assert await count_live_sessions(user_id) == 1
