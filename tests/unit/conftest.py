from contextlib import asynccontextmanager
from datetime import timedelta

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock

from src.adapter.services.in_memory_unit_of_work import InMemoryStore, InMemoryUnitOfWork
from src.app.services.access_token_codec import AccessTokenCodec
from src.app.services.credential_service import CredentialService
from src.app.services.mailer import IMailer
from src.app.services.session_store import SessionStore
from src.domain.entities import Session, User


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def uow(store):
    return InMemoryUnitOfWork(store)


@pytest.fixture
def uow_factory(store):
    @asynccontextmanager
    async def factory():
        yield InMemoryUnitOfWork(store)

    return factory


@pytest.fixture(scope="session")
def credentials():
    # Low cost factor keeps the suite fast
    return CredentialService(rounds=4)


@pytest.fixture
def codec():
    return AccessTokenCodec(secret="unit-test-secret", ttl=timedelta(hours=24))


@pytest_asyncio.fixture
async def password_hash(credentials):
    return await credentials.hash_password("SecurePass123!")


@pytest.fixture
def make_user(store, password_hash):
    """Insert a committed user into the in-memory store"""

    async def _make_user(username="alice", email=None, **fields) -> User:
        uow = InMemoryUnitOfWork(store)
        async with uow:
            user = await uow.users.create(
                User(
                    username=username,
                    email=email or f"{username}@example.com",
                    password_hash=password_hash,
                    **fields,
                )
            )
            await uow.commit()
            return user

    return _make_user


class RecordingMailer(IMailer):
    def __init__(self):
        self.sent = []

    async def send_verification_email(self, email, username, token):
        self.sent.append(("verification", email, token))

    async def send_password_reset_email(self, email, username, token):
        self.sent.append(("password_reset", email, token))

    async def send_security_notification(self, email, username, event):
        self.sent.append((event, email, None))

    def last_token(self, kind):
        tokens = [token for sent_kind, _, token in self.sent if sent_kind == kind and token]
        return tokens[-1]


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def start_session(store):
    """Create and commit a session through SessionStore"""

    async def _start_session(user_id: int, metadata=None, extended=False) -> Session:
        uow = InMemoryUnitOfWork(store)
        async with uow:
            session = (await SessionStore(uow).create(user_id, metadata, extended)).value
            await uow.commit()
            return session

    return _start_session
