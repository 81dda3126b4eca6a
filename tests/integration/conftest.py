import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.credential_service import CredentialService
from src.app.services.mailer import IMailer
from src.depends import get_credential_service, get_mailer, get_unit_of_work
from src.domain.base import utcnow
from src.domain.entities import Session, User


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


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest_asyncio.fixture
async def client(session_factory, mailer):
    from httpx import ASGITransport
    from src.api.app import create_app
    from config import ApplicationConfig

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        async with session_factory() as session:
            yield SqlAlchemyUnitOfWork(session)

    credentials = CredentialService(rounds=4)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_credential_service] = lambda: credentials
    app.dependency_overrides[get_mailer] = lambda: mailer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test/api") as ac:
        yield ac


@pytest.fixture
def register(client):
    async def _register(username="alice", email=None, password="SecurePass123!"):
        response = await client.post(
            "/auth/register",
            json={
                "username": username,
                "email": email or f"{username}@example.com",
                "password": password,
            },
        )
        assert response.status_code == 201, response.text
        return response.json()["user"]

    return _register


@pytest.fixture
def login(client):
    async def _login(email="alice@example.com", password="SecurePass123!", **extra):
        response = await client.post(
            "/auth/login", json={"email": email, "password": password, **extra}
        )
        assert response.status_code == 200, response.text
        return response.json()

    return _login


def bearer(login_data) -> dict:
    return {"Authorization": f"Bearer {login_data['access_token']}"}


@pytest.fixture
def auth_headers():
    return bearer


@pytest.fixture
def update_user(session_factory):
    """Change a user row directly in the database"""

    async def _update_user(user_id: int, **fields):
        async with session_factory() as session:
            user = await session.get(User, user_id)
            for key, value in fields.items():
                setattr(user, key, value)
            session.add(user)
            await session.commit()

    return _update_user


@pytest.fixture
def count_live_sessions(session_factory):
    async def _count(user_id: int) -> int:
        async with session_factory() as session:
            result = await session.exec(
                select(Session).where(
                    Session.user_id == user_id,
                    Session.is_active == True,  # noqa: E712
                    Session.expires_at > utcnow(),
                )
            )
            return len(result.all())

    return _count
