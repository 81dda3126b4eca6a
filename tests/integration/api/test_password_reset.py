"""
Integration tests for the password reset flow
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from src.domain.base import utcnow


@pytest.mark.asyncio
async def test_reset_flow(client: AsyncClient, register, login, auth_headers, mailer):
    await register()
    old_login = await login()

    response = await client.post("/auth/forgot-password", json={"email": "alice@example.com"})
    assert response.status_code == 200
    assert "token" not in response.json()
    token = mailer.last_token("password_reset")

    response = await client.post(
        "/auth/reset-password", json={"token": token, "new_password": "NewSecure456?"}
    )
    assert response.status_code == 200
    assert response.json()["sessions_revoked"] == 1
    assert ("password_reset", "alice@example.com", None) in mailer.sent

    # Sessions from before the reset are gone
    response = await client.get("/auth/me", headers=auth_headers(old_login))
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "SESSION_REVOKED"

    await login(password="NewSecure456?")
    response = await client.post(
        "/auth/login", json={"email": "alice@example.com", "password": "SecurePass123!"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_reset_token_replay(client: AsyncClient, register, mailer):
    await register()
    await client.post("/auth/forgot-password", json={"email": "alice@example.com"})
    token = mailer.last_token("password_reset")

    first = await client.post(
        "/auth/reset-password", json={"token": token, "new_password": "NewSecure456?"}
    )
    second = await client.post(
        "/auth/reset-password", json={"token": token, "new_password": "Another789#x"}
    )

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["error"]["code"] == "EPHEMERAL_TOKEN_NOT_FOUND"


@pytest.mark.asyncio
async def test_expired_reset_token(client: AsyncClient, register, login, update_user, mailer):
    user = await register()
    await client.post("/auth/forgot-password", json={"email": "alice@example.com"})
    token = mailer.last_token("password_reset")
    await update_user(user["id"], reset_expiry=utcnow() - timedelta(minutes=1))

    response = await client.post(
        "/auth/reset-password", json={"token": token, "new_password": "NewSecure456?"}
    )

    assert response.status_code == 410
    assert response.json()["error"]["code"] == "EPHEMERAL_TOKEN_EXPIRED"
    await login(password="SecurePass123!")


@pytest.mark.asyncio
async def test_reset_with_weak_password(client: AsyncClient, register, mailer):
    await register()
    await client.post("/auth/forgot-password", json={"email": "alice@example.com"})

    response = await client.post(
        "/auth/reset-password",
        json={"token": mailer.last_token("password_reset"), "new_password": "password"},
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "POLICY_VIOLATION"
    assert "Password must contain at least one uppercase letter" in error["details"]["violations"]


@pytest.mark.asyncio
async def test_forgot_password_does_not_reveal_accounts(client: AsyncClient, register, mailer):
    await register()

    known = await client.post("/auth/forgot-password", json={"email": "alice@example.com"})
    unknown = await client.post("/auth/forgot-password", json={"email": "nobody@example.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.json() == unknown.json()
    assert len([sent for sent in mailer.sent if sent[0] == "password_reset"]) == 1
