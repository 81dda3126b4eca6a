"""
Integration tests for admin user and session endpoints
"""

import pytest
from httpx import AsyncClient


@pytest.fixture
def admin_login(register, login, update_user):
    async def _admin_login():
        admin = await register("admin")
        await update_user(admin["id"], is_admin=True)
        return await login("admin@example.com")

    return _admin_login


@pytest.mark.asyncio
async def test_deactivate_user_revokes_live_session(
    client: AsyncClient, register, login, auth_headers, admin_login, count_live_sessions
):
    """Deactivation ends the user's session before the response is sent"""
    admin = await admin_login()
    user = await register("alice")
    alice = await login("alice@example.com")
    assert (await client.get("/auth/me", headers=auth_headers(alice))).status_code == 200

    response = await client.put(
        f"/admin/users/{user['id']}/status",
        json={"is_active": False},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    assert response.json()["sessions_revoked"] == 1
    assert response.json()["user"]["is_active"] is False
    assert await count_live_sessions(user["id"]) == 0

    response = await client.get("/auth/me", headers=auth_headers(alice))
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "SESSION_REVOKED"

    response = await client.post(
        "/auth/login", json={"email": "alice@example.com", "password": "SecurePass123!"}
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "ACCOUNT_DISABLED"


@pytest.mark.asyncio
async def test_reactivate_user(client: AsyncClient, register, login, auth_headers, admin_login):
    admin = await admin_login()
    user = await register("alice")

    for is_active in (False, True):
        response = await client.put(
            f"/admin/users/{user['id']}/status",
            json={"is_active": is_active},
            headers=auth_headers(admin),
        )
        assert response.status_code == 200

    await login("alice@example.com")


@pytest.mark.asyncio
async def test_admin_cannot_deactivate_self(client: AsyncClient, auth_headers, admin_login):
    admin = await admin_login()

    response = await client.put(
        f"/admin/users/{admin['user']['id']}/status",
        json={"is_active": False},
        headers=auth_headers(admin),
    )

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "CANNOT_MODIFY_SELF"


@pytest.mark.asyncio
async def test_deactivate_unknown_user(client: AsyncClient, auth_headers, admin_login):
    admin = await admin_login()

    response = await client.put(
        "/admin/users/9999/status", json={"is_active": False}, headers=auth_headers(admin)
    )

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "USER_NOT_FOUND"


@pytest.mark.asyncio
async def test_non_admin_is_forbidden(client: AsyncClient, register, login, auth_headers):
    await register("alice")
    alice = await login("alice@example.com")

    response = await client.get("/admin/sessions", headers=auth_headers(alice))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_list_and_invalidate_sessions(
    client: AsyncClient, register, login, auth_headers, admin_login
):
    admin = await admin_login()
    await register("alice")
    alice = await login("alice@example.com")

    response = await client.get("/admin/sessions", headers=auth_headers(admin))
    assert response.status_code == 200
    sessions = {item["username"]: item for item in response.json()}
    assert set(sessions) == {"admin", "alice"}
    assert sessions["alice"]["session_id"] == alice["session"]["session_id"]

    path = f"/admin/sessions/{alice['session']['session_id']}"
    response = await client.delete(path, headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["invalidated"] is True

    assert (await client.get("/auth/me", headers=auth_headers(alice))).status_code == 401

    response = await client.delete(path, headers=auth_headers(admin))
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "SESSION_NOT_FOUND"


@pytest.mark.asyncio
async def test_promote_user_takes_effect_at_next_login(
    client: AsyncClient, register, login, auth_headers, admin_login
):
    admin = await admin_login()
    user = await register("alice")
    alice = await login("alice@example.com")

    response = await client.put(
        f"/admin/users/{user['id']}/role",
        json={"action": "promote"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    assert response.json()["user"]["is_admin"] is True
    assert response.json()["sessions_revoked"] == 1

    response = await client.get("/auth/me", headers=auth_headers(alice))
    assert response.json()["error"]["code"] == "SESSION_REVOKED"

    alice = await login("alice@example.com")
    response = await client.get("/auth/me", headers=auth_headers(alice))
    assert response.json()["isAdmin"] is True
    assert (await client.get("/admin/sessions", headers=auth_headers(alice))).status_code == 200


@pytest.mark.asyncio
async def test_role_change_errors(client: AsyncClient, register, auth_headers, admin_login):
    admin = await admin_login()
    admin_id = (await client.get("/auth/me", headers=auth_headers(admin))).json()["id"]

    response = await client.put(
        f"/admin/users/{admin_id}/role", json={"action": "demote"}, headers=auth_headers(admin)
    )
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "CANNOT_MODIFY_SELF"

    response = await client.put(
        "/admin/users/999/role", json={"action": "promote"}, headers=auth_headers(admin)
    )
    assert response.status_code == 404

    user = await register("alice")
    response = await client.put(
        f"/admin/users/{user['id']}/role", json={"action": "crown"}, headers=auth_headers(admin)
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_admin_sets_user_password(
    client: AsyncClient, register, login, auth_headers, admin_login, mailer
):
    admin = await admin_login()
    user = await register("alice")
    alice = await login("alice@example.com")

    response = await client.post(
        f"/admin/users/{user['id']}/reset-password",
        json={"new_password": "NewSecure456?"},
        headers=auth_headers(admin),
    )

    assert response.status_code == 200
    assert response.json() == {"user_id": user["id"], "sessions_revoked": 1}
    assert ("password_set_by_admin", "alice@example.com", None) in mailer.sent
    assert (await client.get("/auth/me", headers=auth_headers(alice))).status_code == 401
    await login("alice@example.com", password="NewSecure456?")


@pytest.mark.asyncio
async def test_admin_set_password_errors(client: AsyncClient, register, auth_headers, admin_login):
    admin = await admin_login()
    user = await register("alice")

    response = await client.post(
        f"/admin/users/{user['id']}/reset-password",
        json={"new_password": "weak"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "POLICY_VIOLATION"
    assert response.json()["error"]["details"]["violations"]

    response = await client.post(
        "/admin/users/999/reset-password",
        json={"new_password": "NewSecure456?"},
        headers=auth_headers(admin),
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_non_admin_cannot_manage_users(
    client: AsyncClient, register, login, auth_headers
):
    user = await register("alice")
    bob = await register("bob")
    alice = await login("alice@example.com")

    role = await client.put(
        f"/admin/users/{bob['id']}/role", json={"action": "promote"}, headers=auth_headers(alice)
    )
    password = await client.post(
        f"/admin/users/{user['id']}/reset-password",
        json={"new_password": "NewSecure456?"},
        headers=auth_headers(alice),
    )

    assert role.status_code == 403
    assert role.json()["error"]["code"] == "FORBIDDEN"
    assert password.status_code == 403
