import pytest
from httpx import AsyncClient

TEST_PASSWORD = "Password123!"

@pytest.mark.asyncio
async def test_register_user(test_client: AsyncClient):
    """Test user registration"""
    user_data = {
        "username": "newuser",
        "nickname": "New User",
        "password": "Password123!"
    }

    response = await test_client.post("/api/auth/register", json=user_data)

    assert response.status_code == 201
    data = response.json()
    assert data["username"] == user_data["username"]
    assert data["nickname"] == user_data["nickname"]
    assert data["isAdmin"] is False
    assert "id" in data
    assert "password" not in data  # Password should not be in response
    assert "hashedPassword" not in data

@pytest.mark.asyncio
async def test_register_duplicate_username(test_client: AsyncClient, alice):
    response = await test_client.post(
        "/api/auth/register",
        json={"username": "alice", "password": "Password123!"}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Username already taken"

@pytest.mark.asyncio
async def test_register_rejects_invalid_username(test_client: AsyncClient):
    response = await test_client.post(
        "/api/auth/register",
        json={"username": "no spaces!", "password": "Password123!"}
    )
    assert response.status_code == 422

@pytest.mark.asyncio
async def test_login_user(test_client: AsyncClient, alice):
    """Test user login"""
    login_data = {
        "username": "alice",
        "password": TEST_PASSWORD
    }

    response = await test_client.post("/api/auth/login", data=login_data)

    assert response.status_code == 200
    data = response.json()
    assert "accessToken" in data
    assert data["tokenType"] == "bearer"
    assert data["user"]["id"] == alice.id

@pytest.mark.asyncio
async def test_login_wrong_password(test_client: AsyncClient, alice):
    response = await test_client.post(
        "/api/auth/login",
        data={"username": "alice", "password": "not-the-password"}
    )
    assert response.status_code == 401

@pytest.mark.asyncio
async def test_protected_endpoint(test_client: AsyncClient, alice):
    """Token from /login opens /me"""
    login_response = await test_client.post(
        "/api/auth/login",
        data={"username": "alice", "password": TEST_PASSWORD}
    )
    token = login_response.json()["accessToken"]

    headers = {"Authorization": f"Bearer {token}"}
    response = await test_client.get("/api/auth/me", headers=headers)

    assert response.status_code == 200
    assert response.json()["username"] == "alice"

@pytest.mark.asyncio
async def test_invalid_token_is_rejected(test_client: AsyncClient):
    response = await test_client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401

@pytest.mark.asyncio
async def test_logout_blacklists_token(test_client: AsyncClient, alice, auth_headers, fake_redis):
    headers = auth_headers(alice)

    response = await test_client.post("/api/auth/logout", headers=headers)
    assert response.status_code == 200

    token = headers["Authorization"].split(" ", 1)[1]
    assert await fake_redis.get(f"blacklist:{token}") == "1"

    response = await test_client.get("/api/auth/me", headers=headers)
    assert response.status_code == 401

@pytest.mark.asyncio
async def test_change_password(test_client: AsyncClient, alice, auth_headers):
    headers = auth_headers(alice)

    response = await test_client.post(
        "/api/auth/change-password",
        json={"currentPassword": "wrong-password", "newPassword": "NewPassword456!"},
        headers=headers
    )
    assert response.status_code == 401

    response = await test_client.post(
        "/api/auth/change-password",
        json={"currentPassword": TEST_PASSWORD, "newPassword": "NewPassword456!"},
        headers=headers
    )
    assert response.status_code == 200

    old = await test_client.post("/api/auth/login", data={"username": "alice", "password": TEST_PASSWORD})
    new = await test_client.post("/api/auth/login", data={"username": "alice", "password": "NewPassword456!"})
    assert old.status_code == 401
    assert new.status_code == 200

@pytest.mark.asyncio
async def test_update_profile(test_client: AsyncClient, alice, auth_headers):
    response = await test_client.put(
        "/api/users/me",
        json={"nickname": "Alice L.", "profileText": "Loops all day"},
        headers=auth_headers(alice)
    )

    assert response.status_code == 200
    assert response.json()["nickname"] == "Alice L."

    profile = (await test_client.get(f"/api/users/{alice.id}")).json()
    assert profile["profileText"] == "Loops all day"
