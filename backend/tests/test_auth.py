"""
Tests for authentication endpoints and token handling.
"""
from datetime import timedelta

import pytest
from httpx import AsyncClient

from jobly.errors import UnauthorizedError
from jobly.utils.jwt_handler import create_token, decode_token


# ============================================================
# TOKEN TESTS
# ============================================================

def test_token_round_trip():
    payload = decode_token(create_token("u1", True))

    assert payload["username"] == "u1"
    assert payload["isAdmin"] is True
    assert "exp" in payload


def test_expired_token():
    token = create_token("u1", False, expires_delta=timedelta(seconds=-10))

    with pytest.raises(UnauthorizedError) as exc_info:
        decode_token(token)

    assert exc_info.value.message == "Token expired"


def test_tampered_token():
    with pytest.raises(UnauthorizedError) as exc_info:
        decode_token(create_token("u1", False) + "x")

    assert exc_info.value.message == "Invalid token"


# ============================================================
# LOGIN TESTS
# ============================================================

@pytest.mark.asyncio
async def test_login(async_client: AsyncClient, seed):
    response = await async_client.post("/auth/token", json={"username": "u1", "password": "password1"})

    assert response.status_code == 200
    payload = decode_token(response.json()["token"])
    assert payload["username"] == "u1"
    assert payload["isAdmin"] is False


@pytest.mark.asyncio
async def test_login_admin(async_client: AsyncClient, seed):
    response = await async_client.post("/auth/token", json={"username": "u4", "password": "password4"})

    assert response.status_code == 200
    assert decode_token(response.json()["token"])["isAdmin"] is True


@pytest.mark.asyncio
async def test_login_unknown_user(async_client: AsyncClient, seed):
    response = await async_client.post("/auth/token", json={"username": "nope", "password": "password1"})

    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid username/password"}


@pytest.mark.asyncio
async def test_login_wrong_password(async_client: AsyncClient, seed):
    response = await async_client.post("/auth/token", json={"username": "u1", "password": "nope"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_missing_field(async_client: AsyncClient, seed):
    response = await async_client.post("/auth/token", json={"username": "u1"})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_login_extra_field(async_client: AsyncClient, seed):
    response = await async_client.post(
        "/auth/token",
        json={"username": "u1", "password": "password1", "isAdmin": True},
    )

    assert response.status_code == 400


# ============================================================
# REGISTER TESTS
# ============================================================

@pytest.mark.asyncio
async def test_register(async_client: AsyncClient, seed):
    response = await async_client.post(
        "/auth/register",
        json={
            "username": "new",
            "firstName": "first",
            "lastName": "last",
            "password": "password",
            "email": "new@email.com",
        },
    )

    assert response.status_code == 201
    payload = decode_token(response.json()["token"])
    assert payload["username"] == "new"
    assert payload["isAdmin"] is False


@pytest.mark.asyncio
async def test_register_cannot_make_admin(async_client: AsyncClient, seed):
    response = await async_client.post(
        "/auth/register",
        json={
            "username": "new",
            "firstName": "first",
            "lastName": "last",
            "password": "password",
            "email": "new@email.com",
            "isAdmin": True,
        },
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_register_duplicate(async_client: AsyncClient, seed):
    response = await async_client.post(
        "/auth/register",
        json={
            "username": "u1",
            "firstName": "first",
            "lastName": "last",
            "password": "password",
            "email": "new@email.com",
        },
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_short_password(async_client: AsyncClient, seed):
    response = await async_client.post(
        "/auth/register",
        json={
            "username": "new",
            "firstName": "first",
            "lastName": "last",
            "password": "pw",
            "email": "new@email.com",
        },
    )

    assert response.status_code == 400
    assert any(message.startswith("body.password") for message in response.json()["detail"])


# ============================================================
# ACCESS CONTROL TESTS
# ============================================================

@pytest.mark.asyncio
async def test_invalid_token_is_anonymous(async_client: AsyncClient, seed):
    headers = {"Authorization": "Bearer not-a-token"}

    # Public routes still work
    response = await async_client.get("/companies", headers=headers)
    assert response.status_code == 200

    response = await async_client.get("/users/u1", headers=headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_expired_token_is_anonymous(async_client: AsyncClient, seed):
    token = create_token("u4", True, expires_delta=timedelta(seconds=-10))

    response = await async_client.get("/users", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    response = await async_client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
