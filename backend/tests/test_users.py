"""
Tests for Users API endpoints and job applications.
"""
import pytest
from httpx import AsyncClient

from jobly.utils.jwt_handler import decode_token


NEW_USER = {
    "username": "u-new",
    "firstName": "First-new",
    "lastName": "Last-newL",
    "password": "password-new",
    "email": "new@email.com",
}


# ============================================================
# CREATE USER TESTS
# ============================================================

@pytest.mark.asyncio
async def test_create_user_as_admin(async_client: AsyncClient, seed, admin_headers):
    response = await async_client.post("/users", json=NEW_USER, headers=admin_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["user"] == {
        "username": "u-new",
        "firstName": "First-new",
        "lastName": "Last-newL",
        "email": "new@email.com",
        "isAdmin": False,
        "jobs": [],
    }
    assert decode_token(body["token"])["username"] == "u-new"


@pytest.mark.asyncio
async def test_create_admin_as_admin(async_client: AsyncClient, seed, admin_headers):
    response = await async_client.post(
        "/users",
        json={**NEW_USER, "isAdmin": True},
        headers=admin_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["user"]["isAdmin"] is True
    assert decode_token(body["token"])["isAdmin"] is True


@pytest.mark.asyncio
async def test_create_user_duplicate(async_client: AsyncClient, seed, admin_headers):
    response = await async_client.post(
        "/users",
        json={**NEW_USER, "username": "u1"},
        headers=admin_headers,
    )

    assert response.status_code == 409
    assert response.json() == {"detail": "Duplicate username: u1"}


@pytest.mark.asyncio
async def test_create_user_invalid_email(async_client: AsyncClient, seed, admin_headers):
    response = await async_client.post(
        "/users",
        json={**NEW_USER, "email": "not-an-email"},
        headers=admin_headers,
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_create_user_as_non_admin(async_client: AsyncClient, seed, u1_headers):
    response = await async_client.post("/users", json=NEW_USER, headers=u1_headers)

    assert response.status_code == 401


# ============================================================
# LIST USERS TESTS
# ============================================================

@pytest.mark.asyncio
async def test_list_users_as_admin(async_client: AsyncClient, seed, admin_headers):
    response = await async_client.get("/users", headers=admin_headers)

    assert response.status_code == 200
    users = response.json()["users"]
    assert [user["username"] for user in users] == ["u1", "u2", "u3", "u4"]
    assert users[0]["jobs"] == [seed["j1-c1"]]
    assert users[1]["jobs"] == []
    assert users[3]["isAdmin"] is True
    assert all("password" not in user for user in users)


@pytest.mark.asyncio
async def test_list_users_as_non_admin(async_client: AsyncClient, seed, u1_headers):
    response = await async_client.get("/users", headers=u1_headers)

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_list_users_as_anon(async_client: AsyncClient, seed):
    response = await async_client.get("/users")

    assert response.status_code == 401


# ============================================================
# GET USER TESTS
# ============================================================

@pytest.mark.asyncio
async def test_get_user_as_self(async_client: AsyncClient, seed, u1_headers):
    response = await async_client.get("/users/u1", headers=u1_headers)

    assert response.status_code == 200
    assert response.json() == {
        "user": {
            "username": "u1",
            "firstName": "U1F",
            "lastName": "U1L",
            "email": "user1@user.com",
            "isAdmin": False,
            "jobs": [seed["j1-c1"]],
        }
    }


@pytest.mark.asyncio
async def test_get_user_as_admin(async_client: AsyncClient, seed, admin_headers):
    response = await async_client.get("/users/u2", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["user"]["username"] == "u2"


@pytest.mark.asyncio
async def test_get_other_user(async_client: AsyncClient, seed, u2_headers):
    response = await async_client.get("/users/u1", headers=u2_headers)

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_get_user_not_found(async_client: AsyncClient, seed, admin_headers):
    response = await async_client.get("/users/nope", headers=admin_headers)

    assert response.status_code == 404
    assert response.json() == {"detail": "No user: nope"}


# ============================================================
# UPDATE USER TESTS
# ============================================================

@pytest.mark.asyncio
async def test_update_user_as_self(async_client: AsyncClient, seed, u1_headers):
    response = await async_client.patch("/users/u1", json={"firstName": "New"}, headers=u1_headers)

    assert response.status_code == 200
    assert response.json()["user"]["firstName"] == "New"
    assert response.json()["user"]["jobs"] == [seed["j1-c1"]]


@pytest.mark.asyncio
async def test_update_user_password(async_client: AsyncClient, seed, u1_headers):
    response = await async_client.patch(
        "/users/u1",
        json={"password": "new-password"},
        headers=u1_headers,
    )
    assert response.status_code == 200

    response = await async_client.post(
        "/auth/token",
        json={"username": "u1", "password": "new-password"},
    )
    assert response.status_code == 200

    response = await async_client.post(
        "/auth/token",
        json={"username": "u1", "password": "password1"},
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_update_user_make_admin_as_self(async_client: AsyncClient, seed, u1_headers):
    response = await async_client.patch("/users/u1", json={"isAdmin": True}, headers=u1_headers)

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_update_user_make_admin_as_admin(async_client: AsyncClient, seed, admin_headers):
    response = await async_client.patch("/users/u1", json={"isAdmin": True}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["user"]["isAdmin"] is True


@pytest.mark.asyncio
async def test_update_user_username_change(async_client: AsyncClient, seed, admin_headers):
    response = await async_client.patch("/users/u1", json={"username": "u1-new"}, headers=admin_headers)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_user_empty_body(async_client: AsyncClient, seed, u1_headers):
    response = await async_client.patch("/users/u1", json={}, headers=u1_headers)

    assert response.status_code == 400
    assert response.json() == {"detail": "No data"}


@pytest.mark.asyncio
async def test_update_other_user(async_client: AsyncClient, seed, u2_headers):
    response = await async_client.patch("/users/u1", json={"firstName": "New"}, headers=u2_headers)

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_update_user_not_found(async_client: AsyncClient, seed, admin_headers):
    response = await async_client.patch("/users/nope", json={"firstName": "New"}, headers=admin_headers)

    assert response.status_code == 404


# ============================================================
# DELETE USER TESTS
# ============================================================

@pytest.mark.asyncio
async def test_delete_user_as_self(async_client: AsyncClient, seed, u1_headers, admin_headers):
    response = await async_client.delete("/users/u1", headers=u1_headers)

    assert response.status_code == 200
    assert response.json() == {"deleted": "u1"}

    response = await async_client.get("/users/u1", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_other_user(async_client: AsyncClient, seed, u2_headers):
    response = await async_client.delete("/users/u1", headers=u2_headers)

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_delete_user_not_found(async_client: AsyncClient, seed, admin_headers):
    response = await async_client.delete("/users/nope", headers=admin_headers)

    assert response.status_code == 404


# ============================================================
# APPLY FOR JOB TESTS
# ============================================================

@pytest.mark.asyncio
async def test_apply_as_self(async_client: AsyncClient, seed, u2_headers):
    job_id = seed["j3-c1"]
    response = await async_client.post(f"/users/u2/jobs/{job_id}", headers=u2_headers)

    assert response.status_code == 201
    assert response.json() == {"applied": job_id}

    response = await async_client.get("/users/u2", headers=u2_headers)
    assert response.json()["user"]["jobs"] == [job_id]


@pytest.mark.asyncio
async def test_apply_as_admin_for_user(async_client: AsyncClient, seed, admin_headers):
    response = await async_client.post(f"/users/u3/jobs/{seed['j1-d1']}", headers=admin_headers)

    assert response.status_code == 201


@pytest.mark.asyncio
async def test_apply_twice(async_client: AsyncClient, seed, u1_headers):
    response = await async_client.post(f"/users/u1/jobs/{seed['j1-c1']}", headers=u1_headers)

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_apply_for_missing_job(async_client: AsyncClient, seed, u1_headers):
    response = await async_client.post("/users/u1/jobs/0", headers=u1_headers)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_apply_for_missing_user(async_client: AsyncClient, seed, admin_headers):
    response = await async_client.post(f"/users/nope/jobs/{seed['j1-c1']}", headers=admin_headers)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_apply_as_other_user(async_client: AsyncClient, seed, u2_headers):
    response = await async_client.post(f"/users/u1/jobs/{seed['j2-c1']}", headers=u2_headers)

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_applications_removed_with_job(async_client: AsyncClient, seed, u1_headers, admin_headers):
    await async_client.delete(f"/jobs/{seed['j1-c1']}", headers=admin_headers)

    response = await async_client.get("/users/u1", headers=u1_headers)
    assert response.json()["user"]["jobs"] == []


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["password", "firstName", "lastName", "email", "isAdmin"])
async def test_update_user_null_field(async_client: AsyncClient, seed, admin_headers, field):
    response = await async_client.patch("/users/u1", json={field: None}, headers=admin_headers)

    assert response.status_code == 400

    response = await async_client.post(
        "/auth/token",
        json={"username": "u1", "password": "password1"},
    )
    assert response.status_code == 200
