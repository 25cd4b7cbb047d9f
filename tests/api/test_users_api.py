"""Tests for /api/users - ADMIN-only user administration."""

import pytest
from httpx import AsyncClient


class TestListUsers:

    @pytest.mark.anyio
    async def test_lists_org_users_without_hashes(
        self, client: AsyncClient, admin_headers, normal_user, other_admin,
    ) -> None:
        resp = await client.get("/api/users", headers=admin_headers)
        assert resp.status_code == 200
        emails = {u["email"] for u in resp.json()}
        assert emails == {"admin@acme.test", "user@acme.test"}
        assert all("password_hash" not in u for u in resp.json())

    @pytest.mark.anyio
    async def test_user_forbidden(self, client: AsyncClient, user_headers) -> None:
        resp = await client.get("/api/users", headers=user_headers)
        assert resp.status_code == 403


class TestCreateUser:

    @pytest.mark.anyio
    async def test_created_user_can_login(self, client: AsyncClient, admin_headers, org) -> None:
        resp = await client.post(
            "/api/users",
            json={
                "email": "  Jane.Doe@Acme.test ",
                "password": "s3cret-pass",
                "first_name": "Jane",
                "last_name": "Doe",
            },
            headers=admin_headers,
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["email"] == "jane.doe@acme.test"
        assert data["role"] == "USER"
        assert data["status"] == "ACTIVE"
        assert data["organization_id"] == str(org.organization_id)

        login = await client.post(
            "/api/auth/login",
            json={"email": "jane.doe@acme.test", "password": "s3cret-pass"},
        )
        assert login.status_code == 200

    @pytest.mark.anyio
    async def test_duplicate_email(self, client: AsyncClient, admin_headers, normal_user) -> None:
        resp = await client.post(
            "/api/users",
            json={"email": "USER@acme.test", "password": "long-enough", "first_name": "U"},
            headers=admin_headers,
        )
        assert resp.status_code == 409

    @pytest.mark.anyio
    @pytest.mark.parametrize("payload", [
        {"email": "no-at-sign", "password": "long-enough", "first_name": "A"},
        {"email": "a@b.test", "password": "short", "first_name": "A"},
        {"email": "a@b.test", "password": "long-enough", "first_name": "A", "role": "ROOT"},
        {"email": "a@b.test", "password": "é" * 40, "first_name": "A"},
    ])
    async def test_invalid_payload(self, client: AsyncClient, admin_headers, payload) -> None:
        resp = await client.post("/api/users", json=payload, headers=admin_headers)
        assert resp.status_code == 422


class TestUpdateUser:

    @pytest.mark.anyio
    async def test_promote(self, client: AsyncClient, admin_headers, normal_user) -> None:
        resp = await client.put(
            f"/api/users/{normal_user.user_id}",
            json={"role": "ADMIN", "last_name": "Promoted"},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["role"] == "ADMIN"
        assert data["last_name"] == "Promoted"
        assert data["first_name"] == "User"

    @pytest.mark.anyio
    async def test_other_org_user_is_404(
        self, client: AsyncClient, admin_headers, other_admin,
    ) -> None:
        resp = await client.put(
            f"/api/users/{other_admin.user_id}", json={"role": "USER"}, headers=admin_headers,
        )
        assert resp.status_code == 404


class TestDeleteUser:

    @pytest.mark.anyio
    async def test_soft_delete(self, client: AsyncClient, admin_headers, normal_user) -> None:
        resp = await client.delete(f"/api/users/{normal_user.user_id}", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json() == {"message": "User deleted"}
        assert normal_user.is_deleted is True

        emails = {u["email"] for u in
                  (await client.get("/api/users", headers=admin_headers)).json()}
        assert "user@acme.test" not in emails

    @pytest.mark.anyio
    async def test_cannot_delete_self(self, client: AsyncClient, admin_headers, admin_user) -> None:
        resp = await client.delete(f"/api/users/{admin_user.user_id}", headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["detail"] == "You cannot delete your own account."

    @pytest.mark.anyio
    async def test_other_org_user_is_404(
        self, client: AsyncClient, admin_headers, other_admin,
    ) -> None:
        resp = await client.delete(f"/api/users/{other_admin.user_id}", headers=admin_headers)
        assert resp.status_code == 404


class TestPasswordLength:

    @pytest.mark.anyio
    async def test_multibyte_password_at_byte_limit(
        self, client: AsyncClient, admin_headers,
    ) -> None:
        password = "é" * 36  # 72 bytes
        resp = await client.post(
            "/api/users",
            json={"email": "accent@acme.test", "password": password, "first_name": "E"},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        login = await client.post(
            "/api/auth/login", json={"email": "accent@acme.test", "password": password},
        )
        assert login.status_code == 200

    @pytest.mark.anyio
    async def test_login_rejects_over_byte_limit(self, client: AsyncClient, admin_user) -> None:
        resp = await client.post(
            "/api/auth/login",
            json={"email": "admin@acme.test", "password": "é" * 40},
        )
        assert resp.status_code == 422
