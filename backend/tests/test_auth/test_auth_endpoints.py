"""Tests for back-office authentication endpoints and guards: login, refresh, me."""

import uuid
from datetime import timedelta

import pytest
from httpx import AsyncClient

from villa_ledger.auth.jwt import create_access_token, create_token_pair
from villa_ledger.models.user import AdminUser

pytestmark = pytest.mark.asyncio


# ---------------------------------------------------------------------------
# POST /api/v1/auth/login
# ---------------------------------------------------------------------------


class TestLogin:
    """Tests for email/password login."""

    async def test_login_success(self, client: AsyncClient, staff_user: AdminUser) -> None:
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "staff@stayinubud.com", "password": "testpass123"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["user"]["email"] == "staff@stayinubud.com"
        assert data["user"]["role"] == "staff"
        assert data["tokens"]["access_token"]
        assert data["tokens"]["refresh_token"]
        assert data["tokens"]["token_type"] == "bearer"
        assert data["tokens"]["expires_in"] == 30 * 60

    async def test_login_email_case_insensitive(self, client: AsyncClient, staff_user: AdminUser) -> None:
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "Staff@StayinUbud.com", "password": "testpass123"},
        )
        assert response.status_code == 200

    async def test_login_wrong_password(self, client: AsyncClient, staff_user: AdminUser) -> None:
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "staff@stayinubud.com", "password": "wrongpassword"},
        )
        assert response.status_code == 401
        assert "invalid" in response.json()["detail"].lower()

    async def test_login_nonexistent_user(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "nobody@nowhere.com", "password": "irrelevant1"},
        )
        assert response.status_code == 401

    async def test_login_inactive_account(self, client: AsyncClient, inactive_user: AdminUser) -> None:
        response = await client.post(
            "/api/v1/auth/login",
            json={"email": "former@stayinubud.com", "password": "testpass123"},
        )
        assert response.status_code == 403


# ---------------------------------------------------------------------------
# POST /api/v1/auth/refresh
# ---------------------------------------------------------------------------


class TestRefresh:
    async def test_refresh_success(self, client: AsyncClient, admin_user: AdminUser) -> None:
        tokens = create_token_pair(str(admin_user.id), admin_user.role)
        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert response.status_code == 200
        data = response.json()
        assert data["access_token"]
        assert data["refresh_token"]

    async def test_access_token_rejected(self, client: AsyncClient, staff_user: AdminUser) -> None:
        tokens = create_token_pair(str(staff_user.id))
        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})
        assert response.status_code == 401

    async def test_garbage_token(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": "not.a.jwt"})
        assert response.status_code == 401

    async def test_inactive_account(self, client: AsyncClient, inactive_user: AdminUser) -> None:
        tokens = create_token_pair(str(inactive_user.id))
        response = await client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
        assert response.status_code == 401


# ---------------------------------------------------------------------------
# GET /api/v1/auth/me and the bearer guard
# ---------------------------------------------------------------------------


class TestMe:
    async def test_me(self, client: AsyncClient, auth_headers: dict, staff_user: AdminUser) -> None:
        response = await client.get("/api/v1/auth/me", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["id"] == str(staff_user.id)

    async def test_missing_token(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/auth/me")
        assert response.status_code in (401, 403)

    async def test_expired_token_rejected(self, client: AsyncClient, staff_user: AdminUser) -> None:
        token = create_access_token({"sub": str(staff_user.id)}, expires_delta=timedelta(seconds=-1))
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_refresh_token_type_rejected(self, client: AsyncClient, staff_user: AdminUser) -> None:
        tokens = create_token_pair(str(staff_user.id))
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
        assert response.status_code == 401

    async def test_nonexistent_user_rejected(self, client: AsyncClient) -> None:
        token = create_access_token({"sub": str(uuid.uuid4())})
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_malformed_subject_rejected(self, client: AsyncClient) -> None:
        token = create_access_token({"sub": "not-a-uuid"})
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_inactive_account_forbidden(self, client: AsyncClient, inactive_user: AdminUser) -> None:
        token = create_access_token({"sub": str(inactive_user.id)})
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 403
