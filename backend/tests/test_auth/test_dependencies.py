"""Tests for auth dependencies via the /me and approver-only endpoints."""

import uuid
from datetime import timedelta

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from cottagebook.auth.jwt import create_access_token, create_token_pair
from cottagebook.models.user import User


class TestGetCurrentUser:
    """Tests for resolving the user from a bearer token."""

    async def test_expired_token_rejected(self, client: AsyncClient, approver_user: User) -> None:
        token = create_access_token({"sub": str(approver_user.id)}, expires_delta=timedelta(seconds=-1))
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_invalid_token_format(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not.a.valid.jwt"})
        assert response.status_code == 401

    async def test_refresh_token_type_rejected(self, client: AsyncClient, approver_user: User) -> None:
        tokens = create_token_pair(str(approver_user.id))
        response = await client.get(
            "/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"}
        )
        assert response.status_code == 401

    async def test_nonexistent_user_id_rejected(self, client: AsyncClient) -> None:
        token = create_access_token({"sub": str(uuid.uuid4())})
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_non_uuid_subject_rejected(self, client: AsyncClient) -> None:
        token = create_access_token({"sub": "not-a-uuid"})
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_inactive_user_rejected(
        self, client: AsyncClient, db_session: AsyncSession, approver_user: User
    ) -> None:
        approver_user.is_active = False
        await db_session.flush()

        token = create_access_token({"sub": str(approver_user.id)})
        response = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_missing_header_rejected(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/auth/me")
        assert response.status_code in (401, 403)


class TestGetCurrentApprover:
    """Tests for the approver role check."""

    async def test_cleaner_cannot_list_bookings(self, client: AsyncClient, cleaner_headers: dict) -> None:
        response = await client.get("/api/v1/bookings", headers=cleaner_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Approver role required"

    async def test_cleaner_can_read_own_profile(self, client: AsyncClient, cleaner_headers: dict) -> None:
        response = await client.get("/api/v1/auth/me", headers=cleaner_headers)
        assert response.status_code == 200
        assert response.json()["role"] == "cleaner"

    async def test_admin_counts_as_approver(self, client: AsyncClient, admin_user: User) -> None:
        tokens = create_token_pair(str(admin_user.id))
        response = await client.get(
            "/api/v1/bookings", headers={"Authorization": f"Bearer {tokens['access_token']}"}
        )
        assert response.status_code == 200
