"""Tests for session-cookie authentication."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from conftest import TEST_PASSWORD
from leasedesk.config import settings
from leasedesk.models import AuthSession, User, UserRole
from leasedesk.models.timestamps import utc_now
from leasedesk.services.auth import (
    authenticate_user,
    create_session,
    create_user,
    delete_expired_sessions,
    ensure_bootstrap_admin,
    hash_session_token,
    resolve_session,
    validate_new_password,
)


def _session_cookie(response) -> str:
    name, _, value = response.headers["set-cookie"].split(";")[0].partition("=")
    assert name == settings.session_cookie_name
    return value


class TestLogin:
    """Tests for POST /api/auth/login."""

    @pytest.mark.asyncio
    async def test_login_sets_cookie(self, unauthenticated_client: AsyncClient, manager_user):
        response = await unauthenticated_client.post(
            "/api/auth/login", json={"login": "  MANAGER ", "password": TEST_PASSWORD}
        )

        assert response.status_code == 200
        assert response.json()["user"] == {
            "id": str(manager_user.id),
            "login": "manager",
            "displayName": "Manager",
            "role": "manager",
        }
        set_cookie = response.headers["set-cookie"].lower()
        assert "httponly" in set_cookie
        assert "samesite=lax" in set_cookie

        token = _session_cookie(response)
        session = await AuthSession.find_one(AuthSession.token_hash == hash_session_token(token))
        assert session is not None
        assert session.user_id == manager_user.id

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, unauthenticated_client: AsyncClient, manager_user):
        response = await unauthenticated_client.post(
            "/api/auth/login", json={"login": "manager", "password": "nope"}
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid login or password"

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, unauthenticated_client: AsyncClient):
        response = await unauthenticated_client.post(
            "/api/auth/login", json={"login": "ghost", "password": TEST_PASSWORD}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_login_inactive_user(self, unauthenticated_client: AsyncClient, manager_user):
        manager_user.is_active = False
        await manager_user.save()

        response = await unauthenticated_client.post(
            "/api/auth/login", json={"login": "manager", "password": TEST_PASSWORD}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_login_rate_limited(self, unauthenticated_client: AsyncClient, manager_user):
        limit = settings.login_rate_limit_per_minute
        statuses = []
        for _ in range(limit + 1):
            response = await unauthenticated_client.post(
                "/api/auth/login", json={"login": "manager", "password": "nope"}
            )
            statuses.append(response.status_code)

        assert statuses[:limit] == [401] * limit
        assert statuses[-1] == 429


class TestSession:
    """Tests for /me and logout."""

    @pytest.mark.asyncio
    async def test_me(self, admin_client: AsyncClient, admin_user):
        response = await admin_client.get("/api/auth/me")
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "admin"

    @pytest.mark.asyncio
    async def test_me_requires_session(self, unauthenticated_client: AsyncClient):
        response = await unauthenticated_client.get("/api/auth/me")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_token(self, unauthenticated_client: AsyncClient):
        response = await unauthenticated_client.get(
            "/api/auth/me", headers={"Cookie": f"{settings.session_cookie_name}=forged"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_logout_ends_session(self, unauthenticated_client: AsyncClient, manager_user):
        token = await create_session(manager_user)
        cookie = {"Cookie": f"{settings.session_cookie_name}={token}"}

        response = await unauthenticated_client.post("/api/auth/logout", headers=cookie)
        assert response.status_code == 200
        assert response.json() == {"message": "Successfully logged out"}
        assert await AuthSession.find_all().count() == 0

        response = await unauthenticated_client.get("/api/auth/me", headers=cookie)
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_logout_without_session(self, unauthenticated_client: AsyncClient):
        response = await unauthenticated_client.post("/api/auth/logout")
        assert response.status_code == 200


class TestSessionService:
    """Tests for session helpers."""

    @pytest.mark.asyncio
    async def test_resolve_session_touches_last_seen(self, init_test_db, manager_user):
        token = await create_session(manager_user)
        session = await AuthSession.find_one(AuthSession.token_hash == hash_session_token(token))
        session.last_seen_at = utc_now() - timedelta(hours=1)
        await session.save()

        user = await resolve_session(token)
        assert user.id == manager_user.id

        refreshed = await AuthSession.get(session.id)
        assert refreshed.last_seen_at > utc_now() - timedelta(minutes=1)

    @pytest.mark.asyncio
    async def test_expired_session_is_deleted(self, init_test_db, manager_user):
        token = await create_session(manager_user)
        session = await AuthSession.find_one(AuthSession.token_hash == hash_session_token(token))
        session.expires_at = utc_now() - timedelta(seconds=1)
        await session.save()

        assert await resolve_session(token) is None
        assert await AuthSession.find_all().count() == 0

    @pytest.mark.asyncio
    async def test_inactive_user_session_is_rejected(self, init_test_db, manager_user):
        token = await create_session(manager_user)
        manager_user.is_active = False
        await manager_user.save()
        assert await resolve_session(token) is None

    @pytest.mark.asyncio
    async def test_delete_expired_sessions(self, init_test_db, manager_user):
        await create_session(manager_user)
        removed = await delete_expired_sessions(utc_now() + timedelta(days=365))
        assert removed == 1

    @pytest.mark.asyncio
    async def test_login_records_last_login(self, init_test_db, manager_user):
        assert manager_user.last_login is None
        await create_session(manager_user)
        stored = await User.get(manager_user.id)
        assert stored.last_login is not None


class TestUsers:
    """Tests for user creation and bootstrap."""

    @pytest.mark.asyncio
    async def test_create_user_normalizes_login(self, init_test_db):
        user = await create_user("  Ivan.Petrov ", "pass1234")
        assert user.login == "ivan.petrov"
        assert user.display_name == "ivan.petrov"
        assert user.role == UserRole.MANAGER
        assert await authenticate_user("IVAN.PETROV", "pass1234") is not None

    @pytest.mark.asyncio
    async def test_create_user_duplicate(self, init_test_db):
        await create_user("ivan", "pass1234")
        with pytest.raises(ValueError, match="already exists"):
            await create_user("IVAN", "pass1234")

    def test_short_password_rejected(self):
        with pytest.raises(ValueError, match="at least"):
            validate_new_password("  ab  ")

    @pytest.mark.asyncio
    async def test_bootstrap_admin(self, init_test_db, monkeypatch):
        from leasedesk.config import get_settings

        current = get_settings()
        monkeypatch.setattr(current.config.auth, "bootstrap_admin_login", "Root")
        monkeypatch.setattr(current.secrets, "bootstrap_admin_password", "root-pass")

        admin = await ensure_bootstrap_admin()
        assert admin.login == "root"
        assert admin.role == UserRole.ADMIN

        # Second start does nothing
        assert await ensure_bootstrap_admin() is None

    @pytest.mark.asyncio
    async def test_bootstrap_admin_not_configured(self, init_test_db):
        assert await ensure_bootstrap_admin() is None
