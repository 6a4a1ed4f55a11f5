"""Tests for accounts, sessions and stored preferences."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.orm import Session

from cookgpt.auth import AuthError, authenticate, hash_password, register_user, verify_password
from cookgpt.database import sync_engine
from cookgpt.models import AuthSession, UserPreferences


class TestPasswords:
    def test_hash_roundtrip(self):
        hashed = hash_password("secret123")

        assert hashed != "secret123"
        assert verify_password("secret123", hashed) is True
        assert verify_password("wrong", hashed) is False

    def test_malformed_hash(self):
        assert verify_password("secret123", "not-a-bcrypt-hash") is False


class TestRegisterUser:
    @pytest.mark.asyncio
    async def test_creates_default_preferences(self, db_session):
        user = await register_user(db_session, "  Jane@Example.com ", "secret123", "Jane")

        assert user.email == "jane@example.com"
        assert user.subscription_tier == "free"
        prefs = await db_session.get(UserPreferences, user.id)
        assert prefs is not None
        assert prefs.onboarding_completed is False

    @pytest.mark.asyncio
    async def test_duplicate_email(self, db_session):
        await register_user(db_session, "jane@example.com", "secret123")

        with pytest.raises(AuthError, match="already exists"):
            await register_user(db_session, "JANE@example.com", "other-secret")

    @pytest.mark.asyncio
    async def test_short_password(self, db_session):
        with pytest.raises(AuthError, match="at least 6 characters"):
            await register_user(db_session, "jane@example.com", "abc")

    @pytest.mark.asyncio
    async def test_authenticate(self, db_session):
        await register_user(db_session, "jane@example.com", "secret123")

        user = await authenticate(db_session, "Jane@example.com", "secret123")
        assert user.email == "jane@example.com"

        with pytest.raises(AuthError, match="Invalid email or password"):
            await authenticate(db_session, "jane@example.com", "nope")


class TestAuthApi:
    def test_register_starts_onboarding(self, register_account):
        data = register_account("new@example.com")

        assert data["token_type"] == "bearer"
        assert data["redirect_to"] == "/onboarding"
        assert data["user"]["email"] == "new@example.com"

    def test_register_duplicate(self, client, session_data):
        response = client.post(
            "/api/v1/auth/register",
            json={"email": "cook@example.com", "password": "secret123"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "An account with this email already exists"

    def test_login_redirects_by_onboarding_state(self, client, session_data, auth_headers, open_preferences):
        credentials = {"email": "cook@example.com", "password": "secret123"}

        response = client.post("/api/v1/auth/login", json=credentials)
        assert response.status_code == 200
        assert response.json()["redirect_to"] == "/onboarding"

        client.post(
            "/api/v1/onboarding/complete", json=open_preferences.model_dump(), headers=auth_headers
        )
        assert client.post("/api/v1/auth/login", json=credentials).json()["redirect_to"] == "/dashboard"

    def test_login_wrong_password(self, client, session_data):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": "cook@example.com", "password": "wrong-password"},
        )
        assert response.status_code == 401

    def test_me(self, client, auth_headers):
        response = client.get("/api/v1/auth/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["subscription_tier"] == "free"

    def test_me_without_token(self, client):
        assert client.get("/api/v1/auth/me").status_code == 401
        assert client.get("/api/v1/auth/me", headers={"Authorization": "Bearer nope"}).status_code == 401

    def test_logout_revokes_token(self, client, auth_headers):
        assert client.post("/api/v1/auth/logout", headers=auth_headers).status_code == 204
        assert client.get("/api/v1/auth/me", headers=auth_headers).status_code == 401

    def test_expired_session(self, client, session_data, auth_headers):
        with Session(sync_engine) as session:
            token = session.get(AuthSession, session_data["access_token"])
            token.expires_at = datetime.utcnow() - timedelta(minutes=1)
            session.commit()

        assert client.get("/api/v1/auth/me", headers=auth_headers).status_code == 401

        with Session(sync_engine) as session:
            assert session.get(AuthSession, session_data["access_token"]) is None


class TestPreferencesApi:
    def test_defaults(self, client, auth_headers, user_id):
        data = client.get("/api/v1/preferences", headers=auth_headers).json()

        assert data["user_id"] == user_id
        assert data["dietary_restrictions"] == []
        assert data["skill_level"] == "beginner"
        assert data["cooking_time"] == "30min"

    def test_replace(self, client, auth_headers, vegan_preferences):
        response = client.put(
            "/api/v1/preferences", json=vegan_preferences.model_dump(), headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["dietary_restrictions"] == ["vegan"]
        assert response.json()["goals"] == ["healthy-eating"]

    def test_partial_update(self, client, auth_headers, vegan_preferences):
        client.put("/api/v1/preferences", json=vegan_preferences.model_dump(), headers=auth_headers)

        response = client.patch(
            "/api/v1/preferences", json={"skill_level": "expert"}, headers=auth_headers
        )

        data = response.json()
        assert data["skill_level"] == "expert"
        assert data["dietary_restrictions"] == ["vegan"]

    def test_invalid_skill_level(self, client, auth_headers):
        response = client.patch(
            "/api/v1/preferences", json={"skill_level": "wizard"}, headers=auth_headers
        )
        assert response.status_code == 422

    def test_requires_auth(self, client):
        assert client.get("/api/v1/preferences").status_code == 401
