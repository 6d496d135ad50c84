"""
RICHIEAT Backend — Auth Endpoint Tests
========================================

Exercises /api/auth through the full request pipeline against a per-test
SQLite database.
"""

import pytest
from sqlalchemy import func, select

from richieat.models.advisor import Advisor


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_returns_token_and_advisor(self, test_client, registration):
        response = await test_client.post("/api/auth/register", json=registration)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Advisor registered successfully"
        assert body["token"]
        assert body["advisor"]["email"] == "ada@example.com"
        assert body["advisor"]["firmName"] == "Analytical Advisors"
        assert "password" not in body["advisor"]
        assert "passwordHash" not in body["advisor"]

    @pytest.mark.asyncio
    async def test_duplicate_email_is_conflict(self, test_client, registration, session_factory):
        first = await test_client.post("/api/auth/register", json=registration)
        assert first.status_code == 201

        registration["email"] = "ADA@example.com"
        second = await test_client.post("/api/auth/register", json=registration)

        assert second.status_code == 409
        body = second.json()
        assert body["success"] is False
        assert body["error"] == "duplicate_email"
        assert "token" not in body

        async with session_factory() as session:
            count = await session.scalar(select(func.count()).select_from(Advisor))
        assert count == 1

    @pytest.mark.asyncio
    async def test_short_password_is_validation_error(self, test_client, registration):
        registration["password"] = "abc"
        response = await test_client.post("/api/auth/register", json=registration)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert any(d["field"] == "password" for d in body["details"])

    @pytest.mark.asyncio
    async def test_invalid_email_is_validation_error(self, test_client, registration):
        registration["email"] = "not-an-email"
        response = await test_client.post("/api/auth/register", json=registration)
        assert response.status_code == 400


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_success(self, test_client, advisor_token, registration):
        response = await test_client.post(
            "/api/auth/login",
            json={"email": registration["email"], "password": registration["password"]},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Login successful"
        assert body["token"]
        assert body["advisor"]["lastLoginAt"] is not None

    @pytest.mark.asyncio
    async def test_wrong_password_is_401_without_token(self, test_client, advisor_token, registration):
        response = await test_client.post(
            "/api/auth/login",
            json={"email": registration["email"], "password": "wrong-password"},
        )

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Invalid email or password"
        assert "token" not in body

    @pytest.mark.asyncio
    async def test_unknown_email_matches_wrong_password(self, test_client, advisor_token, registration):
        wrong = await test_client.post(
            "/api/auth/login",
            json={"email": registration["email"], "password": "wrong-password"},
        )
        unknown = await test_client.post(
            "/api/auth/login",
            json={"email": "ghost@example.com", "password": "whatever1"},
        )

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json()["message"] == unknown.json()["message"]
        assert wrong.json()["error"] == unknown.json()["error"]

    @pytest.mark.asyncio
    async def test_overlong_password_same_for_known_and_unknown_email(
        self, test_client, advisor_token, registration
    ):
        overlong = "x" * 80
        known = await test_client.post(
            "/api/auth/login",
            json={"email": registration["email"], "password": overlong},
        )
        unknown = await test_client.post(
            "/api/auth/login",
            json={"email": "nobody@example.com", "password": overlong},
        )

        assert known.status_code == unknown.status_code == 400
        assert known.json()["error"] == unknown.json()["error"] == "validation_error"
        assert "token" not in known.json()


class TestProfile:

    @pytest.mark.asyncio
    async def test_profile_without_token_is_401(self, test_client):
        response = await test_client.get("/api/auth/profile")

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Not authorized, no token"

    @pytest.mark.asyncio
    async def test_profile_with_bad_token_is_401(self, test_client):
        response = await test_client.get(
            "/api/auth/profile", headers={"Authorization": "Bearer nope.nope.nope"}
        )
        assert response.status_code == 401
        assert response.json()["error"] == "token_invalid"

    @pytest.mark.asyncio
    async def test_profile_returns_current_advisor(self, test_client, auth_headers):
        response = await test_client.get("/api/auth/profile", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["advisor"]["firstName"] == "Ada"

    @pytest.mark.asyncio
    async def test_update_profile_partial(self, test_client, auth_headers):
        response = await test_client.put(
            "/api/auth/profile",
            headers=auth_headers,
            json={"firmName": "Difference Engines Ltd", "phone": "555-0100"},
        )

        assert response.status_code == 200
        advisor = response.json()["advisor"]
        assert advisor["firmName"] == "Difference Engines Ltd"
        assert advisor["phone"] == "555-0100"
        assert advisor["firstName"] == "Ada"

        again = await test_client.get("/api/auth/profile", headers=auth_headers)
        assert again.json()["advisor"]["firmName"] == "Difference Engines Ltd"


class TestLogout:

    @pytest.mark.asyncio
    async def test_logout_succeeds(self, test_client, auth_headers):
        response = await test_client.post("/api/auth/logout", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Logged out successfully"}

    @pytest.mark.asyncio
    async def test_logout_requires_token(self, test_client):
        response = await test_client.post("/api/auth/logout")
        assert response.status_code == 401
