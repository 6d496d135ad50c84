"""
RICHIEAT Backend — Client Endpoint Tests
==========================================
"""

import uuid

import pytest


async def create_client(test_client, headers, **fields):
    payload = {"firstName": "Jane", "lastName": "Doe", "email": "jane@example.com"}
    payload.update(fields)
    response = await test_client.post("/api/clients", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["client"]


async def second_advisor_headers(test_client):
    response = await test_client.post(
        "/api/auth/register",
        json={
            "firstName": "Other",
            "lastName": "Advisor",
            "email": "other@example.com",
            "password": "another-pass",
        },
    )
    return {"Authorization": f"Bearer {response.json()['token']}"}


class TestClientCrudRoutes:

    @pytest.mark.asyncio
    async def test_requires_authentication(self, test_client):
        response = await test_client.get("/api/clients")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_list_get(self, test_client, auth_headers):
        created = await create_client(test_client, auth_headers)
        assert created["firstName"] == "Jane"
        assert created["status"] == "active"

        listing = await test_client.get("/api/clients", headers=auth_headers)
        body = listing.json()
        assert body["success"] is True
        assert body["count"] == 1
        assert body["clients"][0]["id"] == created["id"]

        detail = await test_client.get(f"/api/clients/{created['id']}", headers=auth_headers)
        assert detail.status_code == 200
        assert detail.json()["client"]["email"] == "jane@example.com"

    @pytest.mark.asyncio
    async def test_update_and_delete(self, test_client, auth_headers):
        created = await create_client(test_client, auth_headers)

        updated = await test_client.put(
            f"/api/clients/{created['id']}",
            json={"status": "inactive", "notes": "Moved abroad"},
            headers=auth_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["client"]["status"] == "inactive"
        assert updated.json()["client"]["notes"] == "Moved abroad"

        deleted = await test_client.delete(f"/api/clients/{created['id']}", headers=auth_headers)
        assert deleted.status_code == 200
        assert deleted.json()["message"] == "Client deleted successfully"

        gone = await test_client.get(f"/api/clients/{created['id']}", headers=auth_headers)
        assert gone.status_code == 404

    @pytest.mark.asyncio
    async def test_other_advisor_cannot_see_client(self, test_client, auth_headers):
        created = await create_client(test_client, auth_headers)
        other = await second_advisor_headers(test_client)

        response = await test_client.get(f"/api/clients/{created['id']}", headers=other)
        assert response.status_code == 404

        listing = await test_client.get("/api/clients", headers=other)
        assert listing.json()["count"] == 0

    @pytest.mark.asyncio
    async def test_unknown_client_is_404(self, test_client, auth_headers):
        response = await test_client.get(f"/api/clients/{uuid.uuid4()}", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_invalid_status_filter_is_400(self, test_client, auth_headers):
        response = await test_client.get("/api/clients?status=archived", headers=auth_headers)
        assert response.status_code == 400


class TestOnboardingRoutes:

    @pytest.mark.asyncio
    async def test_full_onboarding_flow(self, test_client, auth_headers):
        invite = await test_client.post(
            "/api/clients/onboarding-link",
            json={"email": "invitee@example.com"},
            headers=auth_headers,
        )
        assert invite.status_code == 201
        body = invite.json()
        token = body["onboardingToken"]
        assert body["client"]["status"] == "pending"
        assert body["onboardingUrl"].endswith(f"/client-onboarding/{token}")

        # Public endpoints: no Authorization header
        view = await test_client.get(f"/api/clients/onboarding/{token}")
        assert view.status_code == 200
        assert view.json()["client"]["advisorName"] == "Ada Lovelace"
        assert view.json()["client"]["email"] == "invitee@example.com"

        submit = await test_client.post(
            f"/api/clients/onboarding/{token}",
            json={
                "firstName": "Ivy",
                "lastName": "Invitee",
                "email": "ivy@example.com",
                "phone": "555-0142",
            },
        )
        assert submit.status_code == 200

        reuse = await test_client.get(f"/api/clients/onboarding/{token}")
        assert reuse.status_code == 404

        listing = await test_client.get("/api/clients?status=active", headers=auth_headers)
        assert [c["firstName"] for c in listing.json()["clients"]] == ["Ivy"]
