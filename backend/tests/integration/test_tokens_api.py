"""Integration tests for the API token management endpoints."""

import uuid

import pytest

from mission_control.auth.hashing import TOKEN_PREFIX


class TestCreateToken:
    """POST /tokens"""

    @pytest.mark.asyncio
    async def test_create_returns_plaintext_once(self, make_client, session_headers):
        async with make_client() as client:
            response = await client.post(
                "/tokens", json={"name": "openclaw"}, headers=session_headers("tenant-a")
            )

        assert response.status_code == 201
        data = response.json()
        assert data["token"].startswith(TOKEN_PREFIX)
        assert data["token_prefix"] == data["token"][:8]
        assert uuid.UUID(data["token_id"])
        assert isinstance(data["created_at"], int)

    @pytest.mark.asyncio
    async def test_created_token_authenticates_webhook(self, make_client, session_headers):
        async with make_client(MISSION_CONTROL_AUTH_REQUIRED=True) as client:
            created = await client.post("/tokens", json={}, headers=session_headers("tenant-a"))
            token = created.json()["token"]
            response = await client.post(
                "/openclaw/event",
                json={"type": "ping"},
                headers={"Authorization": f"Bearer {token}"},
            )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_create_requires_session(self, make_client):
        async with make_client() as client:
            response = await client.post("/tokens", json={"name": "x"})

        assert response.status_code == 401
        assert response.json() == {"ok": False, "error": "Authentication required"}

    @pytest.mark.asyncio
    async def test_api_token_is_not_a_session(self, make_client, session_headers):
        """Bearer API tokens cannot manage tokens."""
        async with make_client() as client:
            created = await client.post("/tokens", json={}, headers=session_headers("tenant-a"))
            token = created.json()["token"]
            response = await client.get("/tokens", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_fields_rejected(self, make_client, session_headers):
        async with make_client() as client:
            response = await client.post(
                "/tokens", json={"tenant_id": "tenant-b"}, headers=session_headers("tenant-a")
            )

        assert response.status_code == 422


class TestListTokens:
    """GET /tokens"""

    @pytest.mark.asyncio
    async def test_list_hides_secrets(self, make_client, session_headers):
        headers = session_headers("tenant-a")
        async with make_client() as client:
            created = (await client.post("/tokens", json={"name": "ci"}, headers=headers)).json()
            response = await client.get("/tokens", headers=headers)

        assert response.status_code == 200
        tokens = response.json()
        assert len(tokens) == 1
        assert tokens[0]["id"] == created["token_id"]
        assert tokens[0]["token_prefix"] == created["token_prefix"]
        assert tokens[0]["name"] == "ci"
        assert tokens[0]["last_used_at"] is None
        assert "token" not in tokens[0]
        assert "token_hash" not in tokens[0]
        assert created["token"] not in response.text

    @pytest.mark.asyncio
    async def test_list_is_tenant_scoped(self, make_client, session_headers):
        async with make_client() as client:
            await client.post("/tokens", json={"name": "a"}, headers=session_headers("tenant-a"))
            await client.post("/tokens", json={"name": "b"}, headers=session_headers("tenant-b"))
            response = await client.get("/tokens", headers=session_headers("tenant-b"))

        assert [t["name"] for t in response.json()] == ["b"]


class TestRevokeToken:
    """POST /tokens/{token_id}/revoke"""

    @pytest.mark.asyncio
    async def test_revoke_is_idempotent(self, make_client, session_headers):
        headers = session_headers("tenant-a")
        async with make_client() as client:
            created = (await client.post("/tokens", json={}, headers=headers)).json()
            first = await client.post(f"/tokens/{created['token_id']}/revoke", headers=headers)
            second = await client.post(f"/tokens/{created['token_id']}/revoke", headers=headers)
            listed = await client.get("/tokens", headers=headers)

        assert first.status_code == second.status_code == 200
        assert first.json() == second.json() == {"ok": True}
        assert listed.json() == []

    @pytest.mark.asyncio
    async def test_revoked_token_rejected_by_webhook(self, make_client, session_headers):
        headers = session_headers("tenant-a")
        async with make_client() as client:
            created = (await client.post("/tokens", json={}, headers=headers)).json()
            await client.post(f"/tokens/{created['token_id']}/revoke", headers=headers)
            response = await client.post(
                "/openclaw/event",
                json={"type": "ping"},
                headers={"Authorization": f"Bearer {created['token']}"},
            )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_revoke_other_tenant_not_found(self, make_client, session_headers):
        async with make_client() as client:
            created = (await client.post("/tokens", json={}, headers=session_headers("tenant-a"))).json()
            response = await client.post(
                f"/tokens/{created['token_id']}/revoke", headers=session_headers("tenant-b")
            )
            still_listed = await client.get("/tokens", headers=session_headers("tenant-a"))

        assert response.status_code == 404
        assert response.json() == {"ok": False, "error": "Token not found"}
        assert len(still_listed.json()) == 1

    @pytest.mark.asyncio
    async def test_revoke_missing_not_found(self, make_client, session_headers):
        async with make_client() as client:
            response = await client.post(
                f"/tokens/{uuid.uuid4()}/revoke", headers=session_headers("tenant-a")
            )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_revoke_malformed_id_not_found(self, make_client, session_headers):
        async with make_client() as client:
            response = await client.post("/tokens/not-a-uuid/revoke", headers=session_headers("tenant-a"))

        assert response.status_code == 404
        assert response.json() == {"ok": False, "error": "Token not found"}
