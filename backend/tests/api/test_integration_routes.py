# tests/api/test_integration_routes.py
"""
Tests for the integration API

Coverage:
- Stored API keys are never echoed back
- Credential tests persist nothing
- Sync runs in the background and records its outcome
- Disconnect keeps the row and clears the credential
"""

import pytest
from unittest.mock import AsyncMock, patch

from maven.services.connectors_service import IntegrationResult


async def _create(client, **payload):
    body = {"name": "Apollo", "status": "connected", "apiKey": "secret-key", **payload}
    response = await client.post("/api/integrations", json=body)
    assert response.status_code == 200
    return response.json()


# ============================================================================
# TEST: CRUD
# ============================================================================

class TestIntegrationCrud:

    @pytest.mark.asyncio
    async def test_api_key_is_never_returned(self, client):
        created = await _create(client)

        assert "apiKey" not in created
        assert created["hasApiKey"] is True

        listed = (await client.get("/api/integrations")).json()
        assert "apiKey" not in listed[0]
        assert listed[0]["syncFrequency"] == 60

    @pytest.mark.asyncio
    async def test_duplicate_name_conflicts(self, client):
        await _create(client)

        response = await client.post("/api/integrations", json={"name": "apollo"})

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_get_missing(self, client):
        response = await client.get("/api/integrations/999")

        assert response.status_code == 404
        assert response.json() == {"message": "Integration not found"}

    @pytest.mark.asyncio
    async def test_patch(self, client):
        created = await _create(client)

        response = await client.patch(
            f"/api/integrations/{created['id']}",
            json={"syncFrequency": 15, "settings": {"endpoint": "https://proxy.local"}},
        )

        assert response.status_code == 200
        assert response.json()["syncFrequency"] == 15
        assert response.json()["settings"] == {"endpoint": "https://proxy.local"}

    @pytest.mark.asyncio
    async def test_rename_to_existing_vendor_conflicts(self, client):
        await _create(client, name="Apollo")
        clay = await _create(client, name="Clay")

        response = await client.patch(f"/api/integrations/{clay['id']}", json={"name": "APOLLO"})

        assert response.status_code == 409
        assert (await client.get(f"/api/integrations/{clay['id']}")).json()["name"] == "Clay"

    @pytest.mark.asyncio
    async def test_rename_keeping_own_name(self, client):
        created = await _create(client, name="Apollo")

        response = await client.patch(f"/api/integrations/{created['id']}", json={"name": "apollo"})

        assert response.status_code == 200
        assert response.json()["name"] == "apollo"

    @pytest.mark.asyncio
    async def test_patch_cannot_null_name(self, client):
        created = await _create(client)

        response = await client.patch(f"/api/integrations/{created['id']}", json={"name": None})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_patch_rejects_unknown_status(self, client):
        created = await _create(client)

        response = await client.patch(f"/api/integrations/{created['id']}", json={"status": "broken"})

        assert response.status_code == 400


# ============================================================================
# TEST: Credential test
# ============================================================================

class TestIntegrationTest:

    @pytest.mark.asyncio
    async def test_requires_name_and_key(self, client):
        response = await client.post("/api/integrations/test", json={"name": "Apollo"})

        assert response.status_code == 400
        assert response.json() == {"message": "Name and API key are required"}

    @pytest.mark.asyncio
    async def test_unsupported_integration(self, client):
        response = await client.post("/api/integrations/test", json={"name": "Salesforce", "apiKey": "k"})

        assert response.status_code == 200
        assert response.json()["success"] is False
        assert response.json()["message"] == "Unsupported integration: Salesforce"

    @pytest.mark.asyncio
    async def test_success_persists_nothing(self, client):
        result = IntegrationResult(success=True, data={"people": []}, records_processed=0)

        with patch(
            "maven.routers.integration_routes.IntegrationManager.test_integration",
            new=AsyncMock(return_value=result),
        ):
            response = await client.post("/api/integrations/test", json={"name": "Apollo", "apiKey": "k"})

        assert response.json() == {
            "success": True,
            "message": "Integration test successful",
            "data": {"people": []},
        }
        assert (await client.get("/api/integrations")).json() == []
        assert (await client.get("/api/activities")).json() == []


# ============================================================================
# TEST: Sync
# ============================================================================

class TestIntegrationSync:

    @pytest.mark.asyncio
    async def test_sync_without_key_ends_in_error(self, client):
        created = await _create(client, apiKey=None)

        response = await client.post(f"/api/integrations/{created['id']}/sync")

        assert response.status_code == 200
        assert response.json() == {"message": "Sync started successfully"}

        integration = (await client.get(f"/api/integrations/{created['id']}")).json()
        assert integration["status"] == "error"
        assert integration["lastSync"] is not None

        descriptions = [a["description"] for a in (await client.get("/api/activities")).json()]
        assert descriptions == ["Apollo sync failed - 0 records processed", "Apollo sync started"]

    @pytest.mark.asyncio
    async def test_successful_sync_marks_connected(self, client):
        created = await _create(client, name="SmartLead")
        result = IntegrationResult(success=True, data=[{"id": 1}], records_processed=1)

        with patch(
            "maven.services.integration_manager.IntegrationManager.sync_integration",
            new=AsyncMock(return_value=result),
        ):
            await client.post(f"/api/integrations/{created['id']}/sync")

        integration = (await client.get(f"/api/integrations/{created['id']}")).json()
        assert integration["status"] == "connected"

    @pytest.mark.asyncio
    async def test_sync_missing(self, client):
        response = await client.post("/api/integrations/999/sync")
        assert response.status_code == 404


# ============================================================================
# TEST: Disconnect
# ============================================================================

class TestIntegrationDisconnect:

    @pytest.mark.asyncio
    async def test_disconnect_keeps_row(self, client):
        created = await _create(client)

        response = await client.delete(f"/api/integrations/{created['id']}")

        assert response.status_code == 200
        assert response.json() == {"message": "Integration disconnected successfully"}

        integration = (await client.get(f"/api/integrations/{created['id']}")).json()
        assert integration["status"] == "disconnected"
        assert integration["hasApiKey"] is False
        assert integration["lastSync"] is None

        activity = (await client.get("/api/activities/recent?limit=1")).json()[0]
        assert activity["type"] == "integration_disconnected"

    @pytest.mark.asyncio
    async def test_disconnect_missing(self, client):
        response = await client.delete("/api/integrations/999")
        assert response.status_code == 404
