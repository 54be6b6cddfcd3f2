# tests/services/test_integration_manager.py
"""
Tests for IntegrationManager

Coverage:
- Tests never persist anything
- Sync requires a stored API key
- Apollo / Rb2b syncs create de-duplicated prospects
- Clay sync enriches existing prospects
- run_sync records status, last sync and an audit row
"""

import httpx
import pytest
from unittest.mock import AsyncMock, patch

from maven.services.integration_manager import IntegrationManager

APOLLO_PERSON = {
    "first_name": "Jennifer",
    "last_name": "Wilson",
    "email": "j.wilson@techstartup.com",
    "title": "VP of Marketing",
    "organization": {"name": "TechStartup Inc", "industry": "Technology", "estimated_num_employees": 300},
}

RB2B_VISITOR = {
    "company": {"name": "Enterprise Solutions Co", "domain": "enterprisesolutions.com", "size": "1000+"},
    "visitData": {"pages": ["/pricing"], "duration": 180},
    "intentSignals": [
        {"signal": "Pricing page visited", "confidence": 0.85},
        {"signal": "Enterprise features viewed", "confidence": 0.92},
    ],
}


def _json_transport(payload, status_code=200):
    return httpx.MockTransport(lambda request: httpx.Response(status_code, json=payload))


async def _integration(storage, name, api_key="key", settings=None, status="connected"):
    return await storage.create_integration({
        "name": name,
        "status": status,
        "api_key": api_key,
        "settings": settings or {},
    })


# ============================================================================
# TEST: test_integration
# ============================================================================

class TestTestIntegration:

    @pytest.mark.asyncio
    async def test_success_persists_nothing(self, storage):
        manager = IntegrationManager(transport=_json_transport({"people": [APOLLO_PERSON]}))

        result = await manager.test_integration("Apollo", "key")

        assert result.success is True
        assert result.records_processed == 1
        assert await storage.list_prospects() == []
        assert await storage.count_activities() == 0

    @pytest.mark.asyncio
    async def test_unsupported_name(self):
        result = await IntegrationManager().test_integration("Salesforce", "key")

        assert result.success is False
        assert result.error == "Unsupported integration: Salesforce"

    @pytest.mark.asyncio
    async def test_vendor_error(self):
        manager = IntegrationManager(transport=_json_transport({}, status_code=403))

        result = await manager.test_integration("SmartLead", "bad-key")

        assert result.success is False
        assert "403" in result.error


# ============================================================================
# TEST: sync_integration
# ============================================================================

class TestSyncIntegration:

    @pytest.mark.asyncio
    async def test_requires_api_key(self, storage):
        integration = await _integration(storage, "Apollo", api_key=None)

        result = await IntegrationManager(storage).sync_integration(integration.id)

        assert result.success is False
        assert result.error == "Integration not found or missing API key"

    @pytest.mark.asyncio
    async def test_missing_integration(self, storage):
        result = await IntegrationManager(storage).sync_integration(999)
        assert result.success is False

    @pytest.mark.asyncio
    async def test_apollo_creates_prospects_once(self, storage):
        integration = await _integration(storage, "Apollo")
        manager = IntegrationManager(storage, transport=_json_transport({"people": [APOLLO_PERSON]}))

        first = await manager.sync_integration(integration.id)
        second = await manager.sync_integration(integration.id)

        assert first.success and second.success
        assert first.data["created"] == 1
        assert second.data["created"] == 0
        prospects = await storage.list_prospects()
        assert len(prospects) == 1
        assert prospects[0].email == "j.wilson@techstartup.com"

    @pytest.mark.asyncio
    async def test_rb2b_creates_only_high_intent_visitors(self, storage):
        integration = await _integration(storage, "Rb2b", settings={"endpoint": "https://rb2b.local/visitors"})
        low_intent = {
            **RB2B_VISITOR,
            "company": {"name": "Low Co", "domain": "low.co"},
            "intentSignals": [{"signal": "Blog visit", "confidence": 0.4}],
        }
        manager = IntegrationManager(storage, transport=_json_transport([RB2B_VISITOR, low_intent]))

        result = await manager.sync_integration(integration.id)

        assert result.records_processed == 2
        assert result.data["created"] == 1
        prospect = (await storage.list_prospects())[0]
        assert prospect.email == "visitor@enterprisesolutions.com"
        assert prospect.lead_score == 92

    @pytest.mark.asyncio
    async def test_clay_enriches_existing_prospects(self, storage, prospect_data):
        prospect = await storage.create_prospect({**prospect_data, "personalized_notes": "Met at conference"})
        integration = await _integration(storage, "Clay", settings={"endpoint": "https://clay.local/enrich"})
        enrichment = {"companyData": {"revenue": "$50M-$100M", "technologies": ["Salesforce"]}}
        manager = IntegrationManager(storage, transport=_json_transport(enrichment))

        result = await manager.sync_integration(integration.id)

        assert result.success is True
        assert result.records_processed == 1
        refreshed = await storage.get_prospect(prospect.id)
        assert refreshed.revenue == "$50M-$100M"
        assert refreshed.personalized_notes == "Met at conference | Clay enrichment: Salesforce"

    @pytest.mark.asyncio
    async def test_clay_without_endpoint_fails(self, storage, prospect_data):
        await storage.create_prospect(prospect_data)
        integration = await _integration(storage, "Clay")

        result = await IntegrationManager(storage).sync_integration(integration.id)

        assert result.success is False
        assert "requires an endpoint" in result.error

    @pytest.mark.asyncio
    async def test_smartlead_counts_campaigns(self, storage):
        integration = await _integration(storage, "SmartLead")
        manager = IntegrationManager(storage, transport=_json_transport({"data": [{"id": 1}]}))

        result = await manager.sync_integration(integration.id)

        assert result.success is True
        assert result.records_processed == 1


# ============================================================================
# TEST: run_sync
# ============================================================================

class TestRunSync:

    @pytest.mark.asyncio
    async def test_success_marks_connected(self, storage):
        integration = await _integration(storage, "SmartLead", status="syncing")
        manager = IntegrationManager(storage, transport=_json_transport([{"id": 1}, {"id": 2}]))

        await manager.run_sync(integration.id)

        refreshed = await storage.get_integration(integration.id)
        assert refreshed.status == "connected"
        assert refreshed.last_sync is not None

        activity = (await storage.get_recent_activities(1))[0]
        assert activity.type == "integration_sync"
        assert activity.description == "SmartLead sync completed - 2 records processed"
        assert activity.activity_metadata["status"] == "completed"

    @pytest.mark.asyncio
    async def test_failure_marks_error(self, storage):
        integration = await _integration(storage, "Apollo", api_key=None, status="syncing")

        result = await IntegrationManager(storage).run_sync(integration.id)

        assert result.success is False
        refreshed = await storage.get_integration(integration.id)
        assert refreshed.status == "error"
        activity = (await storage.get_recent_activities(1))[0]
        assert activity.description == "Apollo sync failed - 0 records processed"

    @pytest.mark.asyncio
    async def test_crash_marks_error(self, storage):
        integration = await _integration(storage, "Apollo", status="syncing")
        manager = IntegrationManager(storage)

        with patch.object(manager, "sync_integration", new=AsyncMock(side_effect=RuntimeError("boom"))):
            result = await manager.run_sync(integration.id)

        assert result.success is False
        refreshed = await storage.get_integration(integration.id)
        assert refreshed.status == "error"
        activity = (await storage.get_recent_activities(1))[0]
        assert activity.description == "Apollo sync failed with error"
        assert activity.activity_metadata["error"] == "boom"
