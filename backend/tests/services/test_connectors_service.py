# tests/services/test_connectors_service.py
"""
Tests for vendor connectors

HTTP is served by httpx.MockTransport; nothing leaves the process.
"""

import json
import httpx
import pytest

from maven.services.connectors_service import (
    ConnectorFactory,
    ConnectorError,
    ApolloConnector,
    ClayConnector,
    SmartLeadConnector,
    Rb2bConnector,
)


APOLLO_PERSON = {
    "first_name": "Jennifer",
    "last_name": "Wilson",
    "email": "j.wilson@techstartup.com",
    "title": "VP of Marketing",
    "linkedin_url": "https://linkedin.com/in/jenniferwilson",
    "city": "San Francisco",
    "state": "CA",
    "phone_numbers": [{"raw_number": "+1-555-987-6543"}],
    "organization": {
        "name": "TechStartup Inc",
        "industry": "Technology",
        "estimated_num_employees": 300,
        "website_url": "https://techstartup.com",
    },
}

RB2B_VISITOR = {
    "visitorId": "visitor_001",
    "company": {"name": "Enterprise Solutions Co", "domain": "enterprisesolutions.com", "size": "1000+", "industry": "Technology"},
    "visitData": {"pages": ["/pricing", "/enterprise"], "duration": 180},
    "intentSignals": [
        {"signal": "Pricing page visited", "confidence": 0.85},
        {"signal": "Enterprise features viewed", "confidence": 0.92},
    ],
}


def _transport(handler):
    return httpx.MockTransport(handler)


# ============================================================================
# TEST: Factory
# ============================================================================

class TestConnectorFactory:

    @pytest.mark.parametrize("name,cls", [
        ("Apollo", ApolloConnector),
        ("clay", ClayConnector),
        ("SMARTLEAD", SmartLeadConnector),
        ("Rb2b", Rb2bConnector),
    ])
    def test_lookup_is_case_insensitive(self, name, cls):
        assert isinstance(ConnectorFactory.get_connector(name, "key"), cls)

    def test_unknown_integration(self):
        with pytest.raises(ValueError, match="Unsupported integration: OpenAI GPT-4"):
            ConnectorFactory.get_connector("OpenAI GPT-4", "key")


# ============================================================================
# TEST: Apollo
# ============================================================================

class TestApollo:

    @pytest.mark.asyncio
    async def test_search_sends_key_and_page_size(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["key"] = request.headers.get("X-Api-Key")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"people": [APOLLO_PERSON]})

        connector = ApolloConnector("apollo-key", transport=_transport(handler))
        people = await connector.search_people(limit=10)

        assert people == [APOLLO_PERSON]
        assert seen["url"] == "https://api.apollo.io/v1/mixed_people/search"
        assert seen["key"] == "apollo-key"
        assert seen["body"]["per_page"] == 10

    @pytest.mark.asyncio
    async def test_endpoint_override(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            return httpx.Response(200, json={"people": []})

        connector = ApolloConnector(
            "k", settings={"endpoint": "https://proxy.local/apollo"}, transport=_transport(handler)
        )
        await connector.search_people()

        assert seen["url"] == "https://proxy.local/apollo"

    @pytest.mark.asyncio
    async def test_http_error_raises_connector_error(self):
        connector = ApolloConnector("bad", transport=_transport(lambda r: httpx.Response(401, json={})))

        with pytest.raises(ConnectorError, match="401"):
            await connector.search_people()

    @pytest.mark.asyncio
    async def test_missing_people_list(self):
        connector = ApolloConnector("k", transport=_transport(lambda r: httpx.Response(200, json={"error": "x"})))

        with pytest.raises(ConnectorError):
            await connector.search_people()

    def test_to_prospect(self):
        prospect = ApolloConnector.to_prospect(APOLLO_PERSON)

        assert prospect["first_name"] == "Jennifer"
        assert prospect["company"] == "TechStartup Inc"
        assert prospect["company_size"] == "201-500"
        assert prospect["phone"] == "+1-555-987-6543"
        assert prospect["location"] == "San Francisco, CA"
        assert prospect["source"] == "apollo"


# ============================================================================
# TEST: Clay
# ============================================================================

class TestClay:

    @pytest.mark.asyncio
    async def test_requires_endpoint(self):
        connector = ClayConnector("k")

        with pytest.raises(ConnectorError, match="requires an endpoint"):
            await connector.enrich_contact("a@b.com")

    @pytest.mark.asyncio
    async def test_enrich_posts_email(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"companyData": {"revenue": "$50M-$100M"}})

        connector = ClayConnector("clay-key", settings={"endpoint": "https://clay.local/enrich"},
                                  transport=_transport(handler))
        enrichment = await connector.enrich_contact("a@b.com")

        assert seen["body"] == {"email": "a@b.com"}
        assert seen["auth"] == "Bearer clay-key"
        assert enrichment["companyData"]["revenue"] == "$50M-$100M"

    def test_enrichment_updates_appends_technologies(self):
        updates = ClayConnector.enrichment_updates(
            {"companyData": {"revenue": "$50M-$100M", "technologies": ["Salesforce", "HubSpot"]}},
            "Existing note",
        )

        assert updates == {
            "revenue": "$50M-$100M",
            "personalized_notes": "Existing note | Clay enrichment: Salesforce, HubSpot",
        }

    def test_enrichment_updates_empty(self):
        assert ClayConnector.enrichment_updates({}, None) == {}


# ============================================================================
# TEST: SmartLead
# ============================================================================

class TestSmartLead:

    @pytest.mark.asyncio
    async def test_lists_campaigns_with_key_param(self):
        seen = {}

        def handler(request):
            seen["key"] = request.url.params.get("api_key")
            return httpx.Response(200, json=[{"id": 1, "name": "Q1"}, {"id": 2, "name": "Q2"}])

        connector = SmartLeadConnector("sl-key", transport=_transport(handler))
        result = await connector.test_connection()

        assert seen["key"] == "sl-key"
        assert result.success is True
        assert result.records_processed == 2


# ============================================================================
# TEST: Rb2b
# ============================================================================

class TestRb2b:

    def test_high_intent(self):
        assert Rb2bConnector.is_high_intent(RB2B_VISITOR)
        low = {**RB2B_VISITOR, "intentSignals": [{"signal": "Blog", "confidence": 0.8}]}
        assert not Rb2bConnector.is_high_intent(low)

    def test_to_prospect(self):
        prospect = Rb2bConnector.to_prospect(RB2B_VISITOR)

        assert prospect["first_name"] == "Unknown"
        assert prospect["last_name"] == "Visitor"
        assert prospect["email"] == "visitor@enterprisesolutions.com"
        assert prospect["lead_score"] == 92
        assert prospect["intent_signals"]["signals"] == ["Pricing page visited", "Enterprise features viewed"]
        assert "/pricing, /enterprise" in prospect["personalized_notes"]

    @pytest.mark.asyncio
    async def test_get_visitors_unwraps_envelope(self):
        connector = Rb2bConnector(
            "k",
            settings={"endpoint": "https://rb2b.local/visitors"},
            transport=_transport(lambda r: httpx.Response(200, json={"visitors": [RB2B_VISITOR]})),
        )

        assert await connector.get_visitors() == [RB2B_VISITOR]
