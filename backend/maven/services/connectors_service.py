"""Connector implementations for the third-party prospect data vendors."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Any, Optional
import httpx
import logging

from maven.config import settings as app_settings
from maven.services.normalization import NormalizationService as N

logger = logging.getLogger(__name__)


@dataclass
class IntegrationResult:
    """Outcome of a connector test or sync."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    records_processed: int = 0


class ConnectorError(Exception):
    """Vendor call failed or returned something unusable."""


class BaseConnector(ABC):
    """Base class for all vendor connectors."""

    name = 'base'
    default_endpoint: Optional[str] = None

    def __init__(
        self,
        api_key: str,
        settings: Optional[Dict[str, Any]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.settings = settings or {}
        self.transport = transport

    @property
    def endpoint(self) -> str:
        """Vendor URL; `settings.endpoint` overrides the built-in default."""
        endpoint = self.settings.get('endpoint') or self.default_endpoint
        if not endpoint:
            raise ConnectorError(f"{self.name} integration requires an endpoint in its settings")
        return endpoint

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=app_settings.CONNECTOR_TIMEOUT_SECONDS,
            transport=self.transport,
        )

    def _headers(self) -> Dict[str, str]:
        return {
            'Content-Type': 'application/json',
            'User-Agent': 'Maven-Connector/1.0',
        }

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            async with self._client() as client:
                response = await client.request(method, url, headers=self._headers(), **kwargs)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            raise ConnectorError(f"{self.name} API returned {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ConnectorError(f"{self.name} API request failed: {e}") from e
        except ValueError as e:
            raise ConnectorError(f"{self.name} API returned invalid JSON") from e

    @abstractmethod
    async def test_connection(self) -> IntegrationResult:
        """Check the credentials with one small request."""
        pass


class ApolloConnector(BaseConnector):
    """Apollo people search."""

    name = 'Apollo'
    default_endpoint = 'https://api.apollo.io/v1/mixed_people/search'

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        headers['X-Api-Key'] = self.api_key
        return headers

    async def search_people(self, limit: int = 10, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        payload = {'page': 1, 'per_page': limit}
        payload.update(filters or self.settings.get('filters') or {})

        data = await self._request('POST', self.endpoint, json=payload)
        people = data.get('people') if isinstance(data, dict) else None
        if people is None:
            raise ConnectorError("Apollo response has no 'people' list")
        return people

    @staticmethod
    def to_prospect(person: Dict[str, Any]) -> Dict[str, Any]:
        """Flatten an Apollo person record into a prospect dict."""
        organization = person.get('organization') or {}
        phone_numbers = person.get('phone_numbers') or []
        location = ', '.join(p for p in (person.get('city'), person.get('state')) if p)
        company = organization.get('name') or person.get('organization_name') or ''
        title = person.get('title') or ''

        return {
            'first_name': (person.get('first_name') or '').strip(),
            'last_name': (person.get('last_name') or '').strip(),
            'email': (person.get('email') or '').strip(),
            'company': company,
            'title': title,
            'phone': phone_numbers[0].get('raw_number') if phone_numbers else None,
            'linkedin_url': person.get('linkedin_url'),
            'website': organization.get('website_url'),
            'industry': organization.get('industry'),
            'company_size': N.parse_company_size(organization.get('estimated_num_employees')),
            'revenue': N.parse_revenue(organization.get('annual_revenue')),
            'location': location or None,
            'source': 'apollo',
            'status': 'new',
            'lead_score': 50,
            'engagement_level': 'low',
            'intent_signals': {
                'signals': ['Contact discovered', 'Company research'],
                'reasoning': 'New contact from Apollo search',
            },
            'personalized_notes': f"Discovered via Apollo - {title} at {company}",
        }

    async def test_connection(self) -> IntegrationResult:
        people = await self.search_people(limit=1)
        return IntegrationResult(success=True, data=people, records_processed=len(people))


class ClayConnector(BaseConnector):
    """Clay enrichment webhook/table endpoint."""

    name = 'Clay'

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        headers['Authorization'] = f'Bearer {self.api_key}'
        return headers

    async def enrich_contact(self, email: str) -> Dict[str, Any]:
        data = await self._request('POST', self.endpoint, json={'email': email})
        if not isinstance(data, dict):
            raise ConnectorError("Clay response is not an object")
        return data

    @staticmethod
    def enrichment_updates(enrichment: Dict[str, Any], existing_notes: Optional[str]) -> Dict[str, Any]:
        """Prospect column updates derived from an enrichment payload."""
        company_data = enrichment.get('companyData') or {}
        updates = {}

        if company_data.get('revenue'):
            updates['revenue'] = company_data['revenue']

        technologies = company_data.get('technologies') or []
        if technologies:
            note = f"Clay enrichment: {', '.join(technologies)}"
            updates['personalized_notes'] = f"{existing_notes} | {note}" if existing_notes else note

        return updates

    async def test_connection(self) -> IntegrationResult:
        enrichment = await self.enrich_contact('test@example.com')
        return IntegrationResult(success=True, data=enrichment, records_processed=1)


class SmartLeadConnector(BaseConnector):
    """SmartLead campaigns."""

    name = 'SmartLead'
    default_endpoint = 'https://server.smartlead.ai/api/v1/campaigns'

    async def list_campaigns(self) -> List[Dict[str, Any]]:
        data = await self._request('GET', self.endpoint, params={'api_key': self.api_key})
        if isinstance(data, dict):
            data = data.get('data') or data.get('campaigns') or []
        if not isinstance(data, list):
            raise ConnectorError("SmartLead response has no campaign list")
        return data

    async def test_connection(self) -> IntegrationResult:
        campaigns = await self.list_campaigns()
        return IntegrationResult(success=True, data=campaigns, records_processed=len(campaigns))


class Rb2bConnector(BaseConnector):
    """Rb2b identified website visitors."""

    name = 'Rb2b'
    HIGH_INTENT_CONFIDENCE = 0.8

    def _headers(self) -> Dict[str, str]:
        headers = super()._headers()
        headers['Authorization'] = f'Bearer {self.api_key}'
        return headers

    async def get_visitors(self) -> List[Dict[str, Any]]:
        data = await self._request('GET', self.endpoint)
        if isinstance(data, dict):
            data = data.get('visitors') or data.get('data') or []
        if not isinstance(data, list):
            raise ConnectorError("Rb2b response has no visitor list")
        return data

    @classmethod
    def is_high_intent(cls, visitor: Dict[str, Any]) -> bool:
        return any(
            float(s.get('confidence') or 0) > cls.HIGH_INTENT_CONFIDENCE
            for s in visitor.get('intentSignals') or []
        )

    @staticmethod
    def to_prospect(visitor: Dict[str, Any]) -> Dict[str, Any]:
        company = visitor.get('company') or {}
        visit = visitor.get('visitData') or {}
        signals = visitor.get('intentSignals') or []
        domain = company.get('domain') or N.company_slug(company.get('name', '')) + '.com'
        best_confidence = max((float(s.get('confidence') or 0) for s in signals), default=0)
        score = max(0, min(100, round(best_confidence * 100)))

        return {
            'first_name': 'Unknown',
            'last_name': 'Visitor',
            'email': f"visitor@{domain}",
            'company': company.get('name') or domain,
            'title': 'Unknown',
            'website': f"https://{domain}",
            'industry': company.get('industry'),
            'company_size': N.parse_company_size(company.get('size')),
            'source': 'rb2b',
            'status': 'new',
            'lead_score': score,
            'engagement_level': 'high',
            'intent_signals': {
                'signals': [s.get('signal') for s in signals if s.get('signal')],
                'reasoning': 'High-intent website visitor with strong buying signals',
            },
            'personalized_notes': (
                f"Rb2b visitor - viewed {', '.join(visit.get('pages') or [])} "
                f"for {visit.get('duration', 0)}s"
            ),
            'last_activity': datetime.now(timezone.utc),
        }

    async def test_connection(self) -> IntegrationResult:
        visitors = await self.get_visitors()
        return IntegrationResult(success=True, data=visitors, records_processed=len(visitors))


class ConnectorFactory:
    """Factory to get connector instances by integration name."""

    _connectors = {
        'apollo': ApolloConnector,
        'clay': ClayConnector,
        'smartlead': SmartLeadConnector,
        'rb2b': Rb2bConnector,
    }

    @classmethod
    def get_connector(
        cls,
        name: str,
        api_key: str,
        settings: Optional[Dict[str, Any]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> BaseConnector:
        """Get connector instance for an integration name (case-insensitive)."""
        connector_class = cls._connectors.get((name or '').strip().lower())
        if not connector_class:
            raise ValueError(f"Unsupported integration: {name}")
        return connector_class(api_key, settings=settings, transport=transport)

    @classmethod
    def get_available_types(cls) -> List[str]:
        return list(cls._connectors.keys())
