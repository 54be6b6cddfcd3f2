# backend/maven/services/integration_manager.py
"""
Integration Manager - runs connector tests and syncs.

Tests never touch the database. Syncs use the stored credential and write
their results (new prospects, enrichment updates) through Storage with the
same de-duplication keys as CSV import.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any

import httpx

from maven.config import settings
from maven.models import Integration
from maven.services.storage import Storage
from maven.services.activity_logger import ActivityLogger
from maven.services.connectors_service import (
    ConnectorFactory,
    ConnectorError,
    IntegrationResult,
    ApolloConnector,
    ClayConnector,
    SmartLeadConnector,
    Rb2bConnector,
)

logger = logging.getLogger(__name__)


class IntegrationManager:
    """Test and sync vendor integrations."""

    def __init__(self, storage: Optional[Storage] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.storage = storage
        self.transport = transport

    # ==================== TEST ====================

    async def test_integration(
        self,
        name: str,
        api_key: str,
        integration_settings: Optional[Dict[str, Any]] = None,
    ) -> IntegrationResult:
        """Probe a vendor with the given credential. Nothing is persisted."""
        try:
            connector = ConnectorFactory.get_connector(
                name, api_key, settings=integration_settings, transport=self.transport
            )
            return await connector.test_connection()
        except (ValueError, ConnectorError) as e:
            logger.warning(f"Integration test for {name} failed: {e}")
            return IntegrationResult(success=False, error=str(e))

    # ==================== SYNC ====================

    async def sync_integration(self, integration_id: int) -> IntegrationResult:
        """Pull from the vendor behind a stored integration and persist the results."""
        integration = await self.storage.get_integration(integration_id)
        if not integration or not integration.api_key:
            return IntegrationResult(success=False, error="Integration not found or missing API key")

        try:
            connector = ConnectorFactory.get_connector(
                integration.name,
                integration.api_key,
                settings=integration.settings,
                transport=self.transport,
            )
        except ValueError as e:
            return IntegrationResult(success=False, error=str(e))

        try:
            if isinstance(connector, ApolloConnector):
                return await self._sync_apollo(connector)
            if isinstance(connector, ClayConnector):
                return await self._sync_clay(connector)
            if isinstance(connector, SmartLeadConnector):
                campaigns = await connector.list_campaigns()
                return IntegrationResult(success=True, data=campaigns, records_processed=len(campaigns))
            if isinstance(connector, Rb2bConnector):
                return await self._sync_rb2b(connector)
        except ConnectorError as e:
            logger.warning(f"{integration.name} sync failed: {e}")
            return IntegrationResult(success=False, error=str(e))

        return IntegrationResult(success=False, error=f"Unsupported integration: {integration.name}")

    async def _create_if_new(self, prospect_data: Dict[str, Any]) -> bool:
        """Insert a prospect unless its email or company+name triple already exists."""
        if not all(prospect_data.get(f) for f in ('first_name', 'last_name', 'email', 'company')):
            return False

        duplicate = await self.storage.find_duplicate_prospect(
            email=prospect_data['email'],
            company=prospect_data['company'],
            first_name=prospect_data['first_name'],
            last_name=prospect_data['last_name'],
        )
        if duplicate:
            return False

        await self.storage.create_prospect(prospect_data)
        return True

    async def _sync_apollo(self, connector: ApolloConnector) -> IntegrationResult:
        people = await connector.search_people(limit=settings.APOLLO_SYNC_PAGE_SIZE)

        created = 0
        for person in people:
            if await self._create_if_new(connector.to_prospect(person)):
                created += 1

        logger.info(f"Apollo sync: {len(people)} people fetched, {created} new prospects")
        return IntegrationResult(
            success=True,
            data={'fetched': len(people), 'created': created},
            records_processed=len(people),
        )

    async def _sync_clay(self, connector: ClayConnector) -> IntegrationResult:
        endpoint = connector.endpoint
        prospects = (await self.storage.list_prospects())[:settings.CLAY_SYNC_BATCH_SIZE]
        logger.info(f"Clay sync: enriching {len(prospects)} prospects via {endpoint}")

        enriched = 0
        for prospect in prospects:
            try:
                enrichment = await connector.enrich_contact(prospect.email)
            except ConnectorError as e:
                logger.warning(f"Clay enrichment failed for prospect {prospect.id}: {e}")
                continue

            updates = connector.enrichment_updates(enrichment, prospect.personalized_notes)
            if updates:
                await self.storage.update_prospect(prospect.id, updates)
            enriched += 1

        return IntegrationResult(success=True, data={'enriched': enriched}, records_processed=enriched)

    async def _sync_rb2b(self, connector: Rb2bConnector) -> IntegrationResult:
        visitors = await connector.get_visitors()

        created = 0
        for visitor in visitors:
            if connector.is_high_intent(visitor) and await self._create_if_new(connector.to_prospect(visitor)):
                created += 1

        return IntegrationResult(
            success=True,
            data={'visitors': len(visitors), 'created': created},
            records_processed=len(visitors),
        )

    # ==================== SYNC RUN ====================

    async def start_sync(self, integration: Integration) -> Integration:
        """Mark an integration as syncing and audit the start."""
        integration = await self.storage.update_integration(integration.id, {
            "status": "syncing",
            "last_sync": datetime.now(timezone.utc),
        })
        await ActivityLogger(self.storage).log_sync_started(integration)
        return integration

    async def run_sync(self, integration_id: int) -> IntegrationResult:
        """Sync, then record the final status, last-sync time and an audit row."""
        activity_logger = ActivityLogger(self.storage)
        integration = await self.storage.get_integration(integration_id)
        if integration is None:
            logger.warning(f"Integration {integration_id} vanished before its sync ran")
            return IntegrationResult(success=False, error="Integration not found")

        try:
            result = await self.sync_integration(integration_id)
        except Exception as e:
            logger.exception(f"{integration.name} sync crashed")
            await self.storage.db.rollback()
            # rollback expires loaded rows; use the refreshed instance
            integration = await self.storage.update_integration(integration_id, {
                "status": "error",
                "last_sync": datetime.now(timezone.utc),
            })
            await activity_logger.log_sync_error(integration, str(e))
            return IntegrationResult(success=False, error=f"Integration sync error: {e}")

        integration = await self.storage.update_integration(integration_id, {
            "status": "connected" if result.success else "error",
            "last_sync": datetime.now(timezone.utc),
        })
        await activity_logger.log_sync_finished(
            integration,
            success=result.success,
            records_processed=result.records_processed,
            error=result.error,
        )

        logger.info(
            f"{integration.name} sync {'completed' if result.success else 'failed'}: "
            f"{result.records_processed} records processed"
        )
        return result
