# backend/maven/services/activity_logger.py
"""
Activity Logger - writes append-only audit rows for prospect, import,
integration and sequence events.
"""

from typing import Optional, Dict, Any, List

from maven.models import Activity, Prospect, Integration
from maven.services.storage import Storage


class ActivityLogger:
    """Logs audit activities through Storage."""

    def __init__(self, storage: Storage):
        self.storage = storage

    async def log(
        self,
        activity_type: str,
        description: str,
        metadata: Optional[Dict[str, Any]] = None,
        prospect_id: Optional[int] = None,
        sequence_id: Optional[int] = None,
    ) -> Activity:
        """Append one activity row."""
        return await self.storage.create_activity({
            "type": activity_type,
            "description": description,
            "metadata": metadata or {},
            "prospect_id": prospect_id,
            "sequence_id": sequence_id,
        })

    async def log_prospect_created(self, prospect: Prospect) -> Activity:
        return await self.log(
            "prospect_created",
            f"New prospect {prospect.first_name} {prospect.last_name} added with score {prospect.lead_score}",
            metadata={"source": prospect.source, "score": prospect.lead_score},
            prospect_id=prospect.id,
        )

    async def log_import_row(self, data_source: str, prospect: Prospect) -> Activity:
        return await self.log(
            "prospect_created",
            f"{data_source} import: {prospect.first_name} {prospect.last_name} from {prospect.company}",
            metadata={
                "source": data_source.lower(),
                "email": prospect.email,
                "score": prospect.lead_score,
                "dataSource": data_source,
            },
            prospect_id=prospect.id,
        )

    async def log_import_summary(
        self,
        data_source: str,
        imported: int,
        skipped: int,
        total: int,
        errors: List[str],
    ) -> Activity:
        return await self.log(
            "csv_import",
            f"{data_source} CSV import completed: {imported} prospects imported, {skipped} skipped",
            metadata={
                "imported": imported,
                "skipped": skipped,
                "total": total,
                "dataSource": data_source,
                "errors": errors[:10],
            },
        )

    async def log_score_updated(self, prospect: Prospect, previous_score: Optional[int]) -> Activity:
        return await self.log(
            "score_updated",
            f"{prospect.first_name} {prospect.last_name} lead score changed to {prospect.lead_score}",
            metadata={"previousScore": previous_score, "newScore": prospect.lead_score},
            prospect_id=prospect.id,
        )

    async def log_enrollment(self, prospect: Prospect, sequence_id: int, sequence_name: str) -> Activity:
        return await self.log(
            "sequence_enrolled",
            f"{prospect.first_name} {prospect.last_name} enrolled in {sequence_name}",
            metadata={"sequenceId": sequence_id},
            prospect_id=prospect.id,
            sequence_id=sequence_id,
        )

    async def log_sync_started(self, integration: Integration, sync_type: str = "manual") -> Activity:
        return await self.log(
            "integration_sync",
            f"{integration.name} sync started",
            metadata={"integrationId": integration.id, "syncType": sync_type},
        )

    async def log_sync_finished(
        self,
        integration: Integration,
        success: bool,
        records_processed: int,
        error: Optional[str] = None,
        sync_type: str = "manual",
    ) -> Activity:
        outcome = "completed" if success else "failed"
        return await self.log(
            "integration_sync",
            f"{integration.name} sync {outcome} - {records_processed} records processed",
            metadata={
                "integrationId": integration.id,
                "syncType": sync_type,
                "status": outcome,
                "recordsProcessed": records_processed,
                "error": error,
            },
        )

    async def log_sync_error(self, integration: Integration, error: str, sync_type: str = "manual") -> Activity:
        return await self.log(
            "integration_sync",
            f"{integration.name} sync failed with error",
            metadata={
                "integrationId": integration.id,
                "syncType": sync_type,
                "status": "error",
                "error": error,
            },
        )

    async def log_disconnected(self, integration: Integration) -> Activity:
        return await self.log(
            "integration_disconnected",
            f"{integration.name} integration disconnected",
            metadata={"integrationId": integration.id},
        )
