# backend/maven/services/storage.py
"""
Storage - ORM repository over an AsyncSession.

Every mutating call commits. Updates take plain dicts of snake_case columns.
"""

from typing import Optional, Dict, Any, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_, and_
import logging

from maven.config import settings
from maven.models import (
    Prospect,
    Sequence,
    SequenceEnrollment,
    Activity,
    Integration,
    LeadScoringRule,
)

logger = logging.getLogger(__name__)


class Storage:
    """Get/list/create/update per entity."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _add(self, instance):
        self.db.add(instance)
        await self.db.commit()
        await self.db.refresh(instance)
        return instance

    async def _update(self, model, entity_id: int, updates: Dict[str, Any]):
        instance = await self.db.get(model, entity_id)
        if instance is None:
            return None
        for key, value in updates.items():
            if not hasattr(model, key):
                raise ValueError(f"Unknown field for {model.__name__}: {key}")
            setattr(instance, key, value)
        await self.db.commit()
        await self.db.refresh(instance)
        return instance

    # ==================== PROSPECTS ====================

    async def list_prospects(self) -> List[Prospect]:
        result = await self.db.execute(
            select(Prospect).order_by(Prospect.created_at.desc(), Prospect.id.desc())
        )
        return list(result.scalars().all())

    async def get_prospect(self, prospect_id: int) -> Optional[Prospect]:
        return await self.db.get(Prospect, prospect_id)

    async def create_prospect(self, data: Dict[str, Any]) -> Prospect:
        return await self._add(Prospect(**data))

    async def update_prospect(self, prospect_id: int, updates: Dict[str, Any]) -> Optional[Prospect]:
        return await self._update(Prospect, prospect_id, updates)

    async def get_high_intent_prospects(self) -> List[Prospect]:
        """Prospects at or above the high-intent score, best first."""
        result = await self.db.execute(
            select(Prospect)
            .where(Prospect.lead_score >= settings.HIGH_INTENT_THRESHOLD)
            .order_by(Prospect.lead_score.desc(), Prospect.id)
        )
        return list(result.scalars().all())

    async def find_duplicate_prospect(
        self,
        email: Optional[str],
        company: str,
        first_name: str,
        last_name: str,
    ) -> Optional[Prospect]:
        """
        Match on email (case-insensitive) or on the company + first + last
        name triple (case-insensitive).
        """
        name_match = and_(
            func.lower(Prospect.company) == company.lower(),
            func.lower(Prospect.first_name) == first_name.lower(),
            func.lower(Prospect.last_name) == last_name.lower(),
        )
        condition = name_match
        if email:
            condition = or_(func.lower(Prospect.email) == email.lower(), name_match)

        result = await self.db.execute(select(Prospect).where(condition).limit(1))
        return result.scalar_one_or_none()

    # ==================== SEQUENCES ====================

    async def list_sequences(self) -> List[Sequence]:
        result = await self.db.execute(
            select(Sequence).order_by(Sequence.created_at.desc(), Sequence.id.desc())
        )
        return list(result.scalars().all())

    async def get_sequence(self, sequence_id: int) -> Optional[Sequence]:
        return await self.db.get(Sequence, sequence_id)

    async def create_sequence(self, data: Dict[str, Any]) -> Sequence:
        sequence = Sequence(**data)
        sequence.response_rate = response_rate(sequence.total_sent, sequence.total_responses)
        return await self._add(sequence)

    async def update_sequence(self, sequence_id: int, updates: Dict[str, Any]) -> Optional[Sequence]:
        sequence = await self.db.get(Sequence, sequence_id)
        if sequence is None:
            return None
        if "total_sent" in updates or "total_responses" in updates:
            updates = dict(updates)
            updates["response_rate"] = response_rate(
                updates.get("total_sent", sequence.total_sent),
                updates.get("total_responses", sequence.total_responses),
            )
        return await self._update(Sequence, sequence_id, updates)

    async def get_active_sequences(self) -> List[Sequence]:
        result = await self.db.execute(
            select(Sequence).where(Sequence.status == "active").order_by(Sequence.id)
        )
        return list(result.scalars().all())

    # ==================== ENROLLMENTS ====================

    async def list_enrollments(self, sequence_id: Optional[int] = None) -> List[SequenceEnrollment]:
        query = select(SequenceEnrollment)
        if sequence_id is not None:
            query = query.where(SequenceEnrollment.sequence_id == sequence_id)
        result = await self.db.execute(query.order_by(SequenceEnrollment.id))
        return list(result.scalars().all())

    async def get_enrollment(self, sequence_id: int, prospect_id: int) -> Optional[SequenceEnrollment]:
        result = await self.db.execute(
            select(SequenceEnrollment).where(
                and_(
                    SequenceEnrollment.sequence_id == sequence_id,
                    SequenceEnrollment.prospect_id == prospect_id,
                )
            )
        )
        return result.scalar_one_or_none()

    async def create_enrollment(self, data: Dict[str, Any]) -> SequenceEnrollment:
        return await self._add(SequenceEnrollment(**data))

    # ==================== ACTIVITIES ====================

    async def list_activities(self, limit: int = 100, offset: int = 0) -> List[Activity]:
        result = await self.db.execute(
            select(Activity)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def count_activities(self) -> int:
        result = await self.db.execute(select(func.count(Activity.id)))
        return result.scalar() or 0

    async def get_recent_activities(self, limit: int = 10) -> List[Activity]:
        return await self.list_activities(limit=limit)

    async def create_activity(self, data: Dict[str, Any]) -> Activity:
        data = dict(data)
        data["activity_metadata"] = data.pop("metadata", None) or {}
        return await self._add(Activity(**data))

    # ==================== INTEGRATIONS ====================

    async def list_integrations(self) -> List[Integration]:
        result = await self.db.execute(
            select(Integration).order_by(Integration.created_at.desc(), Integration.id.desc())
        )
        return list(result.scalars().all())

    async def get_integration(self, integration_id: int) -> Optional[Integration]:
        return await self.db.get(Integration, integration_id)

    async def get_integration_by_name(self, name: str) -> Optional[Integration]:
        result = await self.db.execute(
            select(Integration).where(func.lower(Integration.name) == name.lower()).limit(1)
        )
        return result.scalar_one_or_none()

    async def create_integration(self, data: Dict[str, Any]) -> Integration:
        return await self._add(Integration(**data))

    async def update_integration(self, integration_id: int, updates: Dict[str, Any]) -> Optional[Integration]:
        return await self._update(Integration, integration_id, updates)

    async def disconnect_integration(self, integration_id: int) -> Optional[Integration]:
        """Clear the credential and sync state; the row itself is kept."""
        return await self._update(Integration, integration_id, {
            "status": "disconnected",
            "api_key": None,
            "last_sync": None,
        })

    # ==================== LEAD SCORING RULES ====================

    async def list_scoring_rules(self, active_only: bool = False) -> List[LeadScoringRule]:
        query = select(LeadScoringRule)
        if active_only:
            query = query.where(LeadScoringRule.is_active.is_(True))
        result = await self.db.execute(query.order_by(LeadScoringRule.priority, LeadScoringRule.id))
        return list(result.scalars().all())

    async def get_scoring_rule(self, rule_id: int) -> Optional[LeadScoringRule]:
        return await self.db.get(LeadScoringRule, rule_id)

    async def create_scoring_rule(self, data: Dict[str, Any]) -> LeadScoringRule:
        return await self._add(LeadScoringRule(**data))

    async def update_scoring_rule(self, rule_id: int, updates: Dict[str, Any]) -> Optional[LeadScoringRule]:
        return await self._update(LeadScoringRule, rule_id, updates)


def response_rate(total_sent: Optional[int], total_responses: Optional[int]) -> float:
    """Percentage of sends that got a response, two decimals."""
    if not total_sent:
        return 0.0
    return round((total_responses or 0) / total_sent * 100, 2)
