# backend/maven/routers/dashboard_routes.py
"""Dashboard headline metrics."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from maven.config import settings
from maven.database import get_db
from maven.models import Prospect
from maven.schemas import CamelModel
from maven.services.storage import Storage

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


class DashboardMetrics(CamelModel):
    active_leads: int
    qualified_leads: int
    response_rate: str
    pipeline_value: str


def format_pipeline_value(value: int) -> str:
    """Dollars rendered in millions, one decimal ("$1.5M")."""
    return f"${value / 1_000_000:.1f}M"


@router.get("/metrics", response_model=DashboardMetrics)
async def get_dashboard_metrics(db: AsyncSession = Depends(get_db)):
    """
    Prospect counts, the response rate across active sequences and an
    estimated pipeline value of qualified leads.
    """
    active_leads = (await db.execute(select(func.count(Prospect.id)))).scalar() or 0
    qualified_leads = (await db.execute(
        select(func.count(Prospect.id)).where(Prospect.lead_score >= settings.QUALIFIED_SCORE_THRESHOLD)
    )).scalar() or 0

    sequences = await Storage(db).get_active_sequences()
    total_sent = sum(s.total_sent or 0 for s in sequences)
    total_responses = sum(s.total_responses or 0 for s in sequences)
    response_rate = (total_responses / total_sent * 100) if total_sent else 0.0

    return DashboardMetrics(
        active_leads=active_leads,
        qualified_leads=qualified_leads,
        response_rate=f"{response_rate:.1f}",
        pipeline_value=format_pipeline_value(qualified_leads * settings.PIPELINE_VALUE_PER_QUALIFIED_LEAD),
    )
