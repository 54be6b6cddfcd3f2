# backend/maven/routers/lead_scoring_routes.py
"""Lead scoring rule API and ad-hoc rule evaluation."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from maven.database import get_db
from maven.schemas import (
    LeadScoringRuleCreate,
    LeadScoringRuleUpdate,
    LeadScoringRuleResponse,
    ProspectData,
    RuleEvaluationResponse,
)
from maven.services.storage import Storage
from maven.services.rule_scoring import evaluate_rules

router = APIRouter(prefix="/api/lead-scoring", tags=["lead-scoring"])


@router.get("/rules", response_model=List[LeadScoringRuleResponse])
async def list_rules(db: AsyncSession = Depends(get_db)):
    """All scoring rules in evaluation order."""
    return await Storage(db).list_scoring_rules()


@router.post("/rules", response_model=LeadScoringRuleResponse)
async def create_rule(rule_data: LeadScoringRuleCreate, db: AsyncSession = Depends(get_db)):
    return await Storage(db).create_scoring_rule(rule_data.model_dump())


@router.patch("/rules/{rule_id}", response_model=LeadScoringRuleResponse)
async def update_rule(
    rule_id: int,
    updates: LeadScoringRuleUpdate,
    db: AsyncSession = Depends(get_db),
):
    rule = await Storage(db).update_scoring_rule(rule_id, updates.model_dump(exclude_unset=True))
    if not rule:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Lead scoring rule not found"
        )
    return rule


@router.post("/evaluate", response_model=RuleEvaluationResponse)
async def evaluate(prospect_data: ProspectData, db: AsyncSession = Depends(get_db)):
    """Score a prospect payload against the active rules without storing anything."""
    rules = await Storage(db).list_scoring_rules(active_only=True)
    return evaluate_rules(prospect_data.model_dump(), rules)
