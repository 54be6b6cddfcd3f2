# backend/maven/routers/ai_routes.py
"""LLM-backed endpoints. All of them degrade instead of failing."""

from fastapi import APIRouter, Depends

from maven.schemas import (
    ProspectData,
    LeadScoringResult,
    PersonalizationResult,
    OutreachRequest,
    IntentRequest,
    IntentResponse,
)
from maven.services.ai_service import AIService, get_ai_service

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.post("/score-prospect", response_model=LeadScoringResult)
async def score_prospect(prospect_data: ProspectData, ai: AIService = Depends(get_ai_service)):
    return await ai.score_lead(prospect_data.model_dump(by_alias=True))


@router.post("/generate-outreach", response_model=PersonalizationResult)
async def generate_outreach(request: OutreachRequest, ai: AIService = Depends(get_ai_service)):
    return await ai.generate_outreach(
        request.prospect_data.model_dump(by_alias=True),
        request.sequence_type,
    )


@router.post("/analyze-intent", response_model=IntentResponse)
async def analyze_intent(request: IntentRequest, ai: AIService = Depends(get_ai_service)):
    signals = await ai.analyze_intent(
        request.prospect_data.model_dump(by_alias=True),
        request.recent_activity,
    )
    return IntentResponse(intent_signals=signals)
