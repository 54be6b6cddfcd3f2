"""Schemas for the LLM-backed endpoints."""

from pydantic import ConfigDict, Field
from typing import Optional, List, Dict, Any

from maven.schemas import CamelModel


class ProspectData(CamelModel):
    """Loose prospect payload accepted by the AI endpoints."""
    model_config = ConfigDict(extra="allow")

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    title: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    revenue: Optional[str] = None
    location: Optional[str] = None


class LeadScoringResult(CamelModel):
    score: int = Field(..., ge=0, le=100)
    reasoning: str
    intent_signals: List[str] = Field(default_factory=list)
    confidence: float = Field(..., ge=0, le=1)


class PersonalizationResult(CamelModel):
    subject: str
    email_body: str
    personalized_opening: str
    call_to_action: str


class OutreachRequest(CamelModel):
    prospect_data: ProspectData
    sequence_type: str = "email"


class IntentRequest(CamelModel):
    prospect_data: ProspectData
    recent_activity: List[Dict[str, Any]] = Field(default_factory=list)


class IntentResponse(CamelModel):
    intent_signals: List[str] = Field(default_factory=list)
