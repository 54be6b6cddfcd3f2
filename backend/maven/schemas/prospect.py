"""Prospect schemas."""

from pydantic import Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

from maven.schemas import CamelModel, ProspectStatus, EngagementLevel, reject_null


class ProspectBase(CamelModel):
    """Fields shared by create and response."""
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    company: str = Field(..., min_length=1, max_length=255)
    title: str = Field(..., max_length=255)
    phone: Optional[str] = None
    linkedin_url: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    revenue: Optional[str] = None
    location: Optional[str] = None
    lead_score: int = Field(default=0, ge=0, le=100)
    status: ProspectStatus = ProspectStatus.NEW
    source: str = Field(..., min_length=1, max_length=50)
    engagement_level: EngagementLevel = EngagementLevel.LOW
    intent_signals: Dict[str, Any] = Field(default_factory=dict)
    personalized_notes: Optional[str] = None


class ProspectCreate(ProspectBase):
    """Manual prospect creation. Score and intent signals are filled by the AI scorer."""
    last_activity: Optional[datetime] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        if "@" not in v:
            raise ValueError("email must contain '@'")
        return v.strip()


class ProspectUpdate(CamelModel):
    """Partial prospect update."""
    first_name: Optional[str] = Field(None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, min_length=3, max_length=255)
    company: Optional[str] = Field(None, min_length=1, max_length=255)
    title: Optional[str] = None
    phone: Optional[str] = None
    linkedin_url: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    revenue: Optional[str] = None
    location: Optional[str] = None
    lead_score: Optional[int] = Field(None, ge=0, le=100)
    status: Optional[ProspectStatus] = None
    engagement_level: Optional[EngagementLevel] = None
    intent_signals: Optional[Dict[str, Any]] = None
    personalized_notes: Optional[str] = None
    last_activity: Optional[datetime] = None

    @field_validator("first_name", "last_name", "email", "company", "title", "status")
    @classmethod
    def required_columns_not_null(cls, v):
        return reject_null(v)


class ProspectResponse(ProspectBase):
    id: int
    lead_score: Optional[int] = 0
    engagement_level: Optional[str] = None
    intent_signals: Optional[Dict[str, Any]] = None
    last_activity: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class CsvImportResponse(CamelModel):
    """Summary returned by the CSV upload endpoint."""
    message: str
    imported: int
    skipped: int
    total: int
    data_source: str
    errors: List[str] = Field(default_factory=list)
