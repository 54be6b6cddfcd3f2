"""Sequence and enrollment schemas."""

from pydantic import Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal

from maven.schemas import CamelModel, SequenceStatus, TemplateType, EnrollmentStatus, reject_null


class SequenceStep(CamelModel):
    """One step of an outreach sequence."""
    step: int = Field(..., ge=1)
    type: str = Field(..., min_length=1, description="Channel: email, linkedin, call, ...")
    delay: int = Field(default=0, ge=0, description="Days after the previous step")
    template: str = Field(..., min_length=1)


class SequenceBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    status: SequenceStatus = SequenceStatus.DRAFT
    template_type: TemplateType
    steps: List[SequenceStep] = Field(default_factory=list)
    target_criteria: Dict[str, Any] = Field(default_factory=dict)


class SequenceCreate(SequenceBase):
    total_sent: int = Field(default=0, ge=0)
    total_responses: int = Field(default=0, ge=0)

    @field_validator("steps")
    @classmethod
    def validate_step_order(cls, v):
        numbers = [s.step for s in v]
        if numbers != sorted(numbers) or len(set(numbers)) != len(numbers):
            raise ValueError("steps must be in ascending, unique step order")
        return v


class SequenceUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[SequenceStatus] = None
    template_type: Optional[TemplateType] = None
    steps: Optional[List[SequenceStep]] = None
    target_criteria: Optional[Dict[str, Any]] = None
    total_sent: Optional[int] = Field(None, ge=0)
    total_responses: Optional[int] = Field(None, ge=0)

    @field_validator("name", "status", "template_type", "steps")
    @classmethod
    def required_columns_not_null(cls, v):
        return reject_null(v)


class SequenceResponse(SequenceBase):
    id: int
    template_type: str
    response_rate: Optional[Decimal] = None
    total_sent: Optional[int] = 0
    total_responses: Optional[int] = 0
    created_at: datetime
    updated_at: datetime


class EnrollmentCreate(CamelModel):
    prospect_id: int
    current_step: int = Field(default=0, ge=0)
    status: EnrollmentStatus = EnrollmentStatus.ACTIVE
    next_touchpoint: Optional[datetime] = None


class EnrollmentResponse(CamelModel):
    id: int
    sequence_id: int
    prospect_id: int
    current_step: Optional[int] = 0
    status: str
    enrolled_at: datetime
    last_touchpoint: Optional[datetime] = None
    next_touchpoint: Optional[datetime] = None
