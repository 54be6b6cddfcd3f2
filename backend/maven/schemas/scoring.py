"""Lead scoring rule schemas."""

from pydantic import Field, field_validator
from typing import Optional, List, Any
from datetime import datetime

from maven.schemas import CamelModel, reject_null


class ScoringCondition(CamelModel):
    value: Any
    score: int = Field(..., ge=-100, le=100)


class ScoringCriteria(CamelModel):
    field: str = Field(..., min_length=1)
    conditions: List[ScoringCondition] = Field(..., min_length=1)


class LeadScoringRuleCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    criteria: ScoringCriteria
    is_active: bool = True
    priority: int = Field(default=1, ge=0)


class LeadScoringRuleUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    criteria: Optional[ScoringCriteria] = None
    is_active: Optional[bool] = None
    priority: Optional[int] = Field(None, ge=0)

    @field_validator("name", "criteria")
    @classmethod
    def required_columns_not_null(cls, v):
        return reject_null(v)


class LeadScoringRuleResponse(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    criteria: ScoringCriteria
    is_active: Optional[bool] = True
    priority: Optional[int] = 1
    created_at: datetime
    updated_at: datetime


class RuleMatch(CamelModel):
    rule_id: Optional[int] = None
    rule_name: str
    field: str
    value: Any
    score: int


class RuleEvaluationResponse(CamelModel):
    score: int
    matches: List[RuleMatch] = Field(default_factory=list)
