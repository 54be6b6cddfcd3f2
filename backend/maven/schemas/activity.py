"""Activity schemas."""

from pydantic import AliasChoices, Field
from typing import Optional, Dict, Any
from datetime import datetime

from maven.schemas import CamelModel


class ActivityCreate(CamelModel):
    prospect_id: Optional[int] = None
    sequence_id: Optional[int] = None
    type: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ActivityResponse(CamelModel):
    id: int
    prospect_id: Optional[int] = None
    sequence_id: Optional[int] = None
    type: str
    description: str
    metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        validation_alias=AliasChoices("activity_metadata", "metadata"),
        serialization_alias="metadata",
    )
    created_at: datetime
