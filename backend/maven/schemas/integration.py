"""Integration schemas. The stored API key is never echoed back."""

from pydantic import Field, field_validator
from typing import Optional, Dict, Any
from datetime import datetime

from maven.schemas import CamelModel, IntegrationStatus, reject_null


class IntegrationCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    status: IntegrationStatus = IntegrationStatus.DISCONNECTED
    api_key: Optional[str] = None
    sync_frequency: int = Field(default=60, ge=1)
    settings: Dict[str, Any] = Field(default_factory=dict)


class IntegrationUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    status: Optional[IntegrationStatus] = None
    api_key: Optional[str] = None
    sync_frequency: Optional[int] = Field(None, ge=1)
    settings: Optional[Dict[str, Any]] = None

    @field_validator("name", "status")
    @classmethod
    def required_columns_not_null(cls, v):
        return reject_null(v)


class IntegrationResponse(CamelModel):
    id: int
    name: str
    status: str
    has_api_key: bool = False
    last_sync: Optional[datetime] = None
    sync_frequency: Optional[int] = None
    settings: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, integration) -> "IntegrationResponse":
        return cls(
            id=integration.id,
            name=integration.name,
            status=integration.status,
            has_api_key=bool(integration.api_key),
            last_sync=integration.last_sync,
            sync_frequency=integration.sync_frequency,
            settings=integration.settings,
            created_at=integration.created_at,
            updated_at=integration.updated_at,
        )


class IntegrationTestRequest(CamelModel):
    name: Optional[str] = None
    api_key: Optional[str] = None
    settings: Dict[str, Any] = Field(default_factory=dict)


class IntegrationTestResponse(CamelModel):
    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None
