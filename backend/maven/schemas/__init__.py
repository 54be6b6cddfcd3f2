"""Pydantic schemas for request/response validation.

Wire format is camelCase; Python attributes stay snake_case.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from enum import Enum


class CamelModel(BaseModel):
    """Base for all API schemas."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


def reject_null(value):
    """Partial updates may leave out a required column but never null it."""
    if value is None:
        raise ValueError("field cannot be null")
    return value


class ProspectStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    RESPONDED = "responded"
    QUALIFIED = "qualified"
    DISQUALIFIED = "disqualified"


class EngagementLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SequenceStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class TemplateType(str, Enum):
    EMAIL = "email"
    LINKEDIN = "linkedin"
    MULTI_CHANNEL = "multi-channel"


class EnrollmentStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    BOUNCED = "bounced"


class IntegrationStatus(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    SYNCING = "syncing"
    ERROR = "error"


from maven.schemas.prospect import (  # noqa: E402
    ProspectCreate,
    ProspectUpdate,
    ProspectResponse,
    CsvImportResponse,
)
from maven.schemas.sequence import (  # noqa: E402
    SequenceStep,
    SequenceCreate,
    SequenceUpdate,
    SequenceResponse,
    EnrollmentCreate,
    EnrollmentResponse,
)
from maven.schemas.activity import ActivityCreate, ActivityResponse  # noqa: E402
from maven.schemas.integration import (  # noqa: E402
    IntegrationCreate,
    IntegrationUpdate,
    IntegrationResponse,
    IntegrationTestRequest,
    IntegrationTestResponse,
)
from maven.schemas.scoring import (  # noqa: E402
    ScoringCondition,
    ScoringCriteria,
    LeadScoringRuleCreate,
    LeadScoringRuleUpdate,
    LeadScoringRuleResponse,
    RuleMatch,
    RuleEvaluationResponse,
)
from maven.schemas.ai import (  # noqa: E402
    ProspectData,
    LeadScoringResult,
    PersonalizationResult,
    OutreachRequest,
    IntentRequest,
    IntentResponse,
)
