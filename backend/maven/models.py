# backend/maven/models.py
"""
SQLAlchemy ORM models.

Foreign keys only, no back_populates: activities and enrollments point at
prospects/sequences one way.
"""

from sqlalchemy import (
    Column, String, Boolean, Integer, Numeric, Text, ForeignKey, Index,
    TIMESTAMP, CheckConstraint, JSON, event
)
from sqlalchemy.dialects.postgresql import JSONB
from datetime import datetime, timezone

from maven.database import Base


# JSONB on postgres, plain JSON elsewhere (sqlite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow():
    return datetime.now(timezone.utc)


PROSPECT_STATUSES = ("new", "contacted", "responded", "qualified", "disqualified")
ENGAGEMENT_LEVELS = ("low", "medium", "high")
SEQUENCE_STATUSES = ("draft", "active", "paused", "completed")
ENROLLMENT_STATUSES = ("active", "paused", "completed", "bounced")
INTEGRATION_STATUSES = ("connected", "disconnected", "syncing", "error")


def _in_list(column: str, values) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


# ============================================================================
# PROSPECT MODEL
# ============================================================================

class Prospect(Base):
    """A sales lead."""
    __tablename__ = "prospects"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Identity
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    company = Column(String(255), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    phone = Column(String(50))
    linkedin_url = Column(Text)
    website = Column(Text)

    # Classification
    industry = Column(String(255))
    company_size = Column(String(50))
    revenue = Column(String(50))
    location = Column(String(255))
    source = Column(String(50), nullable=False)

    # Scoring & pipeline state
    lead_score = Column(Integer, default=0)
    status = Column(String(50), nullable=False, default="new")
    engagement_level = Column(String(20), default="low")
    intent_signals = Column(JSONType, default=dict)
    # Example: {"signals": ["Visited pricing page"], "reasoning": "..."}
    personalized_notes = Column(Text)

    last_activity = Column(TIMESTAMP(timezone=True), default=utcnow)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(_in_list("status", PROSPECT_STATUSES), name="chk_prospect_status"),
        CheckConstraint("lead_score >= 0 AND lead_score <= 100", name="chk_prospect_lead_score"),
        Index("idx_prospects_lead_score", "lead_score"),
    )

    def __repr__(self):
        return f"<Prospect(id={self.id}, email='{self.email}', company='{self.company}')>"


# ============================================================================
# SEQUENCE MODELS
# ============================================================================

class Sequence(Base):
    """Multi-step outreach campaign."""
    __tablename__ = "sequences"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    status = Column(String(50), nullable=False, default="draft")
    template_type = Column(String(50), nullable=False)  # email, linkedin, multi-channel

    steps = Column(JSONType, nullable=False, default=list)
    # Example: [{"step": 1, "type": "email", "delay": 0, "template": "Initial outreach"}]
    target_criteria = Column(JSONType, default=dict)

    response_rate = Column(Numeric(5, 2), default=0)
    total_sent = Column(Integer, default=0)
    total_responses = Column(Integer, default=0)

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(_in_list("status", SEQUENCE_STATUSES), name="chk_sequence_status"),
    )


class SequenceEnrollment(Base):
    """A prospect's progress through a sequence."""
    __tablename__ = "sequence_enrollments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sequence_id = Column(Integer, ForeignKey("sequences.id"), nullable=False, index=True)
    prospect_id = Column(Integer, ForeignKey("prospects.id"), nullable=False, index=True)
    current_step = Column(Integer, default=0)
    status = Column(String(50), nullable=False, default="active")
    enrolled_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    last_touchpoint = Column(TIMESTAMP(timezone=True))
    next_touchpoint = Column(TIMESTAMP(timezone=True))

    __table_args__ = (
        CheckConstraint(_in_list("status", ENROLLMENT_STATUSES), name="chk_enrollment_status"),
    )


# ============================================================================
# ACTIVITY MODEL (append-only audit log)
# ============================================================================

class Activity(Base):
    """Audit-log row. Never updated after insert."""
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    prospect_id = Column(Integer, ForeignKey("prospects.id"), nullable=True, index=True)
    sequence_id = Column(Integer, ForeignKey("sequences.id"), nullable=True)
    type = Column(String(100), nullable=False)
    # email_sent, response_received, prospect_created, csv_import, integration_sync, ...
    description = Column(Text, nullable=False)
    # "metadata" is reserved on declarative classes
    activity_metadata = Column("metadata", JSONType, default=dict)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, index=True)


class ImmutableActivityError(RuntimeError):
    pass


@event.listens_for(Activity, "before_update")
def _refuse_activity_update(mapper, connection, target):
    raise ImmutableActivityError(f"Activity {target.id} is append-only")


# ============================================================================
# INTEGRATION MODEL
# ============================================================================

class Integration(Base):
    """Connection to a third-party data source, one row per vendor."""
    __tablename__ = "integrations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)  # Apollo, Clay, SmartLead, Rb2b, OpenAI GPT-4
    status = Column(String(50), nullable=False, default="disconnected")
    api_key = Column(Text)
    last_sync = Column(TIMESTAMP(timezone=True))
    sync_frequency = Column(Integer, default=60)  # minutes
    settings = Column(JSONType, default=dict)
    # Example: {"endpoint": "https://...", "per_page": 10}
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(_in_list("status", INTEGRATION_STATUSES), name="chk_integration_status"),
    )

    def __repr__(self):
        return f"<Integration(id={self.id}, name='{self.name}', status='{self.status}')>"


# ============================================================================
# LEAD SCORING RULES
# ============================================================================

class LeadScoringRule(Base):
    """Prioritized field -> value -> score conditions."""
    __tablename__ = "lead_scoring_rules"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    criteria = Column(JSONType, nullable=False)
    # Example: {
    #   "field": "companySize",
    #   "conditions": [{"value": "1000+", "score": 25}, {"value": "500-1000", "score": 20}]
    # }
    is_active = Column(Boolean, default=True)
    priority = Column(Integer, default=1)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
