# backend/maven/services/seed.py
"""Demo data inserted on first startup (when no integrations exist yet)."""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from maven.models import Integration
from maven.services.storage import Storage

logger = logging.getLogger(__name__)


def _default_integrations(now: datetime):
    return [
        {"name": "Apollo", "status": "connected", "last_sync": now},
        {"name": "Clay", "status": "connected", "last_sync": now},
        {"name": "SmartLead", "status": "connected", "last_sync": now},
        {"name": "Rb2b", "status": "syncing", "last_sync": now - timedelta(minutes=45)},
        {"name": "OpenAI GPT-4", "status": "connected", "last_sync": now},
    ]


def _sample_prospects(now: datetime):
    return [
        {
            "first_name": "Sarah",
            "last_name": "Johnson",
            "email": "sarah.johnson@techcorp.com",
            "company": "TechCorp Solutions",
            "title": "VP of Marketing",
            "phone": "+1-555-123-4567",
            "linkedin_url": "https://linkedin.com/in/sarahjohnson",
            "website": "https://techcorpsolutions.com",
            "industry": "Technology",
            "company_size": "500-1000",
            "revenue": "$50M-$100M",
            "location": "San Francisco, CA",
            "lead_score": 92,
            "status": "new",
            "source": "apollo",
            "last_activity": now - timedelta(days=2),
            "engagement_level": "high",
            "intent_signals": {
                "signals": ["Visited pricing page", "Downloaded whitepaper", "LinkedIn engagement"],
                "reasoning": "Strong buying signals with recent engagement",
            },
            "personalized_notes": "Recently promoted to VP, expanding team",
        },
        {
            "first_name": "Michael",
            "last_name": "Chen",
            "email": "m.chen@growthco.io",
            "company": "GrowthCo",
            "title": "Head of Growth",
            "phone": "+1-555-234-5678",
            "linkedin_url": "https://linkedin.com/in/michaelchen",
            "website": "https://growthco.io",
            "industry": "SaaS",
            "company_size": "100-250",
            "revenue": "$10M-$25M",
            "location": "Austin, TX",
            "lead_score": 85,
            "status": "contacted",
            "source": "clay",
            "last_activity": now - timedelta(days=1),
            "engagement_level": "high",
            "intent_signals": {
                "signals": ["Email opened", "Link clicked", "Company research"],
                "reasoning": "Active engagement with outreach",
            },
            "personalized_notes": "Interested in automation tools",
        },
        {
            "first_name": "Emily",
            "last_name": "Rodriguez",
            "email": "emily.r@scalestartup.com",
            "company": "ScaleStartup Inc",
            "title": "Marketing Director",
            "phone": "+1-555-345-6789",
            "linkedin_url": "https://linkedin.com/in/emilyrodriguez",
            "website": "https://scalestartup.com",
            "industry": "Fintech",
            "company_size": "250-500",
            "revenue": "$25M-$50M",
            "location": "New York, NY",
            "lead_score": 78,
            "status": "responded",
            "source": "rb2b",
            "last_activity": now - timedelta(hours=3),
            "engagement_level": "medium",
            "intent_signals": {
                "signals": ["Demo request", "Competitor comparison"],
                "reasoning": "Evaluating solutions actively",
            },
            "personalized_notes": "Looking for enterprise solution",
        },
        {
            "first_name": "David",
            "last_name": "Kim",
            "email": "david.kim@innovatetech.com",
            "company": "InnovateTech",
            "title": "Chief Marketing Officer",
            "phone": "+1-555-456-7890",
            "linkedin_url": "https://linkedin.com/in/davidkim",
            "website": "https://innovatetech.com",
            "industry": "Technology",
            "company_size": "1000+",
            "revenue": "$100M+",
            "location": "Seattle, WA",
            "lead_score": 95,
            "status": "qualified",
            "source": "apollo",
            "last_activity": now - timedelta(minutes=30),
            "engagement_level": "high",
            "intent_signals": {
                "signals": ["Budget confirmed", "Timeline discussed", "Stakeholder meeting"],
                "reasoning": "High intent with budget and timeline",
            },
            "personalized_notes": "Ready to implement Q1 2025",
        },
    ]


SAMPLE_SEQUENCES = [
    {
        "name": "Enterprise Outreach Sequence",
        "description": "AI-powered sequence targeting enterprise prospects",
        "status": "active",
        "template_type": "email",
        "steps": [
            {"step": 1, "type": "email", "delay": 0, "template": "Initial outreach"},
            {"step": 2, "type": "email", "delay": 3, "template": "Follow-up with value"},
            {"step": 3, "type": "linkedin", "delay": 7, "template": "LinkedIn connection"},
        ],
        "target_criteria": {"companySize": "500+", "industry": "Technology"},
        "total_sent": 234,
        "total_responses": 29,
    },
    {
        "name": "SaaS Growth Campaign",
        "description": "Targeting growing SaaS companies",
        "status": "active",
        "template_type": "multi-channel",
        "steps": [
            {"step": 1, "type": "email", "delay": 0, "template": "Pain point email"},
            {"step": 2, "type": "email", "delay": 5, "template": "Case study follow-up"},
        ],
        "target_criteria": {"industry": "SaaS", "revenue": "$10M+"},
        "total_sent": 156,
        "total_responses": 13,
    },
]

SAMPLE_RULES = [
    {
        "name": "Enterprise Company Size",
        "description": "Higher score for larger companies",
        "criteria": {
            "field": "companySize",
            "conditions": [
                {"value": "1000+", "score": 25},
                {"value": "500-1000", "score": 20},
                {"value": "250-500", "score": 15},
            ],
        },
        "is_active": True,
        "priority": 1,
    },
    {
        "name": "Revenue Qualification",
        "description": "Score based on company revenue",
        "criteria": {
            "field": "revenue",
            "conditions": [
                {"value": "$100M+", "score": 30},
                {"value": "$50M-$100M", "score": 25},
                {"value": "$25M-$50M", "score": 20},
            ],
        },
        "is_active": True,
        "priority": 2,
    },
]


async def seed_demo_data(db: AsyncSession) -> bool:
    """
    Insert demo integrations, prospects, sequences, activities and scoring rules.

    Returns False without writing anything when integrations already exist.
    """
    existing = await db.execute(select(Integration.id).limit(1))
    if existing.scalar_one_or_none() is not None:
        return False

    storage = Storage(db)
    now = datetime.now(timezone.utc)

    for integration in _default_integrations(now):
        await storage.create_integration({**integration, "api_key": None, "sync_frequency": 60, "settings": {}})

    prospects = [await storage.create_prospect(p) for p in _sample_prospects(now)]
    sequences = [await storage.create_sequence(dict(s)) for s in SAMPLE_SEQUENCES]

    sarah, michael, emily, david = prospects
    sample_activities = [
        {
            "prospect_id": sarah.id,
            "type": "prospect_created",
            "description": "New prospect Sarah Johnson added with score 92",
            "metadata": {"source": "apollo", "score": 92},
        },
        {
            "prospect_id": michael.id,
            "sequence_id": sequences[0].id,
            "type": "email_sent",
            "description": "Personalized email sent to Michael Chen",
            "metadata": {"sequenceId": sequences[0].id, "template": "Initial outreach"},
        },
        {
            "prospect_id": emily.id,
            "type": "response_received",
            "description": "Emily Rodriguez responded with interest in demo",
            "metadata": {"responseType": "positive", "sentiment": "interested"},
        },
        {
            "prospect_id": david.id,
            "type": "score_updated",
            "description": "David Kim lead score increased to 95",
            "metadata": {"previousScore": 88, "newScore": 95},
        },
        {
            "type": "data_enrichment",
            "description": "Clay integration updated 15 prospect profiles",
            "metadata": {"recordsUpdated": 15, "source": "clay"},
        },
    ]
    for activity in sample_activities:
        await storage.create_activity(activity)

    for rule in SAMPLE_RULES:
        await storage.create_scoring_rule(dict(rule))

    logger.info("Demo data seeded")
    return True
