# backend/maven/services/ai_service.py
"""
AI Service - lead scoring, outreach copy and intent analysis via the
OpenAI chat completions API.

Every public call degrades to a neutral result instead of raising.
"""

import json
import logging
from typing import Optional, Dict, Any, List

from openai import AsyncOpenAI

from maven.config import settings
from maven.schemas.ai import LeadScoringResult, PersonalizationResult

logger = logging.getLogger(__name__)


SCORING_SYSTEM_PROMPT = (
    "You are an AI lead scoring expert for enterprise B2B marketing software. "
    "Analyze prospects and provide accurate scoring based on their fit for outbound marketing tools."
)

OUTREACH_SYSTEM_PROMPT = (
    "You are an expert B2B copywriter specializing in personalized outreach for marketing technology. "
    "Create engaging, relevant emails that resonate with enterprise decision makers."
)

INTENT_SYSTEM_PROMPT = (
    "You are an expert at identifying buyer intent signals for B2B marketing software. "
    "Analyze prospect behavior and profile to identify indicators of purchase intent."
)

SCORING_FALLBACK = LeadScoringResult(
    score=50,
    reasoning="Error occurred during AI analysis",
    intent_signals=[],
    confidence=0.1,
)

OUTREACH_FALLBACK = PersonalizationResult(
    subject="Error generating subject",
    email_body="Error generating email body",
    personalized_opening="Error generating opening",
    call_to_action="Error generating CTA",
)


class AIServiceUnavailable(RuntimeError):
    """No API key is configured."""


def _field(prospect: Dict[str, Any], camel: str, snake: str, default: str = "") -> str:
    value = prospect.get(camel)
    if value in (None, ""):
        value = prospect.get(snake)
    if value in (None, ""):
        return default
    return str(value)


def _clamp(value: Any, low: float, high: float, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return max(low, min(high, number))


class AIService:
    """Thin wrapper over AsyncOpenAI with prompt formatting and result parsing."""

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: Optional[str] = None):
        self._client = client
        self.model = model or settings.OPENAI_MODEL

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            api_key = settings.openai_api_key
            if not api_key:
                raise AIServiceUnavailable("OPENAI_API_KEY not set")
            self._client = AsyncOpenAI(api_key=api_key, timeout=settings.OPENAI_TIMEOUT_SECONDS)
        return self._client

    async def _complete_json(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        """Run one chat completion in JSON mode and parse the reply."""
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            response_format={"type": "json_object"},
        )
        content = response.choices[0].message.content or "{}"
        result = json.loads(content)
        if not isinstance(result, dict):
            raise ValueError("Model reply is not a JSON object")
        return result

    # ==================== LEAD SCORING ====================

    async def score_lead(self, prospect: Dict[str, Any]) -> LeadScoringResult:
        prompt = f"""Analyze this prospect and provide a lead score from 0-100 based on their fit for enterprise B2B outbound marketing software. Consider company size, revenue, title, industry, and any intent signals.

Prospect Data:
- Name: {_field(prospect, 'firstName', 'first_name')} {_field(prospect, 'lastName', 'last_name')}
- Company: {_field(prospect, 'company', 'company')}
- Title: {_field(prospect, 'title', 'title')}
- Industry: {_field(prospect, 'industry', 'industry', 'Unknown')}
- Company Size: {_field(prospect, 'companySize', 'company_size', 'Unknown')}
- Revenue: {_field(prospect, 'revenue', 'revenue', 'Unknown')}
- Location: {_field(prospect, 'location', 'location', 'Unknown')}

Provide your analysis in JSON format with the following structure:
{{
  "score": number (0-100),
  "reasoning": "detailed explanation of the score",
  "intentSignals": ["signal1", "signal2", ...],
  "confidence": number (0-1)
}}"""

        try:
            result = await self._complete_json(SCORING_SYSTEM_PROMPT, prompt)

            signals = result.get("intentSignals") or []
            if not isinstance(signals, list):
                signals = [str(signals)]

            return LeadScoringResult(
                score=int(round(_clamp(result.get("score"), 0, 100, 0))),
                reasoning=result.get("reasoning") or "No reasoning provided",
                intent_signals=[str(s) for s in signals],
                confidence=_clamp(result.get("confidence"), 0, 1, 0.5),
            )
        except Exception as e:
            logger.warning(f"AI lead scoring failed: {e}")
            return SCORING_FALLBACK.model_copy()

    # ==================== OUTREACH ====================

    async def generate_outreach(self, prospect: Dict[str, Any], sequence_type: str) -> PersonalizationResult:
        prompt = f"""Create a personalized outreach email for this prospect for an AI-powered outbound marketing platform. The email should be professional, relevant, and focused on their specific role and company.

Prospect Details:
- Name: {_field(prospect, 'firstName', 'first_name')} {_field(prospect, 'lastName', 'last_name')}
- Company: {_field(prospect, 'company', 'company')}
- Title: {_field(prospect, 'title', 'title')}
- Industry: {_field(prospect, 'industry', 'industry', 'Technology')}

Sequence Type: {sequence_type}

Generate a personalized email with:
1. A compelling subject line
2. Personalized opening that shows research
3. Value proposition relevant to their role
4. Clear call to action

Provide the response in JSON format:
{{
  "subject": "email subject line",
  "emailBody": "full email body",
  "personalizedOpening": "personalized first paragraph",
  "callToAction": "specific call to action"
}}"""

        try:
            result = await self._complete_json(OUTREACH_SYSTEM_PROMPT, prompt)

            return PersonalizationResult(
                subject=result.get("subject") or "Partnership Opportunity",
                email_body=result.get("emailBody") or "Generic email body",
                personalized_opening=result.get("personalizedOpening") or "Hello",
                call_to_action=result.get("callToAction") or "Let's connect",
            )
        except Exception as e:
            logger.warning(f"AI outreach generation failed: {e}")
            return OUTREACH_FALLBACK.model_copy()

    # ==================== INTENT ====================

    async def analyze_intent(self, prospect: Dict[str, Any], recent_activity: List[Dict[str, Any]]) -> List[str]:
        activity_lines = "\n".join(
            f"- {a.get('type', '')}: {a.get('description', '')}" for a in recent_activity
        )
        prompt = f"""Analyze this prospect's recent activity and profile to identify intent signals for B2B marketing software. Look for signals that indicate they might be interested in outbound marketing automation, lead generation, or sales enablement tools.

Prospect Profile:
- Company: {_field(prospect, 'company', 'company')}
- Title: {_field(prospect, 'title', 'title')}
- Industry: {_field(prospect, 'industry', 'industry', 'Unknown')}

Recent Activity:
{activity_lines}

Identify potential intent signals and return them as a JSON array of strings:
{{
  "intentSignals": ["signal1", "signal2", ...]
}}"""

        try:
            result = await self._complete_json(INTENT_SYSTEM_PROMPT, prompt)
        except Exception as e:
            logger.warning(f"AI intent analysis failed: {e}")
            return []

        signals = result.get("intentSignals") or []
        if not isinstance(signals, list):
            return []
        return [str(s) for s in signals]


ai_service = AIService()


def get_ai_service() -> AIService:
    """Dependency to get the shared AI service."""
    return ai_service
