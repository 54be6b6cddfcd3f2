# tests/services/test_ai_service.py
"""
Tests for AIService

Coverage:
- Result parsing and clamping
- Default values for missing keys
- Degraded results on API errors, bad JSON and missing API key
"""

import json
import pytest
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

from maven.services.ai_service import AIService, SCORING_FALLBACK, OUTREACH_FALLBACK


def _completion(payload):
    content = payload if isinstance(payload, str) else json.dumps(payload)
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _service(payload=None, error=None):
    client = MagicMock()
    if error is not None:
        client.chat.completions.create = AsyncMock(side_effect=error)
    else:
        client.chat.completions.create = AsyncMock(return_value=_completion(payload))
    return AIService(client=client, model="gpt-4o"), client


PROSPECT = {
    "firstName": "Sarah",
    "lastName": "Johnson",
    "company": "TechCorp Solutions",
    "title": "VP of Marketing",
    "company_size": "500-1000",
}


# ============================================================================
# TEST: Lead scoring
# ============================================================================

class TestScoreLead:

    @pytest.mark.asyncio
    async def test_parses_result(self):
        service, client = _service({
            "score": 87,
            "reasoning": "Senior buyer at a mid-market company",
            "intentSignals": ["Recently promoted"],
            "confidence": 0.8,
        })

        result = await service.score_lead(PROSPECT)

        assert result.score == 87
        assert result.intent_signals == ["Recently promoted"]
        assert result.confidence == 0.8

        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["response_format"] == {"type": "json_object"}
        prompt = kwargs["messages"][1]["content"]
        assert "Sarah Johnson" in prompt
        assert "Company Size: 500-1000" in prompt
        assert "Industry: Unknown" in prompt

    @pytest.mark.asyncio
    async def test_clamps_out_of_range_values(self):
        service, _ = _service({"score": 140, "reasoning": "x", "confidence": 3})

        result = await service.score_lead(PROSPECT)

        assert result.score == 100
        assert result.confidence == 1.0

    @pytest.mark.asyncio
    async def test_missing_keys_get_defaults(self):
        service, _ = _service({})

        result = await service.score_lead(PROSPECT)

        assert result.score == 0
        assert result.reasoning == "No reasoning provided"
        assert result.intent_signals == []
        assert result.confidence == 0.5

    @pytest.mark.asyncio
    async def test_api_error_degrades(self):
        service, _ = _service(error=RuntimeError("rate limited"))

        result = await service.score_lead(PROSPECT)

        assert result == SCORING_FALLBACK
        assert result.score == 50
        assert result.confidence == 0.1

    @pytest.mark.asyncio
    async def test_invalid_json_degrades(self):
        service, _ = _service("not json")

        result = await service.score_lead(PROSPECT)

        assert result.reasoning == "Error occurred during AI analysis"

    @pytest.mark.asyncio
    async def test_wrong_value_types_degrade(self):
        service, _ = _service({"score": 80, "reasoning": ["not", "a", "string"]})

        result = await service.score_lead(PROSPECT)

        assert result == SCORING_FALLBACK

    @pytest.mark.asyncio
    async def test_no_api_key_does_not_call_out(self):
        service = AIService()

        with patch("maven.services.ai_service.AsyncOpenAI") as mock_openai:
            result = await service.score_lead(PROSPECT)

        mock_openai.assert_not_called()
        assert result.score == 50


# ============================================================================
# TEST: Outreach
# ============================================================================

class TestGenerateOutreach:

    @pytest.mark.asyncio
    async def test_parses_result(self):
        service, client = _service({
            "subject": "Scaling outbound at TechCorp",
            "emailBody": "Hi Sarah, ...",
            "personalizedOpening": "Congrats on the new role",
            "callToAction": "Open to a 15 minute call?",
        })

        result = await service.generate_outreach(PROSPECT, "email")

        assert result.subject == "Scaling outbound at TechCorp"
        assert result.call_to_action == "Open to a 15 minute call?"
        prompt = client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
        assert "Sequence Type: email" in prompt
        assert "Industry: Technology" in prompt

    @pytest.mark.asyncio
    async def test_missing_keys_get_defaults(self):
        service, _ = _service({"subject": "Hello"})

        result = await service.generate_outreach(PROSPECT, "linkedin")

        assert result.subject == "Hello"
        assert result.email_body == "Generic email body"
        assert result.personalized_opening == "Hello"
        assert result.call_to_action == "Let's connect"

    @pytest.mark.asyncio
    async def test_wrong_value_types_degrade(self):
        service, _ = _service({"subject": {"x": 1}})

        result = await service.generate_outreach(PROSPECT, "email")

        assert result == OUTREACH_FALLBACK

    @pytest.mark.asyncio
    async def test_error_degrades(self):
        service, _ = _service(error=RuntimeError("boom"))

        result = await service.generate_outreach(PROSPECT, "email")

        assert result.subject == "Error generating subject"
        assert result.call_to_action == "Error generating CTA"


# ============================================================================
# TEST: Intent
# ============================================================================

class TestAnalyzeIntent:

    @pytest.mark.asyncio
    async def test_returns_signals(self):
        service, client = _service({"intentSignals": ["Visited pricing page"]})

        signals = await service.analyze_intent(
            PROSPECT, [{"type": "email_opened", "description": "Opened intro email"}]
        )

        assert signals == ["Visited pricing page"]
        prompt = client.chat.completions.create.call_args.kwargs["messages"][1]["content"]
        assert "- email_opened: Opened intro email" in prompt

    @pytest.mark.asyncio
    async def test_non_list_signals(self):
        service, _ = _service({"intentSignals": "pricing page"})
        assert await service.analyze_intent(PROSPECT, []) == []

    @pytest.mark.asyncio
    async def test_error_returns_empty(self):
        service, _ = _service(error=RuntimeError("boom"))
        assert await service.analyze_intent(PROSPECT, []) == []
