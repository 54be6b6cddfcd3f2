# backend/maven/services/rule_scoring.py
"""
Rule Scoring - deterministic lead scoring from stored scoring rules.

Each rule looks at one prospect field and awards the score of the first
condition whose value matches (case-insensitive). Rule scores add up and
the total is clamped to 0-100.
"""

import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from maven.models import LeadScoringRule
from maven.schemas.scoring import RuleMatch, RuleEvaluationResponse


def _snake_case(name: str) -> str:
    return re.sub(r'(?<!^)(?=[A-Z])', '_', name).lower()


def _camel_case(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


def field_value(prospect_data: Dict[str, Any], field: str) -> Any:
    """Look a field up under its own name, then its snake_case and camelCase spellings."""
    for key in (field, _snake_case(field), _camel_case(field)):
        value = prospect_data.get(key)
        if value is not None:
            return value
    return None


def match_condition(value: Any, conditions: Iterable[Dict[str, Any]]) -> Optional[Tuple[str, int]]:
    """Return (value, score) of the first matching condition, or None."""
    if value is None:
        return None

    value_str = str(value).strip().lower()
    for condition in conditions:
        expected = str(condition.get('value', '')).strip().lower()
        if value_str == expected:
            return condition.get('value'), int(condition.get('score', 0))
    return None


def evaluate_rules(prospect_data: Dict[str, Any], rules: List[LeadScoringRule]) -> RuleEvaluationResponse:
    """
    Score a prospect against the active rules, lowest priority number first.

    Args:
        prospect_data: Prospect fields keyed by camelCase or snake_case names
        rules: Scoring rules; inactive ones are ignored

    Returns:
        Total score and the rules that contributed to it
    """
    active_rules = sorted(
        (r for r in rules if r.is_active),
        key=lambda r: (r.priority or 0, r.id or 0),
    )

    total = 0
    matches: List[RuleMatch] = []

    for rule in active_rules:
        criteria = rule.criteria or {}
        field = criteria.get('field')
        if not field:
            continue

        value = field_value(prospect_data, field)
        matched = match_condition(value, criteria.get('conditions') or [])
        if matched is None:
            continue

        matched_value, score = matched
        total += score
        matches.append(RuleMatch(
            rule_id=rule.id,
            rule_name=rule.name,
            field=field,
            value=str(matched_value),
            score=score,
        ))

    return RuleEvaluationResponse(score=max(0, min(100, total)), matches=matches)
