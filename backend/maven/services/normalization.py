"""Prospect field normalization shared by CSV import and integration sync."""

import re
from typing import Dict, Any, Optional, Iterable


class NormalizationService:
    """Normalize vendor field values into the prospect vocabulary."""

    # Upper bounds of the company-size buckets, checked in order
    COMPANY_SIZE_BUCKETS = [
        (50, '1-50'),
        (200, '51-200'),
        (500, '201-500'),
        (1000, '501-1000'),
    ]
    LARGEST_COMPANY_SIZE = '1000+'

    # Lower bounds of the revenue buckets, checked from the top
    REVENUE_BUCKETS = [
        (100_000_000, '$100M+'),
        (50_000_000, '$50M-$100M'),
        (10_000_000, '$10M-$50M'),
        (1_000_000, '$1M-$10M'),
    ]
    SMALLEST_REVENUE = 'Under $1M'

    REVENUE_MULTIPLIERS = {'k': 1_000, 'm': 1_000_000, 'b': 1_000_000_000}

    # Keyword -> status, checked in order. "disqualif" must precede "qualif".
    STATUS_KEYWORDS = [
        ('disqualified', ['disqualif', 'reject']),
        ('contacted', ['contact', 'reached']),
        ('responded', ['respond', 'reply', 'replied']),
        ('qualified', ['convert', 'qualif', 'progress']),
    ]

    @staticmethod
    def first_value(row: Dict[str, Any], keys: Iterable[str]) -> str:
        """First non-empty value among several column spellings, stripped."""
        for key in keys:
            value = row.get(key)
            if value is None:
                continue
            value = str(value).strip()
            if value:
                return value
        return ''

    @staticmethod
    def company_slug(company: str) -> str:
        """Lower-case company name with everything but [a-z0-9] removed."""
        return re.sub(r'[^a-z0-9]', '', (company or '').lower())

    @classmethod
    def placeholder_email(cls, company: str, mailbox: str = 'contact') -> str:
        return f"{mailbox}@{cls.company_slug(company)}.com"

    @staticmethod
    def parse_score(value: Any, default: int = 50) -> int:
        """Leading integer of a vendor score column, clamped to 0-100."""
        if value is None:
            return default
        match = re.match(r'\s*(-?\d+)', str(value))
        if not match:
            return default
        return max(0, min(100, int(match.group(1))))

    @staticmethod
    def engagement_for_score(score: int) -> str:
        if score >= 70:
            return 'high'
        if score >= 40:
            return 'medium'
        return 'low'

    @classmethod
    def parse_company_size(cls, size: Any) -> Optional[str]:
        """
        Bucket an employee count or range ("1-10", "500-1000", "250", "1000+").
        Ranges are bucketed by their midpoint. Unparseable text is returned as-is.
        """
        if size is None or str(size).strip() == '':
            return None
        text = str(size).strip()

        numbers = [int(n.replace(',', '')) for n in re.findall(r'\d[\d,]*', text)]
        if not numbers:
            return text

        if len(numbers) >= 2:
            headcount = (numbers[0] + numbers[1]) / 2
        elif text.endswith('+'):
            headcount = numbers[0] + 1
        else:
            headcount = numbers[0]

        for upper, label in cls.COMPANY_SIZE_BUCKETS:
            if headcount <= upper:
                return label
        return cls.LARGEST_COMPANY_SIZE

    @classmethod
    def parse_revenue(cls, revenue: Any) -> Optional[str]:
        """
        Bucket a revenue figure ("12000000", "$50M-$100M", "75m").
        The first amount in the text decides the bucket. Unparseable text is returned as-is.
        """
        if revenue is None or str(revenue).strip() == '':
            return None
        text = str(revenue).strip()

        cleaned = text.lower().replace(',', '').replace('$', '')
        match = re.search(r'(\d+(?:\.\d+)?)\s*([kmb])?', cleaned)
        if not match:
            return text

        amount = float(match.group(1)) * cls.REVENUE_MULTIPLIERS.get(match.group(2) or '', 1)
        for lower, label in cls.REVENUE_BUCKETS:
            if amount >= lower:
                return label
        return cls.SMALLEST_REVENUE

    @classmethod
    def map_status(cls, status: Optional[str]) -> str:
        """Free-text vendor status to a prospect status."""
        if not status:
            return 'new'
        status_lower = status.lower()
        for mapped, keywords in cls.STATUS_KEYWORDS:
            if any(keyword in status_lower for keyword in keywords):
                return mapped
        return 'new'
