# backend/maven/services/csv_import.py
"""
CSV import - vendor detection, per-vendor row mapping and the import run.

Detection is a fixed priority chain over the lower-cased, comma-joined
header row. Mapping functions are pure: a CSV row dict in, a prospect dict
(snake_case columns) or None out.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional, Tuple

from maven.services.normalization import NormalizationService as N
from maven.services.storage import Storage
from maven.services.activity_logger import ActivityLogger

logger = logging.getLogger(__name__)


CLAY_AI = 'Clay AI'
RB2B = 'RB2B'
APOLLO = 'Apollo'
SMARTLEAD = 'SmartLead'
GENERIC_CSV = 'CSV'

REQUIRED_FIELDS = ('first_name', 'last_name', 'email', 'company')

MAX_CLIENT_ERRORS = 20


class CSVParseError(ValueError):
    """The uploaded file as a whole could not be read as CSV."""


# ============================================================================
# PARSING & DETECTION
# ============================================================================

def parse_csv_file(file_content: bytes) -> Tuple[List[str], List[Dict[str, Any]]]:
    """Parse CSV file and return headers and rows."""
    try:
        # Try UTF-8 first (tolerating a BOM)
        text_content = file_content.decode('utf-8-sig')
    except UnicodeDecodeError:
        # Fallback to latin-1
        text_content = file_content.decode('latin-1')

    try:
        csv_reader = csv.DictReader(io.StringIO(text_content))
        headers = [h.strip() for h in (csv_reader.fieldnames or [])]
        csv_reader.fieldnames = headers
        rows = list(csv_reader)
    except csv.Error as e:
        raise CSVParseError(str(e)) from e

    return headers, rows


def detect_data_source(headers: List[str]) -> str:
    """Guess which vendor exported a file from its header row. First match wins."""
    header_str = ','.join(headers).lower()

    # Clay AI exports carry lead ids and an AI interaction score
    if 'lead id' in header_str and 'job title' in header_str and 'ai interaction score' in header_str:
        return CLAY_AI

    # RB2B is company-level data without individual contacts
    if ('company name' in header_str and 'social signal score' in header_str
            and 'annual revenue' in header_str and 'first name' not in header_str):
        return RB2B

    if 'linkedin_url' in header_str or 'apollo' in header_str:
        return APOLLO

    if 'smartlead' in header_str or 'campaign_id' in header_str:
        return SMARTLEAD

    return GENERIC_CSV


# ============================================================================
# PER-VENDOR MAPPING
# ============================================================================

def _today() -> str:
    return datetime.now(timezone.utc).strftime('%Y-%m-%d')


def _optional(row: Dict[str, Any], *keys: str) -> Optional[str]:
    return N.first_value(row, keys) or None


def map_clay_row(row: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    email = N.first_value(row, ('Email', 'email'))
    first_name = N.first_value(row, ('First Name', 'first_name'))
    last_name = N.first_value(row, ('Last Name', 'last_name'))
    company = N.first_value(row, ('Company Name', 'company_name'))
    title = N.first_value(row, ('Job Title', 'job_title'))

    if not email and not company:
        return None

    lead_score = N.parse_score(row.get('AI Interaction Score'))
    lead_status = N.first_value(row, ('Lead Status',))
    lead_source = N.first_value(row, ('Lead Source',)) or 'unknown'

    return {
        'first_name': first_name or 'Contact',
        'last_name': last_name or 'Lead',
        'email': email or N.placeholder_email(company),
        'company': company,
        'title': title,
        'phone': None,
        'linkedin_url': _optional(row, 'Social Media Profile URL'),
        'website': None,
        'industry': _optional(row, 'Industry'),
        'company_size': N.parse_company_size(row.get('Company Size')),
        'revenue': None,
        'location': None,
        'source': 'clay',
        'status': N.map_status(lead_status),
        'lead_score': lead_score,
        'engagement_level': N.engagement_for_score(lead_score),
        'intent_signals': {
            'signals': [f"Clay AI Score: {lead_score}", f"Status: {lead_status or 'unknown'}"],
            'reasoning': f"Imported from Clay AI with interaction score of {lead_score}",
        },
        'personalized_notes': f"Clay AI import - {lead_source} source on {_today()}",
    }


def map_rb2b_row(row: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    company = N.first_value(row, ('Company Name', 'company_name'))
    if not company:
        return None

    revenue = N.parse_revenue(row.get('Annual Revenue'))
    company_size = N.parse_company_size(row.get('Company Size'))
    social_score = N.parse_score(row.get('Social Signal Score'))
    lead_source = N.first_value(row, ('Lead Source',)) or 'unknown'

    return {
        'first_name': 'Business',
        'last_name': 'Development',
        'email': N.placeholder_email(company),
        'company': company,
        'title': 'Decision Maker',
        'phone': None,
        'linkedin_url': None,
        'website': None,
        'industry': _optional(row, 'Industry'),
        'company_size': company_size,
        'revenue': revenue,
        'location': None,
        'source': 'rb2b',
        'status': N.map_status(N.first_value(row, ('Lead Status',))),
        'lead_score': social_score,
        'engagement_level': N.engagement_for_score(social_score),
        'intent_signals': {
            'signals': [
                f"RB2B Social Score: {social_score}",
                f"Revenue: {revenue}",
                f"Size: {company_size}",
            ],
            'reasoning': f"RB2B company data with social signal score of {social_score}",
        },
        'personalized_notes': f"RB2B import - {lead_source} on {_today()}",
    }


def map_apollo_row(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'first_name': N.first_value(row, ('first_name', 'First Name')),
        'last_name': N.first_value(row, ('last_name', 'Last Name')),
        'email': N.first_value(row, ('email', 'Email')),
        'company': N.first_value(row, ('company', 'Company', 'organization_name')),
        'title': N.first_value(row, ('title', 'Title', 'job_title')),
        'phone': _optional(row, 'phone', 'Phone'),
        'linkedin_url': _optional(row, 'linkedin_url', 'LinkedIn URL'),
        'website': _optional(row, 'website', 'Website'),
        'industry': _optional(row, 'industry', 'Industry'),
        'company_size': N.parse_company_size(N.first_value(row, ('company_size', 'Company Size'))),
        'revenue': N.parse_revenue(N.first_value(row, ('revenue', 'Revenue'))),
        'location': _optional(row, 'location', 'Location', 'city'),
        'source': 'apollo',
        'status': 'new',
        'lead_score': 50,
        'engagement_level': 'medium',
        'intent_signals': {
            'signals': ['Apollo export'],
            'reasoning': 'Imported from Apollo database',
        },
        'personalized_notes': f"Apollo import on {_today()}",
    }


def map_smartlead_row(row: Dict[str, Any]) -> Dict[str, Any]:
    status = N.first_value(row, ('status',))
    return {
        'first_name': N.first_value(row, ('first_name', 'First Name')),
        'last_name': N.first_value(row, ('last_name', 'Last Name')),
        'email': N.first_value(row, ('email', 'Email')),
        'company': N.first_value(row, ('company', 'Company')),
        'title': N.first_value(row, ('title', 'Title')),
        'phone': _optional(row, 'phone', 'Phone'),
        'linkedin_url': _optional(row, 'linkedin_url'),
        'website': None,
        'industry': _optional(row, 'industry'),
        'company_size': N.parse_company_size(row.get('company_size')),
        'revenue': None,
        'location': _optional(row, 'location'),
        'source': 'smartlead',
        'status': N.map_status(status) if status else 'new',
        'lead_score': 50,
        'engagement_level': 'medium',
        'intent_signals': {
            'signals': ['SmartLead export'],
            'reasoning': 'Imported from SmartLead campaign',
        },
        'personalized_notes': f"SmartLead import on {_today()}",
    }


def map_generic_row(row: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    first_name = N.first_value(row, ('firstName', 'first_name', 'First Name', 'first name'))
    last_name = N.first_value(row, ('lastName', 'last_name', 'Last Name', 'last name'))
    email = N.first_value(row, ('email', 'Email', 'Email Address'))
    company = N.first_value(row, ('company', 'Company', 'Company Name', 'company name'))
    title = N.first_value(row, ('title', 'Title', 'position', 'Position', 'Job Title'))

    # Require at least company and either name or email
    if not company or (not first_name and not last_name and not email):
        return None

    return {
        'first_name': first_name or 'Contact',
        'last_name': last_name or 'Lead',
        'email': email or N.placeholder_email(company),
        'company': company,
        'title': title or 'Contact',
        'phone': _optional(row, 'phone', 'Phone'),
        'linkedin_url': _optional(row, 'linkedinUrl', 'linkedin_url', 'LinkedIn URL'),
        'website': _optional(row, 'website', 'Website'),
        'industry': _optional(row, 'industry', 'Industry'),
        'company_size': N.parse_company_size(
            N.first_value(row, ('companySize', 'company_size', 'Company Size'))
        ),
        'revenue': N.parse_revenue(N.first_value(row, ('revenue', 'Revenue'))),
        'location': _optional(row, 'location', 'Location'),
        'source': 'csv',
        'status': 'new',
        'lead_score': 50,
        'engagement_level': 'low',
        'intent_signals': {
            'signals': ['CSV import'],
            'reasoning': 'Manually imported from CSV file',
        },
        'personalized_notes': f"CSV import on {_today()}",
    }


ROW_MAPPERS = {
    CLAY_AI: map_clay_row,
    RB2B: map_rb2b_row,
    APOLLO: map_apollo_row,
    SMARTLEAD: map_smartlead_row,
}


def map_row_to_prospect(row: Dict[str, Any], data_source: str) -> Optional[Dict[str, Any]]:
    """Map one CSV row with the mapper for its vendor, generic CSV otherwise."""
    mapper = ROW_MAPPERS.get(data_source, map_generic_row)
    return mapper(row)


def missing_required_fields(prospect_data: Dict[str, Any]) -> List[str]:
    return [f for f in REQUIRED_FIELDS if not prospect_data.get(f)]


# ============================================================================
# IMPORT RUN
# ============================================================================

@dataclass
class ImportSummary:
    data_source: str
    total: int
    imported: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)

    def skip(self, reason: str):
        self.skipped += 1
        self.errors.append(reason)


class CSVImporter:
    """Maps, de-duplicates, persists and audits parsed CSV rows."""

    def __init__(self, storage: Storage):
        self.storage = storage
        self.activity_logger = ActivityLogger(storage)

    async def run(self, rows: List[Dict[str, Any]], data_source: str) -> ImportSummary:
        """
        Import rows one at a time. A bad row is recorded as a skip reason and
        never stops the run. Duplicates are checked against everything already
        stored, including rows imported earlier in this run.
        """
        summary = ImportSummary(data_source=data_source, total=len(rows))

        for row_number, row in enumerate(rows, start=1):
            try:
                prospect_data = map_row_to_prospect(row, data_source)

                if not prospect_data:
                    summary.skip(f"Row {row_number}: Could not map data to prospect format")
                    continue

                missing = missing_required_fields(prospect_data)
                if missing:
                    shown = {f: prospect_data.get(f) for f in REQUIRED_FIELDS}
                    summary.skip(f"Row {row_number}: Missing required fields after mapping ({shown})")
                    continue

                duplicate = await self.storage.find_duplicate_prospect(
                    email=prospect_data['email'],
                    company=prospect_data['company'],
                    first_name=prospect_data['first_name'],
                    last_name=prospect_data['last_name'],
                )
                if duplicate:
                    summary.skip(
                        f"Row {row_number}: Duplicate prospect "
                        f"({prospect_data['email'] or prospect_data['company']})"
                    )
                    continue

                prospect = await self.storage.create_prospect(prospect_data)
                await self.activity_logger.log_import_row(data_source, prospect)
                summary.imported += 1

            except Exception as e:
                logger.warning(f"{data_source} import row {row_number} failed: {e}")
                await self.storage.db.rollback()
                summary.skip(f"Row {row_number}: {e}")

        await self.activity_logger.log_import_summary(
            data_source=data_source,
            imported=summary.imported,
            skipped=summary.skipped,
            total=summary.total,
            errors=summary.errors,
        )

        logger.info(
            f"{data_source} CSV import completed: {summary.imported} imported, "
            f"{summary.skipped} skipped of {summary.total}"
        )
        return summary
