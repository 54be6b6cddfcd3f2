# backend/maven/routers/prospect_routes.py
"""
Prospect API - listing, manual creation (AI-scored), updates, rule-based
rescoring and vendor CSV upload.
"""

from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import logging

from maven.config import settings
from maven.database import get_db
from maven.schemas import (
    ProspectCreate,
    ProspectUpdate,
    ProspectResponse,
    CsvImportResponse,
)
from maven.services.storage import Storage
from maven.services.activity_logger import ActivityLogger
from maven.services.ai_service import AIService, get_ai_service
from maven.services.rule_scoring import evaluate_rules
from maven.services.csv_import import (
    CSVImporter,
    CSVParseError,
    parse_csv_file,
    detect_data_source,
    MAX_CLIENT_ERRORS,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/prospects", tags=["prospects"])


async def _get_prospect_or_404(storage: Storage, prospect_id: int):
    prospect = await storage.get_prospect(prospect_id)
    if not prospect:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Prospect not found"
        )
    return prospect


@router.get("", response_model=List[ProspectResponse])
async def list_prospects(db: AsyncSession = Depends(get_db)):
    """All prospects, newest first."""
    return await Storage(db).list_prospects()


@router.get("/high-intent", response_model=List[ProspectResponse])
async def list_high_intent_prospects(db: AsyncSession = Depends(get_db)):
    """Prospects at or above the high-intent score, highest score first."""
    return await Storage(db).get_high_intent_prospects()


@router.get("/{prospect_id}", response_model=ProspectResponse)
async def get_prospect(prospect_id: int, db: AsyncSession = Depends(get_db)):
    return await _get_prospect_or_404(Storage(db), prospect_id)


@router.post("", response_model=ProspectResponse)
async def create_prospect(
    prospect_data: ProspectCreate,
    db: AsyncSession = Depends(get_db),
    ai: AIService = Depends(get_ai_service),
):
    """
    Create a prospect by hand.

    The lead score and intent signals come from the AI scorer; a scoring
    failure still creates the prospect with the neutral fallback score.
    """
    storage = Storage(db)

    scoring = await ai.score_lead(prospect_data.model_dump(by_alias=True))

    data = prospect_data.model_dump(exclude_none=True)
    data["lead_score"] = scoring.score
    data["intent_signals"] = {
        "signals": scoring.intent_signals,
        "reasoning": scoring.reasoning,
    }

    prospect = await storage.create_prospect(data)
    await ActivityLogger(storage).log_prospect_created(prospect)

    logger.info(f"Prospect {prospect.id} created with AI score {prospect.lead_score}")
    return prospect


@router.patch("/{prospect_id}", response_model=ProspectResponse)
async def update_prospect(
    prospect_id: int,
    updates: ProspectUpdate,
    db: AsyncSession = Depends(get_db),
):
    storage = Storage(db)
    prospect = await storage.update_prospect(prospect_id, updates.model_dump(exclude_unset=True))
    if not prospect:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Prospect not found"
        )
    return prospect


@router.post("/{prospect_id}/rescore", response_model=ProspectResponse)
async def rescore_prospect(prospect_id: int, db: AsyncSession = Depends(get_db)):
    """Recompute a prospect's score from the active scoring rules."""
    storage = Storage(db)
    prospect = await _get_prospect_or_404(storage, prospect_id)
    previous_score = prospect.lead_score

    rules = await storage.list_scoring_rules(active_only=True)
    evaluation = evaluate_rules(ProspectResponse.model_validate(prospect).model_dump(), rules)

    prospect = await storage.update_prospect(prospect_id, {"lead_score": evaluation.score})
    await ActivityLogger(storage).log_score_updated(prospect, previous_score)

    return prospect


@router.post("/csv-upload", response_model=CsvImportResponse)
async def upload_csv(
    csv: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
):
    """
    Import prospects from a vendor CSV export.

    The vendor (Clay AI, RB2B, Apollo, SmartLead or generic CSV) is detected
    from the header row. Bad rows are skipped and reported; they never abort
    the import.
    """
    if csv is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No CSV file uploaded"
        )

    filename = (csv.filename or "").lower()
    if not filename.endswith(".csv") and csv.content_type != "text/csv":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are allowed"
        )

    content = await csv.read(settings.CSV_MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.CSV_MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="File too large"
        )

    try:
        headers, rows = parse_csv_file(content)
    except CSVParseError as e:
        logger.warning(f"Unparseable CSV upload {csv.filename}: {e}")
        rows = []
        headers = []

    if not rows:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="CSV file is empty or could not be parsed"
        )

    data_source = detect_data_source(headers)
    logger.info(f"CSV upload {csv.filename}: {len(rows)} rows detected as {data_source}")

    summary = await CSVImporter(Storage(db)).run(rows, data_source)

    return CsvImportResponse(
        message=f"{data_source} CSV import completed: {summary.imported} prospects imported, {summary.skipped} skipped",
        imported=summary.imported,
        skipped=summary.skipped,
        total=summary.total,
        data_source=data_source,
        errors=summary.errors[:MAX_CLIENT_ERRORS],
    )
