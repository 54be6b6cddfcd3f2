# backend/maven/routers/sequence_routes.py
"""Outreach sequence API, including prospect enrollments."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from maven.database import get_db
from maven.schemas import (
    SequenceCreate,
    SequenceUpdate,
    SequenceResponse,
    EnrollmentCreate,
    EnrollmentResponse,
)
from maven.services.storage import Storage
from maven.services.activity_logger import ActivityLogger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sequences", tags=["sequences"])


async def _get_sequence_or_404(storage: Storage, sequence_id: int):
    sequence = await storage.get_sequence(sequence_id)
    if not sequence:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Sequence not found"
        )
    return sequence


@router.get("", response_model=List[SequenceResponse])
async def list_sequences(db: AsyncSession = Depends(get_db)):
    return await Storage(db).list_sequences()


@router.get("/active", response_model=List[SequenceResponse])
async def list_active_sequences(db: AsyncSession = Depends(get_db)):
    return await Storage(db).get_active_sequences()


@router.get("/{sequence_id}", response_model=SequenceResponse)
async def get_sequence(sequence_id: int, db: AsyncSession = Depends(get_db)):
    return await _get_sequence_or_404(Storage(db), sequence_id)


@router.post("", response_model=SequenceResponse)
async def create_sequence(sequence_data: SequenceCreate, db: AsyncSession = Depends(get_db)):
    """Create a sequence. The response rate is derived from sent/response totals."""
    sequence = await Storage(db).create_sequence(sequence_data.model_dump())
    logger.info(f"Sequence {sequence.id} '{sequence.name}' created")
    return sequence


@router.patch("/{sequence_id}", response_model=SequenceResponse)
async def update_sequence(
    sequence_id: int,
    updates: SequenceUpdate,
    db: AsyncSession = Depends(get_db),
):
    changes = updates.model_dump(exclude_unset=True)
    if changes.get("steps") is not None:
        numbers = [s["step"] for s in changes["steps"]]
        if numbers != sorted(numbers) or len(set(numbers)) != len(numbers):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Steps must be in ascending, unique step order"
            )

    sequence = await Storage(db).update_sequence(sequence_id, changes)
    if not sequence:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Sequence not found"
        )
    return sequence


# ==================== ENROLLMENTS ====================

@router.get("/{sequence_id}/enrollments", response_model=List[EnrollmentResponse])
async def list_enrollments(sequence_id: int, db: AsyncSession = Depends(get_db)):
    storage = Storage(db)
    await _get_sequence_or_404(storage, sequence_id)
    return await storage.list_enrollments(sequence_id)


@router.post("/{sequence_id}/enrollments", response_model=EnrollmentResponse)
async def enroll_prospect(
    sequence_id: int,
    enrollment_data: EnrollmentCreate,
    db: AsyncSession = Depends(get_db),
):
    """Enroll a prospect in a sequence. A prospect can be enrolled once per sequence."""
    storage = Storage(db)
    sequence = await _get_sequence_or_404(storage, sequence_id)

    prospect = await storage.get_prospect(enrollment_data.prospect_id)
    if not prospect:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Prospect not found"
        )

    if await storage.get_enrollment(sequence_id, prospect.id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Prospect already enrolled in this sequence"
        )

    enrollment = await storage.create_enrollment({
        "sequence_id": sequence_id,
        **enrollment_data.model_dump(),
    })
    await ActivityLogger(storage).log_enrollment(prospect, sequence.id, sequence.name)

    return enrollment
