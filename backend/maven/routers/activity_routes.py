# backend/maven/routers/activity_routes.py
"""
Activity API - read and append the audit log.

Activities are append-only: there is no update or delete endpoint.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from maven.database import get_db
from maven.schemas import ActivityCreate, ActivityResponse
from maven.services.storage import Storage

router = APIRouter(prefix="/api/activities", tags=["activities"])


@router.get("/recent", response_model=List[ActivityResponse])
async def get_recent_activities(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Most recent activities, newest first."""
    return await Storage(db).get_recent_activities(limit)


@router.get("", response_model=List[ActivityResponse])
async def list_activities(
    response: Response,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """One page of the audit log, newest first. The full count is sent in X-Total-Count."""
    storage = Storage(db)
    response.headers["X-Total-Count"] = str(await storage.count_activities())
    return await storage.list_activities(limit=limit, offset=offset)


@router.post("", response_model=ActivityResponse)
async def create_activity(activity_data: ActivityCreate, db: AsyncSession = Depends(get_db)):
    storage = Storage(db)

    if activity_data.prospect_id is not None and not await storage.get_prospect(activity_data.prospect_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Prospect not found"
        )
    if activity_data.sequence_id is not None and not await storage.get_sequence(activity_data.sequence_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Sequence not found"
        )

    return await storage.create_activity(activity_data.model_dump())
