# backend/maven/routers/integration_routes.py
"""Integration API - vendor connections, credential tests, syncs and disconnects."""

from fastapi import APIRouter, Depends, HTTPException, BackgroundTasks, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import asyncio
import logging

from maven.config import settings
from maven.database import get_db
from maven.schemas import (
    IntegrationCreate,
    IntegrationUpdate,
    IntegrationResponse,
    IntegrationTestRequest,
    IntegrationTestResponse,
)
from maven.services.storage import Storage
from maven.services.activity_logger import ActivityLogger
from maven.services.integration_manager import IntegrationManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/integrations", tags=["integrations"])


async def _get_integration_or_404(storage: Storage, integration_id: int):
    integration = await storage.get_integration(integration_id)
    if not integration:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Integration not found"
        )
    return integration


@router.get("", response_model=List[IntegrationResponse])
async def list_integrations(db: AsyncSession = Depends(get_db)):
    integrations = await Storage(db).list_integrations()
    return [IntegrationResponse.from_model(i) for i in integrations]


@router.post("", response_model=IntegrationResponse)
async def create_integration(integration_data: IntegrationCreate, db: AsyncSession = Depends(get_db)):
    storage = Storage(db)

    if await storage.get_integration_by_name(integration_data.name):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Integration '{integration_data.name}' already exists"
        )

    integration = await storage.create_integration(integration_data.model_dump())
    logger.info(f"Integration {integration.name} created")
    return IntegrationResponse.from_model(integration)


@router.post("/test", response_model=IntegrationTestResponse)
async def test_integration(test_data: IntegrationTestRequest):
    """Probe a vendor with a candidate credential. Nothing is stored."""
    if not test_data.name or not test_data.api_key:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name and API key are required"
        )

    result = await IntegrationManager().test_integration(
        test_data.name, test_data.api_key, test_data.settings
    )

    return IntegrationTestResponse(
        success=result.success,
        message="Integration test successful" if result.success else result.error,
        data=result.data if result.success else None,
    )


@router.get("/{integration_id}", response_model=IntegrationResponse)
async def get_integration(integration_id: int, db: AsyncSession = Depends(get_db)):
    integration = await _get_integration_or_404(Storage(db), integration_id)
    return IntegrationResponse.from_model(integration)


@router.patch("/{integration_id}", response_model=IntegrationResponse)
async def update_integration(
    integration_id: int,
    updates: IntegrationUpdate,
    db: AsyncSession = Depends(get_db),
):
    storage = Storage(db)
    changes = updates.model_dump(exclude_unset=True)

    if "name" in changes:
        existing = await storage.get_integration_by_name(changes["name"])
        if existing and existing.id != integration_id:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Integration '{changes['name']}' already exists"
            )

    integration = await storage.update_integration(integration_id, changes)
    if not integration:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Integration not found"
        )
    return IntegrationResponse.from_model(integration)


@router.post("/{integration_id}/sync")
async def sync_integration(
    integration_id: int,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    """Mark the integration as syncing and run the sync in the background."""
    storage = Storage(db)
    integration = await _get_integration_or_404(storage, integration_id)

    await IntegrationManager(storage).start_sync(integration)

    # Start sync in background
    background_tasks.add_task(_execute_sync, integration_id)

    logger.info(f"Sync triggered for {integration.name}")
    return {"message": "Sync started successfully"}


@router.delete("/{integration_id}")
async def disconnect_integration(integration_id: int, db: AsyncSession = Depends(get_db)):
    """Clear the credential and mark the integration disconnected. The row is kept."""
    storage = Storage(db)
    integration = await _get_integration_or_404(storage, integration_id)

    await ActivityLogger(storage).log_disconnected(integration)
    await storage.disconnect_integration(integration_id)

    logger.info(f"Integration {integration.name} disconnected")
    return {"message": "Integration disconnected successfully"}


# Background sync execution
async def _execute_sync(integration_id: int):
    """Execute integration sync in background, in its own session."""
    from maven import database

    if settings.SYNC_DELAY_SECONDS:
        await asyncio.sleep(settings.SYNC_DELAY_SECONDS)

    async with database.AsyncSessionLocal() as db:
        try:
            await IntegrationManager(Storage(db)).run_sync(integration_id)
        except Exception:
            logger.exception(f"Background sync for integration {integration_id} failed")
