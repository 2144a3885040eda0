"""Sync router.

Manual holiday sync trigger and the sync activity log.  A sync can take
several minutes when a provider falls back to day-by-day requests.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_calendar.config import settings
from holiday_calendar.core.dependencies import get_current_admin
from holiday_calendar.core.rate_limit import limiter
from holiday_calendar.database import get_db
from holiday_calendar.schemas.sync import SyncLogResponse, SyncRequest, SyncResponse
from holiday_calendar.services.sync_service import get_recent_logs, run_sync

router = APIRouter(prefix="/sync", tags=["Sync"])


@router.post("", response_model=SyncResponse)
@limiter.limit(settings.SYNC_RATE_LIMIT)
async def trigger_sync(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: dict = Depends(get_current_admin),
    body: SyncRequest | None = None,
):
    """Sync all enabled holiday providers and roll recurring holidays."""
    year = body.year if body is not None else None
    result = await run_sync(db, year)
    return SyncResponse(message="Holiday sync completed", synced=result)


@router.get("/logs", response_model=list[SyncLogResponse])
async def list_sync_logs(
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: dict = Depends(get_current_admin),
    limit: int = Query(20, ge=1, le=200),
):
    """Return recent sync log entries, newest first."""
    return await get_recent_logs(db, limit)
