"""Holidays router.

Public read access to the calendar plus admin management of holiday
records.  Admin-created holidays use the ``custom`` source.
"""

import uuid
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_calendar.core.dependencies import get_current_admin
from holiday_calendar.database import get_db
from holiday_calendar.models.holiday import Holiday, default_color
from holiday_calendar.schemas.holiday import (
    HolidayCategory,
    HolidayCreate,
    HolidayResponse,
    HolidayStats,
    HolidayUpdate,
    VisibilityUpdate,
)
from holiday_calendar.services.holiday_store import find_holiday

router = APIRouter(prefix="/holidays", tags=["Holidays"])

CUSTOM_SOURCE = "custom"


async def _get_holiday_or_404(db: AsyncSession, holiday_id: uuid.UUID) -> Holiday:
    result = await db.execute(select(Holiday).where(Holiday.id == holiday_id))
    holiday = result.scalar_one_or_none()
    if holiday is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Holiday not found",
        )
    return holiday


@router.get("", response_model=list[HolidayResponse])
async def list_holidays(
    db: Annotated[AsyncSession, Depends(get_db)],
    year: int | None = Query(None, ge=1900, le=2200),
    category: HolidayCategory | None = Query(None),
    include_hidden: bool = Query(False, description="Include hidden holidays (admin views)"),
):
    """List holidays ordered by date, optionally for one year or category."""
    query = select(Holiday)

    if year is not None:
        query = query.where(Holiday.date.startswith(f"{year:04d}-"))
    if category is not None:
        query = query.where(Holiday.category == category)
    if not include_hidden:
        query = query.where(Holiday.visible == True)  # noqa: E712

    result = await db.execute(query.order_by(Holiday.date, Holiday.title))
    return result.scalars().all()


@router.get("/stats/summary", response_model=HolidayStats)
async def holiday_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: dict = Depends(get_current_admin),
):
    """Count this year's holidays by category, plus hidden ones."""
    year = str(datetime.now(timezone.utc).year)
    in_year = Holiday.date.startswith(f"{year}-")

    result = await db.execute(
        select(Holiday.category, func.count(Holiday.id))
        .where(in_year)
        .group_by(Holiday.category)
    )
    by_category = dict(result.all())

    hidden = await db.scalar(
        select(func.count(Holiday.id)).where(in_year, Holiday.visible == False)  # noqa: E712
    )

    return HolidayStats(
        total=sum(by_category.values()),
        federal=by_category.get("federal", 0),
        fun=by_category.get("fun", 0),
        company=by_category.get("company", 0),
        hidden=hidden or 0,
        year=year,
    )


@router.get("/{holiday_id}", response_model=HolidayResponse)
async def get_holiday(
    holiday_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Return a single holiday."""
    return await _get_holiday_or_404(db, holiday_id)


@router.post("", response_model=HolidayResponse, status_code=status.HTTP_201_CREATED)
async def create_holiday(
    body: HolidayCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: dict = Depends(get_current_admin),
):
    """Create a company/custom holiday."""
    if await find_holiday(db, body.title, body.date, CUSTOM_SOURCE) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A holiday with this title already exists on this date",
        )

    holiday = Holiday(
        title=body.title,
        date=body.date,
        category=body.category,
        color=body.color or default_color(body.category),
        source=CUSTOM_SOURCE,
        visible=body.visible,
        recurring=body.recurring,
    )
    db.add(holiday)
    await db.flush()
    await db.refresh(holiday)
    return holiday


@router.put("/{holiday_id}", response_model=HolidayResponse)
async def update_holiday(
    holiday_id: uuid.UUID,
    body: HolidayUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: dict = Depends(get_current_admin),
):
    """Update fields of a holiday."""
    holiday = await _get_holiday_or_404(db, holiday_id)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)

    title = changes.get("title", holiday.title)
    date = changes.get("date", holiday.date)
    if (title, date) != (holiday.title, holiday.date):
        clash = await find_holiday(db, title, date, holiday.source)
        if clash is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="A holiday with this title already exists on this date",
            )

    for key, value in changes.items():
        setattr(holiday, key, value)
    await db.flush()
    await db.refresh(holiday)
    return holiday


@router.patch("/{holiday_id}/visibility", response_model=HolidayResponse)
async def set_holiday_visibility(
    holiday_id: uuid.UUID,
    body: VisibilityUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: dict = Depends(get_current_admin),
):
    """Show or hide a holiday in the employee calendar."""
    holiday = await _get_holiday_or_404(db, holiday_id)
    holiday.visible = body.visible
    await db.flush()
    await db.refresh(holiday)
    return holiday


@router.delete("/bulk/source/{source}")
async def delete_holidays_by_source(
    source: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: dict = Depends(get_current_admin),
):
    """Delete every holiday created from one source."""
    result = await db.execute(delete(Holiday).where(Holiday.source == source))
    return {"message": f"Deleted {result.rowcount} {source} holidays"}


@router.delete("/{holiday_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_holiday(
    holiday_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: dict = Depends(get_current_admin),
):
    """Delete a holiday."""
    holiday = await _get_holiday_or_404(db, holiday_id)
    await db.delete(holiday)
    await db.flush()
    return None
