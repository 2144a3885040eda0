"""Holiday Store.

Idempotent creation of holiday rows.  A holiday is identified by its
``(title, date, source)`` triple; existing rows are never modified by
sync, so admin edits to visibility, color or recurrence survive re-syncs.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_calendar.models.holiday import Holiday, default_color

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedHoliday:
    """A provider holiday reduced to the fields the calendar stores."""

    title: str
    date: str  # YYYY-MM-DD


async def find_holiday(
    db: AsyncSession,
    title: str,
    date: str,
    source: str | None = None,
) -> Holiday | None:
    """Return the holiday matching title and date (and source, if given)."""
    query = select(Holiday).where(
        Holiday.title == title,
        Holiday.date == date,
    )
    if source is not None:
        query = query.where(Holiday.source == source)
    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none()


async def insert_holiday(db: AsyncSession, holiday: Holiday) -> bool:
    """Insert ``holiday`` in its own savepoint.

    A unique-constraint violation means another transaction stored the
    same ``(title, date, source)`` first; the savepoint is rolled back,
    the rest of the session stays usable and False is returned.
    """
    try:
        async with db.begin_nested():
            db.add(holiday)
            await db.flush()
    except IntegrityError:
        logger.info(
            "Holiday %r on %s from %s already stored, skipping",
            holiday.title, holiday.date, holiday.source,
        )
        return False
    return True


async def upsert_holiday(
    db: AsyncSession,
    candidate: NormalizedHoliday,
    source: str,
    category: str,
    color: str | None = None,
) -> bool:
    """Create a visible, non-recurring holiday unless it already exists.

    Returns True if a row was created.
    """
    existing = await find_holiday(db, candidate.title, candidate.date, source)
    if existing is not None:
        return False

    return await insert_holiday(db, Holiday(
        title=candidate.title,
        date=candidate.date,
        category=category,
        color=color or default_color(category),
        source=source,
        visible=True,
        recurring=False,
    ))
