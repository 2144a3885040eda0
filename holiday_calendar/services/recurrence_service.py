"""Recurrence Service.

Copies recurring holidays forward into a target year, keeping month and
day fixed.
"""

import calendar
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_calendar.models.holiday import Holiday
from holiday_calendar.services.holiday_store import find_holiday, insert_holiday

logger = logging.getLogger(__name__)


def roll_date(date: str, year: int) -> str | None:
    """Swap the year of a ``YYYY-MM-DD`` string.

    Returns None for Feb 29 when ``year`` is not a leap year.
    """
    month_day = date[5:10]
    if month_day == "02-29" and not calendar.isleap(year):
        return None
    return f"{year:04d}-{month_day}"


async def roll_recurring(db: AsyncSession, year: int) -> int:
    """Create the ``year`` occurrence of every recurring holiday.

    A holiday counts as present when any row with the same title and date
    exists, whatever its source.  New rows inherit category, color,
    source and visibility and stay recurring.

    Returns the number of rows created.
    """
    result = await db.execute(select(Holiday).where(Holiday.recurring == True))  # noqa: E712
    templates = result.scalars().all()

    count = 0
    for holiday in templates:
        new_date = roll_date(holiday.date, year)
        if new_date is None:
            logger.debug("Skipping leap-day holiday %r for %d", holiday.title, year)
            continue

        if await find_holiday(db, holiday.title, new_date) is not None:
            continue

        if await insert_holiday(db, Holiday(
            title=holiday.title,
            date=new_date,
            category=holiday.category,
            color=holiday.color,
            source=holiday.source,
            visible=holiday.visible,
            recurring=True,
        )):
            count += 1

    logger.info("Recurring holidays: %d created for %d", count, year)
    return count
