"""Tests for rolling recurring holidays into a new year."""

from sqlalchemy import select

from holiday_calendar.models.holiday import Holiday
from holiday_calendar.services.recurrence_service import roll_date, roll_recurring


async def _add(db, **kwargs) -> Holiday:
    defaults = {
        "title": "Founders Day",
        "date": "2024-03-15",
        "category": "company",
        "color": "#123456",
        "source": "custom",
        "visible": True,
        "recurring": True,
    }
    defaults.update(kwargs)
    holiday = Holiday(**defaults)
    db.add(holiday)
    await db.flush()
    return holiday


async def _rows(db, title: str) -> list[Holiday]:
    result = await db.execute(
        select(Holiday).where(Holiday.title == title).order_by(Holiday.date)
    )
    return list(result.scalars().all())


class TestRollDate:
    def test_swaps_year(self):
        assert roll_date("2024-03-15", 2026) == "2026-03-15"

    def test_leap_day_to_leap_year(self):
        assert roll_date("2024-02-29", 2028) == "2028-02-29"

    def test_leap_day_to_common_year(self):
        assert roll_date("2024-02-29", 2026) is None


class TestRollRecurring:
    async def test_rolls_forward_preserving_fields(self, db_session):
        await _add(db_session, visible=False)

        count = await roll_recurring(db_session, 2026)

        assert count == 1
        rows = await _rows(db_session, "Founders Day")
        assert [r.date for r in rows] == ["2024-03-15", "2026-03-15"]
        new = rows[1]
        assert new.category == "company"
        assert new.color == "#123456"
        assert new.source == "custom"
        assert new.visible is False
        assert new.recurring is True

    async def test_second_roll_is_noop(self, db_session):
        await _add(db_session)

        assert await roll_recurring(db_session, 2026) == 1
        assert await roll_recurring(db_session, 2026) == 0
        assert len(await _rows(db_session, "Founders Day")) == 2

    async def test_non_recurring_ignored(self, db_session):
        await _add(db_session, title="One-off Offsite", recurring=False)

        assert await roll_recurring(db_session, 2026) == 0
        assert len(await _rows(db_session, "One-off Offsite")) == 1

    async def test_existing_row_from_any_source_counts(self, db_session):
        await _add(db_session, title="Pi Day", date="2024-03-14", source="custom")
        await _add(db_session, title="Pi Day", date="2026-03-14", source="calendarific-us", recurring=False)

        assert await roll_recurring(db_session, 2026) == 0

    async def test_leap_day_skipped_in_common_year(self, db_session):
        await _add(db_session, title="Leap Party", date="2024-02-29")

        assert await roll_recurring(db_session, 2027) == 0
        assert await roll_recurring(db_session, 2028) == 1

    async def test_templates_from_several_years_create_one_row(self, db_session):
        await _add(db_session, title="Summer Party", date="2024-07-20")
        await _add(db_session, title="Summer Party", date="2025-07-20")

        assert await roll_recurring(db_session, 2026) == 1
        assert len(await _rows(db_session, "Summer Party")) == 3
