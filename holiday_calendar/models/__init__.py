"""SQLAlchemy ORM models.

All models are imported here so that Alembic can discover them
via ``Base.metadata`` when generating migrations.
"""

from holiday_calendar.models.holiday import Holiday  # noqa: F401
from holiday_calendar.models.setting import Setting  # noqa: F401
from holiday_calendar.models.sync_log import SyncLog  # noqa: F401

__all__ = [
    "Holiday",
    "Setting",
    "SyncLog",
]
