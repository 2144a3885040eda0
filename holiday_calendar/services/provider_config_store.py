"""Provider Config Store.

The list of configured holiday providers lives in a single settings row
as one serialized JSON array.  Callers read the whole list, mutate it
and write the whole list back.  Concurrent admin edits race on that
read-modify-write; edits are rare enough that no locking is done.
"""

import logging

from pydantic import TypeAdapter
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_calendar.models.setting import Setting
from holiday_calendar.schemas.provider_config import ProviderConfig, ProviderType

logger = logging.getLogger(__name__)

PROVIDER_CONFIGS_KEY = "holiday_api_configs"

_config_list = TypeAdapter(list[ProviderConfig])


def default_provider_configs() -> list[ProviderConfig]:
    """Return the built-in provider configs used before any have been saved."""
    return [
        ProviderConfig(
            id="nager-us",
            name="Nager.Date (Federal)",
            type=ProviderType.NAGER,
            endpoint="https://date.nager.at/api/v3",
            country="US",
            category="federal",
            color="#3B82F6",
            enabled=False,
        ),
        ProviderConfig(
            id="calendarific-us",
            name="Calendarific (Fun)",
            type=ProviderType.CALENDARIFIC,
            endpoint="https://calendarific.com/api/v2",
            api_key="",
            country="US",
            category="fun",
            color="#10B981",
            type_filter="observance,national",
            enabled=False,
        ),
    ]


async def load_provider_configs(db: AsyncSession) -> list[ProviderConfig]:
    """Load all provider configs.

    Falls back to :func:`default_provider_configs` when nothing has been
    saved yet.  A stored value that is not a valid config list raises
    ``pydantic.ValidationError``.
    """
    result = await db.execute(
        select(Setting).where(Setting.key == PROVIDER_CONFIGS_KEY)
    )
    setting = result.scalar_one_or_none()
    if setting is None:
        return default_provider_configs()
    return _config_list.validate_json(setting.value)


async def save_provider_configs(db: AsyncSession, configs: list[ProviderConfig]) -> None:
    """Replace the stored provider config list."""
    value = _config_list.dump_json(configs, by_alias=True).decode("utf-8")

    result = await db.execute(
        select(Setting).where(Setting.key == PROVIDER_CONFIGS_KEY)
    )
    setting = result.scalar_one_or_none()
    if setting is None:
        db.add(Setting(key=PROVIDER_CONFIGS_KEY, value=value))
    else:
        setting.value = value
    await db.flush()
    logger.info("Saved %d provider configs", len(configs))
