"""Holiday Sync Service.

Pulls holidays from every enabled provider config, stores the new ones
and rolls recurring holidays into the target year.  The nightly
background task and the manual admin trigger both call :func:`run_sync`.
"""

import asyncio
import logging
from datetime import datetime, timezone

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_calendar.config import settings
from holiday_calendar.models.sync_log import SyncLog
from holiday_calendar.schemas.provider_config import ProviderConfig
from holiday_calendar.schemas.sync import SyncResult
from holiday_calendar.services.holiday_providers import get_provider
from holiday_calendar.services.holiday_store import upsert_holiday
from holiday_calendar.services.provider_config_store import load_provider_configs
from holiday_calendar.services.recurrence_service import roll_recurring

logger = logging.getLogger(__name__)


def _get_client() -> httpx.AsyncClient:
    """Create the HTTP client used for one sync run."""
    return httpx.AsyncClient(timeout=settings.PROVIDER_HTTP_TIMEOUT)


# Serializes runs within this process. Runs in other transactions are
# covered by the unique constraint, see insert_holiday.
_sync_lock = asyncio.Lock()

RECURRING_SOURCE = "recurring"


def _log(db: AsyncSession, source: str, status: str, message: str) -> None:
    db.add(SyncLog(source=source, status=status, message=message))


async def _roll_recurring(db: AsyncSession, year: int) -> int:
    try:
        async with db.begin_nested():
            return await roll_recurring(db, year)
    except Exception as e:
        logger.exception("Sync: rolling recurring holidays failed")
        _log(db, RECURRING_SOURCE, "error", str(e) or type(e).__name__)
        return 0


async def sync_provider(
    db: AsyncSession,
    client: httpx.AsyncClient,
    config: ProviderConfig,
    year: int,
) -> int:
    """Sync one provider and record the outcome in the sync log.

    Never raises: failures are logged and count as zero new holidays.
    Providers missing a required API key are skipped without a log entry.
    """
    provider = get_provider(config.type, client)
    if not provider.can_sync(config):
        logger.info("Sync: %s has no API key, skipping", config.id)
        return 0

    try:
        logger.info("Sync: fetching %s holidays for %d from %s", config.category, year, config.id)
        result = await provider.fetch(config, year)

        count = 0
        # A database error rolls back this provider's rows only
        async with db.begin_nested():
            for holiday in result.holidays:
                if await upsert_holiday(db, holiday, config.id, config.category, config.color):
                    count += 1

        message = f"Synced {count} new holidays from {config.name} for {year}"
        if result.note:
            message += f" ({result.note})"
        _log(db, config.id, "success", message)
        logger.info("Sync: %s", message)
        return count
    except Exception as e:
        logger.exception("Sync: %s failed", config.id)
        _log(db, config.id, "error", str(e) or type(e).__name__)
        return 0


async def run_sync(
    db: AsyncSession,
    year: int | None = None,
    client: httpx.AsyncClient | None = None,
) -> SyncResult:
    """Sync all enabled providers and roll recurring holidays for ``year``.

    Args:
        db: Async database session.  The caller commits.
        year: Target year; defaults to the current year.
        client: HTTP client to use.  A client is created for the run
            when omitted.

    Returns:
        Created-record counts, in total and per provider id.
    """
    target_year = year or datetime.now(timezone.utc).year

    async with _sync_lock:
        configs = [c for c in await load_provider_configs(db) if c.enabled]
        if not configs:
            logger.info("Sync: no enabled providers")
            return SyncResult(year=target_year)

        logger.info("Sync: starting for %d with %d providers", target_year, len(configs))
        providers: dict[str, int] = {}

        owns_client = client is None
        if owns_client:
            client = _get_client()
        try:
            for config in configs:
                providers[config.id] = await sync_provider(db, client, config, target_year)
        finally:
            if owns_client:
                await client.aclose()

        recurring = await _roll_recurring(db, target_year)

    result = SyncResult(
        year=target_year,
        total=sum(providers.values()) + recurring,
        recurring=recurring,
        providers=providers,
    )
    logger.info("Sync: complete, %d holidays created", result.total)
    return result


async def get_recent_logs(db: AsyncSession, limit: int = 20) -> list[SyncLog]:
    """Return the newest sync log entries first."""
    result = await db.execute(
        select(SyncLog).order_by(SyncLog.synced_at.desc()).limit(limit)
    )
    return list(result.scalars().all())
