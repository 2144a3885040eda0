import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_calendar.config import settings
from holiday_calendar.core.rate_limit import limiter
from holiday_calendar.database import get_db
from holiday_calendar.routers import holidays, provider_configs, sync

logger = logging.getLogger(__name__)


def _seconds_until(hour: int, now: datetime) -> float:
    """Seconds from ``now`` until the next ``hour``:00 UTC."""
    target = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


# ---------------------------------------------------------------------------
# Holiday Sync background task
# ---------------------------------------------------------------------------
async def _holiday_sync_loop() -> None:
    """Sync holidays nightly at SYNC_HOUR_UTC (and at startup if enabled)."""
    from holiday_calendar.database import session_scope
    from holiday_calendar.services.sync_service import run_sync

    run_now = settings.SYNC_ON_STARTUP
    while True:
        if not run_now:
            await asyncio.sleep(_seconds_until(settings.SYNC_HOUR_UTC, datetime.now(timezone.utc)))
        run_now = False

        try:
            async with session_scope() as db:
                result = await run_sync(db)
            logger.info(
                "Holiday sync: %d holidays created (%d recurring)",
                result.total,
                result.recurring,
            )
        except Exception:
            logger.exception("Holiday sync error")


# ---------------------------------------------------------------------------
# Lifespan context manager
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan: runs on startup and shutdown."""
    logger.info("%s started", settings.APP_NAME)
    sync_task = asyncio.create_task(_holiday_sync_loop())
    yield
    sync_task.cancel()
    from holiday_calendar.core.redis_client import close_redis
    await close_redis()
    logger.info("%s shutting down", settings.APP_NAME)


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------
app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)

app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

# -- Rate limiting ------------------------------------------------------------
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------
@app.get("/health", tags=["health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check with DB and Redis connectivity verification."""
    from holiday_calendar.core.redis_client import get_redis

    checks: dict[str, str] = {"db": "ok", "redis": "ok"}

    try:
        await db.execute(select(1))
    except Exception:
        checks["db"] = "error"

    try:
        redis = await get_redis()
        if redis is None:
            checks["redis"] = "unavailable"
        else:
            await redis.ping()
    except Exception:
        checks["redis"] = "error"

    # "unavailable" = optional service not configured; only "error" = degraded
    degraded = any(v == "error" for v in checks.values())
    return {"status": "degraded" if degraded else "ok", "app": settings.APP_NAME, **checks}


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(holidays.router, prefix=settings.API_V1_PREFIX)
app.include_router(provider_configs.router, prefix=settings.API_V1_PREFIX)
app.include_router(sync.router, prefix=settings.API_V1_PREFIX)
