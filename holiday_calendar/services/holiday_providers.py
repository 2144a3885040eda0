"""Holiday Providers.

One adapter per provider type.  Each adapter fetches a year of holidays
from its API and normalizes the response into ``NormalizedHoliday``
entries; storing them is left to the sync service.

Adapters raise on transport errors and malformed responses.  A single
malformed holiday entry is skipped instead.
"""

import asyncio
import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, ClassVar

import httpx

from holiday_calendar.config import settings
from holiday_calendar.schemas.provider_config import ProviderConfig, ProviderType
from holiday_calendar.services.holiday_store import NormalizedHoliday

logger = logging.getLogger(__name__)

# Names must contain one of these to count as a fun holiday
FUN_KEYWORDS = (
    "day", "national", "world", "international",
    "pizza", "donut", "ice cream", "chocolate", "coffee",
    "dog", "cat", "pet", "friendship", "love",
)

# Calendarific holiday types that are never fun holidays
EXCLUDED_FUN_TYPES = ("Federal", "Public")

# Error codes Abstract API uses when a request needs a paid plan
PLAN_UPGRADE_ERROR_CODES = frozenset({"payment_required", "upgrade_required"})


class ProviderResponseError(ValueError):
    """The provider answered, but not with something we can use."""


@dataclass
class FetchResult:
    holidays: list[NormalizedHoliday] = field(default_factory=list)
    note: str | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _iso_date(value: Any) -> str | None:
    """Return the date-only part of an ISO date or datetime string."""
    if not isinstance(value, str) or not value:
        return None
    return value.split("T", 1)[0]


def _walk_path(data: Any, path: str | None) -> Any:
    """Follow a dot-separated path of keys through parsed JSON.

    An empty path returns ``data`` itself; an absent segment returns None.
    """
    if not path:
        return data
    node = data
    for segment in path.split("."):
        if not isinstance(node, dict) or node.get(segment) is None:
            return None
        node = node[segment]
    return node


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as e:
        raise ProviderResponseError(f"Invalid JSON from {response.url.host}: {e}") from e


def _require_list(data: Any, what: str) -> list:
    if not isinstance(data, list):
        raise ProviderResponseError(
            f"Expected a list of {what}, got {type(data).__name__}"
        )
    return data


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class HolidayProvider:
    """Base class for provider adapters."""

    type: ClassVar[ProviderType]
    requires_api_key: ClassVar[bool] = False

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    def can_sync(self, config: ProviderConfig) -> bool:
        """Whether ``config`` has everything this adapter needs."""
        return not self.requires_api_key or bool(config.api_key)

    async def fetch(self, config: ProviderConfig, year: int) -> FetchResult:
        raise NotImplementedError


PROVIDERS: dict[ProviderType, type[HolidayProvider]] = {}


def register_provider(cls: type[HolidayProvider]) -> type[HolidayProvider]:
    """Class decorator adding an adapter to :data:`PROVIDERS`."""
    PROVIDERS[cls.type] = cls
    return cls


def get_provider(provider_type: ProviderType, client: httpx.AsyncClient) -> HolidayProvider:
    """Instantiate the adapter registered for ``provider_type``."""
    try:
        cls = PROVIDERS[provider_type]
    except KeyError:
        raise ValueError(f"No adapter registered for provider type {provider_type!r}") from None
    return cls(client)


# ---------------------------------------------------------------------------
# Nager.Date: fixed public holiday schedule
# ---------------------------------------------------------------------------

@register_provider
class NagerDateProvider(HolidayProvider):
    type = ProviderType.NAGER

    async def fetch(self, config: ProviderConfig, year: int) -> FetchResult:
        url = f"{config.endpoint.rstrip('/')}/PublicHolidays/{year}/{config.country}"
        response = await self.client.get(url)
        response.raise_for_status()

        holidays = []
        for item in _require_list(_json(response), "holidays"):
            if not isinstance(item, dict):
                continue
            title = item.get("name")
            holiday_date = _iso_date(item.get("date"))
            if not title or not holiday_date:
                continue
            holidays.append(NormalizedHoliday(title=title, date=holiday_date))
        return FetchResult(holidays)


# ---------------------------------------------------------------------------
# Calendarific: API key, optional type filter
# ---------------------------------------------------------------------------

def is_fun_holiday(name: str, types: list[str]) -> bool:
    """Keyword test used for providers categorized as fun holidays."""
    if any(excluded in t for t in types for excluded in EXCLUDED_FUN_TYPES):
        return False
    lowered = name.lower()
    return any(keyword in lowered for keyword in FUN_KEYWORDS)


@register_provider
class CalendarificProvider(HolidayProvider):
    type = ProviderType.CALENDARIFIC
    requires_api_key = True

    async def fetch(self, config: ProviderConfig, year: int) -> FetchResult:
        params: dict[str, Any] = {
            "api_key": config.api_key,
            "country": config.country,
            "year": year,
        }
        if config.type_filter:
            params["type"] = config.type_filter

        response = await self.client.get(
            f"{config.endpoint.rstrip('/')}/holidays", params=params,
        )
        response.raise_for_status()
        data = _json(response)

        body = data.get("response") if isinstance(data, dict) else None
        if isinstance(body, list) and not body:
            # Calendarific sends an empty list instead of an object when nothing matches
            return FetchResult()
        items = _walk_path(body, "holidays")
        if items is None:
            raise ProviderResponseError("Response has no response.holidays")

        fun_only = config.category == "fun"
        holidays = []
        for item in _require_list(items, "holidays"):
            if not isinstance(item, dict):
                continue
            title = item.get("name")
            holiday_date = _iso_date(_walk_path(item, "date.iso"))
            if not title or not holiday_date:
                continue
            types = item.get("type") or []
            if isinstance(types, str):
                types = [types]
            if fun_only and not is_fun_holiday(title, types):
                continue
            holidays.append(NormalizedHoliday(title=title, date=holiday_date))
        return FetchResult(holidays)


# ---------------------------------------------------------------------------
# Abstract API: bulk queries need a paid plan
# ---------------------------------------------------------------------------

def normalize_abstract_date(item: dict) -> str | None:
    """Build ``YYYY-MM-DD`` from an Abstract API holiday entry.

    Entries carry either ``date_year``/``date_month``/``date_day`` or a
    ``M/D/YYYY`` string in ``date``.
    """
    year, month, day = item.get("date_year"), item.get("date_month"), item.get("date_day")
    if year and month and day:
        try:
            return f"{int(year):04d}-{int(month):02d}-{int(day):02d}"
        except (TypeError, ValueError):
            return None

    raw = item.get("date")
    if isinstance(raw, str) and raw.count("/") == 2:
        month, day, year = raw.split("/")
        try:
            return f"{int(year):04d}-{int(month):02d}-{int(day):02d}"
        except ValueError:
            return None
    return None


def _requires_plan_upgrade(response: httpx.Response) -> bool:
    if response.status_code == httpx.codes.PAYMENT_REQUIRED:
        return True
    try:
        data = response.json()
    except ValueError:
        return False
    code = _walk_path(data, "error.code")
    return isinstance(code, str) and code.lower() in PLAN_UPGRADE_ERROR_CODES


@register_provider
class AbstractApiProvider(HolidayProvider):
    type = ProviderType.ABSTRACT
    requires_api_key = True

    def __init__(self, client: httpx.AsyncClient, request_delay: float | None = None) -> None:
        super().__init__(client)
        self.request_delay = (
            settings.PROVIDER_DAY_REQUEST_DELAY if request_delay is None else request_delay
        )

    async def fetch(self, config: ProviderConfig, year: int) -> FetchResult:
        params = {"api_key": config.api_key, "country": config.country, "year": year}
        response = await self.client.get(config.endpoint, params=params)

        if response.is_error:
            if _requires_plan_upgrade(response):
                logger.info(
                    "%s: bulk query needs a paid plan, falling back to day-by-day requests",
                    config.id,
                )
                items = await self._fetch_day_by_day(config, year)
                return FetchResult(
                    self._normalize(items),
                    note="free plan: queried day by day",
                )
            response.raise_for_status()

        items = _require_list(_json(response), "holidays")
        return FetchResult(self._normalize(items))

    async def _fetch_day_by_day(self, config: ProviderConfig, year: int) -> list:
        """Query every day of ``year`` separately, at most one request per delay."""
        days = 366 if calendar.isleap(year) else 365
        start = date(year, 1, 1)
        items: list = []

        for offset in range(days):
            if offset:
                await asyncio.sleep(self.request_delay)
            day = start + timedelta(days=offset)
            params = {
                "api_key": config.api_key,
                "country": config.country,
                "year": year,
                "month": day.month,
                "day": day.day,
            }
            try:
                response = await self.client.get(config.endpoint, params=params)
                response.raise_for_status()
                data = response.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.debug("%s: no data for %s (%s)", config.id, day, e)
                continue
            if isinstance(data, list):
                items.extend(data)

        return items

    @staticmethod
    def _normalize(items: list) -> list[NormalizedHoliday]:
        holidays = []
        for item in items:
            if not isinstance(item, dict):
                continue
            title = item.get("name")
            holiday_date = normalize_abstract_date(item)
            if not title or not holiday_date:
                continue
            holidays.append(NormalizedHoliday(title=title, date=holiday_date))
        return holidays


# ---------------------------------------------------------------------------
# Custom: URL template plus field mapping
# ---------------------------------------------------------------------------

@register_provider
class CustomProvider(HolidayProvider):
    type = ProviderType.CUSTOM

    async def fetch(self, config: ProviderConfig, year: int) -> FetchResult:
        url = (
            config.endpoint
            .replace("{year}", str(year))
            .replace("{country}", config.country)
        )
        params = {"api_key": config.api_key} if config.api_key else None
        response = await self.client.get(url, params=params)
        response.raise_for_status()

        items = _walk_path(_json(response), config.response_path_to_holidays)
        if items is None:
            logger.info(
                "%s: nothing at %r in response", config.id, config.response_path_to_holidays,
            )
            return FetchResult()

        title_field = config.title_field or "name"
        date_field = config.date_field or "date"
        holidays = []
        for item in _require_list(items, "holidays"):
            title = _walk_path(item, title_field)
            holiday_date = _iso_date(_walk_path(item, date_field))
            if not title or not holiday_date:
                continue
            holidays.append(NormalizedHoliday(title=str(title), date=holiday_date))
        return FetchResult(holidays)
