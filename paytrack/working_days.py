"""
Working days of a month.

Source: the working-days service (GET <url>?year=YYYY&month=M returning
{"workingDays": n, "days": ["YYYY-MM-DD", ...]}).
When the service is disabled, unreachable or returns something unexpected,
the local calendar is used instead: every date of the month whose weekday
is not in WEEKLY_DAYS_OFF and which is not listed in PUBLIC_HOLIDAYS.

The count and the date list are always views of one WorkingDays value,
so both forms fall back together.
"""

import asyncio
import logging
from calendar import monthrange
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Literal, Optional

import httpx

from paytrack.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkingDays:
    year: int
    month: int
    days: tuple[date, ...]
    source: Literal["api", "local"]

    @property
    def count(self) -> int:
        return len(self.days)


# --- Local calendar (fallback) ---


def _public_holidays() -> set[date]:
    holidays: set[date] = set()
    for raw in settings.PUBLIC_HOLIDAYS:
        try:
            holidays.add(date.fromisoformat(raw))
        except ValueError:
            logger.warning("Ignoring malformed PUBLIC_HOLIDAYS entry: %r", raw)
    return holidays


def local_working_days(year: int, month: int) -> WorkingDays:
    """Working days by the built-in calendar (no service call)."""
    days_off = set(settings.WEEKLY_DAYS_OFF)
    holidays = _public_holidays()
    _, last = monthrange(year, month)
    days = tuple(
        d
        for d in (date(year, month, n) for n in range(1, last + 1))
        if d.weekday() not in days_off and d not in holidays
    )
    return WorkingDays(year=year, month=month, days=days, source="local")


# --- Cache and working-days service ---

_api_cache: dict[tuple[int, int], WorkingDays] = {}


def _parse_response(payload: object, year: int, month: int) -> Optional[WorkingDays]:
    """
    Builds WorkingDays from the service body or returns None if the body
    has no usable "days" list. Dates outside the month are dropped.
    """
    if not isinstance(payload, dict):
        return None
    raw_days = payload.get("days")
    if not isinstance(raw_days, list):
        return None
    try:
        parsed = {date.fromisoformat(str(raw)[:10]) for raw in raw_days}
    except ValueError:
        return None

    days = tuple(sorted(d for d in parsed if d.year == year and d.month == month))
    return WorkingDays(year=year, month=month, days=days, source="api")


async def _fetch_month_async(year: int, month: int) -> Optional[WorkingDays]:
    try:
        async with httpx.AsyncClient(
            timeout=settings.WORKING_DAYS_API_TIMEOUT_SEC,
            follow_redirects=True,
        ) as client:
            resp = await client.get(
                settings.WORKING_DAYS_API_URL,
                params={"year": year, "month": month},
            )
            resp.raise_for_status()
    except (httpx.HTTPError, httpx.TimeoutException) as exc:
        logger.warning("working-days request %d-%02d failed: %s", year, month, exc)
        return None

    try:
        payload = resp.json()
    except ValueError:
        logger.warning("working-days %d-%02d: response is not JSON", year, month)
        return None

    result = _parse_response(payload, year, month)
    if result is None:
        logger.warning("working-days %d-%02d: unexpected response body", year, month)
    return result


async def resolve_working_days(year: int, month: int) -> WorkingDays:
    """
    Working days of (year, month): cached service answer, fresh service
    answer, or the local calendar. Fallback results are not cached so the
    service is asked again next time.
    """
    if not settings.WORKING_DAYS_API_ENABLED or not settings.WORKING_DAYS_API_URL:
        return local_working_days(year, month)

    key = (year, month)
    if key in _api_cache:
        return _api_cache[key]

    fetched = await _fetch_month_async(year, month)
    if fetched is None:
        logger.warning(
            "Using local calendar for %d-%02d (working-days service unavailable)",
            year, month,
        )
        return local_working_days(year, month)

    _api_cache[key] = fetched
    return fetched


async def working_days_count(year: int, month: int) -> int:
    return (await resolve_working_days(year, month)).count


async def working_days_list(year: int, month: int) -> list[date]:
    return list((await resolve_working_days(year, month)).days)


async def warm_cache_on_startup(months: Optional[list[tuple[int, int]]] = None) -> None:
    """
    Pre-loads the current and next month at application start
    (in parallel, one request each).
    """
    if not settings.WORKING_DAYS_API_ENABLED or not settings.WORKING_DAYS_API_URL:
        return

    if months is None:
        today = date.today()
        next_month = today.replace(day=1) + timedelta(days=32)
        months = [(today.year, today.month), (next_month.year, next_month.month)]

    to_fetch = [key for key in months if key not in _api_cache]
    if not to_fetch:
        logger.info("Working days already cached for: %s", months)
        return

    results = await asyncio.gather(
        *[resolve_working_days(y, m) for y, m in to_fetch],
        return_exceptions=True,
    )
    for (y, m), result in zip(to_fetch, results):
        if not isinstance(result, WorkingDays) or result.source != "api":
            logger.warning("Working days NOT cached for %d-%02d (will use fallback)", y, m)
