import logging
from contextlib import contextmanager
from datetime import MAXYEAR, MINYEAR, date
from typing import Iterator

from fastapi import HTTPException, status

logger = logging.getLogger(__name__)


@contextmanager
def server_errors(message: str) -> Iterator[None]:
    """
    Re-raises HTTPException untouched; any other exception raised inside
    the block becomes a 500 with {"error": message, "details": str(exc)}.
    """
    try:
        yield
    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("%s: %s", message, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": message, "details": str(exc)},
        ) from exc


def bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def parse_iso_date(val: str, name: str) -> date:
    try:
        return date.fromisoformat(val)
    except ValueError:
        raise bad_request(f"{name} must be an ISO date (YYYY-MM-DD), got '{val}'")


def require_period(year: int | None, month: int | None, message: str) -> tuple[int, int]:
    if year is None or month is None:
        raise bad_request(message)
    # MAXYEAR itself is excluded: its December has no following month
    if not MINYEAR <= year < MAXYEAR:
        raise bad_request(f"year must be between {MINYEAR} and {MAXYEAR - 1}, got {year}")
    if not 1 <= month <= 12:
        raise bad_request(f"month must be between 1 and 12, got {month}")
    return year, month
