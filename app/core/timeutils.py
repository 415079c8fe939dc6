"""Clock helpers. "Today" always means today at the studio."""
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from app.core.config import STUDIO_TIMEZONE


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def studio_now() -> datetime:
    return datetime.now(ZoneInfo(STUDIO_TIMEZONE))


def studio_today() -> date:
    return studio_now().date()


def next_monday(today: date | None = None) -> date:
    """Monday of the coming week.

    Sunday moves one day ahead; every other day, Monday included, jumps to the
    following week's Monday.
    """
    today = today or studio_today()
    weekday = today.isoweekday()  # Monday=1 .. Sunday=7
    if weekday == 7:
        return today + timedelta(days=1)
    return today + timedelta(days=8 - weekday)
