"""Conversion helpers for common type coercion."""

import uuid
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional


def coerce_int(value: object) -> Optional[int]:
    """Return an int for valid string/int inputs, otherwise None."""
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except (TypeError, ValueError):
            return None
    return None


def coerce_uuid(value: object) -> Optional[uuid.UUID]:
    """Return a UUID for valid string/UUID inputs, otherwise None."""
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value
    if isinstance(value, str):
        try:
            return uuid.UUID(value.strip())
        except ValueError:
            return None
    return None


def coerce_float(value: object) -> Optional[float]:
    """Return a float for numeric inputs (Decimal included), otherwise None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def coerce_date(value: object) -> Optional[date]:
    """Parse YYYY-MM-DD strings (or pass dates through)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def coerce_time(value: object) -> Optional[time]:
    """Parse HH:MM or HH:MM:SS strings (or pass times through)."""
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        try:
            return time.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def blank_to_none(value: Optional[str]) -> Optional[str]:
    """Trim a string and turn empty results into None."""
    if value is None:
        return None
    value = value.strip()
    return value or None
