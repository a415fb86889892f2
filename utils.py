"""
utils.py
Dates, ids and small formatting helpers.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def today() -> date:
    return now_utc().date()


def to_iso(moment: datetime) -> str:
    """UTC timestamp with milliseconds and a Z suffix, e.g. 2026-01-31T09:15:00.000Z."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_day(value: str | None) -> date | None:
    """
    Calendar date of a stored ISO string ("2026-01-31" or "2026-01-31T09:15:00.000Z").
    Time of day is ignored. Returns None for empty or unparseable values.
    """
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def add_days_iso(moment: datetime, days: int) -> str:
    return to_iso(moment + timedelta(days=days))


def new_id() -> str:
    return str(uuid.uuid4())


def format_amount(amount: float) -> str:
    return str(int(amount)) if float(amount).is_integer() else f"{amount:.2f}"
