"""
notifications.py
Bounded, newest-first event log shown in the navbar.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

import store
from models import NOTIFICATION_CAP, Notification, Severity
from store import Collection
from utils import new_id, now_utc, to_iso

logger = logging.getLogger(__name__)


def append(title: str, message: str, severity: Severity | str, now: datetime | None = None) -> Notification:
    """
    Insert a new unread notification at the head and keep only the newest
    NOTIFICATION_CAP entries. Older ones are dropped for good.
    """
    notif = Notification(
        id=new_id(),
        title=title,
        message=message,
        severity=Severity(severity),
        date=to_iso(now or now_utc()),
        is_read=False,
    )
    current = store.load(Collection.NOTIFICATIONS)
    current.insert(0, notif)
    store.save_all(Collection.NOTIFICATIONS, current[:NOTIFICATION_CAP])

    log_level = logging.WARNING if notif.severity in (Severity.WARNING, Severity.ERROR) else logging.INFO
    logger.log(log_level, "%s: %s", title, message)
    return notif


def mark_all_read() -> list[Notification]:
    updated = [
        n if n.is_read else replace(n, is_read=True)
        for n in store.load(Collection.NOTIFICATIONS)
    ]
    store.save_all(Collection.NOTIFICATIONS, updated)
    return updated


def unread_count(notifications: list[Notification]) -> int:
    return sum(1 for n in notifications if not n.is_read)


def recent(limit: int = 10) -> list[Notification]:
    return store.load(Collection.NOTIFICATIONS)[:limit]
