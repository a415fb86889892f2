"""
backup.py
Full-state export to a portable JSON document and restore from one.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import store
from errors import SchemaError
from models import NOTIFICATION_CAP, Settings
from store import Collection
from utils import now_utc, to_iso

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.2"

# Document field -> collection, for the optional collections of a restore.
OPTIONAL_COLLECTIONS = {
    "transactions": Collection.TRANSACTIONS,
    "messages": Collection.MESSAGES,
    "notifications": Collection.NOTIFICATIONS,
}


@dataclass(frozen=True)
class RestoreResult:
    success: bool
    message: str


def export_all(now: datetime | None = None) -> dict[str, Any]:
    return {
        "students": [s.to_dict() for s in store.load(Collection.STUDENTS)],
        "transactions": [t.to_dict() for t in store.load(Collection.TRANSACTIONS)],
        "settings": store.load_settings().to_dict(),
        "messages": [m.to_dict() for m in store.load(Collection.MESSAGES)],
        "notifications": [n.to_dict() for n in store.load(Collection.NOTIFICATIONS)],
        "timestamp": to_iso(now or now_utc()),
        "version": BACKUP_VERSION,
    }


def export_json(now: datetime | None = None) -> str:
    return json.dumps(export_all(now), ensure_ascii=False, indent=2)


def backup_filename(now: datetime | None = None) -> str:
    return f"demir_hocam_yedek_{(now or now_utc()).date().isoformat()}.json"


def restore(document: Any) -> RestoreResult:
    """
    Replace Students wholesale, and Transactions/Settings/Messages/Notifications
    only when the document carries them. Everything is parsed before anything is
    written, so a bad document leaves the store untouched.
    """
    if not isinstance(document, dict) or not isinstance(document.get("students"), list):
        return RestoreResult(False, "Geçersiz yedek dosyası formatı.")

    try:
        updates: dict[Collection, list] = {
            Collection.STUDENTS: store.parse_records(Collection.STUDENTS, document["students"]),
        }
        for field, collection in OPTIONAL_COLLECTIONS.items():
            if document.get(field) is not None:
                updates[collection] = store.parse_records(collection, document[field])
        if Collection.NOTIFICATIONS in updates:
            updates[Collection.NOTIFICATIONS] = updates[Collection.NOTIFICATIONS][:NOTIFICATION_CAP]
        settings = None
        if document.get("settings") is not None:
            if not isinstance(document["settings"], dict):
                raise SchemaError("settings bir nesne olmalıdır.")
            settings = Settings.from_dict(document["settings"])
    except SchemaError as exc:
        logger.warning("Backup rejected: %s", exc.message, extra={"error_code": exc.code})
        return RestoreResult(False, f"Geçersiz yedek dosyası formatı. {exc.message}")

    store.save_many(updates, settings=settings)
    logger.info("Backup restored (%d students)", len(updates[Collection.STUDENTS]))
    return RestoreResult(True, "Yedek başarıyla yüklendi.")


def restore_json(text: str | bytes) -> RestoreResult:
    try:
        document = json.loads(text)
    except (ValueError, TypeError):
        return RestoreResult(False, "Dosya okuma hatası.")
    return restore(document)
