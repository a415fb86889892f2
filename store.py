"""
store.py
Typed record store over db.py. Every mutation reads the whole collection,
changes it in memory and writes the whole collection back.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Iterable, TypeVar

import db
from errors import SchemaError
from models import Message, Notification, Settings, Student, Transaction

logger = logging.getLogger(__name__)

T = TypeVar("T", Student, Transaction, Message, Notification)


class Collection(str, Enum):
    STUDENTS = "demir_students"
    TRANSACTIONS = "demir_transactions"
    MESSAGES = "demir_messages"
    NOTIFICATIONS = "demir_notifications"


SETTINGS_KEY = "demir_settings"

RECORD_TYPES: dict[Collection, type] = {
    Collection.STUDENTS: Student,
    Collection.TRANSACTIONS: Transaction,
    Collection.MESSAGES: Message,
    Collection.NOTIFICATIONS: Notification,
}


def parse_records(collection: Collection, raw: Any) -> list:
    """Decode a JSON list into records; raises SchemaError on any malformed entry."""
    if not isinstance(raw, list):
        raise SchemaError(f"{collection.name.lower()} bir liste olmalıdır.")
    record_type = RECORD_TYPES[collection]
    return [record_type.from_dict(item) for item in raw]


def load(collection: Collection) -> list:
    raw = db.read_document(collection.value)
    if raw is None:
        return []
    return parse_records(collection, raw)


def save_all(collection: Collection, records: Iterable) -> None:
    db.write_document(collection.value, [r.to_dict() for r in records])


def save_many(collections: dict[Collection, Iterable], settings: Settings | None = None) -> None:
    """Replace several collections (and optionally the settings) in one transaction."""
    documents: dict[str, Any] = {c.value: [r.to_dict() for r in records] for c, records in collections.items()}
    if settings is not None:
        documents[SETTINGS_KEY] = settings.to_dict()
    db.write_documents(documents)


def add(collection: Collection, record) -> list:
    records = load(collection)
    records.append(record)
    save_all(collection, records)
    return records


def update(collection: Collection, record) -> bool:
    """Replace the record with the same id. Unknown ids are a silent no-op (returns False)."""
    records = load(collection)
    for i, existing in enumerate(records):
        if existing.id == record.id:
            records[i] = record
            save_all(collection, records)
            return True
    logger.warning("Update skipped, id not found", extra={"collection": collection.value})
    return False


def remove(collection: Collection, record_id: str) -> bool:
    records = load(collection)
    kept = [r for r in records if r.id != record_id]
    if len(kept) == len(records):
        return False
    save_all(collection, kept)
    return True


def get(collection: Collection, record_id: str):
    return next((r for r in load(collection) if r.id == record_id), None)


# ---------- Settings singleton ----------

def load_settings() -> Settings:
    return Settings.from_dict(db.read_document(SETTINGS_KEY))


def save_settings(settings: Settings) -> None:
    db.write_document(SETTINGS_KEY, settings.to_dict())
