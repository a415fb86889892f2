"""
db.py
SQLite helpers for the key-value substrate: one JSON document per collection key.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from config import get_config

logger = logging.getLogger(__name__)

# Overrides the configured path when set (tests point this at a tmp file).
DB_FILE: Path | None = None

_SCHEMA = """
CREATE TABLE IF NOT EXISTS collections (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
)
"""


def db_path() -> Path:
    return DB_FILE if DB_FILE is not None else get_config().db_file


@contextmanager
def get_conn():
    path = db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    try:
        conn.execute(_SCHEMA)
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db() -> None:
    """Create the database file and table if needed."""
    with get_conn():
        pass
    logger.info("Database ready at %s", db_path())


def read_document(key: str) -> Any | None:
    """Return the decoded JSON stored under `key`, or None if never written."""
    with get_conn() as conn:
        row = conn.execute("SELECT value FROM collections WHERE key = ?", (key,)).fetchone()
    if row is None:
        return None
    return json.loads(row["value"])


def write_documents(documents: dict[str, Any]) -> None:
    """
    Replace every given key in a single transaction.
    Either all documents are stored or none is.
    """
    rows = [(key, json.dumps(value, ensure_ascii=False)) for key, value in documents.items()]
    with get_conn() as conn:
        conn.executemany(
            """
            INSERT INTO collections(key, value) VALUES(?, ?)
            ON CONFLICT(key) DO UPDATE SET value=excluded.value
            """,
            rows,
        )


def write_document(key: str, value: Any) -> None:
    write_documents({key: value})


def stored_keys() -> list[str]:
    with get_conn() as conn:
        return [r["key"] for r in conn.execute("SELECT key FROM collections ORDER BY key")]
