"""
sync.py
Desktop <-> mobile transfer of the student list through a QR code.

The payload is size-limited, so a scan may carry only part of the students.
Merging never deletes: local students missing from the payload stay as they are.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import store
from errors import SchemaError
from models import Student
from store import Collection

logger = logging.getLogger(__name__)

MAX_PAYLOAD_CHARS = 2500


@dataclass(frozen=True)
class MergeResult:
    success: bool
    message: str
    new_count: int = 0
    updated_count: int = 0


def _encode(records: list[dict[str, Any]]) -> str:
    return json.dumps({"students": records}, ensure_ascii=False, separators=(",", ":"))


def build_payload(students: list[Student], max_chars: int = MAX_PAYLOAD_CHARS) -> str:
    """
    JSON {"students": [...]} with as many leading students (in the given order)
    as fit in `max_chars`. Callers choose the ordering, e.g. most recently edited first.
    """
    included: list[dict[str, Any]] = []
    for s in students:
        candidate = included + [s.to_dict()]
        if len(_encode(candidate)) > max_chars:
            break
        included = candidate
    if len(included) < len(students):
        logger.info("Sync payload truncated to %d of %d students", len(included), len(students))
    return _encode(included)


def merge(imported_students: Any) -> MergeResult:
    """
    Reconcile imported students into the local collection by id. On a match the
    imported fields overwrite the local ones; unknown ids are appended.
    """
    if imported_students is None:
        return MergeResult(False, "Veri boş.")
    if not isinstance(imported_students, list):
        return MergeResult(False, "Geçersiz senkronizasyon verisi.")

    local = store.load(Collection.STUDENTS)
    merged = [s.to_dict() for s in local]
    index = {d["id"]: i for i, d in enumerate(merged)}
    new_count = updated_count = 0

    try:
        for raw in imported_students:
            if not isinstance(raw, dict) or not raw.get("id"):
                raise SchemaError("Kimliği olmayan öğrenci kaydı.")
            student_id = str(raw["id"])
            if student_id in index:
                i = index[student_id]
                merged[i] = {**merged[i], **raw}
                updated_count += 1
            else:
                index[student_id] = len(merged)
                merged.append(dict(raw))
                new_count += 1
        result = store.parse_records(Collection.STUDENTS, merged)
    except SchemaError as exc:
        logger.warning("Merge rejected: %s", exc.message, extra={"error_code": exc.code})
        return MergeResult(False, f"Veri birleştirme hatası oluştu. {exc.message}")

    store.save_all(Collection.STUDENTS, result)
    logger.info("Merged students: %d new, %d updated", new_count, updated_count)
    return MergeResult(
        True,
        f"Senkronizasyon başarılı: {new_count} yeni kayıt, {updated_count} güncelleme.",
        new_count,
        updated_count,
    )


def merge_payload(payload: str | dict[str, Any]) -> MergeResult:
    """Merge a scanned QR payload (text or already decoded)."""
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except ValueError:
            return MergeResult(False, "QR verisi okunamadı.")
    if not isinstance(payload, dict) or "students" not in payload:
        return MergeResult(False, "Geçersiz senkronizasyon verisi.")
    return merge(payload["students"])
