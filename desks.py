"""
desks.py
Desk map: 35 numbered desks in four columns, at most one student per desk by convention.
"""

from __future__ import annotations

import logging
from dataclasses import replace

import store
from errors import RecordNotFoundError, ValidationError
from models import DESK_COUNT, Student
from store import Collection

logger = logging.getLogger(__name__)

# Room layout as seen from the door.
DESK_LAYOUT = {
    "left": list(range(1, 13)),
    "mid_left": list(range(13, 21)) + [35],
    "mid_right": list(range(21, 26)) + list(range(31, 35)),
    "right": list(range(26, 31)),
}

DESK_NUMBERS = sorted(n for column in DESK_LAYOUT.values() for n in column)


def occupancy(students: list[Student]) -> dict[int, Student]:
    """Desk -> student. If two students share a desk the first one wins."""
    taken: dict[int, Student] = {}
    for s in students:
        if s.desk_number is not None and s.desk_number not in taken:
            taken[s.desk_number] = s
    return taken


def empty_desks(students: list[Student]) -> list[int]:
    taken = occupancy(students)
    return [n for n in DESK_NUMBERS if n not in taken]


def unassigned_students(students: list[Student]) -> list[Student]:
    return [s for s in students if s.desk_number is None]


def assign_desk(student_id: str, desk: int, strict: bool = False) -> Student:
    """
    Put a student on a desk. With strict=True a desk held by another student is
    rejected; by default the operator may override.
    """
    desk = int(desk)
    if not 1 <= desk <= DESK_COUNT:
        raise ValidationError(f"Masa numarası 1 ile {DESK_COUNT} arasında olmalıdır.", field="deskNumber")

    students = store.load(Collection.STUDENTS)
    student = next((s for s in students if s.id == student_id), None)
    if student is None:
        raise RecordNotFoundError("Öğrenci", student_id)

    holder = next((s for s in students if s.desk_number == desk and s.id != student_id), None)
    if holder is not None:
        if strict:
            raise ValidationError(f"{desk} numaralı masa {holder.full_name} tarafından kullanılıyor.", field="deskNumber")
        logger.warning("Desk %s shared by two students", desk, extra={"student_id": student_id})

    seated = replace(student, desk_number=desk)
    store.update(Collection.STUDENTS, seated)
    return seated


def release_desk(student_id: str) -> Student | None:
    student = store.get(Collection.STUDENTS, student_id)
    if student is None or student.desk_number is None:
        return student
    freed = replace(student, desk_number=None)
    store.update(Collection.STUDENTS, freed)
    return freed
