"""Shared fixtures: every test gets its own SQLite file."""

from datetime import datetime, timezone

import pytest

import db
from models import PaymentStatus, Student, SubscriptionType

NOW = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def temp_db(tmp_path, monkeypatch):
    path = tmp_path / "study_room_test.db"
    monkeypatch.setattr(db, "DB_FILE", path)
    return path


@pytest.fixture
def now():
    return NOW


def make_student(student_id="s1", **overrides) -> Student:
    fields = dict(
        id=student_id,
        full_name=f"Öğrenci {student_id}",
        parent_name="Veli",
        student_phone="05321234567",
        parent_phone="05329876543",
        dob="2008-03-10",
        registration_date="2026-01-01T08:00:00.000Z",
        subscription_type=SubscriptionType.MONTHLY,
        payment_status=PaymentStatus.PENDING,
    )
    fields.update(overrides)
    return Student(**fields)
