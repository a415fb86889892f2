"""
students.py
Student registration, edits, deletion, search, CSV export and sample data.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta

import pandas as pd

import notifications
import store
import subscriptions
from models import PAYMENT_CYCLE_DAYS, PaymentStatus, Severity, Student, SubscriptionType
from store import Collection
from utils import add_days_iso, new_id, now_utc, parse_day, to_iso

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_student_inputs(full_name: str, student_phone: str, parent_phone: str,
                            email: str | None = None, dob: str | None = None) -> list[str]:
    errors: list[str] = []
    if not full_name.strip():
        errors.append("Ad soyad zorunludur.")
    if not student_phone.strip() and not parent_phone.strip():
        errors.append("En az bir telefon numarası girilmelidir.")
    if email and not EMAIL_RE.match(email.strip()):
        errors.append("E-posta adresi geçersiz.")
    if dob and parse_day(dob) is None:
        errors.append("Doğum tarihi geçerli bir ISO tarih olmalıdır (YYYY-MM-DD).")
    return errors


def register_student(
    full_name: str,
    parent_name: str,
    student_phone: str,
    parent_phone: str,
    subscription_type: SubscriptionType = SubscriptionType.MONTHLY,
    contract_accepted: bool = False,
    email: str | None = None,
    dob: str | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> Student | None:
    """
    Create a student in Pending state with no desk and the first payment due in
    30 days. Returns None (and raises a warning notification) when the
    registration contract was not accepted.
    """
    now = now or now_utc()
    if not contract_accepted:
        notifications.append("Sözleşme Hatası", "Lütfen öğrenci kayıt sözleşmesini onaylayın.", Severity.WARNING, now=now)
        return None

    student = Student(
        id=new_id(),
        full_name=full_name.strip(),
        parent_name=parent_name.strip(),
        student_phone=student_phone.strip(),
        parent_phone=parent_phone.strip(),
        dob=dob or to_iso(now),
        registration_date=to_iso(now),
        subscription_type=SubscriptionType(subscription_type),
        payment_status=PaymentStatus.PENDING,
        desk_number=None,
        email=(email or "").strip() or None,
        next_payment_date=add_days_iso(now, PAYMENT_CYCLE_DAYS),
        notes=(notes or "").strip() or None,
    )
    store.add(Collection.STUDENTS, student)
    notifications.append("Kayıt Başarılı", f"{student.full_name} sisteme eklendi.", Severity.SUCCESS, now=now)
    return student


def update_student(student: Student) -> bool:
    updated = store.update(Collection.STUDENTS, student)
    if updated:
        notifications.append("Güncelleme Başarılı", f"{student.full_name} bilgileri güncellendi.", Severity.SUCCESS)
    return updated


def delete_student(student_id: str) -> bool:
    """Transactions and messages pointing at the student are kept."""
    removed = store.remove(Collection.STUDENTS, student_id)
    if removed:
        notifications.append("Silindi", "Öğrenci kaydı silindi.", Severity.INFO)
    return removed


def find_student(students: list[Student], student_id: str) -> Student | None:
    return next((s for s in students if s.id == student_id), None)


def search_students(students: list[Student], term: str) -> list[Student]:
    term = term.strip().lower()
    if not term:
        return list(students)
    return [
        s for s in students
        if term in s.full_name.lower()
        or term in s.parent_name.lower()
        or term in s.student_phone
        or term in s.parent_phone
    ]


def students_to_csv_bytes(students: list[Student]) -> bytes:
    df = pd.DataFrame([s.to_dict() for s in students])
    return df.to_csv(index=False).encode("utf-8")


def insert_sample_data(now: datetime | None = None) -> list[Student]:
    """
    Register 3 students (one paid, two past due) and run the overdue check.
    Adds new rows on every run.
    """
    now = now or now_utc()
    samples = [
        ("Ayşe Yılmaz", "Fatma Yılmaz", "05321112233", SubscriptionType.MONTHLY, 1),
        ("Mehmet Demir", "Ali Demir", "05324445566", SubscriptionType.YEARLY, 12),
        ("Zeynep Kaya", "Hülya Kaya", "05327778899", SubscriptionType.TRIAL, None),
    ]
    created = []
    for name, parent, phone, sub, desk in samples:
        s = Student(
            id=new_id(),
            full_name=name,
            parent_name=parent,
            student_phone=phone,
            parent_phone=phone,
            dob=to_iso(now - timedelta(days=365 * 17)),
            registration_date=to_iso(now - timedelta(days=40)),
            subscription_type=sub,
            payment_status=PaymentStatus.PENDING,
            desk_number=desk,
            next_payment_date=to_iso(now - timedelta(days=10)),
        )
        store.add(Collection.STUDENTS, s)
        created.append(s)

    _, paid = subscriptions.record_payment(created[0], store.load_settings(), now=now)
    created[0] = paid
    subscriptions.run_overdue_check(now.date())
    return created
