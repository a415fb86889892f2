"""
subscriptions.py
Payment status lifecycle: Pending -> Paid (on payment, renewable) -> Overdue (derived from dates).
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime

import notifications
import store
from errors import RecordNotFoundError
from ledger import validate_transaction
from models import (
    PAYMENT_CYCLE_DAYS,
    PaymentStatus,
    Pricing,
    Settings,
    Severity,
    Student,
    SubscriptionType,
    Transaction,
    TransactionCategory,
    TransactionType,
)
from store import Collection
from utils import add_days_iso, format_amount, new_id, now_utc, parse_day, to_iso

logger = logging.getLogger(__name__)

URGENT_DAYS = 5


def price_for(subscription_type: SubscriptionType, pricing: Pricing) -> float:
    if subscription_type == SubscriptionType.MONTHLY:
        return pricing.monthly_price
    if subscription_type == SubscriptionType.YEARLY:
        return pricing.yearly_price
    return pricing.trial_price


def category_for(subscription_type: SubscriptionType) -> TransactionCategory:
    if subscription_type == SubscriptionType.MONTHLY:
        return TransactionCategory.MONTHLY_SUBSCRIPTION
    if subscription_type == SubscriptionType.YEARLY:
        return TransactionCategory.YEARLY_SUBSCRIPTION
    return TransactionCategory.OTHER_INCOME


def record_payment(student: Student, settings: Settings, now: datetime | None = None) -> tuple[Transaction, Student]:
    """
    Append an income transaction for the student's tier and mark the student Paid
    until now + 30 days (same cycle for every tier).

    Both collections are written in one store transaction.
    """
    now = now or now_utc()
    students = store.load(Collection.STUDENTS)
    index = next((i for i, s in enumerate(students) if s.id == student.id), None)
    if index is None:
        raise RecordNotFoundError("Öğrenci", student.id)
    student = students[index]

    price = price_for(student.subscription_type, settings.pricing)
    txn = Transaction(
        id=new_id(),
        date=to_iso(now),
        amount=price,
        type=TransactionType.INCOME,
        category=category_for(student.subscription_type),
        description=f"{student.full_name} - {student.subscription_type.value} Ödemesi",
        student_id=student.id,
    )
    paid = replace(
        student,
        payment_status=PaymentStatus.PAID,
        last_payment_date=to_iso(now),
        next_payment_date=add_days_iso(now, PAYMENT_CYCLE_DAYS),
    )

    validate_transaction(txn)
    transactions = store.load(Collection.TRANSACTIONS)
    transactions.append(txn)
    students[index] = paid
    store.save_many({Collection.TRANSACTIONS: transactions, Collection.STUDENTS: students})

    logger.info("Payment recorded", extra={"student_id": student.id})
    notifications.append("Ödeme Alındı", f"{format_amount(price)} TL tutarında ödeme başarıyla kaydedildi.", Severity.SUCCESS, now=now)
    return txn, paid


def is_past_due(student: Student, today: date) -> bool:
    due = parse_day(student.next_payment_date)
    return due is not None and due < today


def sweep_overdue(students: list[Student], today: date) -> tuple[int, list[Student]]:
    """
    Mark every student whose next payment date is strictly before `today` as Overdue.
    Pure; a second run with the same day changes nothing.
    """
    changed = 0
    result = []
    for s in students:
        if s.payment_status != PaymentStatus.OVERDUE and is_past_due(s, today):
            result.append(replace(s, payment_status=PaymentStatus.OVERDUE))
            changed += 1
        else:
            result.append(s)
    return changed, result


def run_overdue_check(today: date | None = None) -> int:
    today = today or now_utc().date()
    count, updated = sweep_overdue(store.load(Collection.STUDENTS), today)
    if count > 0:
        store.save_all(Collection.STUDENTS, updated)
        notifications.append("Otomatik Kontrol", f"{count} öğrenci gecikmiş ödeme durumuna alındı.", Severity.WARNING)
    else:
        notifications.append("Kontrol Tamamlandı", "Tüm ödemeler güncel görünüyor.", Severity.INFO)
    return count


def remaining_days(student: Student, today: date) -> int | None:
    """Days until the next payment; negative once it has passed."""
    due = parse_day(student.next_payment_date)
    if due is None:
        return None
    return (due - today).days


def is_urgent(student: Student, today: date) -> bool:
    days = remaining_days(student, today)
    return days is not None and days < URGENT_DAYS
