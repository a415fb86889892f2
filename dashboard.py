"""
dashboard.py
Headline numbers for the dashboard page.
"""

from __future__ import annotations

from datetime import date

import desks
import ledger
from models import PaymentStatus, Student, SubscriptionType, Transaction
from utils import parse_day


def birthdays_on(students: list[Student], day: date) -> list[Student]:
    result = []
    for s in students:
        dob = parse_day(s.dob)
        if dob and (dob.month, dob.day) == (day.month, day.day):
            result.append(s)
    return result


def dashboard_stats(students: list[Student], transactions: list[Transaction], day: date) -> dict:
    return {
        "total_students": len(students),
        "empty_desks": len(desks.empty_desks(students)),
        "monthly_subs": sum(1 for s in students if s.subscription_type == SubscriptionType.MONTHLY),
        "yearly_subs": sum(1 for s in students if s.subscription_type == SubscriptionType.YEARLY),
        "birthdays": birthdays_on(students, day),
        "overdue_payments": sum(1 for s in students if s.payment_status == PaymentStatus.OVERDUE),
        "monthly_revenue": ledger.month_income(transactions, day.year, day.month),
    }
