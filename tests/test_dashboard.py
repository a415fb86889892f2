"""Dashboard numbers."""

from datetime import date

from dashboard import birthdays_on, dashboard_stats
from models import PaymentStatus, SubscriptionType, Transaction, TransactionCategory, TransactionType
from conftest import make_student


def test_dashboard_stats():
    day = date(2026, 3, 10)
    rows = [
        make_student("a", desk_number=1, dob="2008-03-10T00:00:00.000Z"),
        make_student("b", subscription_type=SubscriptionType.YEARLY, payment_status=PaymentStatus.OVERDUE, dob="2007-05-01"),
        make_student("c", subscription_type=SubscriptionType.TRIAL, desk_number=2, dob="2009-03-11"),
    ]
    txns = [
        Transaction(id="1", date="2026-03-02T10:00:00.000Z", amount=1500, type=TransactionType.INCOME,
                    category=TransactionCategory.MONTHLY_SUBSCRIPTION, description="a"),
        Transaction(id="2", date="2026-02-02T10:00:00.000Z", amount=1500, type=TransactionType.INCOME,
                    category=TransactionCategory.MONTHLY_SUBSCRIPTION, description="b"),
    ]

    stats = dashboard_stats(rows, txns, day)

    assert stats["total_students"] == 3
    assert stats["empty_desks"] == 33
    assert stats["monthly_subs"] == 1
    assert stats["yearly_subs"] == 1
    assert stats["overdue_payments"] == 1
    assert stats["monthly_revenue"] == 1500
    assert [s.id for s in stats["birthdays"]] == ["a"]


def test_birthdays_skip_bad_dates():
    assert birthdays_on([make_student("a", dob="")], date(2026, 3, 10)) == []
