"""
ledger.py
Append-only income/expense ledger. Totals and breakdowns are recomputed from the
full list on every call (pandas), nothing is cached.
"""

from __future__ import annotations

import pandas as pd

import store
from errors import ValidationError
from models import Transaction, TransactionType
from store import Collection


def validate_transaction(t: Transaction) -> None:
    if not t.id:
        raise ValidationError("İşlem kimliği boş olamaz.", field="id")
    if not t.date:
        raise ValidationError("İşlem tarihi boş olamaz.", field="date")
    if not t.description.strip():
        raise ValidationError("Açıklama boş olamaz.", field="description")
    # Zero is allowed: a free trial renewal is still recorded.
    if t.amount < 0:
        raise ValidationError("Tutar negatif olamaz.", field="amount")


def append(transaction: Transaction) -> list[Transaction]:
    validate_transaction(transaction)
    return store.add(Collection.TRANSACTIONS, transaction)


def to_frame(transactions: list[Transaction]) -> pd.DataFrame:
    columns = ["id", "date", "amount", "type", "category", "description", "studentId"]
    if not transactions:
        return pd.DataFrame(columns=columns)
    rows = []
    for t in transactions:
        d = t.to_dict()
        d.setdefault("studentId", None)
        rows.append(d)
    return pd.DataFrame(rows, columns=columns)


def summary(transactions: list[Transaction]) -> dict[str, float]:
    income = sum(t.amount for t in transactions if t.type == TransactionType.INCOME)
    expense = sum(t.amount for t in transactions if t.type == TransactionType.EXPENSE)
    return {"income": float(income), "expense": float(expense), "balance": float(income - expense)}


def by_category(transactions: list[Transaction], kind: TransactionType = TransactionType.INCOME) -> pd.DataFrame:
    df = to_frame([t for t in transactions if t.type == kind])
    if df.empty:
        return pd.DataFrame(columns=["category", "amount"])
    out = df.groupby("category", sort=True)["amount"].sum().reset_index()
    return out.sort_values("amount", ascending=False, kind="stable").reset_index(drop=True)


def by_month(transactions: list[Transaction]) -> pd.DataFrame:
    """Income and expense per YYYY-MM, oldest month first."""
    df = to_frame(transactions)
    if df.empty:
        return pd.DataFrame(columns=["month", "income", "expense"])
    df["month"] = df["date"].str.slice(0, 7)
    pivot = df.pivot_table(index="month", columns="type", values="amount", aggfunc="sum", fill_value=0.0)
    out = pd.DataFrame({
        "month": pivot.index,
        "income": pivot.get(TransactionType.INCOME.value, pd.Series(0.0, index=pivot.index)).astype(float).values,
        "expense": pivot.get(TransactionType.EXPENSE.value, pd.Series(0.0, index=pivot.index)).astype(float).values,
    })
    return out.sort_values("month").reset_index(drop=True)


def month_income(transactions: list[Transaction], year: int, month: int) -> float:
    prefix = f"{year:04d}-{month:02d}"
    return float(sum(
        t.amount for t in transactions
        if t.type == TransactionType.INCOME and t.date.startswith(prefix)
    ))


def recent(transactions: list[Transaction], limit: int = 10) -> list[Transaction]:
    """Most recently appended first. No secondary sort."""
    return list(reversed(transactions))[:limit]


def transactions_to_csv_bytes(transactions: list[Transaction]) -> bytes:
    return to_frame(transactions).to_csv(index=False).encode("utf-8")
