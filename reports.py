"""
reports.py
Dashboard metrics, monthly summaries and CSV exports (pandas).
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date

import pandas as pd

import billing
from models import ACTIVE


def _frame(rows, columns: list[str]) -> pd.DataFrame:
    records = [r if isinstance(r, dict) else asdict(r) for r in rows]
    if not records:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(records)


def to_csv_bytes(rows) -> bytes:
    df = pd.DataFrame([r if isinstance(r, dict) else asdict(r) for r in rows])
    return df.to_csv(index=False).encode("utf-8")


def members_frame(members, catalog, today: date) -> pd.DataFrame:
    rows = [
        {
            "id": m.id,
            "name": m.name,
            "phone": m.phone,
            "plan": catalog.plan_label(m.plan_id),
            "fee_type": catalog.period_label(m.period_id),
            "joining_date": m.joining_date,
            "expiry_date": m.expiry_date,
            "fee": m.fee,
            "status": billing.member_status(m, today),
        }
        for m in members
    ]
    return _frame(rows, ["id", "name", "phone", "plan", "fee_type", "joining_date", "expiry_date", "fee", "status"])


def revenue_summary_by_month(transactions) -> pd.DataFrame:
    df = _frame(transactions, ["date", "amount"]).dropna(subset=["date"])
    if df.empty:
        return pd.DataFrame(columns=["month", "revenue"])
    df["month"] = pd.to_datetime(df["date"]).dt.strftime("%Y-%m")
    out = df.groupby("month", as_index=False)["amount"].sum()
    out = out.rename(columns={"amount": "revenue"})
    return out.sort_values("month", ascending=False).reset_index(drop=True)


def expense_summary_by_category(expenses) -> pd.DataFrame:
    df = _frame(expenses, ["category", "amount"])
    if df.empty:
        return pd.DataFrame(columns=["category", "total"])
    out = df.groupby("category", as_index=False)["amount"].sum()
    out = out.rename(columns={"amount": "total"})
    return out.sort_values("total", ascending=False).reset_index(drop=True)


def _month_total(df: pd.DataFrame, today: date) -> int:
    if df.empty:
        return 0
    in_month = df["date"].map(lambda d: isinstance(d, date) and (d.year, d.month) == (today.year, today.month))
    return int(df.loc[in_month.astype(bool), "amount"].sum())


def dashboard_stats(members, transactions, expenses, today: date, warning_days: int = 7) -> dict:
    """
    Same keys as the sheet's getDashboardStats, computed locally so that
    member status reflects `today` rather than whatever the sheet cached.
    """
    members = list(members)
    tx = _frame(transactions, ["date", "amount"])
    ex = _frame(expenses, ["date", "amount"])
    revenue = int(tx["amount"].sum()) if not tx.empty else 0
    spent = int(ex["amount"].sum()) if not ex.empty else 0

    return {
        "totalMembers": len(members),
        "activeMembers": sum(1 for m in members if billing.member_status(m, today) == ACTIVE),
        "totalRevenue": revenue,
        "totalExpenses": spent,
        "netProfit": revenue - spent,
        "thisMonthMembers": sum(
            1 for m in members
            if m.joining_date and (m.joining_date.year, m.joining_date.month) == (today.year, today.month)
        ),
        "thisMonthRevenue": _month_total(tx, today),
        "thisMonthExpenses": _month_total(ex, today),
        "expiringMemberships": sum(1 for m in members if billing.is_expiring_soon(m, today, warning_days)),
    }
