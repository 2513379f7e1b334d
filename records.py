"""
records.py
Translation between sheet rows (loosely typed dicts) and domain dataclasses.

The spreadsheet backend hands back strings, blanks and the occasional number
for the same column. All of that is normalized here and nowhere else.
"""

from __future__ import annotations

import logging

from models import PENDING, STATUSES, Catalog, Expense, Member, Transaction, User
from utils import coerce_amount, coerce_date, coerce_text, iso_or_empty

logger = logging.getLogger(__name__)


def _first(raw: dict, *keys):
    for k in keys:
        if k in raw and raw[k] not in (None, ""):
            return raw[k]
    return None


def _id(raw: dict, *keys) -> str | None:
    value = _first(raw, *keys)
    return coerce_text(value) or None


def member_from_record(raw: dict, catalog: Catalog) -> Member:
    """
    Plan and period references are mapped onto catalog ids when they match
    an id or label; unrecognized values are kept verbatim so that a later
    calculation fails loudly instead of silently repricing.
    """
    plan_raw = coerce_text(_first(raw, "membershipType", "plan"))
    period_raw = coerce_text(_first(raw, "feeType", "feePeriod"))
    plan = catalog.find_plan(plan_raw)
    period = catalog.find_period(period_raw)
    if plan_raw and plan is None:
        logger.debug("Member row has unknown plan %r", plan_raw)

    status = coerce_text(raw.get("status")).lower()
    if status not in STATUSES:
        status = PENDING

    return Member(
        id=_id(raw, "id", "memberId"),
        name=coerce_text(raw.get("name")),
        phone=coerce_text(raw.get("phone")),
        cnic=coerce_text(raw.get("cnic")),
        address=coerce_text(raw.get("address")),
        plan_id=plan.id if plan else plan_raw,
        period_id=period.id if period else period_raw,
        joining_date=coerce_date(raw.get("joiningDate")),
        expiry_date=coerce_date(raw.get("expiryDate")),
        fee=coerce_amount(raw.get("fee")),
        status=status,
    )


def member_to_record(member: Member, catalog: Catalog) -> dict:
    # the sheet stores display labels for plan and fee type
    return {
        "name": member.name,
        "phone": member.phone,
        "cnic": member.cnic,
        "address": member.address,
        "membershipType": catalog.plan_label(member.plan_id),
        "feeType": catalog.period_label(member.period_id),
        "joiningDate": iso_or_empty(member.joining_date),
        "expiryDate": iso_or_empty(member.expiry_date),
        "fee": member.fee,
        "status": member.status,
    }


def transaction_from_record(raw: dict) -> Transaction:
    return Transaction(
        id=_id(raw, "id", "transactionId"),
        member_id=_id(raw, "memberId"),
        member_name=coerce_text(raw.get("memberName")),
        member_phone=coerce_text(raw.get("memberPhone")),
        amount=coerce_amount(raw.get("amount")),
        type=coerce_text(raw.get("type")) or "membership",
        payment_method=coerce_text(raw.get("paymentMethod")) or "Cash",
        date=coerce_date(raw.get("date")),
        status=coerce_text(raw.get("status")) or "completed",
        notes=coerce_text(raw.get("notes")),
        added_by=coerce_text(_first(raw, "addedBy", "userName")),
    )


def transaction_to_record(tx: Transaction) -> dict:
    return {
        "memberId": tx.member_id or "",
        "memberName": tx.member_name,
        "memberPhone": tx.member_phone,
        "amount": tx.amount,
        "type": tx.type,
        "paymentMethod": tx.payment_method,
        "date": iso_or_empty(tx.date),
        "status": tx.status,
        "notes": tx.notes,
        "addedBy": tx.added_by,
    }


def expense_from_record(raw: dict) -> Expense:
    return Expense(
        id=_id(raw, "id", "expenseId"),
        description=coerce_text(raw.get("description")),
        amount=coerce_amount(raw.get("amount")),
        category=coerce_text(raw.get("category")),
        date=coerce_date(raw.get("date")),
        added_by=coerce_text(raw.get("addedBy")),
        notes=coerce_text(raw.get("notes")),
    )


def expense_to_record(expense: Expense) -> dict:
    return {
        "description": expense.description,
        "amount": expense.amount,
        "category": expense.category,
        "date": iso_or_empty(expense.date),
        "addedBy": expense.added_by,
        "notes": expense.notes,
    }


def user_from_record(raw: dict) -> User:
    return User(
        id=_id(raw, "id", "userId"),
        username=coerce_text(raw.get("username")),
        name=coerce_text(raw.get("name")),
        role=coerce_text(raw.get("role")).lower() or "employee",
        phone=coerce_text(raw.get("phone")),
        password_hash=coerce_text(_first(raw, "passwordHash", "password")),
    )
