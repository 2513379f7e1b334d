"""
finance.py
Payment transactions and gym expenses.
"""

from __future__ import annotations

import logging
from datetime import date

from models import EXPENSE_CATEGORIES, PAYMENT_METHODS, TRANSACTION_TYPES, Expense, Transaction, User
from records import expense_from_record, expense_to_record, transaction_from_record, transaction_to_record
from sheets import SheetsClient, StoreError, StoreResult
from utils import coerce_amount

logger = logging.getLogger(__name__)


def load_transactions(store: SheetsClient, use_cache: bool = True) -> list[Transaction]:
    result = store.get_transactions(use_cache=use_cache)
    if not result.success:
        raise StoreError(result)
    return [transaction_from_record(r) for r in result.rows("transactions")]


def visible_transactions(transactions: list[Transaction], user: User) -> list[Transaction]:
    """Employees only see the payments they took themselves."""
    if user.role == "employee":
        return [t for t in transactions if t.added_by == user.name]
    return list(transactions)


def filter_transactions(transactions: list[Transaction], search: str = "", method: str = "all") -> list[Transaction]:
    q = search.strip().lower()
    out = [
        t for t in transactions
        if (not q or q in t.member_name.lower() or q in (t.member_id or "").lower())
        and (method == "all" or t.payment_method == method)
    ]
    return sorted(out, key=lambda t: t.date or date.min, reverse=True)


def member_transactions(store: SheetsClient, member_id: str | None) -> list[Transaction]:
    """Payment history of one member, newest first."""
    result = store.get_member_transactions(member_id)
    if not result.success:
        raise StoreError(result)
    return filter_transactions([transaction_from_record(r) for r in result.rows("transactions")])


def _transaction(actor: User, member_name: str, member_phone: str, amount, payment_method: str, on: date,
                 kind: str, member_id: str | None, notes: str, transaction_id: str | None = None,
                 added_by: str | None = None) -> Transaction:
    if payment_method not in PAYMENT_METHODS:
        raise ValueError(f"Unknown payment method: {payment_method}")
    if kind not in TRANSACTION_TYPES:
        raise ValueError(f"Unknown transaction type: {kind}")
    return Transaction(
        id=transaction_id,
        member_id=member_id,
        member_name=member_name.strip(),
        member_phone=member_phone.strip(),
        amount=coerce_amount(amount),
        type=kind,
        payment_method=payment_method,
        date=on,
        notes=notes.strip(),
        added_by=added_by or actor.name,
    )


def add_transaction(
    store: SheetsClient,
    actor: User,
    *,
    member_name: str,
    member_phone: str,
    amount,
    payment_method: str,
    on: date,
    kind: str = "membership",
    member_id: str | None = None,
    notes: str = "",
) -> StoreResult:
    tx = _transaction(actor, member_name, member_phone, amount, payment_method, on, kind, member_id, notes)
    result = store.add_transaction(transaction_to_record(tx), actor=actor)
    if result.success:
        logger.info("Recorded %s payment of %s for %s", payment_method, tx.amount, tx.member_name)
    return result


def update_transaction(
    store: SheetsClient,
    actor: User,
    tx: Transaction,
    *,
    member_name: str,
    member_phone: str,
    amount,
    payment_method: str,
    on: date,
    kind: str,
    notes: str = "",
) -> StoreResult:
    """Correct a recorded payment. The original recorder stays as `added_by`."""
    if actor.role == "employee" and tx.added_by != actor.name:
        raise PermissionError("Employees can only edit payments they recorded")
    edited = _transaction(actor, member_name, member_phone, amount, payment_method, on, kind, tx.member_id, notes,
                          transaction_id=tx.id, added_by=tx.added_by)
    result = store.update_transaction(tx.id, transaction_to_record(edited), actor=actor)
    if result.success:
        logger.info("Updated transaction %s: %s via %s", tx.id, edited.amount, payment_method)
    return result


def load_expenses(store: SheetsClient, use_cache: bool = True) -> list[Expense]:
    result = store.get_expenses(use_cache=use_cache)
    if not result.success:
        raise StoreError(result)
    return [expense_from_record(r) for r in result.rows("expenses")]


def filter_expenses(expenses: list[Expense], search: str = "", category: str = "all") -> list[Expense]:
    q = search.strip().lower()
    out = [
        e for e in expenses
        if (not q or q in e.description.lower())
        and (category == "all" or e.category == category)
    ]
    return sorted(out, key=lambda e: e.date or date.min, reverse=True)


def _expense(actor: User, description: str, amount, category: str, on: date, notes: str,
             expense_id: str | None = None) -> Expense:
    if category not in EXPENSE_CATEGORIES:
        raise ValueError(f"Unknown expense category: {category}")
    return Expense(
        id=expense_id,
        description=description.strip(),
        amount=coerce_amount(amount),
        category=category,
        date=on,
        added_by=actor.name,
        notes=notes.strip(),
    )


def add_expense(store: SheetsClient, actor: User, *, description: str, amount, category: str, on: date,
                notes: str = "") -> StoreResult:
    expense = _expense(actor, description, amount, category, on, notes)
    return store.add_expense(expense_to_record(expense), actor=actor)


def update_expense(store: SheetsClient, actor: User, expense: Expense, *, description: str, amount,
                   category: str, on: date, notes: str = "") -> StoreResult:
    edited = _expense(actor, description, amount, category, on, notes, expense_id=expense.id)
    return store.update_expense(expense.id, expense_to_record(edited), actor=actor)


def delete_expense(store: SheetsClient, actor: User, expense: Expense) -> StoreResult:
    return store.delete_expense(expense.id, actor=actor)
