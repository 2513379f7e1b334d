"""
members.py
Member workflows: compute with billing, persist to the sheet, then record the
payment, send the receipt and log the activity.

Only the member write decides success. Everything after it is best-effort.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date

import billing
from models import Catalog, Member, Transaction, User
from notify import WhatsAppDispatcher
from records import member_from_record, member_to_record, transaction_to_record
from sheets import SheetsClient, StoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkflowResult:
    success: bool
    member: Member | None = None
    error: str | None = None
    payment_recorded: bool = False
    notified: bool = False


def date_label(d: date | None) -> str:
    return f"{d.month}/{d.day}/{d.year}" if d else ""


# ---------- Reads ----------

def load_members(store: SheetsClient, catalog: Catalog, today: date, use_cache: bool = True) -> list[Member]:
    """Members with status re-derived for `today`."""
    result = store.get_members(use_cache=use_cache)
    if not result.success:
        raise StoreError(result)
    members = [member_from_record(r, catalog) for r in result.rows("members")]
    return [replace(m, status=billing.member_status(m, today)) for m in members]


def filter_members(
    members: list[Member],
    today: date,
    search: str = "",
    status: str = "all",
    plan_id: str = "all",
    warning_days: int = 7,
) -> list[Member]:
    q = search.strip().lower()
    out = []
    for m in members:
        if q and q not in m.name.lower() and q not in m.phone and q not in (m.id or "").lower():
            continue
        if status == "expiring_soon":
            if not billing.is_expiring_soon(m, today, warning_days):
                continue
        elif status != "all" and billing.member_status(m, today) != status:
            continue
        if plan_id != "all" and m.plan_id != plan_id:
            continue
        out.append(m)
    return sorted(out, key=lambda m: (m.expiry_date is None, m.expiry_date or date.max))


def expiring_members(members: list[Member], today: date, warning_days: int = 7) -> list[Member]:
    return filter_members(members, today, status="expiring_soon", warning_days=warning_days)


# ---------- Best-effort follow-ups ----------

def _record_payment(store: SheetsClient, member: Member, amount: int, kind: str, method: str,
                    today: date, actor: User, notes: str = "") -> bool:
    tx = Transaction(
        id=None,
        member_id=member.id,
        member_name=member.name,
        member_phone=member.phone,
        amount=amount,
        type=kind,
        payment_method=method,
        date=today,
        notes=notes,
        added_by=actor.name,
    )
    result = store.add_transaction(transaction_to_record(tx), actor=actor)
    if not result.success:
        logger.warning("Payment for member %s not recorded: %s", member.id, result.error)
    return result.success


def _send_receipt(dispatcher: WhatsAppDispatcher | None, member: Member, catalog: Catalog) -> bool:
    if dispatcher is None:
        return False
    try:
        return dispatcher.send_receipt(
            member.name, member.phone, catalog.plan_label(member.plan_id), member.fee,
            date_label(member.joining_date),
        )
    except Exception:
        # a failed receipt never undoes a saved membership
        logger.exception("Receipt dispatch failed for member %s", member.id)
        return False


def _log(store: SheetsClient, action: str, details: str, actor: User) -> None:
    result = store.log_activity(action, details, actor=actor, kind="member")
    if not result.success:
        logger.debug("Activity %s not logged: %s", action, result.error)


def _created_id(result) -> str | None:
    created = result.get("member")
    if isinstance(created, dict) and created.get("id"):
        return str(created["id"])
    member_id = result.get("memberId") or result.get("id")
    return str(member_id) if member_id else None


# ---------- Writes ----------

def register_member(
    store: SheetsClient,
    catalog: Catalog,
    *,
    name: str,
    phone: str,
    cnic: str,
    address: str,
    plan: str,
    period: str,
    joining_date: date,
    admission_fee: int,
    actor: User,
    today: date,
    dispatcher: WhatsAppDispatcher | None = None,
    payment_method: str = "Cash",
) -> WorkflowResult:
    member = billing.register(name, phone, cnic, address, plan, period, joining_date, admission_fee, catalog)

    result = store.add_member(member_to_record(member, catalog), actor=actor)
    if not result.success:
        return WorkflowResult(False, error=result.error or "Failed to add member")
    member = replace(member, id=_created_id(result))
    logger.info("Registered member %s (%s, %s) fee=%s", member.id, member.plan_id, member.period_id, member.fee)

    paid = _record_payment(store, member, member.fee, "admission", payment_method, today, actor,
                           notes=f"{catalog.plan_label(member.plan_id)} - {catalog.period_label(member.period_id)}")
    notified = _send_receipt(dispatcher, member, catalog)
    _log(store, "member_added", f"Registered {member.name} on {catalog.plan_label(member.plan_id)}", actor)
    return WorkflowResult(True, member=member, payment_recorded=paid, notified=notified)


def renew_member(
    store: SheetsClient,
    catalog: Catalog,
    member: Member,
    *,
    start_date: date,
    period: str,
    actor: User,
    today: date,
    dispatcher: WhatsAppDispatcher | None = None,
    record_payment: bool = True,
    payment_method: str = "Cash",
) -> WorkflowResult:
    renewed = billing.renew(member, start_date, period, catalog)
    # stored status is only a cache of what resolve_status says today
    renewed = replace(renewed, status=billing.member_status(renewed, today))

    result = store.update_member(renewed.id, member_to_record(renewed, catalog), actor=actor)
    if not result.success:
        return WorkflowResult(False, error=result.error or "Failed to renew member")
    logger.info("Renewed member %s until %s fee=%s", renewed.id, renewed.expiry_date, renewed.fee)

    paid = False
    if record_payment:
        paid = _record_payment(store, renewed, renewed.fee, "renewal", payment_method, today, actor,
                               notes=f"Renewal {catalog.period_label(renewed.period_id)}")
    notified = _send_receipt(dispatcher, renewed, catalog)
    _log(store, "member_renewed", f"Renewed {renewed.name} until {renewed.expiry_date}", actor)
    return WorkflowResult(True, member=renewed, payment_recorded=paid, notified=notified)


def update_member(
    store: SheetsClient,
    catalog: Catalog,
    member: Member,
    *,
    name: str,
    phone: str,
    cnic: str,
    address: str,
    plan: str,
    period: str,
    joining_date: date | None,
    actor: User,
    today: date,
) -> WorkflowResult:
    edited = replace(member, name=name.strip(), phone=phone.strip(), cnic=cnic.strip(), address=address.strip())
    plan_id = catalog.plan(plan).id
    period_id = catalog.period(period).id
    if (plan_id, period_id, joining_date) != (member.plan_id, member.period_id, member.joining_date):
        edited = billing.reprice(edited, catalog, plan=plan_id, fee_period=period_id, joining_date=joining_date)
    edited = replace(edited, status=billing.member_status(edited, today))

    result = store.update_member(edited.id, member_to_record(edited, catalog), actor=actor)
    if not result.success:
        return WorkflowResult(False, error=result.error or "Failed to update member")
    _log(store, "member_updated", f"Updated {edited.name}", actor)
    return WorkflowResult(True, member=edited)


def delete_member(store: SheetsClient, member: Member, actor: User) -> WorkflowResult:
    result = store.delete_member(member.id, actor=actor)
    if not result.success:
        return WorkflowResult(False, error=result.error or "Failed to delete member")
    logger.info("Deleted member %s", member.id)
    _log(store, "member_deleted", f"Deleted {member.name}", actor)
    return WorkflowResult(True, member=member)
