"""
billing.py
Membership lifecycle: expiry dates, fees, status and renewal.

Everything here is a pure function of its arguments. The catalog is passed in,
"now" is passed in, and nothing touches the sheet or the network.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta

from models import ACTIVE, EXPIRED, PENDING, Catalog, FeePeriod, Member, MembershipPlan
from utils import add_months


def compute_expiry(start_date: date, fee_period: FeePeriod) -> date:
    """
    Daily pass: the next calendar day. Otherwise start_date plus
    `month_multiplier` calendar months, clamped to the end of a shorter month
    (Jan 31 + 1 month => Feb 28/29).
    """
    if fee_period.is_daily_pass:
        return start_date + timedelta(days=1)
    return add_months(start_date, fee_period.month_multiplier)


def compute_total_fee(admission_fee: int, period_fee: int, fee_period: FeePeriod) -> int:
    """
    Daily passes never carry an admission fee; everything else is
    admission + monthly fee * months.
    """
    if fee_period.is_daily_pass:
        return period_fee
    return admission_fee + period_fee * fee_period.month_multiplier


def resolve_status(now: date, joining_date: date | None, expiry_date: date | None) -> str:
    """
    Status is derived on every read, never trusted from storage.
    A member without dates yet (registration not finalized) is pending.
    """
    if joining_date is None or expiry_date is None:
        return PENDING
    if now <= expiry_date:
        return ACTIVE
    return EXPIRED


def member_status(member: Member, now: date) -> str:
    return resolve_status(now, member.joining_date, member.expiry_date)


def days_until_expiry(member: Member, now: date) -> int | None:
    """Negative once expired, None while pending."""
    if member.expiry_date is None:
        return None
    return (member.expiry_date - now).days


def is_expiring_soon(member: Member, now: date, within_days: int = 7) -> bool:
    if member_status(member, now) != ACTIVE:
        return False
    return days_until_expiry(member, now) <= within_days


def register(
    name: str,
    phone: str,
    cnic: str,
    address: str,
    plan: MembershipPlan | str,
    fee_period: FeePeriod | str,
    joining_date: date,
    admission_fee: int,
    catalog: Catalog,
    period_fee: int | None = None,
) -> Member:
    """
    First registration: the only path that charges an admission fee.
    `period_fee` overrides the plan's base monthly fee when given.
    """
    plan = catalog.plan(plan)
    period = catalog.period(fee_period)
    monthly = plan.base_fee if period_fee is None else period_fee
    return Member(
        id=None,
        name=name.strip(),
        phone=phone.strip(),
        cnic=cnic.strip(),
        address=address.strip(),
        plan_id=plan.id,
        period_id=period.id,
        joining_date=joining_date,
        expiry_date=compute_expiry(joining_date, period),
        fee=compute_total_fee(admission_fee, monthly, period),
        status=ACTIVE,
    )


def reprice(
    member: Member,
    catalog: Catalog,
    plan: MembershipPlan | str | None = None,
    fee_period: FeePeriod | str | None = None,
    joining_date: date | None = None,
    admission_fee: int = 0,
    period_fee: int | None = None,
) -> Member:
    """
    Edit of plan / period / joining date. Expiry and fee are recomputed from
    the (possibly new) joining date; the admission fee is only included when
    the caller passes one.
    """
    plan = catalog.plan(plan if plan is not None else member.plan_id)
    period = catalog.period(fee_period if fee_period is not None else member.period_id)
    start = joining_date or member.joining_date
    if start is None:
        raise ValueError("Cannot price a membership without a joining date")
    monthly = plan.base_fee if period_fee is None else period_fee
    return replace(
        member,
        plan_id=plan.id,
        period_id=period.id,
        joining_date=start,
        expiry_date=compute_expiry(start, period),
        fee=compute_total_fee(admission_fee, monthly, period),
    )


def renew(
    member: Member,
    start_date: date,
    fee_period: FeePeriod | str,
    catalog: Catalog,
    plan_base_fee: int | None = None,
) -> Member:
    """
    Restart the membership at `start_date`. Remaining days are not carried
    over; pass the old expiry as `start_date` to stack. No admission fee.
    Status is left as stored so the next read re-derives it.
    """
    if not member.id:
        raise ValueError("Only an existing member can be renewed")
    period = catalog.period(fee_period)
    plan = catalog.plan(member.plan_id)
    base_fee = plan.base_fee if plan_base_fee is None else plan_base_fee
    return replace(
        member,
        period_id=period.id,
        joining_date=start_date,
        expiry_date=compute_expiry(start_date, period),
        fee=compute_total_fee(0, base_fee, period),
    )
