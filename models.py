"""
models.py
Domain types: plan / fee-period catalog and the records kept in the sheet.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import date

PENDING = "pending"
ACTIVE = "active"
EXPIRED = "expired"
STATUSES = (PENDING, ACTIVE, EXPIRED)

ROLES = ("admin", "partner", "employee")
PAYMENT_METHODS = ("Cash", "Online")
TRANSACTION_TYPES = ("admission", "membership", "renewal")
EXPENSE_CATEGORIES = ("Utilities", "Equipment", "Maintenance", "Staff")


class UnknownCatalogEntry(LookupError):
    """A plan or fee-period reference that is not in the catalog."""

    def __init__(self, kind: str, key) -> None:
        super().__init__(f"Unknown {kind}: {key!r}")
        self.kind = kind
        self.key = key


@dataclass(frozen=True)
class MembershipPlan:
    id: str
    label: str
    base_fee: int  # whole currency units, per month


@dataclass(frozen=True)
class FeePeriod:
    id: str
    label: str
    month_multiplier: int
    is_daily_pass: bool = False


DEFAULT_PLANS = (
    MembershipPlan("strength", "Strength", 3000),
    MembershipPlan("cardio", "Cardio", 2500),
    MembershipPlan("cardio_strength", "Cardio + Strength", 4500),
    MembershipPlan("personal_training", "Personal Training", 8000),
    MembershipPlan("dailypass", "Daily Pass", 500),
)

DEFAULT_PERIODS = (
    FeePeriod("daily", "Daily", 1, is_daily_pass=True),
    FeePeriod("monthly", "Monthly", 1),
    FeePeriod("quarterly", "Quarterly", 3),
    FeePeriod("half_yearly", "Half Yearly", 6),
    FeePeriod("annually", "Annually", 12),
)


def _fold(key) -> str:
    # "Cardio + Strength", "cardio_strength" and "CARDIO-STRENGTH" all fold the same
    return re.sub(r"[\s_+\-]+", "", str(key or "")).lower()


@dataclass(frozen=True)
class Catalog:
    plans: tuple[MembershipPlan, ...] = DEFAULT_PLANS
    periods: tuple[FeePeriod, ...] = DEFAULT_PERIODS

    def find_plan(self, key) -> MembershipPlan | None:
        if isinstance(key, MembershipPlan):
            key = key.id
        folded = _fold(key)
        for p in self.plans:
            if folded in (_fold(p.id), _fold(p.label)):
                return p
        return None

    def find_period(self, key) -> FeePeriod | None:
        if isinstance(key, FeePeriod):
            key = key.id
        folded = _fold(key)
        for p in self.periods:
            if folded in (_fold(p.id), _fold(p.label)):
                return p
        return None

    def plan(self, key) -> MembershipPlan:
        found = self.find_plan(key)
        if found is None:
            raise UnknownCatalogEntry("membership plan", key)
        return found

    def period(self, key) -> FeePeriod:
        found = self.find_period(key)
        if found is None:
            raise UnknownCatalogEntry("fee period", key)
        return found

    def plan_label(self, key) -> str:
        found = self.find_plan(key)
        return found.label if found else str(key or "")

    def period_label(self, key) -> str:
        found = self.find_period(key)
        return found.label if found else str(key or "")


def build_catalog(fee_overrides: dict[str, int] | None = None) -> Catalog:
    """
    Build the catalog once at startup. Overrides are keyed by plan id or label;
    unknown keys raise UnknownCatalogEntry so a typo in PLAN_FEES is loud.
    """
    base = Catalog()
    if not fee_overrides:
        return base
    fees = {p.id: p.base_fee for p in base.plans}
    for key, fee in fee_overrides.items():
        fees[base.plan(key).id] = max(0, int(fee))
    plans = tuple(replace(p, base_fee=fees[p.id]) for p in base.plans)
    return Catalog(plans=plans, periods=base.periods)


@dataclass(frozen=True)
class Member:
    id: str | None
    name: str
    phone: str
    cnic: str
    address: str
    plan_id: str
    period_id: str
    joining_date: date | None
    expiry_date: date | None
    fee: int
    status: str = PENDING  # as last stored; recompute with billing.resolve_status


@dataclass(frozen=True)
class Transaction:
    id: str | None
    member_id: str | None
    member_name: str
    member_phone: str
    amount: int
    type: str  # admission/membership/renewal
    payment_method: str  # Cash/Online
    date: date | None
    status: str = "completed"
    notes: str = ""
    added_by: str = ""


@dataclass(frozen=True)
class Expense:
    id: str | None
    description: str
    amount: int
    category: str
    date: date | None
    added_by: str = ""
    notes: str = ""


@dataclass(frozen=True)
class User:
    id: str | None
    username: str
    name: str
    role: str  # admin/partner/employee
    phone: str = ""
    password_hash: str = ""
